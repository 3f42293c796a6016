import streamlit as st

from credential_store import CredentialStore
from logger_conf import get_logger
from models import MovieDetail, MovieSummary, PersonDetail, SearchKind
from tmdb_client import TmdbClient, image_url
from transform import (
    genre_badges_html,
    known_for_label,
    language_label,
    overview_text,
    primary_director,
    rating_label,
    release_date_label,
    release_year,
    runtime_label,
    section_header_html,
    sort_filmography,
    star_rating,
    top_cast,
)
from view_state import (
    ChangePage,
    CloseCredentialPrompt,
    DetailKind,
    DismissDetail,
    Error,
    Idle,
    Loading,
    MovieSearchApp,
    OpenCredentialPrompt,
    OverlayStatus,
    Results,
    Retry,
    SaveCredential,
    SelectMovie,
    SelectPerson,
    Snapshot,
    SubmitSearch,
)

logger = get_logger(__name__)

# ---------------------- CONFIG BÁSICA ---------------------- #

st.set_page_config(
    page_title="Movie Search",
    page_icon="🎬",
    layout="wide",
)

st.markdown(
    """
    <style>
    .main-title {
        font-size: 2.3rem;
        font-weight: 700;
        margin-bottom: 0.2rem;
    }
    .main-subtitle {
        font-size: 0.95rem;
        color: #bbbbbb;
        margin-bottom: 1.5rem;
    }
    .section-header {
        font-size: 1.3rem;
        font-weight: 600;
        margin-top: 0.5rem;
        margin-bottom: 0.3rem;
    }
    .rating-stars {
        color: #f5c518;
        letter-spacing: 2px;
    }
    .genre-tag {
        display: inline-block;
        padding: 3px 8px;
        border-radius: 12px;
        background: #efefef;
        color: #333333;
        margin-right: 6px;
        font-size: 0.8rem;
    }
    </style>
    """,
    unsafe_allow_html=True,
)

GRID_COLUMNS = 4


# ---------------------- CONTEXTO / COMANDOS ---------------------- #

def get_app() -> MovieSearchApp:
    # um contexto por sessão do navegador
    if "app" not in st.session_state:
        store = CredentialStore()
        st.session_state["app"] = MovieSearchApp(TmdbClient(store), store)
        logger.info("Aplicação inicializada.")
    return st.session_state["app"]


def send(command, spinner: str = None) -> None:
    app = get_app()
    if spinner:
        with st.spinner(spinner):
            app.dispatch(command)
    else:
        app.dispatch(command)
    st.rerun()


# ---------------------- RENDERIZAÇÃO ---------------------- #

def render_credential_panel(snapshot: Snapshot) -> None:
    with st.sidebar:
        st.markdown('<div class="section-header">🔑 TMDb API key</div>', unsafe_allow_html=True)
        if not snapshot.credential_prompt:
            if snapshot.credential_status and snapshot.credential_status.ok:
                st.success(snapshot.credential_status.message)
            if st.button("Change API key"):
                send(OpenCredentialPrompt())
            return

        st.caption("Get a free key at themoviedb.org → Settings → API.")
        with st.form("api-key-form", clear_on_submit=True):
            token = st.text_input("API key", type="password")
            saved = st.form_submit_button("Save API key")
        if saved:
            send(SaveCredential(token))
        if snapshot.credential_status and not snapshot.credential_status.ok:
            st.error(snapshot.credential_status.message)
        if st.button("Close"):
            send(CloseCredentialPrompt())


def render_search_tabs() -> None:
    tabs = st.tabs(["🔍 Search by title", "🎭 Search by actor/actress"])

    with tabs[0]:
        with st.form("title-search"):
            text = st.text_input("Movie title", placeholder="e.g. Inception")
            submitted = st.form_submit_button("Search 🔎")
        if submitted:
            send(SubmitSearch(SearchKind.TITLE, text), spinner="Searching movies...")

    with tabs[1]:
        with st.form("person-search"):
            text = st.text_input("Actor or actress name", placeholder="e.g. Tom Hanks")
            submitted = st.form_submit_button("Search 🎭")
        if submitted:
            send(SubmitSearch(SearchKind.PERSON, text), spinner="Searching actor/actress...")


def render_movie_card(container, movie: MovieSummary, key_prefix: str) -> None:
    with container:
        st.image(image_url(movie.poster_path))
        st.markdown(f"**{movie.title}**")
        st.caption(release_year(movie.release_date))
        st.markdown(
            f'<span class="rating-stars">{star_rating(movie.vote_average)}</span> '
            f"{rating_label(movie.vote_average)}/10",
            unsafe_allow_html=True,
        )
        overview = overview_text(movie.overview)
        st.write(overview[:200] + ("..." if len(overview) > 200 else ""))
        if st.button("ℹ️ Details", key=f"{key_prefix}-det-{movie.id}"):
            send(SelectMovie(movie.id), spinner="Loading details...")


def render_results(view: Results) -> None:
    st.markdown(section_header_html(view.title_label), unsafe_allow_html=True)
    st.caption(view.count_label)

    if view.person is not None:
        person = view.person
        cols = st.columns([1, 5])
        cols[0].image(image_url(person.profile_path), width=100)
        if person.known_for_department:
            cols[1].markdown(f"**Department:** {person.known_for_department}")
        if person.known_for:
            cols[1].markdown(f"**Known for:** {known_for_label(person.known_for)}")
        if cols[1].button("👤 Person details", key=f"person-det-{person.id}"):
            send(SelectPerson(person.id), spinner="Loading details...")

    if view.total_pages > 1:
        col_prev, col_info, col_next = st.columns([1, 2, 1])
        if col_prev.button("⬅️ Previous", disabled=view.page <= 1):
            send(ChangePage(-1), spinner="Searching movies...")
        col_info.markdown(f"Page {view.page} / {view.total_pages}")
        if col_next.button("Next ➡️", disabled=view.page >= view.total_pages):
            send(ChangePage(1), spinner="Searching movies...")

    key_prefix = f"results-p{view.page}"
    for start in range(0, len(view.items), GRID_COLUMNS):
        cols = st.columns(GRID_COLUMNS)
        for col, movie in zip(cols, view.items[start:start + GRID_COLUMNS]):
            render_movie_card(col, movie, key_prefix)


def render_movie_detail(movie: MovieDetail) -> None:
    cols = st.columns([1, 2])
    cols[0].image(image_url(movie.poster_path), width=300)
    with cols[1]:
        st.header(movie.title)
        st.markdown(
            f"📅 {release_date_label(movie.release_date)} &nbsp; "
            f"⏱️ {runtime_label(movie.runtime)} &nbsp; "
            f"🌍 {language_label(movie.original_language)}"
        )
        st.markdown(
            f'<span class="rating-stars">{star_rating(movie.vote_average)}</span> '
            f"{rating_label(movie.vote_average)}/10 ({movie.vote_count} votes)",
            unsafe_allow_html=True,
        )
        if movie.genres:
            st.markdown(genre_badges_html(movie.genres), unsafe_allow_html=True)
        director = primary_director(movie.credits.crew)
        if director:
            st.markdown(f"**Director:** {director.name}")
        cast = top_cast(movie.credits.cast, 5)
        if cast:
            st.markdown(f"**Cast:** {', '.join(cast)}")
        st.markdown("#### Plot Summary")
        st.write(overview_text(movie.overview))


def render_person_detail(person: PersonDetail) -> None:
    cols = st.columns([1, 2])
    cols[0].image(image_url(person.profile_path), width=300)
    with cols[1]:
        st.header(person.name)
        if person.known_for_department:
            st.markdown(f"**Known for:** {person.known_for_department}")
        st.markdown(f"**Born:** {release_date_label(person.birthday)}"
                    + (f" in {person.place_of_birth}" if person.place_of_birth else ""))
        st.markdown("#### Biography")
        st.write(person.biography or "No biography available.")
        filmography = sort_filmography(person.movie_credits, limit=10)
        if filmography:
            st.markdown("#### Recent movies")
            for movie in filmography:
                st.markdown(f"- {movie.title} ({release_year(movie.release_date)})")


def render_overlay(snapshot: Snapshot) -> None:
    overlay = snapshot.overlay
    if overlay is None:
        return

    with st.container(border=True):
        if st.button("✖ Close", key="overlay-close"):
            send(DismissDetail())
        if overlay.status == OverlayStatus.LOADING:
            st.info("Loading details...")
        elif overlay.status == OverlayStatus.ERROR:
            st.error(overlay.message)
        elif overlay.kind == DetailKind.MOVIE:
            render_movie_detail(overlay.detail)
        else:
            render_person_detail(overlay.detail)


def render_view(snapshot: Snapshot) -> None:
    view = snapshot.view
    if isinstance(view, Idle):
        st.info("Search for a movie by title or find the movies of an actor/actress.")
    elif isinstance(view, Loading):
        st.info("Loading...")
    elif isinstance(view, Error):
        st.error(view.message)
        if view.prompt_credential:
            st.warning("Add your TMDb API key in the sidebar to start searching.")
        elif snapshot.query is not None and st.button("🔄 Try again"):
            send(Retry(), spinner="Searching...")
    elif isinstance(view, Results):
        render_results(view)


# ---------------------- PÁGINA ---------------------- #

st.markdown('<div class="main-title">🎬 Movie Search</div>', unsafe_allow_html=True)
st.markdown(
    '<div class="main-subtitle">Search movies by title or by cast member using The Movie Database (TMDb).</div>',
    unsafe_allow_html=True,
)

snapshot = get_app().snapshot()
render_credential_panel(snapshot)
render_search_tabs()
render_overlay(snapshot)
render_view(snapshot)
