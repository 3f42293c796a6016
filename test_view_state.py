import logging
from unittest.mock import MagicMock

import pytest

from conftest import VALID_KEY, make_response, movie_payload
from errors import HttpError, MissingCredential, NetworkError
from models import (
    Credits,
    CrewMember,
    MovieDetail,
    MovieSummary,
    PersonSummary,
    SearchKind,
    SearchPage,
    SearchQuery,
)
from tmdb_client import TmdbClient
from transform import primary_director
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
    SearchOutcome,
    SelectMovie,
    SelectPerson,
    SubmitSearch,
)

INCEPTION = MovieSummary(id=27205, title="Inception", release_date="2010-07-16", vote_average=8.4)
TOM = PersonSummary(id=31, name="Tom Hanks", known_for=["Big"])


@pytest.fixture
def fake_client():
    return MagicMock(spec=TmdbClient)


@pytest.fixture
def app(keyed_store, fake_client) -> MovieSearchApp:
    return MovieSearchApp(fake_client, keyed_store)


# ---------- busca por título ----------
def test_starts_idle_without_prompt_when_key_exists(app: MovieSearchApp) -> None:
    snap = app.snapshot()
    assert snap.view == Idle()
    assert snap.overlay is None
    assert snap.credential_prompt is False


def test_starts_with_prompt_when_key_missing(store, fake_client) -> None:
    assert MovieSearchApp(fake_client, store).snapshot().credential_prompt is True


def test_title_search_results(app: MovieSearchApp, fake_client) -> None:
    fake_client.search_movies_page.return_value = SearchPage(results=[INCEPTION], page=1, total_pages=1, total_results=1)

    snap = app.dispatch(SubmitSearch(SearchKind.TITLE, "  Inception "))

    fake_client.search_movies_page.assert_called_once_with("Inception", page=1)
    assert isinstance(snap.view, Results)
    assert snap.view.title_label == 'Search Results for "Inception"'
    assert snap.view.count_label == "1 movie(s) found"
    assert snap.view.items == [INCEPTION]
    assert snap.query == SearchQuery(SearchKind.TITLE, "Inception", 1)


def test_title_search_no_results(app: MovieSearchApp, fake_client) -> None:
    fake_client.search_movies_page.return_value = SearchPage(results=[], total_results=0)
    snap = app.dispatch(SubmitSearch(SearchKind.TITLE, "qwertyuiop"))
    assert snap.view == Error("No movies found. Try a different search term.")


@pytest.mark.parametrize(
    ("kind", "message"),
    [
        (SearchKind.TITLE, "Please enter a movie title to search."),
        (SearchKind.PERSON, "Please enter an actor or actress name to search."),
    ],
)
def test_empty_query_is_rejected_without_network(app: MovieSearchApp, fake_client, kind, message) -> None:
    snap = app.dispatch(SubmitSearch(kind, "   "))
    assert snap.view == Error(message)
    assert snap.query is None
    fake_client.search_movies_page.assert_not_called()
    fake_client.search_person.assert_not_called()


def test_missing_credential_short_circuits(store, fake_client) -> None:
    app = MovieSearchApp(fake_client, store)
    app.dispatch(CloseCredentialPrompt())

    snap = app.dispatch(SubmitSearch(SearchKind.TITLE, "Inception"))

    assert snap.view == Error("Please configure your API key first.", prompt_credential=True)
    assert snap.credential_prompt is True
    fake_client.search_movies_page.assert_not_called()


def test_client_failure_shows_generic_message(app: MovieSearchApp, fake_client, caplog) -> None:
    fake_client.search_movies_page.side_effect = NetworkError("connection reset by peer")

    with caplog.at_level(logging.ERROR):
        snap = app.dispatch(SubmitSearch(SearchKind.TITLE, "Inception"))

    assert snap.view == Error("Failed to search for movies. Please check your API key and try again.")
    assert "connection reset" not in snap.view.message
    assert "connection reset by peer" in caplog.text


def test_http_401_end_to_end(keyed_store, session, caplog) -> None:
    session.get.return_value = make_response({"status_message": "Invalid API key"}, status_code=401)
    app = MovieSearchApp(TmdbClient(keyed_store, session=session), keyed_store)

    with caplog.at_level(logging.ERROR):
        snap = app.dispatch(SubmitSearch(SearchKind.TITLE, "Inception"))

    assert isinstance(snap.view, Error)
    assert snap.view.message == "Failed to search for movies. Please check your API key and try again."
    assert "401" not in snap.view.message
    assert "status=401" in caplog.text


def test_inception_end_to_end(keyed_store, session) -> None:
    session.get.return_value = make_response(
        {"page": 1, "total_pages": 1, "total_results": 1, "results": [movie_payload(27205, "Inception")]}
    )
    app = MovieSearchApp(TmdbClient(keyed_store, session=session), keyed_store)

    snap = app.dispatch(SubmitSearch(SearchKind.TITLE, "Inception"))

    assert session.get.call_args[1]["params"]["api_key"] == VALID_KEY
    assert snap.view.title_label == 'Search Results for "Inception"'
    assert snap.view.count_label == "1 movie(s) found"


# ---------- busca por pessoa ----------
def test_person_search_results(app: MovieSearchApp, fake_client) -> None:
    fake_client.search_person.return_value = TOM
    fake_client.fetch_movies_for_person.return_value = [INCEPTION]

    snap = app.dispatch(SubmitSearch(SearchKind.PERSON, "tom hanks"))

    fake_client.fetch_movies_for_person.assert_called_once_with(31)
    assert snap.view.title_label == "Movies featuring Tom Hanks"
    assert snap.view.count_label == "1 movie(s) found"
    assert snap.view.person == TOM


def test_person_search_no_match(app: MovieSearchApp, fake_client) -> None:
    fake_client.search_person.return_value = None

    snap = app.dispatch(SubmitSearch(SearchKind.PERSON, "Zzzznotaname"))

    assert snap.view == Error("No actor/actress found with that name. Try a different search term.")
    fake_client.fetch_movies_for_person.assert_not_called()


def test_person_without_dated_movies(app: MovieSearchApp, fake_client) -> None:
    fake_client.search_person.return_value = TOM
    fake_client.fetch_movies_for_person.return_value = []
    snap = app.dispatch(SubmitSearch(SearchKind.PERSON, "tom hanks"))
    assert snap.view == Error("No movies found for this actor/actress.")


def test_person_search_failure_message(app: MovieSearchApp, fake_client) -> None:
    fake_client.search_person.side_effect = HttpError(500)
    snap = app.dispatch(SubmitSearch(SearchKind.PERSON, "tom hanks"))
    assert snap.view == Error("Failed to search for actor/actress. Please check your API key and try again.")


# ---------- concorrência lógica ----------
def test_stale_search_completion_is_dropped(app: MovieSearchApp) -> None:
    first = SearchQuery(SearchKind.TITLE, "Alien")
    second = SearchQuery(SearchKind.TITLE, "Aliens")
    old_ticket = app.begin_search(first)
    new_ticket = app.begin_search(second)
    assert new_ticket > old_ticket
    assert app.snapshot().view == Loading(SearchKind.TITLE)

    assert app.complete_search(old_ticket, first, outcome=SearchOutcome(items=[INCEPTION])) is False
    assert app.snapshot().view == Loading(SearchKind.TITLE)

    assert app.complete_search(new_ticket, second, outcome=SearchOutcome(items=[INCEPTION])) is True
    assert app.snapshot().view.title_label == 'Search Results for "Aliens"'


def test_stale_detail_completion_is_dropped(app: MovieSearchApp) -> None:
    old_ticket = app.begin_detail(DetailKind.MOVIE, 1)
    app.dispatch(DismissDetail())
    assert app.complete_detail(old_ticket, detail=MovieDetail(id=1, title="Late")) is False
    assert app.snapshot().overlay is None


# ---------- paginação / retry ----------
def test_change_page(app: MovieSearchApp, fake_client) -> None:
    fake_client.search_movies_page.side_effect = [
        SearchPage(results=[INCEPTION], page=1, total_pages=2),
        SearchPage(results=[INCEPTION], page=2, total_pages=2),
    ]
    app.dispatch(SubmitSearch(SearchKind.TITLE, "Inception"))

    app.dispatch(ChangePage(-1))
    snap = app.dispatch(ChangePage(1))
    snap = app.dispatch(ChangePage(1))

    assert fake_client.search_movies_page.call_count == 2
    fake_client.search_movies_page.assert_called_with("Inception", page=2)
    assert snap.view.page == 2


def test_retry_repeats_last_query(app: MovieSearchApp, fake_client) -> None:
    fake_client.search_movies_page.side_effect = [
        NetworkError("down"),
        SearchPage(results=[INCEPTION]),
    ]
    assert isinstance(app.dispatch(SubmitSearch(SearchKind.TITLE, "Inception")).view, Error)
    snap = app.dispatch(Retry())
    assert isinstance(snap.view, Results)


def test_retry_without_query_is_noop(app: MovieSearchApp, fake_client) -> None:
    assert app.dispatch(Retry()).view == Idle()
    fake_client.search_movies_page.assert_not_called()


def test_retry_after_rejected_empty_query_does_not_rerun_previous_search(app: MovieSearchApp, fake_client) -> None:
    fake_client.search_movies_page.return_value = SearchPage(results=[INCEPTION])
    app.dispatch(SubmitSearch(SearchKind.TITLE, "Alien"))

    snap = app.dispatch(SubmitSearch(SearchKind.TITLE, "   "))
    assert snap.query is None

    snap = app.dispatch(Retry())

    assert snap.view == Error("Please enter a movie title to search.")
    fake_client.search_movies_page.assert_called_once_with("Alien", page=1)


# ---------- overlay de detalhes ----------
def test_select_movie_opens_detail_over_results(app: MovieSearchApp, fake_client) -> None:
    fake_client.search_movies_page.return_value = SearchPage(results=[INCEPTION])
    detail = MovieDetail(
        id=27205,
        title="Inception",
        credits=Credits(crew=[CrewMember(name="Jane Doe", job="Director")]),
    )
    fake_client.fetch_movie_detail.return_value = detail
    results = app.dispatch(SubmitSearch(SearchKind.TITLE, "Inception")).view

    snap = app.dispatch(SelectMovie(27205))

    assert snap.view == results
    assert snap.overlay.status == OverlayStatus.READY
    assert snap.overlay.detail == detail
    assert primary_director(snap.overlay.detail.credits.crew).name == "Jane Doe"

    snap = app.dispatch(DismissDetail())
    assert snap.overlay is None
    assert snap.view == results


def test_detail_failure_keeps_underlying_state(app: MovieSearchApp, fake_client) -> None:
    fake_client.search_movies_page.return_value = SearchPage(results=[INCEPTION])
    fake_client.fetch_movie_detail.side_effect = HttpError(404)
    results = app.dispatch(SubmitSearch(SearchKind.TITLE, "Inception")).view

    snap = app.dispatch(SelectMovie(27205))

    assert snap.view == results
    assert snap.overlay.status == OverlayStatus.ERROR
    assert snap.overlay.message == "Failed to load movie details. Please try again."


def test_detail_without_credential_opens_prompt(keyed_store, fake_client) -> None:
    fake_client.search_movies_page.return_value = SearchPage(results=[INCEPTION])
    fake_client.fetch_movie_detail.side_effect = MissingCredential()
    app = MovieSearchApp(fake_client, keyed_store)
    results = app.dispatch(SubmitSearch(SearchKind.TITLE, "Inception")).view
    assert app.snapshot().credential_prompt is False

    snap = app.dispatch(SelectMovie(27205))

    assert snap.view == results
    assert snap.overlay.status == OverlayStatus.ERROR
    assert snap.overlay.message == "Please configure your API key first."
    assert snap.credential_prompt is True


def test_select_person_opens_person_detail(app: MovieSearchApp, fake_client) -> None:
    app.dispatch(SelectPerson(31))
    fake_client.fetch_person_detail.assert_called_once_with(31)
    assert app.snapshot().overlay.kind == DetailKind.PERSON


# ---------- chave de API ----------
def test_save_credential_flow(store, fake_client) -> None:
    app = MovieSearchApp(fake_client, store)

    snap = app.dispatch(SaveCredential(""))
    assert snap.credential_status.message == "Please enter an API key."
    assert snap.credential_prompt is True

    snap = app.dispatch(SaveCredential("abc"))
    assert snap.credential_status.message == "Please enter a valid TMDb API key."
    assert store.get() is None

    snap = app.dispatch(SaveCredential(VALID_KEY))
    assert snap.credential_status.ok is True
    assert snap.credential_status.message == "API key saved successfully!"
    assert snap.credential_prompt is False
    assert store.get() == VALID_KEY


def test_open_and_close_credential_prompt(app: MovieSearchApp) -> None:
    assert app.dispatch(OpenCredentialPrompt()).credential_prompt is True
    assert app.dispatch(CloseCredentialPrompt()).credential_prompt is False


def test_unknown_command_raises(app: MovieSearchApp) -> None:
    with pytest.raises(TypeError):
        app.dispatch("search")
