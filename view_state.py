"""
Máquina de estados da tela de busca.

A interface só envia comandos (SubmitSearch, SelectMovie, ...) para
`MovieSearchApp.dispatch` e desenha o `Snapshot` devolvido. Estados da busca:

    Idle -> Loading -> Results | Error
    Results/Error -> Loading (nova busca, troca de página ou retry)

O overlay de detalhes é independente: tem seu próprio ciclo
loading -> ready | error e nunca altera o estado da busca por baixo.

Cada busca (e cada abertura de detalhe) recebe um número de sequência;
só a conclusão com o número mais recente é aplicada, as antigas são descartadas.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from credential_store import CredentialStore
from errors import CredentialStoreError, MissingCredential, TmdbClientError, ValidationError
from logger_conf import get_logger
from models import MovieDetail, MovieSummary, PersonDetail, PersonSummary, SearchKind, SearchQuery
from tmdb_client import TmdbClient
from transform import count_label

logger = get_logger(__name__)

MSG_MISSING_CREDENTIAL = "Please configure your API key first."
MSG_CREDENTIAL_SAVED = "API key saved successfully!"
MSG_CREDENTIAL_STORE_FAILED = "Could not save the API key. Please try again."

EMPTY_QUERY_MESSAGES = {
    SearchKind.TITLE: "Please enter a movie title to search.",
    SearchKind.PERSON: "Please enter an actor or actress name to search.",
}
NO_RESULTS_MESSAGES = {
    SearchKind.TITLE: "No movies found. Try a different search term.",
    SearchKind.PERSON: "No actor/actress found with that name. Try a different search term.",
}
MSG_PERSON_WITHOUT_MOVIES = "No movies found for this actor/actress."
FAILURE_MESSAGES = {
    SearchKind.TITLE: "Failed to search for movies. Please check your API key and try again.",
    SearchKind.PERSON: "Failed to search for actor/actress. Please check your API key and try again.",
}


# ---------- estados ----------
@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    kind: SearchKind


@dataclass(frozen=True)
class Results:
    items: List[MovieSummary]
    title_label: str
    count_label: str
    person: Optional[PersonSummary] = None
    page: int = 1
    total_pages: int = 1


@dataclass(frozen=True)
class Error:
    message: str
    prompt_credential: bool = False


ViewState = Union[Idle, Loading, Results, Error]


class DetailKind(str, Enum):
    MOVIE = "movie"
    PERSON = "person"


class OverlayStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class Overlay:
    kind: DetailKind
    target_id: int
    status: OverlayStatus
    detail: Optional[Union[MovieDetail, PersonDetail]] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class CredentialStatus:
    message: str
    ok: bool


@dataclass(frozen=True)
class Snapshot:
    view: ViewState
    overlay: Optional[Overlay]
    query: Optional[SearchQuery]
    credential_prompt: bool
    credential_status: Optional[CredentialStatus] = None


# ---------- comandos ----------
@dataclass(frozen=True)
class SubmitSearch:
    kind: SearchKind
    text: str


@dataclass(frozen=True)
class ChangePage:
    delta: int


@dataclass(frozen=True)
class Retry:
    pass


@dataclass(frozen=True)
class SelectMovie:
    movie_id: int


@dataclass(frozen=True)
class SelectPerson:
    person_id: int


@dataclass(frozen=True)
class DismissDetail:
    pass


@dataclass(frozen=True)
class SaveCredential:
    token: str


@dataclass(frozen=True)
class OpenCredentialPrompt:
    pass


@dataclass(frozen=True)
class CloseCredentialPrompt:
    pass


Command = Union[
    SubmitSearch, ChangePage, Retry, SelectMovie, SelectPerson,
    DismissDetail, SaveCredential, OpenCredentialPrompt, CloseCredentialPrompt,
]


@dataclass
class SearchOutcome:
    items: List[MovieSummary] = field(default_factory=list)
    person: Optional[PersonSummary] = None
    page: int = 1
    total_pages: int = 1


class MovieSearchApp:
    """Contexto da aplicação: criado uma vez na inicialização e mantido pela interface."""

    def __init__(self, client: TmdbClient, store: CredentialStore):
        self.client = client
        self.store = store
        self.view: ViewState = Idle()
        self.overlay: Optional[Overlay] = None
        self.query: Optional[SearchQuery] = None
        self.credential_status: Optional[CredentialStatus] = None
        self.credential_prompt = not self._has_credential()
        self._search_seq = 0
        self._detail_seq = 0

    def snapshot(self) -> Snapshot:
        return Snapshot(
            view=self.view,
            overlay=self.overlay,
            query=self.query,
            credential_prompt=self.credential_prompt,
            credential_status=self.credential_status,
        )

    def dispatch(self, command: Command) -> Snapshot:
        if isinstance(command, SubmitSearch):
            self._search(SearchQuery(kind=command.kind, text=(command.text or "").strip()))
        elif isinstance(command, ChangePage):
            self._change_page(command.delta)
        elif isinstance(command, Retry):
            if self.query is not None:
                self._search(self.query)
        elif isinstance(command, SelectMovie):
            self._open_detail(DetailKind.MOVIE, command.movie_id)
        elif isinstance(command, SelectPerson):
            self._open_detail(DetailKind.PERSON, command.person_id)
        elif isinstance(command, DismissDetail):
            self._detail_seq += 1
            self.overlay = None
        elif isinstance(command, SaveCredential):
            self._save_credential(command.token)
        elif isinstance(command, OpenCredentialPrompt):
            self.credential_prompt = True
            self.credential_status = None
        elif isinstance(command, CloseCredentialPrompt):
            self.credential_prompt = False
            self.credential_status = None
        else:
            raise TypeError(f"Unknown command: {command!r}")
        return self.snapshot()

    # ---------- busca ----------
    def _has_credential(self) -> bool:
        try:
            return self.store.get() is not None
        except CredentialStoreError as e:
            logger.error(f"Falha ao ler a chave de API: {e}")
            return False

    def begin_search(self, query: SearchQuery) -> Optional[int]:
        """
        Valida a busca e entra em Loading. Devolve o número de sequência da busca,
        ou None se ela foi barrada (texto vazio ou chave ausente).
        """
        if not query.text:
            # nada para repetir: Retry não pode refazer a busca anterior
            self.query = None
            self.view = Error(EMPTY_QUERY_MESSAGES[query.kind])
            return None
        if not self._has_credential():
            self.view = Error(MSG_MISSING_CREDENTIAL, prompt_credential=True)
            self.credential_prompt = True
            return None

        self._search_seq += 1
        self.query = query
        self.view = Loading(query.kind)
        return self._search_seq

    def fetch(self, query: SearchQuery) -> SearchOutcome:
        if query.kind == SearchKind.TITLE:
            page = self.client.search_movies_page(query.text, page=query.page)
            return SearchOutcome(items=page.results, page=page.page, total_pages=page.total_pages)

        person = self.client.search_person(query.text)
        if person is None:
            return SearchOutcome()
        return SearchOutcome(items=self.client.fetch_movies_for_person(person.id), person=person)

    def complete_search(
        self,
        ticket: int,
        query: SearchQuery,
        outcome: Optional[SearchOutcome] = None,
        error: Optional[Exception] = None,
    ) -> bool:
        """Aplica o resultado de uma busca; devolve False se ela já foi superada por outra."""
        if ticket != self._search_seq:
            logger.debug(f"Descartando resultado antigo da busca #{ticket} (atual #{self._search_seq})")
            return False

        if error is not None:
            self._apply_failure(query, error)
        elif outcome is None or not outcome.items:
            if query.kind == SearchKind.PERSON and outcome is not None and outcome.person is not None:
                self.view = Error(MSG_PERSON_WITHOUT_MOVIES)
            else:
                self.view = Error(NO_RESULTS_MESSAGES[query.kind])
        else:
            if query.kind == SearchKind.TITLE:
                title_label = f'Search Results for "{query.text}"'
            else:
                title_label = f"Movies featuring {outcome.person.name}"
            self.view = Results(
                items=outcome.items,
                title_label=title_label,
                count_label=count_label(len(outcome.items)),
                person=outcome.person,
                page=outcome.page,
                total_pages=outcome.total_pages,
            )
            logger.info(f"{query.kind.value} '{query.text}': {len(outcome.items)} filme(s)")
        return True

    def _apply_failure(self, query: SearchQuery, error: Exception):
        if isinstance(error, MissingCredential):
            self.view = Error(MSG_MISSING_CREDENTIAL, prompt_credential=True)
            self.credential_prompt = True
            return
        status = getattr(error, "status_code", None)
        logger.error(f"Erro na busca ({query.kind.value} '{query.text}'): {error!r} status={status}")
        self.view = Error(FAILURE_MESSAGES[query.kind])

    def _search(self, query: SearchQuery):
        ticket = self.begin_search(query)
        if ticket is None:
            return
        try:
            outcome = self.fetch(query)
        except (TmdbClientError, CredentialStoreError) as e:
            self.complete_search(ticket, query, error=e)
        else:
            self.complete_search(ticket, query, outcome=outcome)

    def _change_page(self, delta: int):
        if not isinstance(self.view, Results) or self.query is None:
            return
        if self.query.kind != SearchKind.TITLE:
            return
        new_page = self.view.page + delta
        if new_page < 1 or new_page > self.view.total_pages or new_page == self.view.page:
            return
        self._search(SearchQuery(kind=self.query.kind, text=self.query.text, page=new_page))

    # ---------- overlay de detalhes ----------
    def begin_detail(self, kind: DetailKind, target_id: int) -> int:
        self._detail_seq += 1
        self.overlay = Overlay(kind=kind, target_id=target_id, status=OverlayStatus.LOADING)
        return self._detail_seq

    def complete_detail(
        self,
        ticket: int,
        detail: Optional[Union[MovieDetail, PersonDetail]] = None,
        error: Optional[Exception] = None,
    ) -> bool:
        if ticket != self._detail_seq or self.overlay is None:
            logger.debug(f"Descartando detalhe antigo #{ticket}")
            return False

        kind, target_id = self.overlay.kind, self.overlay.target_id
        if error is None:
            self.overlay = Overlay(kind=kind, target_id=target_id, status=OverlayStatus.READY, detail=detail)
            return True

        if isinstance(error, MissingCredential):
            message = MSG_MISSING_CREDENTIAL
            self.credential_prompt = True
        else:
            logger.error(f"Erro ao carregar detalhes ({kind.value} {target_id}): {error!r} "
                         f"status={getattr(error, 'status_code', None)}")
            label = "movie" if kind == DetailKind.MOVIE else "person"
            message = f"Failed to load {label} details. Please try again."
        self.overlay = Overlay(kind=kind, target_id=target_id, status=OverlayStatus.ERROR, message=message)
        return True

    def _open_detail(self, kind: DetailKind, target_id: int):
        ticket = self.begin_detail(kind, target_id)
        try:
            if kind == DetailKind.MOVIE:
                detail = self.client.fetch_movie_detail(target_id)
            else:
                detail = self.client.fetch_person_detail(target_id)
        except (TmdbClientError, CredentialStoreError) as e:
            self.complete_detail(ticket, error=e)
        else:
            self.complete_detail(ticket, detail=detail)

    # ---------- chave de API ----------
    def _save_credential(self, token: str):
        try:
            self.store.set(token)
        except ValidationError as e:
            self.credential_status = CredentialStatus(str(e), ok=False)
            return
        except CredentialStoreError as e:
            logger.error(f"Falha ao salvar a chave de API: {e}")
            self.credential_status = CredentialStatus(MSG_CREDENTIAL_STORE_FAILED, ok=False)
            return
        self.credential_status = CredentialStatus(MSG_CREDENTIAL_SAVED, ok=True)
        self.credential_prompt = False
