# tmdb_client.py
from typing import Any, Dict, List, Optional

import requests

from credential_store import CredentialStore
from errors import DecodeError, HttpError, MissingCredential, NetworkError
from logger_conf import get_logger
from models import (
    MovieDetail,
    MovieSummary,
    PersonDetail,
    PersonSummary,
    SearchPage,
    decode_movie_credits,
    decode_movie_detail,
    decode_person_detail,
    decode_person_search,
    decode_search_page,
)
from settings import BASE_URL, IMAGE_BASE_URL, LANGUAGE, PLACEHOLDER_IMAGE_URL, REQUEST_TIMEOUT
from transform import sort_filmography

logger = get_logger(__name__)


# ---------- utilitários ----------
def image_url(path: Optional[str]) -> str:
    """URL completa de pôster/foto; placeholder quando o TMDb não tem imagem."""
    if not path:
        return PLACEHOLDER_IMAGE_URL
    return f"{IMAGE_BASE_URL}{path}"


class TmdbClient:
    """
    Cliente mínimo da API v3 do TMDb.

    A chave é lida do CredentialStore antes de cada requisição; sem chave
    nenhuma chamada de rede é feita (MissingCredential).
    """

    def __init__(
        self,
        store: CredentialStore,
        session: Optional[requests.Session] = None,
        base_url: str = BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.store = store
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        api_key = self.store.get()
        if not api_key:
            raise MissingCredential()

        url = f"{self.base_url}{endpoint}"
        query = {"api_key": api_key, "language": LANGUAGE}
        query.update(params or {})

        try:
            resp = self.session.get(url, params=query, headers={"accept": "application/json"}, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.warning(f"Requisição expirou (timeout) em {endpoint}")
            raise NetworkError(f"TMDb request to {endpoint} timed out.") from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"Erro de rede em {endpoint}: {e}")
            raise NetworkError(f"TMDb request to {endpoint} failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            snippet = (resp.text or "")[:200]
            logger.warning(f"Erro na API ({endpoint}): status {resp.status_code} — {snippet}")
            raise HttpError(resp.status_code, body_snippet=snippet)

        try:
            return resp.json()
        except ValueError as e:
            logger.warning(f"Resposta não-JSON em {endpoint}")
            raise DecodeError(
                "TMDb returned non-JSON response.",
                status_code=resp.status_code,
                body_snippet=(resp.text or "")[:200],
            ) from e

    # ---------- busca ----------
    def search_movies_page(self, query: str, page: int = 1) -> SearchPage:
        """Busca filmes por texto (/search/movie), com dados de paginação."""
        data = self._get("/search/movie", {"query": query, "page": max(int(page), 1)})
        result = decode_search_page(data)
        logger.debug(f"search/movie '{query}' p{result.page}: {len(result.results)} resultados")
        return result

    def search_movies(self, query: str, page: int = 1) -> List[MovieSummary]:
        # lista vazia = nenhum resultado (não é erro)
        return self.search_movies_page(query, page).results

    def search_person(self, name: str) -> Optional[PersonSummary]:
        """Primeiro resultado de /search/person, ou None se não houver nenhum."""
        data = self._get("/search/person", {"query": name, "page": 1})
        return decode_person_search(data)

    # ---------- detalhes ----------
    def fetch_movie_detail(self, movie_id: int) -> MovieDetail:
        # append_to_response traz elenco/equipe na mesma requisição
        data = self._get(f"/movie/{int(movie_id)}", {"append_to_response": "credits"})
        return decode_movie_detail(data)

    def fetch_person_detail(self, person_id: int) -> PersonDetail:
        data = self._get(f"/person/{int(person_id)}", {"append_to_response": "movie_credits"})
        return decode_person_detail(data)

    def fetch_movies_for_person(self, person_id: int) -> List[MovieSummary]:
        """Filmografia (como elenco) com data, do mais recente ao mais antigo, no máximo 20."""
        data = self._get(f"/person/{int(person_id)}/movie_credits")
        return sort_filmography(decode_movie_credits(data))
