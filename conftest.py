import json
import os
import tempfile
from unittest.mock import MagicMock

# logs de teste fora da pasta do projeto (precisa vir antes de importar settings)
os.environ.setdefault("MOVIE_SEARCH_LOG_FILE", os.path.join(tempfile.gettempdir(), "movie_search_test.log"))

import pytest
import requests

from credential_store import CredentialStore
from tmdb_client import TmdbClient

VALID_KEY = "0123456789abcdef0123456789abcdef"


def make_response(payload=None, status_code: int = 200, text: str = None):
    resp = MagicMock()
    resp.status_code = status_code
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
        resp.text = text or ""
    else:
        resp.json.return_value = payload
        resp.text = text if text is not None else json.dumps(payload)
    return resp


def movie_payload(movie_id: int, title: str, release_date: str = "2010-07-16", **extra) -> dict:
    data = {
        "id": movie_id,
        "title": title,
        "poster_path": f"/{movie_id}.jpg",
        "release_date": release_date,
        "vote_average": 8.4,
        "overview": f"Overview of {title}",
    }
    data.update(extra)
    return data


@pytest.fixture
def store(tmp_path) -> CredentialStore:
    return CredentialStore(path=str(tmp_path / "local_store.json"))


@pytest.fixture
def keyed_store(store) -> CredentialStore:
    store.set(VALID_KEY)
    return store


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(keyed_store, session) -> TmdbClient:
    return TmdbClient(keyed_store, session=session)
