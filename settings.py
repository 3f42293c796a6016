# settings.py
import os
from dotenv import load_dotenv

# Carrega .env (opcional; nada aqui é obrigatório)
load_dotenv()

_HERE = os.path.dirname(__file__)

BASE_URL = "https://api.themoviedb.org/3"
IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"
PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/300x450?text=No+Image"
LANGUAGE = "en-US"

# chave usada no arquivo de armazenamento local
CREDENTIAL_KEY = "tmdb_api_key"
CREDENTIAL_PREFIX = "api_"
CREDENTIAL_MIN_LENGTH = 20

FILMOGRAPHY_LIMIT = 20

STORE_FILE = os.getenv("MOVIE_SEARCH_STORE_FILE") or os.path.join(_HERE, "local_store.json")
LOG_FILE = os.getenv("MOVIE_SEARCH_LOG_FILE") or os.path.join(_HERE, "movie_search.log")


def _read_timeout(default: float = 10.0) -> float:
    raw = os.getenv("MOVIE_SEARCH_TIMEOUT")
    if not raw:
        return default
    try:
        value = float(raw)
    except (ValueError, TypeError):
        return default
    return value if value > 0 else default


REQUEST_TIMEOUT = _read_timeout()


def _read_log_level(default: str = "INFO") -> str:
    # nível do console; o arquivo sempre recebe DEBUG
    raw = (os.getenv("MOVIE_SEARCH_LOG_LEVEL") or "").strip().upper()
    if raw in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        return raw
    return default


LOG_LEVEL = _read_log_level()
