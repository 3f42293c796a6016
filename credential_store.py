# credential_store.py
import json
import os
from typing import Dict, Optional

from errors import CredentialStoreError, EmptyCredential, InvalidCredentialFormat
from logger_conf import get_logger
from settings import CREDENTIAL_KEY, CREDENTIAL_MIN_LENGTH, CREDENTIAL_PREFIX, STORE_FILE

logger = get_logger(__name__)


def looks_like_api_key(token: str) -> bool:
    """
    Checagem superficial de formato: prefixo conhecido ou comprimento mínimo.
    Não garante que a chave seja aceita pelo TMDb; isso só se sabe na primeira requisição.
    """
    return token.startswith(CREDENTIAL_PREFIX) or len(token) >= CREDENTIAL_MIN_LENGTH


class CredentialStore:
    """Guarda uma única chave de API num arquivo JSON chave-valor (persistente entre sessões)."""

    def __init__(self, path: str = STORE_FILE, key: str = CREDENTIAL_KEY):
        self.path = path
        self.key = key

    # ---------- arquivo ----------
    def _ensure_file(self):
        """Garante que o arquivo exista e seja um objeto JSON."""
        if not os.path.exists(self.path):
            try:
                with open(self.path, "w", encoding="utf-8") as f:
                    json.dump({}, f)
            except OSError as e:
                raise CredentialStoreError(f"Não foi possível criar {self.path}: {e}") from e

    def _read_file(self) -> Dict[str, str]:
        self._ensure_file()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f) or {}
            if not isinstance(data, dict):
                raise ValueError("conteúdo não é um objeto JSON")
            return data
        except (OSError, ValueError) as e:
            # arquivo corrompido: renomeia e recria vazio
            backup = self.path + ".corrupt"
            try:
                os.replace(self.path, backup)
            except OSError:
                logger.warning(f"Não foi possível renomear {self.path} para {backup}")
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump({}, f)
            raise CredentialStoreError(f"Erro lendo {self.path}. Arquivo renomeado para {backup}. Detalhe: {e}") from e

    def _write_file(self, data: Dict[str, str]):
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            raise CredentialStoreError(f"Erro ao gravar {self.path}: {e}") from e

    # ---------- API pública ----------
    def get(self) -> Optional[str]:
        value = self._read_file().get(self.key)
        if isinstance(value, str) and value:
            return value
        return None

    def set(self, token: str) -> str:
        token = (token or "").strip()
        if not token:
            raise EmptyCredential("Please enter an API key.")
        if not looks_like_api_key(token):
            raise InvalidCredentialFormat("Please enter a valid TMDb API key.")

        data = self._read_file()
        data[self.key] = token
        self._write_file(data)
        logger.info("Chave de API salva.")
        return token

    def clear(self) -> None:
        data = self._read_file()
        if data.pop(self.key, None) is not None:
            self._write_file(data)
            logger.info("Chave de API removida.")
