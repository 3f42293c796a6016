# errors.py
from typing import Optional


class ValidationError(ValueError):
    """Entrada do usuário vazia ou malformada; resolvida localmente."""


class EmptyCredential(ValidationError):
    pass


class InvalidCredentialFormat(ValidationError):
    pass


class CredentialStoreError(RuntimeError):
    pass


class TmdbClientError(RuntimeError):
    def __init__(self, message: str, *, status_code: Optional[int] = None, body_snippet: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body_snippet = body_snippet


class MissingCredential(TmdbClientError):
    def __init__(self, message: str = "TMDb API key is not configured.") -> None:
        super().__init__(message)


class NetworkError(TmdbClientError):
    pass


class HttpError(TmdbClientError):
    def __init__(self, status_code: int, body_snippet: Optional[str] = None) -> None:
        super().__init__(f"TMDb request failed with HTTP {status_code}.", status_code=status_code, body_snippet=body_snippet)


class DecodeError(TmdbClientError):
    pass
