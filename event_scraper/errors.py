"""Typed failures returned (never raised) by the scraping engine."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class FetchErrorKind(str, Enum):
    INVALID_URL = "invalid_url"
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    NON_HTML_CONTENT = "non_html_content"
    POOL_EXHAUSTED = "pool_exhausted"


class ExtractionErrorKind(str, Enum):
    NO_EXTRACTABLE_CONTENT = "no_extractable_content"


class FetchError(BaseModel):
    """The page could not be fetched or rendered. Always fatal to the call."""

    model_config = ConfigDict(frozen=True)

    kind: FetchErrorKind
    message: str
    status_code: Optional[int] = None  # Only for HTTP_STATUS

    @classmethod
    def invalid_url(cls, url: str) -> "FetchError":
        return cls(kind=FetchErrorKind.INVALID_URL, message=f"URL inválida: {url}")

    @classmethod
    def unreachable(cls, detail: str = "erro desconhecido") -> "FetchError":
        return cls(
            kind=FetchErrorKind.UNREACHABLE,
            message=f"Não foi possível acessar a página: {detail}",
        )

    @classmethod
    def timeout(cls, url: str) -> "FetchError":
        return cls(
            kind=FetchErrorKind.TIMEOUT,
            message=f"Timeout ao acessar {url}. Verifique se a URL está correta.",
        )

    @classmethod
    def http_status(cls, code: int) -> "FetchError":
        if code in (403, 429):
            message = (
                f"Este site bloqueou o acesso automático (HTTP {code}). "
                "Por favor, preencha as informações do evento manualmente."
            )
        else:
            message = f"Não foi possível acessar a página: HTTP {code}"
        return cls(kind=FetchErrorKind.HTTP_STATUS, message=message, status_code=code)

    @classmethod
    def non_html(cls, content_type: Optional[str]) -> "FetchError":
        return cls(
            kind=FetchErrorKind.NON_HTML_CONTENT,
            message=f"A URL não aponta para uma página HTML ({content_type or 'tipo desconhecido'})",
        )

    @classmethod
    def pool_exhausted(cls) -> "FetchError":
        return cls(
            kind=FetchErrorKind.POOL_EXHAUSTED,
            message="Capacidade de renderização esgotada. Tente novamente em instantes.",
        )


class ExtractionError(BaseModel):
    """The page was fetched but the minimal viable record could not be built."""

    model_config = ConfigDict(frozen=True)

    kind: ExtractionErrorKind = ExtractionErrorKind.NO_EXTRACTABLE_CONTENT
    message: str = (
        "Não foi possível identificar um evento nesta página "
        "(título, data, cidade e estado são obrigatórios)."
    )
    missing: list[str] = []
