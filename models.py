"""
Modelos pydantic para as respostas do TMDb usadas pela interface.

Cada função `decode_*` recebe o JSON cru de um endpoint e valida com
`Model.model_validate`; se o formato não bater (campo obrigatório ausente,
tipo errado, NaN) levanta DecodeError em vez de deixar campos indefinidos
passarem adiante. Campos extras devolvidos pela API são ignorados.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Type, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from errors import DecodeError


class SearchKind(str, Enum):
    TITLE = "title"
    PERSON = "person"


@dataclass(frozen=True)
class SearchQuery:
    kind: SearchKind
    text: str
    page: int = 1


class TmdbModel(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)


def _blank_to_none(value: Any) -> Any:
    # o TMDb manda "" quando não tem data
    return value or None


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


class MovieSummary(TmdbModel):
    id: int
    title: str
    poster_path: Optional[str] = None
    release_date: Optional[str] = None
    vote_average: Optional[float] = None
    overview: Optional[str] = None

    @field_validator("release_date", mode="before")
    @classmethod
    def _release_date(cls, value: Any) -> Any:
        return _blank_to_none(value)


class CrewMember(TmdbModel):
    name: str
    job: str = ""

    @field_validator("job", mode="before")
    @classmethod
    def _job(cls, value: Any) -> Any:
        return "" if value is None else value


class CastMember(TmdbModel):
    name: str


class Credits(TmdbModel):
    crew: List[CrewMember] = Field(default_factory=list)
    cast: List[CastMember] = Field(default_factory=list)

    @field_validator("crew", "cast", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> Any:
        return _none_to_list(value)


class MovieDetail(MovieSummary):
    runtime: Optional[int] = None
    original_language: Optional[str] = None
    vote_count: int = 0
    genres: List[str] = Field(default_factory=list)
    credits: Credits = Field(default_factory=Credits)

    @field_validator("vote_count", mode="before")
    @classmethod
    def _vote_count(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("genres", mode="before")
    @classmethod
    def _genre_names(cls, value: Any) -> Any:
        # [{"id": 28, "name": "Action"}] -> ["Action"]
        if isinstance(value, list):
            return [g.get("name") if isinstance(g, dict) else g for g in value]
        return _none_to_list(value)

    @field_validator("credits", mode="before")
    @classmethod
    def _credits(cls, value: Any) -> Any:
        return {} if value is None else value


class PersonSummary(TmdbModel):
    id: int
    name: str
    profile_path: Optional[str] = None
    popularity: Optional[float] = None
    known_for_department: Optional[str] = None
    known_for: List[str] = Field(default_factory=list)

    @field_validator("known_for", mode="before")
    @classmethod
    def _known_for_titles(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return _none_to_list(value)
        titles = []
        for item in value:
            if isinstance(item, str):
                titles.append(item)
                continue
            if not isinstance(item, dict):
                raise ValueError("known_for entry is not an object")
            # filmes têm "title", séries têm "name"
            title = item.get("title") or item.get("name")
            if isinstance(title, str) and title:
                titles.append(title)
        return titles[:3]


class PersonDetail(PersonSummary):
    birthday: Optional[str] = None
    place_of_birth: Optional[str] = None
    biography: Optional[str] = None
    movie_credits: List[MovieSummary] = Field(default_factory=list)

    @field_validator("birthday", mode="before")
    @classmethod
    def _birthday(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("movie_credits", mode="before")
    @classmethod
    def _cast_credits(cls, value: Any) -> Any:
        # append_to_response=movie_credits -> {"cast": [...], "crew": [...]}
        if isinstance(value, dict):
            return _none_to_list(value.get("cast"))
        return _none_to_list(value)


class SearchPage(TmdbModel):
    results: List[MovieSummary]
    page: int = 1
    total_pages: int = 1
    total_results: Optional[int] = None

    @field_validator("page", "total_pages", mode="before")
    @classmethod
    def _at_least_one(cls, value: Any) -> Any:
        if value is None:
            return 1
        if isinstance(value, int) and value < 1:
            return 1
        return value

    @model_validator(mode="after")
    def _default_total(self) -> "SearchPage":
        if self.total_results is None:
            self.total_results = len(self.results)
        return self


class PersonSearchPage(TmdbModel):
    results: List[PersonSummary]


class MovieCredits(TmdbModel):
    cast: List[MovieSummary] = Field(default_factory=list)

    @field_validator("cast", mode="before")
    @classmethod
    def _cast(cls, value: Any) -> Any:
        return _none_to_list(value)


# ---------- decoders ----------
M = TypeVar("M", bound=BaseModel)


def _decode(model: Type[M], payload: Any, what: str) -> M:
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        raise DecodeError(f"TMDb returned unexpected JSON shape for {what}: {e.error_count()} error(s).") from e


def decode_search_page(payload: Any) -> SearchPage:
    return _decode(SearchPage, payload, "search response")


def decode_movie_detail(payload: Any) -> MovieDetail:
    return _decode(MovieDetail, payload, "movie detail")


def decode_person_search(payload: Any) -> Optional[PersonSummary]:
    results = _decode(PersonSearchPage, payload, "person search response").results
    return results[0] if results else None


def decode_movie_credits(payload: Any) -> List[MovieSummary]:
    return _decode(MovieCredits, payload, "movie credits").cast


def decode_person_detail(payload: Any) -> PersonDetail:
    return _decode(PersonDetail, payload, "person detail")
