# transform.py
import html
import math
from datetime import date
from typing import Iterable, List, Optional, Sequence

from models import CastMember, CrewMember, MovieSummary
from settings import FILMOGRAPHY_LIMIT

FULL_STAR = "★"
EMPTY_STAR = "☆"
# meia estrela usa o mesmo símbolo da vazia
HALF_STAR = "☆"
UNKNOWN = "Unknown"


# ---------- campos derivados ----------
def star_rating(score: Optional[float]) -> str:
    """
    Converte a nota 0-10 do TMDb em 5 símbolos de estrela.
    None, 0 ou NaN -> 5 estrelas vazias. Valores fora de [0, 10] são limitados.
    """
    if not score or math.isnan(score):
        return EMPTY_STAR * 5
    score = min(max(float(score), 0.0), 10.0)
    full_stars = math.floor(score / 2)
    half_star = (score % 2) >= 1
    empty_stars = 5 - full_stars - (1 if half_star else 0)
    return FULL_STAR * full_stars + (HALF_STAR if half_star else "") + EMPTY_STAR * empty_stars


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def release_year(value: Optional[str]) -> str:
    parsed = _parse_date(value)
    if parsed:
        return str(parsed.year)
    # datas parciais ("1999" ou "1999-xx")
    if value and len(value) >= 4 and value[:4].isdigit():
        return value[:4]
    return UNKNOWN


def primary_director(crew: Iterable[CrewMember]) -> Optional[CrewMember]:
    """Primeiro integrante da equipe com job == "Director" (não o 'melhor')."""
    for member in crew:
        if member.job == "Director":
            return member
    return None


def top_cast(cast: Sequence[CastMember], n: int = 5) -> List[str]:
    # o TMDb já devolve o elenco na ordem de créditos
    return [member.name for member in cast[:max(n, 0)]]


def known_for_label(titles: Sequence[str], n: int = 3) -> str:
    return ", ".join(t for t in titles[:max(n, 0)] if t)


def sort_filmography(movies: Iterable[MovieSummary], limit: int = FILMOGRAPHY_LIMIT) -> List[MovieSummary]:
    """
    Remove filmes sem data de lançamento, ordena do mais recente para o mais antigo
    e mantém os `limit` primeiros. sorted() é estável, então empates preservam a
    ordem devolvida pela API.
    """
    dated = [m for m in movies if m.release_date]
    dated.sort(key=lambda m: m.release_date, reverse=True)
    return dated[:limit]


# ---------- rótulos de apresentação ----------
def rating_label(score: Optional[float]) -> str:
    if not score or math.isnan(score):
        return "N/A"
    return f"{score:.1f}"


def runtime_label(minutes: Optional[int]) -> str:
    return f"{minutes} minutes" if minutes else UNKNOWN


def release_date_label(value: Optional[str]) -> str:
    parsed = _parse_date(value)
    if not parsed:
        return UNKNOWN
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def language_label(code: Optional[str]) -> str:
    return code.upper() if code else UNKNOWN


def overview_text(text: Optional[str]) -> str:
    return text if text else "No overview available."


def count_label(n: int) -> str:
    return f"{n} movie(s) found"


# ---------- trechos HTML (st.markdown com unsafe_allow_html) ----------
# títulos e gêneros vêm do usuário ou da API: sempre escapar
def section_header_html(label: str) -> str:
    return f'<div class="section-header">{html.escape(label)}</div>'


def genre_badges_html(genres: Iterable[str]) -> str:
    return " ".join(f'<span class="genre-tag">{html.escape(g)}</span>' for g in genres)
