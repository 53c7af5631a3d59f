# render.py

from dataclasses import dataclass
from typing import Dict, List, Optional

from settings import IMG_BASE, PLACEHOLDER_POSTER

NOT_AVAILABLE = "N/A"
EMPTY_MESSAGE = "No movies found. Try a different search."


@dataclass(frozen=True)
class MovieCard:
    id: Optional[int]
    title: str
    poster_url: str
    year: str
    rating: str
    genres: List[str]


def display_year(release_date: Optional[str]) -> str:
    if not release_date:
        return NOT_AVAILABLE
    head = str(release_date)[:4]
    return head if head.isdigit() else NOT_AVAILABLE


def display_rating(vote_average: Optional[float]) -> str:
    # 0 counts as unrated, the same as a missing score
    if not vote_average:
        return NOT_AVAILABLE
    try:
        return f"{float(vote_average):.1f}"
    except (TypeError, ValueError):
        return NOT_AVAILABLE


def display_genres(genre_ids: Optional[List[int]], genre_map: Dict[int, str], limit: int = 2) -> List[str]:
    """First `limit` ids resolved through the map; unknown ids are dropped."""
    names = [genre_map.get(gid) for gid in (genre_ids or [])[:limit]]
    return [n for n in names if n]


def poster_url(poster_path: Optional[str]) -> str:
    return f"{IMG_BASE}{poster_path}" if poster_path else PLACEHOLDER_POSTER


def to_card(movie: dict, genre_map: Dict[int, str]) -> MovieCard:
    return MovieCard(
        id=movie.get("id"),
        title=movie.get("title") or "",
        poster_url=poster_url(movie.get("poster_path")),
        year=display_year(movie.get("release_date")),
        rating=display_rating(movie.get("vote_average")),
        genres=display_genres(movie.get("genre_ids"), genre_map),
    )


class ResultsView:
    """
    In-memory stand-in for the results grid: what a UI would draw is kept
    on attributes so callers (CLI, tests) can read it back.
    """

    def __init__(self):
        self.loading = False
        self.cards: List[MovieCard] = []
        self.status = ""
        self.source: Optional[str] = None
        self.renders = 0

    def show_loading(self) -> None:
        self.loading = True

    def hide_loading(self) -> None:
        self.loading = False

    def show_results(self, movies: List[dict], genre_map: Dict[int, str], source: Optional[str] = None) -> None:
        self.renders += 1
        self.source = source
        self.cards = [to_card(m, genre_map) for m in movies]
        if not self.cards:
            self.status = EMPTY_MESSAGE
        else:
            self.status = f"Found {len(self.cards)} amazing movies"

