# tiers.py

import asyncio
from typing import List, Optional, Tuple

import requests
from loguru import logger

import demo_data
from errors import MalformedResponse, UpstreamError
from movies_client import GENRES_PATH, LANGUAGE, SearchRequest, fetch_json, select_endpoint
from settings import BASE_URL

PAGE_SIZE = 20
GENRE_KEYS = ("id", "name")


def _results(data: dict, key: str, required: Tuple[str, ...] = ()) -> List[dict]:
    """
    Pull the item list out of a tier response. Anything that is not a list
    of objects carrying the required keys is a MalformedResponse, so the
    chain moves on to the next tier.
    """
    if data.get("error"):
        raise UpstreamError(str(data["error"]))
    items = data.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise MalformedResponse(f"'{key}' is not a list")
    for item in items:
        if not isinstance(item, dict):
            raise MalformedResponse(f"'{key}' holds a non-object item: {item!r}")
        missing = [k for k in required if k not in item]
        if missing:
            raise MalformedResponse(f"'{key}' item lacks {', '.join(missing)}")
    return items


class GatewayTier:
    """Our own backend: /api/movies and /api/genres."""

    name = "gateway"

    def __init__(self, gateway_url: str, timeout: float = 10.0, http=None):
        self.gateway_url = gateway_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests

    def _get(self, path: str, params: Optional[dict] = None) -> dict:
        return fetch_json(self.http, f"{self.gateway_url}{path}", params or {}, self.timeout)

    async def movies(self, request: SearchRequest) -> List[dict]:
        params = {
            "query": request.query_text,
            "genre": "" if request.genre_id is None else request.genre_id,
            "page": request.page,
        }
        data = await asyncio.to_thread(self._get, "/api/movies", params)
        return _results(data, "results")

    async def genres(self) -> List[dict]:
        data = await asyncio.to_thread(self._get, "/api/genres")
        return _results(data, "genres", GENRE_KEYS)


class DirectUpstreamTier:
    """
    Calls TMDB straight from the client with an explicitly configured
    public key. Same endpoint precedence as the gateway, single attempt.
    """

    name = "direct"

    def __init__(self, api_key: str, base_url: str = BASE_URL, timeout: float = 10.0, http=None):
        if not api_key:
            raise ValueError("DirectUpstreamTier needs an explicit public API key")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests

    def _get(self, path: str, params: dict) -> dict:
        return fetch_json(self.http, f"{self.base_url}{path}", {**params, "api_key": self.api_key}, self.timeout)

    async def movies(self, request: SearchRequest) -> List[dict]:
        path, params = select_endpoint(request)
        data = await asyncio.to_thread(self._get, path, params)
        return _results(data, "results")

    async def genres(self) -> List[dict]:
        data = await asyncio.to_thread(self._get, GENRES_PATH, {"language": LANGUAGE})
        return _results(data, "genres", GENRE_KEYS)


class LocalStaticTier:
    """In-memory filter over a fixed dataset. Never fails."""

    name = "local"

    def __init__(self, movies: Optional[List[dict]] = None, genres: Optional[List[dict]] = None):
        self._movies = list(demo_data.MOVIES if movies is None else movies)
        self._genres = list(demo_data.GENRES if genres is None else genres)

    def filter(self, request: SearchRequest) -> List[dict]:
        if request.query_text:
            needle = request.query_text.lower()
            matches = [m for m in self._movies if needle in (m.get("title") or "").lower()]
        elif request.genre_id is not None:
            matches = [m for m in self._movies if request.genre_id in (m.get("genre_ids") or [])]
        else:
            matches = list(self._movies)
        start = (request.page - 1) * PAGE_SIZE
        return matches[start:start + PAGE_SIZE]

    async def movies(self, request: SearchRequest) -> List[dict]:
        results = self.filter(request)
        logger.debug(f"[Tier:local] {request.mode} matched {len(results)} demo movies")
        return results

    async def genres(self) -> List[dict]:
        return list(self._genres)
