# movies_client.py

import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import requests
from loguru import logger

from errors import ConfigMissing, MalformedResponse, UpstreamError, UpstreamTransient
from retry import RetryPolicy
from settings import BASE_URL

LANGUAGE = "en-US"

SEARCH_PATH = "/search/movie"
DISCOVER_PATH = "/discover/movie"
POPULAR_PATH = "/movie/popular"
GENRES_PATH = "/genre/movie/list"

DEFAULT_HEADERS = {"User-Agent": "MovieExplorer/1.0", "Accept": "application/json"}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _to_int(value: Any) -> Optional[int]:
    """Leading-integer parse: "3abc" and "2.5" give 3 and 2, "abc" gives None."""
    if value is None:
        return None
    m = _LEADING_INT.match(str(value))
    return int(m.group(1)) if m else None


@dataclass(frozen=True)
class SearchRequest:
    query_text: str = ""
    genre_id: Optional[int] = None
    page: int = 1

    @classmethod
    def build(cls, query: Any = None, genre: Any = None, page: Any = None) -> "SearchRequest":
        """
        Normalize raw inputs: trim the text, drop an unparseable genre,
        and fall back to page 1 on a missing or invalid page.
        """
        text = str(query).strip() if query is not None else ""
        page_num = _to_int(page)
        return cls(
            query_text=text,
            genre_id=_to_int(genre),
            page=page_num if page_num and page_num >= 1 else 1,
        )

    @property
    def mode(self) -> str:
        if self.query_text:
            return "search"
        if self.genre_id is not None:
            return "discover"
        return "popular"


def select_endpoint(request: SearchRequest) -> Tuple[str, dict]:
    """
    Map a request to (upstream path, params without credential).
    Text wins over genre; neither means the popular listing.
    """
    params = {
        "language": LANGUAGE,
        "page": request.page,
        "include_adult": "false",
    }
    if request.query_text:
        params["query"] = request.query_text
        return SEARCH_PATH, params
    if request.genre_id is not None:
        params["with_genres"] = request.genre_id
        params["sort_by"] = "popularity.desc"
        return DISCOVER_PATH, params
    return POPULAR_PATH, params


def fetch_json(http, url: str, params: dict, timeout: float, headers: Optional[dict] = None) -> dict:
    """
    One upstream GET. Transport failures, 5xx and 429 become
    UpstreamTransient; other non-2xx become UpstreamError; a body that is
    not a JSON object becomes MalformedResponse.
    """
    try:
        resp = http.get(url, params=params, headers=headers, timeout=timeout)
    except requests.exceptions.Timeout as e:
        raise UpstreamTransient(f"Timed out after {timeout}s: {url}") from e
    except requests.exceptions.RequestException as e:
        raise UpstreamTransient(f"Connection error: {e}") from e

    status = resp.status_code
    if status == 429 or status >= 500:
        raise UpstreamTransient(f"Upstream responded {status}", upstream_status=status)
    if not 200 <= status < 300:
        raise UpstreamError(f"Upstream responded {status}", upstream_status=status)

    try:
        data = resp.json()
    except ValueError as e:
        raise MalformedResponse("Upstream body is not valid JSON") from e
    if not isinstance(data, dict):
        raise MalformedResponse("Upstream body is not a JSON object")
    return data


class MoviesClient:
    """
    Server-side TMDB client. Holds the credential, injects it into every
    call, and wraps each call in the retry policy.
    """

    def __init__(self, api_key: Optional[str], base_url: str = BASE_URL, timeout: float = 10.0,
                 retry_policy: Optional[RetryPolicy] = None, http=None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self.http = http or requests

    def _require_key(self) -> str:
        if not self.api_key:
            raise ConfigMissing()
        return self.api_key

    def _get(self, path: str, params: dict, retry: bool = True) -> dict:
        params = {**params, "api_key": self._require_key()}
        url = f"{self.base_url}{path}"

        def do_call():
            return fetch_json(self.http, url, params, self.timeout, headers=DEFAULT_HEADERS)

        if not retry:
            try:
                return do_call()
            except UpstreamTransient as e:
                raise UpstreamError(e.message, upstream_status=e.upstream_status) from e
        return self.retry_policy.call(do_call, label=path)

    def genres(self) -> dict:
        return self._get(GENRES_PATH, {"language": LANGUAGE})

    def movies(self, request: SearchRequest) -> dict:
        path, params = select_endpoint(request)
        logger.debug(f"[Gateway] {request.mode} -> {path} page={request.page}")
        return self._get(path, params)

    def ping(self) -> dict:
        """Single popular-listing call without retry, for connectivity checks."""
        return self._get(POPULAR_PATH, {"page": 1}, retry=False)
