# orchestrator.py

from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

from debounce import Debouncer
from errors import GatewayError
from movies_client import SearchRequest
from render import ResultsView
from settings import ClientSettings
from tiers import DirectUpstreamTier, GatewayTier, LocalStaticTier


def build_tiers(settings: ClientSettings, offline: bool = False) -> list:
    """
    Ordered fallback chain: gateway, then direct upstream (only with an
    explicitly configured public key), then the local demo dataset.
    """
    tiers: list = []
    if not offline:
        tiers.append(GatewayTier(settings.gateway_url, timeout=settings.timeout))
        if settings.direct_upstream_enabled:
            tiers.append(DirectUpstreamTier(settings.public_api_key, base_url=settings.base_url,
                                            timeout=settings.timeout))
    tiers.append(LocalStaticTier())
    return tiers


class Session:
    """
    One user's browsing session: current inputs, genre map, fallback
    chain and the view results are drawn into.

    Every search takes a new sequence token; a result is applied only if
    its token is still the latest one when it arrives.
    """

    def __init__(self, tiers: Sequence, view: Optional[ResultsView] = None, debounce_seconds: float = 0.3):
        if not tiers:
            raise ValueError("Session needs at least one tier")
        self.tiers = list(tiers)
        self.view = view or ResultsView()
        self.genre_map: Dict[int, str] = {}
        self.query_text = ""
        self.genre_id: Optional[int] = None
        self.initialized = False
        self._token = 0
        self._debouncer = Debouncer(debounce_seconds, self._debounced_search)

    @classmethod
    def from_settings(cls, settings: Optional[ClientSettings] = None, view: Optional[ResultsView] = None,
                      offline: bool = False) -> "Session":
        settings = settings or ClientSettings.from_env()
        return cls(build_tiers(settings, offline=offline), view=view, debounce_seconds=settings.debounce_seconds)

    @property
    def latest_token(self) -> int:
        return self._token

    async def initialize(self, initial_search: bool = True) -> None:
        """Load genres once through the chain, then show the default listing."""
        await self.load_genres()
        self.initialized = True
        if initial_search:
            await self.search()

    async def load_genres(self) -> None:
        for tier in self.tiers:
            try:
                genres = await tier.genres()
            except GatewayError as e:
                logger.warning(f"[Tier:{tier.name}] genres unavailable: {e.message}")
                continue
            self.genre_map = {g["id"]: g["name"] for g in genres}
            logger.info(f"[Orchestrator] Loaded {len(self.genre_map)} genres from {tier.name}")
            return
        logger.error("[Orchestrator] No tier could provide genres")

    async def resolve(self, request: SearchRequest) -> Tuple[List[dict], Optional[str]]:
        """Try each tier in order; the first success wins. ([], None) when all fail."""
        for tier in self.tiers:
            try:
                results = await tier.movies(request)
            except GatewayError as e:
                logger.warning(f"[Tier:{tier.name}] {request.mode} failed, falling back: {e.message}")
                continue
            logger.debug(f"[Orchestrator] {tier.name} answered {request.mode} with {len(results)} movies")
            return results, tier.name
        logger.error(f"[Orchestrator] All tiers failed for {request.mode}")
        return [], None

    def current_request(self, page: int = 1) -> SearchRequest:
        return SearchRequest.build(self.query_text, self.genre_id, page)

    async def search(self, request: Optional[SearchRequest] = None) -> Optional[List[dict]]:
        """
        Run one search and render it. Returns the applied results, or None
        when a newer search started before this one finished.
        """
        request = request or self.current_request()
        self._token += 1
        token = self._token
        self.view.show_loading()

        results, source = await self.resolve(request)

        if token != self._token:
            logger.debug(f"[Orchestrator] Dropping stale result for token {token} (latest {self._token})")
            return None
        self.view.show_results(results, self.genre_map, source=source)
        self.view.hide_loading()
        return results

    async def _debounced_search(self) -> None:
        await self.search()

    def on_query_changed(self, text: str) -> None:
        self.query_text = text
        self._debouncer.trigger()

    async def on_genre_changed(self, genre) -> Optional[List[dict]]:
        self.genre_id = SearchRequest.build(genre=genre).genre_id
        return await self.search()

    async def settle(self) -> None:
        """Wait for the last debounced search to finish."""
        await self._debouncer.flush()

    def close(self) -> None:
        self._debouncer.cancel()
