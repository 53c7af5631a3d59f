import asyncio

import pytest

from errors import UpstreamError
from movies_client import SearchRequest
from orchestrator import Session, build_tiers
from render import EMPTY_MESSAGE
from settings import ClientSettings
from tiers import DirectUpstreamTier, GatewayTier, LocalStaticTier


def titles(session):
    return [c.title for c in session.view.cards]


def test_fallback_prefers_direct_upstream_over_local(run, fake_tier):
    gateway = fake_tier("gateway", error=UpstreamError("Upstream responded 500"))
    direct = fake_tier("direct", results=[{"id": 7, "title": "From TMDB"}])
    session = Session([gateway, direct, LocalStaticTier()])

    run(session.search(SearchRequest.build("anything")))
    assert titles(session) == ["From TMDB"]
    assert session.view.source == "direct"
    assert len(gateway.requests) == 1


def test_local_tier_text_match_batman_is_empty(run, fake_tier):
    gateway = fake_tier("gateway", error=UpstreamError("down"))
    session = Session([gateway, LocalStaticTier()])

    results = run(session.search(SearchRequest.build("batman")))
    assert results == []
    assert session.view.source == "local"
    assert session.view.status == EMPTY_MESSAGE


def test_local_tier_genre_filter_drama():
    results = LocalStaticTier().filter(SearchRequest.build("", 18))
    assert len(results) == 3
    assert all(18 in m["genre_ids"] for m in results)


def test_local_tier_text_match_is_case_insensitive():
    results = LocalStaticTier().filter(SearchRequest.build("GODFATHER", 28))
    assert [m["title"] for m in results] == ["The Godfather"]


def test_all_tiers_failing_shows_empty_state(run, fake_tier):
    session = Session([fake_tier("gateway", error=UpstreamError("x")), fake_tier("direct", error=UpstreamError("y"))])

    assert run(session.search()) == []
    assert session.view.source is None
    assert session.view.status == EMPTY_MESSAGE


def test_stale_response_is_ignored(fake_tier):
    async def scenario():
        slow_gate = asyncio.Event()
        slow = fake_tier("gateway", results=[{"id": 1, "title": "Old"}], gate=slow_gate)
        session = Session([slow])

        first = asyncio.ensure_future(session.search(SearchRequest.build("old")))
        await asyncio.sleep(0)
        # second search answers immediately from a fresh tier chain
        session.tiers = [fake_tier("gateway", results=[{"id": 2, "title": "New"}])]
        second = await session.search(SearchRequest.build("new"))

        slow_gate.set()
        stale = await first
        return session, second, stale

    session, second, stale = asyncio.run(scenario())
    assert stale is None
    assert second == [{"id": 2, "title": "New"}]
    assert titles(session) == ["New"]
    assert session.view.renders == 1
    assert session.latest_token == 2


def test_debounce_collapses_bursts(fake_tier):
    async def scenario():
        tier = fake_tier("gateway", results=[{"id": 1, "title": "Hit"}])
        session = Session([tier], debounce_seconds=0.05)
        for text in ("b", "ba", "bat", "batm", "batman"):
            session.on_query_changed(text)
            await asyncio.sleep(0.005)
        await asyncio.sleep(0.1)
        await session.settle()
        return tier

    tier = asyncio.run(scenario())
    assert len(tier.requests) == 1
    assert tier.requests[0].query_text == "batman"


def test_genre_change_searches_immediately(fake_tier):
    async def scenario():
        tier = fake_tier("gateway", results=[])
        session = Session([tier], debounce_seconds=10)
        session.query_text = "heat"
        await session.on_genre_changed("80")
        return tier

    tier = asyncio.run(scenario())
    assert len(tier.requests) == 1
    assert tier.requests[0].query_text == "heat"
    assert tier.requests[0].genre_id == 80


def test_initialize_loads_genres_through_chain(run, fake_tier):
    gateway = fake_tier("gateway", error=UpstreamError("down"))
    session = Session([gateway, LocalStaticTier()])

    run(session.initialize())
    assert session.initialized
    assert session.genre_map[18] == "Drama"
    assert len(session.view.cards) == 6


def test_gateway_tier_rejects_embedded_error(run, fake_http, fake_response):
    http = fake_http(fake_response(200, {"error": "Failed to fetch movies"}))
    tier = GatewayTier("http://localhost:3000", http=http)

    with pytest.raises(UpstreamError):
        run(tier.movies(SearchRequest.build("x", 12, 2)))
    call = http.calls[0]
    assert call["url"] == "http://localhost:3000/api/movies"
    assert call["params"] == {"query": "x", "genre": 12, "page": 2}


def test_direct_tier_uses_same_precedence(run, fake_http, fake_response):
    http = fake_http(fake_response(200, {"results": [{"id": 3, "title": "Drama"}]}))
    tier = DirectUpstreamTier("public-key", base_url="https://upstream.test/3", http=http)

    assert run(tier.movies(SearchRequest.build("", 18))) == [{"id": 3, "title": "Drama"}]
    call = http.calls[0]
    assert call["url"] == "https://upstream.test/3/discover/movie"
    assert call["params"]["api_key"] == "public-key"


def test_direct_tier_is_opt_in():
    names = [t.name for t in build_tiers(ClientSettings())]
    assert names == ["gateway", "local"]

    names = [t.name for t in build_tiers(ClientSettings(public_api_key="k"))]
    assert names == ["gateway", "direct", "local"]

    assert [t.name for t in build_tiers(ClientSettings(), offline=True)] == ["local"]


@pytest.mark.parametrize("payload", [
    {"results": [None, 5]},
    {"results": [{"id": 1, "title": "ok"}, "junk"]},
])
def test_malformed_movie_items_fall_through_to_local(run, fake_http, fake_response, payload):
    gateway = GatewayTier("http://localhost:3000", http=fake_http(fake_response(200, payload)))
    session = Session([gateway, LocalStaticTier()])

    results = run(session.search(SearchRequest.build("", 18)))
    assert len(results) == 3
    assert session.view.source == "local"
    assert session.view.loading is False


@pytest.mark.parametrize("payload", [
    {"genres": [1, 2]},
    {"genres": [{"id": 18}]},
])
def test_malformed_genres_fall_through_to_local(run, fake_http, fake_response, payload):
    gateway = GatewayTier("http://localhost:3000", http=fake_http(fake_response(200, payload)))
    session = Session([gateway, LocalStaticTier()])

    run(session.load_genres())
    assert session.genre_map[18] == "Drama"
    assert len(session.genre_map) == 19
