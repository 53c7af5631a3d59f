# app.py

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

from errors import ConfigMissing, GatewayError, TooManyRequests
from movies_client import MoviesClient, SearchRequest
from rate_limit import SlidingWindowLimiter
from retry import RetryPolicy
from settings import VERSION, GatewaySettings


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def rate_limited(request: Request) -> None:
    request.app.state.limiter.hit(_client_key(request))


def _failure(settings: GatewaySettings, error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "error": error,
            "message": str(exc) if settings.is_development else "Internal server error",
        },
    )


router = APIRouter(prefix="/api", dependencies=[Depends(rate_limited)])


# --------------------------
# GET /api/genres
# --------------------------

@router.get("/genres")
def genres(request: Request):
    settings: GatewaySettings = request.app.state.settings
    if not settings.api_key_configured:
        raise ConfigMissing()

    try:
        return request.app.state.client.genres()
    except GatewayError as e:
        logger.error(f"[Gateway] Error fetching genres: {e}")
        return _failure(settings, "Failed to fetch genres", e)


# -------------------
# GET /api/movies
# -------------------

@router.get("/movies")
def movies(
    request: Request,
    query: Optional[str] = Query(""),
    genre: Optional[str] = Query(""),
    page: Optional[str] = Query("1"),
):
    settings: GatewaySettings = request.app.state.settings
    if not settings.api_key_configured:
        raise ConfigMissing()

    search = SearchRequest.build(query, genre, page)
    try:
        return request.app.state.client.movies(search)
    except GatewayError as e:
        logger.error(f"[Gateway] Error fetching movies ({search.mode}): {e}")
        return _failure(settings, "Failed to fetch movies", e)


# -------------------
# GET /api/health
# -------------------

class HealthResponse(BaseModel):
    status: str
    message: str
    timestamp: str
    environment: str
    version: str
    apiKeyConfigured: bool


@router.get("/health", response_model=HealthResponse)
def health(request: Request):
    settings: GatewaySettings = request.app.state.settings
    return HealthResponse(
        status="OK",
        message="Server is running",
        timestamp=_now_iso(),
        environment=settings.environment,
        version=VERSION,
        apiKeyConfigured=settings.api_key_configured,
    )


# -------------------
# GET /api/test
# -------------------

@router.get("/test")
def upstream_probe(request: Request):
    settings: GatewaySettings = request.app.state.settings
    if not settings.api_key_configured:
        return JSONResponse(
            status_code=503,
            content={
                "status": "API key not configured",
                "message": "Please configure TMDB_API_KEY in your environment",
            },
        )

    try:
        data = request.app.state.client.ping()
    except GatewayError as e:
        logger.error(f"[Gateway] Connectivity probe failed: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "status": "TMDB API connection failed",
                "error": str(e) if settings.is_development else "Connection error",
            },
        )
    return {
        "status": "TMDB API is accessible",
        "movieCount": len(data.get("results") or []),
        "timestamp": _now_iso(),
    }


@router.get("/{path:path}", include_in_schema=False)
def unknown_api_route(path: str):
    return JSONResponse(status_code=404, content={"error": "API endpoint not found"})


def create_app(settings: Optional[GatewaySettings] = None, client: Optional[MoviesClient] = None,
               limiter: Optional[SlidingWindowLimiter] = None) -> FastAPI:
    settings = settings or GatewaySettings.from_env()
    app = FastAPI(title="Movie Explorer Gateway", version=VERSION)

    app.state.settings = settings
    app.state.client = client or MoviesClient(
        settings.api_key,
        base_url=settings.base_url,
        timeout=settings.timeout,
        retry_policy=RetryPolicy(
            max_attempts=settings.max_attempts,
            base_delay=settings.base_delay,
            max_delay=settings.max_delay,
        ),
    )
    app.state.limiter = limiter or SlidingWindowLimiter(settings.rate_limit_max, settings.rate_limit_window)

    @app.exception_handler(TooManyRequests)
    async def too_many_requests(request: Request, exc: TooManyRequests):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.error},
            headers={"Retry-After": str(int(exc.retry_after) + 1)},
        )

    @app.exception_handler(GatewayError)
    async def gateway_error(request: Request, exc: GatewayError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.error, "message": exc.message})

    app.include_router(router)

    logger.info(f"[Gateway] API key configured: {'Yes' if settings.api_key_configured else 'No'}")
    logger.info(f"[Gateway] Environment: {settings.environment}")
    if not settings.api_key_configured:
        logger.warning("[Gateway] TMDB_API_KEY is not set; running in demo mode, clients fall back to other tiers")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
