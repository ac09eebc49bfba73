import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.config import load_settings
from backend.app.errors import InvalidRequestError, UpstreamError
from backend.app.logging_config import configure_logging
from backend.app.models import SearchResultPage, VideoItem
from backend.app.services.curated_sources import load_curated_channels
from backend.app.services.kids_client import KidsApiClient
from backend.app.services.kids_feed import curated_videos, home_videos, search_videos


# ---------------------------
# App setup
# ---------------------------

settings = load_settings()
configure_logging(settings.log_level)
LOGGER = logging.getLogger("kids_feed.api")

KIDS_CLIENT = KidsApiClient(settings)
CURATED_CHANNELS = load_curated_channels(settings.channels_file)


def get_kids_client() -> KidsApiClient:
    return KIDS_CLIENT


def parse_cors_origins() -> tuple[list[str], bool]:
    raw = settings.cors_allowed_origins
    if not raw:
        return ["http://localhost:5173"], True
    if raw == "*":
        return ["*"], False
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    if not origins:
        return ["http://localhost:5173"], True
    return origins, True

app = FastAPI()

cors_origins, cors_credentials = parse_cors_origins()

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=cors_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidRequestError)
async def invalid_request_handler(_request: Request, exc: InvalidRequestError):
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "error_code": "invalid_request"},
    )


@app.exception_handler(UpstreamError)
async def upstream_error_handler(_request: Request, exc: UpstreamError):
    return JSONResponse(
        status_code=502,
        content={
            "detail": str(exc),
            "error_code": "upstream_error",
            "upstream_status": exc.status_code,
        },
    )


def require_region(region: str | None) -> str:
    # Region is only checked for presence; the kids surface is not regionalised.
    if region is None:
        raise InvalidRequestError("region is a required parameter")
    return region


# ---------------------------
# Routes
# ---------------------------

@app.get("/health")
def health():
    return {"ok": True}


@app.get("/kids/search", response_model=SearchResultPage)
def kids_search(q: str | None = None, filter: str | None = None):
    """
    Kids search. `filter` is accepted for API compatibility and ignored:
    the kids surface only returns videos.
    """
    _ = filter
    return search_videos(get_kids_client(), q or "")


@app.get("/kids/videos", response_model=list[VideoItem])
def kids_videos(region: str | None = None):
    require_region(region)
    client = get_kids_client()
    try:
        items = home_videos(client)
    except UpstreamError as exc:
        LOGGER.warning("kids home feed unavailable status=%s error=%s", exc.status_code, exc)
        items = []
    if items:
        return items

    LOGGER.info("kids home feed empty, using curated channels count=%s", len(CURATED_CHANNELS))
    return curated_videos(client, CURATED_CHANNELS)


@app.get("/trending", response_model=list[VideoItem])
def trending(region: str | None = None):
    return kids_videos(region)


@app.get("/kids/channels", response_model=list[VideoItem])
def kids_channels(region: str | None = None):
    require_region(region)
    return curated_videos(get_kids_client(), CURATED_CHANNELS)
