import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_SEARCH_URL = "https://www.youtubekids.com/youtubei/v1/search?alt=json"
DEFAULT_BROWSE_URL = "https://www.youtubekids.com/youtubei/v1/browse?alt=json"
DEFAULT_SEARCH_CLIENT_VERSION = "2.20251120.00.00"
DEFAULT_BROWSE_CLIENT_VERSION = "2.20251027.00.00"
DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_CHANNELS_FILE = Path(__file__).resolve().parents[1] / "data" / "kids_channels.json"


@dataclass(frozen=True)
class Settings:
    search_url: str = DEFAULT_SEARCH_URL
    browse_url: str = DEFAULT_BROWSE_URL
    search_client_version: str = DEFAULT_SEARCH_CLIENT_VERSION
    browse_client_version: str = DEFAULT_BROWSE_CLIENT_VERSION
    request_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    channels_file: Path = DEFAULT_CHANNELS_FILE
    log_level: str = "INFO"
    cors_allowed_origins: str = ""


def _env_str(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip()
    return raw or default


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        search_url=_env_str("KIDS_SEARCH_URL", DEFAULT_SEARCH_URL),
        browse_url=_env_str("KIDS_BROWSE_URL", DEFAULT_BROWSE_URL),
        search_client_version=_env_str("KIDS_SEARCH_CLIENT_VERSION", DEFAULT_SEARCH_CLIENT_VERSION),
        browse_client_version=_env_str("KIDS_BROWSE_CLIENT_VERSION", DEFAULT_BROWSE_CLIENT_VERSION),
        request_timeout_seconds=_env_float("KIDS_REQUEST_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        channels_file=Path(_env_str("KIDS_CHANNELS_FILE", str(DEFAULT_CHANNELS_FILE))),
        log_level=_env_str("LOG_LEVEL", "INFO"),
        cors_allowed_origins=(os.getenv("CORS_ALLOWED_ORIGINS") or "").strip(),
    )
