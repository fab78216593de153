"""Settings read from the environment."""
import os
from dataclasses import dataclass
from typing import Mapping

from .errors import ConfigError

# Discord application id
APP_CLIENT_ID = "861702238472241162"

SHORT_SLEEP = 5.0
LONG_SLEEP = 60.0

SONG_TTL = 24 * 60 * 60
METADATA_TTL = 60 * 60
CACHE_SWEEP = 60.0

ARTWORK_SIZE = 512

# Discord app assets used when Apple has no artwork for the track/artist
LARGE_IMAGE_FALLBACK = "applemusic"
SMALL_IMAGE_FALLBACK = "play"

PLAYER_PROCESS = "Music"
PRESENCE_PROCESSES = ("Discord", "Vesktop")

_TRUE = {"1", "true", "yes", "on"}


def _float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in _TRUE


@dataclass(frozen=True)
class Config:
    log_level: str = "warning"
    debug_file: bool = False
    client_id: str = APP_CLIENT_ID
    short_sleep: float = SHORT_SLEEP
    long_sleep: float = LONG_SLEEP
    storefront: str = "US"
    http_timeout: float = 10.0
    song_ttl: float = SONG_TTL
    metadata_ttl: float = METADATA_TTL
    cache_sweep: float = CACHE_SWEEP
    cache_share_id: bool = True
    large_image_fallback: str = LARGE_IMAGE_FALLBACK
    small_image_fallback: str = SMALL_IMAGE_FALLBACK

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ) -> "Config":
        return cls(
            log_level=environ.get("LOG_LEVEL", "").strip() or "warning",
            debug_file=environ.get("MUSICRPC_DEBUG", "").strip() == "1",
            client_id=environ.get("MUSICRPC_CLIENT_ID", "").strip() or APP_CLIENT_ID,
            short_sleep=_float(environ, "MUSICRPC_SHORT_SLEEP", SHORT_SLEEP),
            long_sleep=_float(environ, "MUSICRPC_LONG_SLEEP", LONG_SLEEP),
            storefront=environ.get("MUSICRPC_STOREFRONT", "").strip().upper() or "US",
            http_timeout=_float(environ, "MUSICRPC_HTTP_TIMEOUT", 10.0),
            song_ttl=_float(environ, "MUSICRPC_SONG_TTL", SONG_TTL),
            metadata_ttl=_float(environ, "MUSICRPC_METADATA_TTL", METADATA_TTL),
            cache_sweep=_float(environ, "MUSICRPC_CACHE_SWEEP", CACHE_SWEEP),
            cache_share_id=_flag(environ, "MUSICRPC_CACHE_SHARE_ID", True),
        )
