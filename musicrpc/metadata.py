import logging
import urllib.parse
from dataclasses import dataclass
from typing import Iterable, List, Optional

import requests

from .errors import MetadataError
from .models import Metadata
from .ttl_cache import TTLCache

logger = logging.getLogger(__name__)

SEARCH_URL = "https://tools.applemediaservices.com/api/apple-media/music/{storefront}/search.json"
SEARCH_KINDS = ("songs", "artists")


@dataclass(frozen=True)
class SearchResult:
    id: str
    artwork_url_template: str
    url: str


def composite_key(artist: str, album: str, title: str) -> str:
    return urllib.parse.quote_plus(" ".join((artist, album, title)))


def try_split(value: str, separators: Iterable[str]) -> List[str]:
    for sep in separators:
        parts = value.split(sep)
        if len(parts) > 1:
            return parts
    return [value]


def first_artist(artist: str) -> str:
    # "A, B & C" -> "A"
    return try_split(artist, (",", "&"))[0].strip()


def _mapping(value, kind: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MetadataError(f"{kind} search returned an unexpected shape")
    return value


def _text(value, kind: str, allow_int: bool = False) -> str:
    if value is None:
        return ""
    if allow_int and isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        raise MetadataError(f"{kind} search returned a non-string field {value!r}")
    return value


def sized_artwork(template: str, size: int = 512) -> str:
    return template.replace("{w}", str(size), 1).replace("{h}", str(size), 1)


class AppleMediaServicesTransport:
    """Single-result searches against the Apple Media Services catalog."""

    def __init__(self, storefront: str = "US", timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.url = SEARCH_URL.format(storefront=storefront)
        self.timeout = timeout
        self._http = session or requests.Session()

    def search(self, kind: str, term: str) -> Optional[SearchResult]:
        if kind not in SEARCH_KINDS:
            raise ValueError(f"unsupported search kind {kind!r}")

        params = {"types": kind, "limit": 1, "term": term}
        try:
            r = self._http.get(self.url, params=params, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except requests.RequestException as e:
            raise MetadataError(f"{kind} search failed: {e}") from e
        except ValueError as e:
            raise MetadataError(f"{kind} search returned invalid JSON: {e}") from e

        section = _mapping(_mapping(data, kind).get(kind), kind)
        items = section.get("data")
        if not items:
            return None
        if not isinstance(items, list) or not isinstance(items[0], dict):
            raise MetadataError(f"{kind} search returned an unexpected shape")

        item = items[0]
        attributes = _mapping(item.get("attributes"), kind)
        artwork = _mapping(attributes.get("artwork"), kind)
        return SearchResult(
            id=_text(item.get("id"), kind, allow_int=True),
            artwork_url_template=_text(artwork.get("url"), kind),
            url=_text(attributes.get("url"), kind),
        )

    def close(self) -> None:
        self._http.close()


class MetadataResolver:
    def __init__(
        self,
        transport,
        artwork_cache: TTLCache[str, str],
        share_url_cache: TTLCache[str, str],
        artist_artwork_cache: TTLCache[str, str],
        ttl: float = 3600,
        share_id_cache: Optional[TTLCache[str, str]] = None,
        artwork_size: int = 512,
    ):
        self.transport = transport
        self.artwork_cache = artwork_cache
        self.share_url_cache = share_url_cache
        self.artist_artwork_cache = artist_artwork_cache
        self.share_id_cache = share_id_cache
        self.ttl = ttl
        self.artwork_size = artwork_size

    def _cached(self, key: str) -> Optional[Metadata]:
        artwork, artwork_ok = self.artwork_cache.get(key)
        share_url, share_url_ok = self.share_url_cache.get(key)
        artist_artwork, artist_ok = self.artist_artwork_cache.get(key)
        if not (artwork_ok and share_url_ok and artist_ok):
            return None

        share_id = ""
        if self.share_id_cache is not None:
            share_id = self.share_id_cache.get(key)[0] or ""
        return Metadata(
            share_id=share_id,
            artwork_url=artwork,
            share_url=share_url,
            artist_artwork_url=artist_artwork,
        )

    def resolve(self, artist: str, album: str, title: str) -> Metadata:
        key = composite_key(artist, album, title)
        cached = self._cached(key)
        if cached is not None:
            logger.debug("got album and artist artwork from cache key=%s", key)
            return cached

        song = self.transport.search("songs", " ".join((artist, album, title)))
        if song is None:
            logger.debug("no song metadata found key=%s", key)
            return Metadata()

        artwork = sized_artwork(song.artwork_url_template, self.artwork_size)

        artist_result = self.transport.search("artists", first_artist(artist))
        artist_artwork = ""
        if artist_result is not None:
            artist_artwork = sized_artwork(artist_result.artwork_url_template, self.artwork_size)

        self.artwork_cache.set(key, artwork, self.ttl)
        self.share_url_cache.set(key, song.url, self.ttl)
        self.artist_artwork_cache.set(key, artist_artwork, self.ttl)
        if self.share_id_cache is not None:
            self.share_id_cache.set(key, song.id, self.ttl)

        return Metadata(
            share_id=song.id,
            artwork_url=artwork,
            share_url=song.url,
            artist_artwork_url=artist_artwork,
        )
