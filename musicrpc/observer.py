import logging
import time

from .errors import SourceError, SourceErrorKind
from .metadata import MetadataResolver
from .models import PlaybackState, Snapshot, Track
from .ttl_cache import TTLCache

logger = logging.getLogger(__name__)


def _parse(convert, raw: str, field: str):
    try:
        return convert(raw.strip())
    except ValueError:
        raise SourceError(f"invalid {field} {raw!r}", kind=SourceErrorKind.PARSE) from None


class NowPlayingObserver:
    """Turns one query of the player into a Snapshot.

    Tracks are resolved once and kept in ``song_cache`` by database id, so a
    track that keeps playing costs a single AppleScript call per cycle.
    """

    def __init__(self, source, resolver: MetadataResolver, song_cache: TTLCache[int, Track], song_ttl: float = 86400):
        self.source = source
        self.resolver = resolver
        self.song_cache = song_cache
        self.song_ttl = song_ttl

    def observe(self) -> Snapshot:
        started = time.monotonic()
        try:
            return self._observe()
        finally:
            logger.debug("got info took=%.3fs", time.monotonic() - started)

    def _observe(self) -> Snapshot:
        raw_id, raw_position, raw_state = self.source.playback()
        track_id = _parse(int, raw_id, "track id")
        position = _parse(float, raw_position, "position")

        state = PlaybackState.from_raw(raw_state.strip())
        if state is not PlaybackState.PLAYING:
            return Snapshot(state=state, position=position, raw_state=raw_state)

        track, found = self.song_cache.get(track_id)
        if found:
            logger.debug("got song from cache songID=%d", track_id)
            return Snapshot(state=state, position=position, track=track, raw_state=raw_state)

        title = self.source.field("name")
        artist = self.source.field("artist")
        album = self.source.field("album")
        raw_year, raw_duration = self.source.fields("year", "duration")
        year = _parse(int, raw_year, "year")
        duration = _parse(float, raw_duration, "duration")

        metadata = self.resolver.resolve(artist, album, title)

        track = Track(
            id=track_id,
            title=title,
            artist=artist,
            album=album,
            year=year,
            duration=duration,
            artwork_url=metadata.artwork_url,
            artist_artwork_url=metadata.artist_artwork_url,
            share_url=metadata.share_url,
            share_id=metadata.share_id,
        )
        self.song_cache.set(track_id, track, self.song_ttl)
        return Snapshot(state=state, position=position, track=track, raw_state=raw_state)
