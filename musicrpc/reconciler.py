import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, List

from .config import LARGE_IMAGE_FALLBACK, SMALL_IMAGE_FALLBACK
from .models import Activity, Button, ConnectionState, Snapshot, Track

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assets:
    large_fallback: str = LARGE_IMAGE_FALLBACK
    small_fallback: str = SMALL_IMAGE_FALLBACK


def songlink(track: Track) -> str:
    if not track.share_id:
        return ""
    return f"https://song.link/i/{track.share_id}"


def first_non_empty(*values: str) -> str:
    for value in values:
        if value:
            return value
    return ""


def build_activity(track: Track, position: float, now: float, assets: Assets = Assets()) -> Activity:
    buttons: List[Button] = []
    if track.share_url:
        buttons.append(Button("Listen on Apple Music", track.share_url))
    link = songlink(track)
    if link:
        buttons.append(Button("View on SongLink", link))

    return Activity(
        details=f"{track.title} · {track.artist}",
        state=track.album,
        large_image=first_non_empty(track.artwork_url, assets.large_fallback),
        large_text=track.title,
        small_image=first_non_empty(track.artist_artwork_url, assets.small_fallback),
        small_text=track.artist,
        start=int(now - position),
        end=int(now + (track.duration - position)),
        buttons=tuple(buttons),
    )


class PresenceReconciler:
    """Keeps the Discord activity in line with what Music is playing.

    Publishing only happens when the track changes or its position moves
    backwards (seek back, replay). Position moving forward on the same track
    is the same play-through and is left alone.
    """

    def __init__(self, sink, application_id: str, assets: Assets = Assets(), clock: Callable[[], float] = time.time):
        self.sink = sink
        self.application_id = application_id
        self.assets = assets
        self.clock = clock
        self.state = ConnectionState()

    @property
    def connected(self) -> bool:
        return self.state.connected

    def reconcile(self, snapshot: Snapshot) -> bool:
        if not snapshot.playing or snapshot.track is None:
            self.stop()
            return False
        return self.play(snapshot)

    def play(self, snapshot: Snapshot) -> bool:
        track = snapshot.track
        st = self.state

        if st.connected and st.last_track_id == track.id and snapshot.position >= st.last_position:
            logger.debug("ongoing activity, ignoring songID=%d position=%.1f", track.id, snapshot.position)
            return False

        logger.debug(
            "new event lastSongID=%d songID=%d lastPosition=%.1f position=%.1f",
            st.last_track_id, track.id, st.last_position, snapshot.position,
        )

        if not st.connected:
            self.sink.connect(self.application_id)
            st.connected = True

        # only a published track counts as the last one
        self.sink.publish(build_activity(track, snapshot.position, self.clock(), self.assets))
        st.last_track_id = track.id
        st.last_position = snapshot.position

        logger.warning(
            "now playing song=%s album=%s artist=%s year=%d duration=%s position=%s songlink=%s",
            track.title, track.album, track.artist, track.year,
            timedelta(seconds=int(track.duration)), timedelta(seconds=int(snapshot.position)),
            songlink(track),
        )
        return True

    def stop(self) -> None:
        if not self.state.connected:
            return
        self.sink.disconnect()
        self.state.reset()
