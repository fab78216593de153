from typing import Dict, List, Optional, Tuple

import pytest

from musicrpc.errors import PresenceUpdateError
from musicrpc.metadata import SearchResult
from musicrpc.models import PlaybackState, Snapshot, Track
from musicrpc.ttl_cache import CacheSet


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSink:
    def __init__(self):
        self.connects: List[str] = []
        self.published = []
        self.disconnects = 0
        self.fail_publish = False

    def connect(self, application_id: str) -> None:
        self.connects.append(application_id)

    def publish(self, activity) -> None:
        if self.fail_publish:
            raise PresenceUpdateError("rejected")
        self.published.append(activity)

    def disconnect(self) -> None:
        self.disconnects += 1


class FakeTransport:
    def __init__(self, songs: Optional[Dict[str, SearchResult]] = None, artists: Optional[Dict[str, SearchResult]] = None):
        self.results = {"songs": songs or {}, "artists": artists or {}}
        self.calls: List[Tuple[str, str]] = []
        self.error: Optional[Exception] = None

    def search(self, kind: str, term: str) -> Optional[SearchResult]:
        self.calls.append((kind, term))
        if self.error is not None:
            raise self.error
        return self.results[kind].get(term)


def make_track(track_id: int = 1, **kwargs) -> Track:
    fields = dict(
        id=track_id,
        title="Bohemian Rhapsody",
        artist="Queen",
        album="A Night at the Opera",
        year=1975,
        duration=180.0,
    )
    fields.update(kwargs)
    return Track(**fields)


def playing(track: Track, position: float) -> Snapshot:
    return Snapshot(state=PlaybackState.PLAYING, position=position, track=track, raw_state="playing")


def paused(position: float = 0.0) -> Snapshot:
    return Snapshot(state=PlaybackState.OTHER, position=position, raw_state="paused")


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def caches(clock: FakeClock):
    cs = CacheSet(sweep_interval=None, clock=clock)
    yield cs
    cs.close()


@pytest.fixture()
def sink() -> FakeSink:
    return FakeSink()
