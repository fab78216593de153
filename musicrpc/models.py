# musicrpc/models.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class PlaybackState(Enum):
    PLAYING = "playing"
    OTHER = "other"

    @classmethod
    def from_raw(cls, raw: str) -> "PlaybackState":
        return cls.PLAYING if raw == cls.PLAYING.value else cls.OTHER


@dataclass(frozen=True)
class Metadata:
    share_id: str = ""
    artwork_url: str = ""
    share_url: str = ""
    artist_artwork_url: str = ""


@dataclass(frozen=True)
class Track:
    id: int
    title: str
    artist: str
    album: str
    year: int
    duration: float  # seconds
    artwork_url: str = ""
    artist_artwork_url: str = ""
    share_url: str = ""
    share_id: str = ""


@dataclass(frozen=True)
class Snapshot:
    state: PlaybackState
    position: float  # seconds
    track: Optional[Track] = None
    raw_state: str = ""

    @property
    def playing(self) -> bool:
        return self.state is PlaybackState.PLAYING


@dataclass
class ConnectionState:
    connected: bool = False
    last_track_id: int = 0
    last_position: float = 0.0

    def reset(self) -> None:
        self.connected = False
        self.last_track_id = 0
        self.last_position = 0.0


@dataclass(frozen=True)
class Button:
    label: str
    url: str


@dataclass(frozen=True)
class Activity:
    details: str
    state: str
    large_image: str
    large_text: str
    small_image: str
    small_text: str
    start: int  # unix seconds
    end: int
    buttons: Tuple[Button, ...] = ()
