"""Mirror what Music.app is playing to Discord Rich Presence."""

__version__ = "1.0.0"
