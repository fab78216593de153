# musicrpc/errors.py
from enum import Enum


class MusicRPCError(Exception):
    pass


class ConfigError(MusicRPCError):
    pass


class CacheClosedError(MusicRPCError):
    pass


class SourceErrorKind(Enum):
    TERMINATED = "terminated"  # Music quit while we were talking to it
    QUERY = "query"
    PARSE = "parse"


class SourceError(MusicRPCError):
    def __init__(self, message: str, kind: SourceErrorKind = SourceErrorKind.QUERY):
        super().__init__(message)
        self.kind = kind

    @property
    def terminated(self) -> bool:
        return self.kind is SourceErrorKind.TERMINATED


class MetadataError(MusicRPCError):
    pass


class PresenceLoginError(MusicRPCError):
    """Could not open the Rich Presence session. Nothing else can work without it."""


class PresenceUpdateError(MusicRPCError):
    pass
