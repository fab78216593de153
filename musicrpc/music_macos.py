# musicrpc/music_macos.py
import re
import subprocess
from typing import List, Tuple

from .errors import SourceError, SourceErrorKind

# Apple event errors meaning Music went away mid-query:
# -1728 "can't get current track" while quitting, -600 "application isn't running"
_TERMINATED_CODES = {"-1728", "-600"}
_ERROR_CODE = re.compile(r"\((-?\d+)\)\s*$")

SEPARATOR = ", "


def error_kind(stderr: str) -> SourceErrorKind:
    match = _ERROR_CODE.search(stderr.strip())
    if match and match.group(1) in _TERMINATED_CODES:
        return SourceErrorKind.TERMINATED
    return SourceErrorKind.QUERY


class MusicAppSource:
    """Talks to Music.app through osascript."""

    def __init__(self, application: str = "Music"):
        self.application = application

    def tell(self, statement: str) -> str:
        cmd = [
            "osascript",
            "-e", f'tell application "{self.application}"',
            "-e", statement,
            "-e", "end tell",
        ]
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise SourceError(f"could not run osascript: {e}") from e

        if proc.returncode != 0:
            message = (proc.stderr or proc.stdout).strip()
            raise SourceError(
                f"{message}: exit status {proc.returncode}",
                kind=error_kind(message),
            )
        return proc.stdout.strip()

    def playback(self) -> Tuple[str, str, str]:
        """(database id, player position, player state) in a single round trip."""
        out = self.tell("get {database id} of current track & {player position, player state}")
        parts = out.split(SEPARATOR)
        if len(parts) < 3:
            raise SourceError(f"unexpected playback reply {out!r}", kind=SourceErrorKind.PARSE)
        return parts[0], parts[1], parts[2]

    def field(self, name: str) -> str:
        return self.tell(f"get {{{name}}} of current track")

    def fields(self, *names: str) -> List[str]:
        out = self.tell(f"get {{{', '.join(names)}}} of current track")
        parts = out.split(SEPARATOR)
        if len(parts) != len(names):
            raise SourceError(f"expected {len(names)} values, got {out!r}", kind=SourceErrorKind.PARSE)
        return parts
