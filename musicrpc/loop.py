import logging
import time
from typing import Callable, Iterable, Optional

from .config import LONG_SLEEP, PLAYER_PROCESS, PRESENCE_PROCESSES, SHORT_SLEEP
from .errors import MetadataError, PresenceUpdateError, SourceError
from .observer import NowPlayingObserver
from .process import is_running as pgrep_is_running
from .reconciler import PresenceReconciler

logger = logging.getLogger(__name__)


class PollLoop:
    def __init__(
        self,
        observer: NowPlayingObserver,
        reconciler: PresenceReconciler,
        is_running: Callable[[str], bool] = pgrep_is_running,
        short_sleep: float = SHORT_SLEEP,
        long_sleep: float = LONG_SLEEP,
        player_process: str = PLAYER_PROCESS,
        presence_processes: Iterable[str] = PRESENCE_PROCESSES,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.observer = observer
        self.reconciler = reconciler
        self.is_running = is_running
        self.short_sleep = short_sleep
        self.long_sleep = long_sleep
        self.player_process = player_process
        self.presence_processes = tuple(presence_processes)
        self.sleep = sleep

    def run_once(self) -> float:
        """Run one cycle and return how long to sleep before the next one."""
        if not self.is_running(self.player_process):
            logger.warning("Apple Music is not running sleep=%ss", self.long_sleep)
            self.reconciler.stop()
            return self.long_sleep

        if not any(self.is_running(name) for name in self.presence_processes):
            logger.warning("Discord is not running sleep=%ss", self.long_sleep)
            self.reconciler.stop()
            return self.long_sleep

        try:
            snapshot = self.observer.observe()
        except SourceError as e:
            if e.terminated:
                logger.warning("Apple Music stopped running sleep=%ss", self.long_sleep)
                self.reconciler.stop()
                return self.long_sleep
            logger.error("will try again soon err=%s sleep=%ss", e, self.short_sleep)
            self.reconciler.stop()
            return self.short_sleep
        except MetadataError as e:
            logger.error("will try again soon err=%s sleep=%ss", e, self.short_sleep)
            self.reconciler.stop()
            return self.short_sleep

        if not snapshot.playing:
            if self.reconciler.connected:
                logger.info("not playing state=%s", snapshot.raw_state)
                self.reconciler.stop()
            return self.short_sleep

        try:
            self.reconciler.play(snapshot)
        except PresenceUpdateError as e:
            logger.warning("could not set activity, will retry later err=%s", e)

        return self.short_sleep

    def run(self, max_cycles: Optional[int] = None) -> None:
        cycles = 0
        try:
            while max_cycles is None or cycles < max_cycles:
                delay = self.run_once()
                cycles += 1
                if max_cycles is not None and cycles >= max_cycles:
                    break
                self.sleep(delay)
        finally:
            self.reconciler.stop()
