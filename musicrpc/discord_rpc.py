#musicrpc/discord_rpc.py
import logging
import time
from typing import Optional

from pypresence import Presence
from pypresence.exceptions import PyPresenceException
from pypresence.types import ActivityType

from .errors import PresenceLoginError, PresenceUpdateError
from .models import Activity

logger = logging.getLogger(__name__)

# Discord rejects longer activity strings
MAX_TEXT = 128


def _clip(value: str) -> str:
    return (value or "")[:MAX_TEXT]


def user_display(user: Optional[dict]) -> str:
    user = user or {}
    name = user.get("username", "Unknown")
    disc = user.get("discriminator", "")
    return f"{name}#{disc}" if disc and disc != "0" else name


class DiscordPresenceSink:
    def __init__(self, presence_factory=Presence):
        self._factory = presence_factory
        self._rpc: Optional[Presence] = None

    @property
    def connected(self) -> bool:
        return self._rpc is not None

    def connect(self, application_id: str) -> None:
        rpc = self._factory(application_id)
        try:
            rpc.connect()
        except (PyPresenceException, OSError) as e:
            try:
                rpc.close()
            except (PyPresenceException, OSError) as close_err:
                logger.debug("discord cleanup after failed login failed err=%s", close_err)
            raise PresenceLoginError(f"could not create rich presence client: {e}") from e

        # Give Discord time to send READY payload
        time.sleep(0.3)
        logger.info("connected to discord user=%s", user_display(getattr(rpc, "user", None)))
        self._rpc = rpc

    def publish(self, activity: Activity) -> None:
        if self._rpc is None:
            raise PresenceUpdateError("not connected to discord")

        payload = {
            "details": _clip(activity.details),
            "state": _clip(activity.state),
            "large_image": activity.large_image,
            "large_text": _clip(activity.large_text),
            "small_image": activity.small_image,
            "small_text": _clip(activity.small_text),
            "start": activity.start,
            "end": activity.end,
            "activity_type": ActivityType.LISTENING,
        }
        if activity.buttons:
            payload["buttons"] = [{"label": b.label, "url": b.url} for b in activity.buttons[:2]]

        try:
            self._rpc.update(**payload)
        except (PyPresenceException, OSError) as e:
            raise PresenceUpdateError(str(e)) from e

    def disconnect(self) -> None:
        rpc, self._rpc = self._rpc, None
        if rpc is None:
            return
        try:
            rpc.clear()
            rpc.close()
        except (PyPresenceException, OSError) as e:
            logger.debug("discord logout failed err=%s", e)
