import logging
import os

from mixpanel import Mixpanel

logger = logging.getLogger(__name__)


class SilentMixpanel:
    def __init__(self, token: str = ""):
        pass

    def track(self, distinct_id: int, event: str, properties: dict | None = None):
        pass


def _create_client():
    token = os.getenv("MIXPANEL_PROJECT_TOKEN")
    if not token:
        logger.debug("MIXPANEL_PROJECT_TOKEN is not set, tracking disabled")
        return SilentMixpanel()
    return Mixpanel(token)


mp = _create_client()


def mute_mp_for_tests():
    global mp
    mp = SilentMixpanel()


def track(distinct_id: int, event: str, properties: dict | None = None) -> None:
    """Send an event without ever breaking the caller."""
    try:
        mp.track(distinct_id, event, properties or {})
    except Exception as e:
        logger.warning(f"Failed to track {event}: {e}")
