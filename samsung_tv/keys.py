"""Remote key constants for Samsung (Tizen) TVs.

Key codes are the ``DataOfCmd`` values of ``SendRemoteKey`` commands.
"""

from enum import Enum
from typing import Dict, Optional

# Power
KEY_POWER = "KEY_POWER"

# Navigation
KEY_UP = "KEY_UP"
KEY_DOWN = "KEY_DOWN"
KEY_LEFT = "KEY_LEFT"
KEY_RIGHT = "KEY_RIGHT"
KEY_ENTER = "KEY_ENTER"

# Menu/Back
KEY_MENU = "KEY_MENU"
KEY_RETURN = "KEY_RETURN"
KEY_EXIT = "KEY_EXIT"
KEY_HOME = "KEY_HOME"
KEY_SOURCE = "KEY_SOURCE"

# Volume
KEY_VOLUME_UP = "KEY_VOLUP"
KEY_VOLUME_DOWN = "KEY_VOLDOWN"
KEY_MUTE = "KEY_MUTE"

# Playback
KEY_PLAY = "KEY_PLAY"
KEY_PAUSE = "KEY_PAUSE"
KEY_STOP = "KEY_STOP"
KEY_PLAY_BACK = "KEY_PLAY_BACK"  # Play/pause toggle
KEY_FAST_FORWARD = "KEY_FF"
KEY_REWIND = "KEY_REWIND"

# Numbers
KEY_0 = "KEY_0"
KEY_1 = "KEY_1"
KEY_2 = "KEY_2"
KEY_3 = "KEY_3"
KEY_4 = "KEY_4"
KEY_5 = "KEY_5"
KEY_6 = "KEY_6"
KEY_7 = "KEY_7"
KEY_8 = "KEY_8"
KEY_9 = "KEY_9"

# Channel
KEY_CHANNEL_UP = "KEY_CHUP"
KEY_CHANNEL_DOWN = "KEY_CHDOWN"

# Extras
KEY_INFO = "KEY_INFO"
KEY_GUIDE = "KEY_GUIDE"

ALL_KEYS = [
    KEY_POWER,
    KEY_UP, KEY_DOWN, KEY_LEFT, KEY_RIGHT, KEY_ENTER,
    KEY_MENU, KEY_RETURN, KEY_EXIT, KEY_HOME, KEY_SOURCE,
    KEY_VOLUME_UP, KEY_VOLUME_DOWN, KEY_MUTE,
    KEY_PLAY, KEY_PAUSE, KEY_STOP, KEY_PLAY_BACK, KEY_FAST_FORWARD, KEY_REWIND,
    KEY_0, KEY_1, KEY_2, KEY_3, KEY_4, KEY_5, KEY_6, KEY_7, KEY_8, KEY_9,
    KEY_CHANNEL_UP, KEY_CHANNEL_DOWN,
    KEY_INFO, KEY_GUIDE,
]


class RemoteKey(Enum):
    """Closed set of remote intents a host can send."""

    ARROW_UP = "arrow_up"
    ARROW_DOWN = "arrow_down"
    ARROW_LEFT = "arrow_left"
    ARROW_RIGHT = "arrow_right"
    SELECT = "select"
    BACK = "back"
    EXIT = "exit"
    PLAY_PAUSE = "play_pause"
    INFORMATION = "information"
    REWIND = "rewind"
    FAST_FORWARD = "fast_forward"
    NEXT_TRACK = "next_track"
    PREVIOUS_TRACK = "previous_track"


# None means the intent is accepted but has no key on this TV
REMOTE_KEY_MAP: Dict[RemoteKey, Optional[str]] = {
    RemoteKey.ARROW_UP: KEY_UP,
    RemoteKey.ARROW_DOWN: KEY_DOWN,
    RemoteKey.ARROW_LEFT: KEY_LEFT,
    RemoteKey.ARROW_RIGHT: KEY_RIGHT,
    RemoteKey.SELECT: KEY_ENTER,
    RemoteKey.BACK: KEY_RETURN,
    RemoteKey.EXIT: KEY_HOME,
    RemoteKey.PLAY_PAUSE: KEY_PLAY_BACK,
    RemoteKey.INFORMATION: KEY_INFO,
    RemoteKey.REWIND: KEY_REWIND,
    RemoteKey.FAST_FORWARD: KEY_FAST_FORWARD,
    RemoteKey.NEXT_TRACK: None,
    RemoteKey.PREVIOUS_TRACK: None,
}

# Key name mapping for CLI / MQTT payloads
KEY_NAME_MAP = {
    "power": KEY_POWER,
    "up": KEY_UP,
    "down": KEY_DOWN,
    "left": KEY_LEFT,
    "right": KEY_RIGHT,
    "ok": KEY_ENTER,
    "enter": KEY_ENTER,
    "select": KEY_ENTER,
    "menu": KEY_MENU,
    "back": KEY_RETURN,
    "return": KEY_RETURN,
    "exit": KEY_EXIT,
    "home": KEY_HOME,
    "source": KEY_SOURCE,
    "volumeup": KEY_VOLUME_UP,
    "volup": KEY_VOLUME_UP,
    "vol+": KEY_VOLUME_UP,
    "volumedown": KEY_VOLUME_DOWN,
    "voldown": KEY_VOLUME_DOWN,
    "vol-": KEY_VOLUME_DOWN,
    "mute": KEY_MUTE,
    "play": KEY_PLAY,
    "pause": KEY_PAUSE,
    "playpause": KEY_PLAY_BACK,
    "stop": KEY_STOP,
    "forward": KEY_FAST_FORWARD,
    "ff": KEY_FAST_FORWARD,
    "rewind": KEY_REWIND,
    "rw": KEY_REWIND,
    "chup": KEY_CHANNEL_UP,
    "ch+": KEY_CHANNEL_UP,
    "chdown": KEY_CHANNEL_DOWN,
    "ch-": KEY_CHANNEL_DOWN,
    "info": KEY_INFO,
    "guide": KEY_GUIDE,
}


def get_key(name: str) -> str:
    """Get key constant from friendly name.

    Args:
        name: Key name (e.g., 'up', 'volumeup', 'power') or a KEY_ constant

    Returns:
        Key constant string (e.g., 'KEY_UP')
    """
    name_lower = name.lower().strip()

    if name_lower in KEY_NAME_MAP:
        return KEY_NAME_MAP[name_lower]

    if name.startswith("KEY_"):
        return name

    return f"KEY_{name.strip().upper()}"


def get_remote_key(name: str) -> Optional[RemoteKey]:
    """Look up a RemoteKey intent by its value or member name."""
    normalized = name.strip().lower()
    for intent in RemoteKey:
        if normalized in (intent.value, intent.name.lower()):
            return intent
    return None
