"""Wire format of the Samsung remote control channel.

Outbound frames are JSON envelopes with a ``method`` and ``params``. Inbound
frames carry an ``event`` name and optional ``data``; they are classified
into a small set of tagged event types by :func:`parse_event`.
"""

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .config.constants import BROWSER_APP_ID

_LOGGER = logging.getLogger(__name__)

# Outbound methods
METHOD_REMOTE_CONTROL = "ms.remote.control"
METHOD_CHANNEL_EMIT = "ms.channel.emit"

# Inbound events
EVENT_CONNECT = "ms.channel.connect"
EVENT_ERROR = "ms.error"
EVENT_TIMEOUT = "ms.channel.timeOut"
EVENT_UNAUTHORIZED = "ms.channel.unauthorized"

# Key command types
CMD_PRESS = "Press"
CMD_CLICK = "Click"
CMD_RELEASE = "Release"
KEY_COMMANDS = (CMD_PRESS, CMD_CLICK, CMD_RELEASE)


def key_payload(key: str, cmd: str = CMD_CLICK) -> Dict[str, Any]:
    """Build a SendRemoteKey command.

    Args:
        key: Key code, e.g. KEY_POWER
        cmd: Press, Click or Release
    """
    if cmd not in KEY_COMMANDS:
        raise ValueError(f"Invalid key command: {cmd}")
    return {
        "method": METHOD_REMOTE_CONTROL,
        "params": {
            "Cmd": cmd,
            "DataOfCmd": key,
            "Option": False,
            "TypeOfRemote": "SendRemoteKey",
        },
    }


def text_payload(text: str) -> Dict[str, Any]:
    """Build a SendInputString command (text is sent base64 encoded)."""
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return {
        "method": METHOD_REMOTE_CONTROL,
        "params": {
            "Cmd": encoded,
            "DataOfCmd": "base64",
            "TypeOfRemote": "SendInputString",
        },
    }


def mouse_move_payload(x: int, y: int, duration: int = 0) -> Dict[str, Any]:
    """Build a relative pointer move (ProcessMouseDevice)."""
    return {
        "method": METHOD_REMOTE_CONTROL,
        "params": {
            "Cmd": "Move",
            "x": int(x),
            "y": int(y),
            "Time": str(int(duration)),
            "TypeOfRemote": "ProcessMouseDevice",
        },
    }


def app_launch_payload(app_id: str, meta_tag: str = "") -> Dict[str, Any]:
    """Build an ed.apps.launch request for a native app."""
    return {
        "method": METHOD_CHANNEL_EMIT,
        "params": {
            "event": "ed.apps.launch",
            "to": "host",
            "data": {
                "appId": app_id,
                "action_type": "NATIVE_LAUNCH",
                "metaTag": meta_tag,
            },
        },
    }


def browser_payload(url: str) -> Dict[str, Any]:
    """Open a URL in the TV's built-in browser."""
    return app_launch_payload(BROWSER_APP_ID, url)


@dataclass(frozen=True)
class ChannelConnected:
    """Channel authorized; carries a fresh token on first pairing."""

    client_id: Optional[str] = None
    token: Optional[str] = None


@dataclass(frozen=True)
class ChannelError:
    """ms.error or ms.channel.timeOut."""

    message: str = ""


@dataclass(frozen=True)
class ChannelUnauthorized:
    """The user denied (or has not yet granted) access on the TV."""

    pass


@dataclass(frozen=True)
class UnknownEvent:
    event: str
    data: Any = None


ChannelEvent = Union[ChannelConnected, ChannelError, ChannelUnauthorized, UnknownEvent]


def parse_event(raw: Union[str, bytes]) -> ChannelEvent:
    """Classify one inbound frame.

    Raises:
        ValueError: If the frame is not a JSON object with an event name
    """
    message = json.loads(raw)
    if not isinstance(message, dict):
        raise ValueError("frame is not a JSON object")
    event = message.get("event")
    if not isinstance(event, str):
        raise ValueError("frame has no event name")

    data = message.get("data")

    if event == EVENT_CONNECT:
        if not isinstance(data, dict):
            data = {}
        token = data.get("token")
        client_id = data.get("id")
        return ChannelConnected(
            client_id=str(client_id) if client_id is not None else None,
            token=str(token) if token else None,
        )

    if event == EVENT_ERROR:
        message_text = data.get("message", "") if isinstance(data, dict) else str(data or "")
        return ChannelError(message=str(message_text))

    if event == EVENT_TIMEOUT:
        return ChannelError(message="channel timed out")

    if event == EVENT_UNAUTHORIZED:
        return ChannelUnauthorized()

    return UnknownEvent(event=event, data=data)


def encode(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"))
