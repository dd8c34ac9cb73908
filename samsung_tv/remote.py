"""Remote control intents and their delivery over the session channel."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .keys import REMOTE_KEY_MAP, RemoteKey, get_key
from .models import DeviceDescriptor
from .protocol import (
    CMD_CLICK,
    app_launch_payload,
    browser_payload,
    key_payload,
    mouse_move_payload,
    text_payload,
)
from .session import SessionConnection

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextInput:
    text: str


@dataclass(frozen=True)
class CursorMove:
    x: int
    y: int
    duration: int = 0


@dataclass(frozen=True)
class OpenBrowser:
    url: str


@dataclass(frozen=True)
class LaunchApp:
    app_id: str
    meta_tag: str = ""


Intent = Union[RemoteKey, TextInput, CursorMove, OpenBrowser, LaunchApp]


class RemoteCommandSender:
    """Translates intents into channel commands.

    Intents without a key on the TV (next/previous track) are accepted and
    dropped, like a hardware remote without that button.
    """

    def __init__(self, connection: SessionConnection, device: Optional[DeviceDescriptor] = None):
        self._connection = connection
        self.device = device or connection.device

    @property
    def remote_available(self) -> bool:
        return self.device.capabilities.remote_available

    def payload_for(self, intent: Intent) -> Optional[Dict[str, Any]]:
        """Return the command for an intent, or None for a no-op."""
        if isinstance(intent, RemoteKey):
            key = REMOTE_KEY_MAP.get(intent)
            return key_payload(key) if key else None
        if isinstance(intent, TextInput):
            return text_payload(intent.text)
        if isinstance(intent, CursorMove):
            return mouse_move_payload(intent.x, intent.y, intent.duration)
        if isinstance(intent, OpenBrowser):
            return browser_payload(intent.url)
        if isinstance(intent, LaunchApp):
            return app_launch_payload(intent.app_id, intent.meta_tag)
        raise TypeError(f"Unsupported intent: {intent!r}")

    async def send(self, intent: Intent) -> bool:
        """Send an intent, connecting first if needed.

        Returns:
            True if a command was sent, False for no-ops or when the TV
            reports remote input as unavailable.

        Raises:
            TransportError, TimedOut, NotAuthorized: connection failures
        """
        payload = self.payload_for(intent)
        if payload is None:
            _LOGGER.debug("No command for %s, ignoring", intent)
            return False
        return await self._deliver(payload)

    async def send_key(self, key: Union[str, RemoteKey], cmd: str = CMD_CLICK) -> bool:
        """Send a key by intent, KEY_ constant or friendly name ('up', 'mute')."""
        if isinstance(key, RemoteKey):
            if cmd == CMD_CLICK:
                return await self.send(key)
            mapped = REMOTE_KEY_MAP.get(key)
            if mapped is None:
                return False
            return await self._deliver(key_payload(mapped, cmd))
        return await self._deliver(key_payload(get_key(key), cmd))

    async def send_text(self, text: str) -> bool:
        return await self.send(TextInput(text))

    async def move_cursor(self, x: int, y: int, duration: int = 0) -> bool:
        return await self.send(CursorMove(x, y, duration))

    async def open_browser(self, url: str) -> bool:
        return await self.send(OpenBrowser(url))

    async def launch_app(self, app_id: str, meta_tag: str = "") -> bool:
        return await self.send(LaunchApp(app_id, meta_tag))

    async def _deliver(self, payload: Dict[str, Any]) -> bool:
        if not self.remote_available:
            _LOGGER.warning("Remote input is not available on %s", self.device.name)
            return False
        await self._connection.ensure_connected()
        await self._connection.send_command(payload)
        return True
