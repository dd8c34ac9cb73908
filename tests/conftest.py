"""Fixtures for Samsung TV tests."""

from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from typing import Any, List, Optional
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from samsung_tv.config.storage import CredentialStore
from samsung_tv.models import DeviceDescriptor
from samsung_tv.power import PowerTiming

MOCK_HOST = "192.168.1.60"
MOCK_MAC = "aa:bb:cc:dd:ee:ff"
MOCK_DEVICE_ID = "uuid:0f3a6b2c-1d4e-4f50-8a9b-0123456789ab"

MOCK_IS_SUPPORT = json.dumps({
    "remote_available": "true",
    "remote_fourDirections": "true",
    "remote_touchPad": "true",
    "remote_voiceControl": "false",
    "TokenAuthSupport": "true",
    "FrameTVSupport": "false",
})


def make_status_document(power_state: Optional[str] = "on", **device_overrides) -> dict:
    """Build a status document like the one served on port 8001."""
    device = {
        "id": MOCK_DEVICE_ID,
        "name": "Living Room TV",
        "modelName": "QE55Q70RATXXU",
        "wifiMac": MOCK_MAC,
        "ip": MOCK_HOST,
        "TokenAuthSupport": "true",
        "type": "Samsung SmartTV",
    }
    if power_state is not None:
        device["PowerState"] = power_state
    device.update(device_overrides)
    return {
        "id": MOCK_DEVICE_ID,
        "name": "[TV] Living Room",
        "type": "Samsung SmartTV",
        "version": "2.0.25",
        "isSupport": MOCK_IS_SUPPORT,
        "device": device,
    }


def connect_frame(token: Optional[str] = "token-1", client_id: str = "client-1") -> str:
    data = {"id": client_id, "clients": []}
    if token:
        data["token"] = token
    return json.dumps({"event": "ms.channel.connect", "data": data})


class FakeResponse:
    """Stand-in for aiohttp.ClientResponse (status, json)."""

    def __init__(self, status: int = 200, body: Any = None, delay: float = 0):
        self.status = status
        self._body = body
        self._delay = delay

    async def json(self, content_type=None):
        if self._delay:
            await asyncio.sleep(self._delay)
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class _RequestContext:
    def __init__(self, response):
        self._response = response

    async def __aenter__(self):
        if isinstance(self._response, Exception):
            raise self._response
        return self._response

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeWebSocket:
    """Stand-in for aiohttp.ClientWebSocketResponse fed from a queue."""

    def __init__(self, frames: Optional[List[str]] = None):
        self.sent: List[dict] = []
        self.closed = False
        self.close_code: Optional[int] = None
        self.fail_sends = False
        self._inbox: asyncio.Queue = asyncio.Queue()
        for frame in frames or []:
            self.feed_text(frame)

    def feed_text(self, data: str):
        self._inbox.put_nowait(SimpleNamespace(type=aiohttp.WSMsgType.TEXT, data=data))

    def feed_binary(self, data: bytes):
        self._inbox.put_nowait(SimpleNamespace(type=aiohttp.WSMsgType.BINARY, data=data))

    def feed_close(self, code: int):
        self.close_code = code
        self._inbox.put_nowait(SimpleNamespace(type=aiohttp.WSMsgType.CLOSE, data=code))

    def feed_error(self, error: BaseException, close_code: Optional[int] = 1002):
        # aiohttp puts the error in msg.data and leaves exception() unset
        self.close_code = close_code
        self._inbox.put_nowait(SimpleNamespace(type=aiohttp.WSMsgType.ERROR, data=error))

    def exception(self):
        return None

    async def receive(self):
        if self.closed and self._inbox.empty():
            return SimpleNamespace(type=aiohttp.WSMsgType.CLOSED, data=None)
        return await self._inbox.get()

    async def send_str(self, data: str):
        if self.fail_sends or self.closed:
            raise ConnectionResetError("Cannot write to closing transport")
        self.sent.append(json.loads(data))

    async def close(self):
        if not self.closed:
            self.closed = True
            self._inbox.put_nowait(SimpleNamespace(type=aiohttp.WSMsgType.CLOSED, data=None))
        return True


class FakeHTTPSession:
    """Stand-in for aiohttp.ClientSession (get and ws_connect only).

    ``responses`` are returned in order by ``get``; the last one repeats.
    Every ``ws_connect`` opens a new FakeWebSocket pre-fed with ``frames``.
    """

    def __init__(self, responses: Optional[list] = None, frames: Optional[List[str]] = None):
        self.responses = list(responses or [])
        self.frames = list(frames or [])
        self.requested: List[str] = []
        self.ws_urls: List[str] = []
        self.sockets: List[FakeWebSocket] = []
        self.closed = False

    def get(self, url, timeout=None):
        self.requested.append(url)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        return _RequestContext(response)

    async def ws_connect(self, url, ssl=None):
        self.ws_urls.append(url)
        await asyncio.sleep(0)
        ws = FakeWebSocket(self.frames)
        self.sockets.append(ws)
        return ws

    async def close(self):
        self.closed = True


class ScriptedProbe:
    """Returns scripted power states in order; the last one repeats."""

    def __init__(self, states):
        self.states = list(states)
        self.calls = 0

    async def power_state(self, host, timeout=None):
        self.calls += 1
        if len(self.states) > 1:
            return self.states.pop(0)
        return self.states[0]


async def wait_until(predicate, timeout: float = 1.0):
    """Yield to the loop until predicate() is true."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def device() -> DeviceDescriptor:
    """TV descriptor used across tests."""
    return DeviceDescriptor(
        host=MOCK_HOST,
        mac=MOCK_MAC,
        device_id=MOCK_DEVICE_ID,
        name="Living Room TV",
        model="QE55Q70RATXXU",
    )


@pytest.fixture
def store(tmp_path) -> CredentialStore:
    """Credential store in a temporary directory."""
    return CredentialStore(tmp_path / "credentials")


@pytest.fixture
def fast_timing() -> PowerTiming:
    """Power timing scaled down for tests."""
    return PowerTiming(
        probe_timeout=0.05,
        change_timeout=0.5,
        poll_interval=0.01,
        wake_interval=0.01,
        cooldown=0.0,
    )


@pytest.fixture
def mock_connection() -> MagicMock:
    """Mock SessionConnection that is always ready."""
    connection = MagicMock()
    connection.ensure_connected = AsyncMock()
    connection.send_command = AsyncMock()
    return connection


@pytest.fixture
def mock_waker() -> MagicMock:
    """Mock WakeSignal."""
    waker = MagicMock()
    waker.wake = AsyncMock(return_value=True)
    return waker
