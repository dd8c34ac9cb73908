"""Remote control channel session for Samsung TVs.

One authenticated WebSocket per device (``wss://<ip>:8002``). The TV presents
a self-signed certificate, so verification is disabled. On first connect the
TV shows an "allow access" prompt; once accepted it answers with
``ms.channel.connect`` carrying a token, which is persisted and sent on
later connects so the prompt is skipped.

A single receive task owns the socket's inbound side. It classifies frames
and drives the state machine::

    DISCONNECTED/FAILED -> CONNECTING -> AUTHENTICATING -> READY
                                   any -> FAILED (error, TV closed, timeout)
                                   any -> DISCONNECTED (close())
"""

import asyncio
import base64
import logging
import ssl
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import aiohttp

from . import protocol
from .config.constants import (
    ACCESS_DENIED_CLOSE_CODE,
    CONNECT_TIMEOUT,
    DEFAULT_CLIENT_NAME,
    REMOTE_CHANNEL_PATH,
    REMOTE_PORT,
)
from .config.storage import CredentialStore
from .exceptions import NotAuthorized, NotConnected, SamsungTVError, TimedOut, TransportError
from .models import Credential, DeviceDescriptor

_LOGGER = logging.getLogger(__name__)


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    READY = "ready"
    FAILED = "failed"


class AuthStatus(Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Session:
    """A live channel. Replaced wholesale on reconnect, never mutated."""

    ws: Any
    auth_status: AuthStatus
    credential: Optional[Credential] = None
    client_id: Optional[str] = None

    @property
    def closed(self) -> bool:
        return self.ws.closed


def _create_ssl_context() -> ssl.SSLContext:
    """TLS context that accepts the TV's self-signed certificate."""
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def _is_access_denied(close_code: Optional[int], error: Optional[BaseException] = None) -> bool:
    """The TV drops unapproved clients with close status 1005."""
    if close_code == ACCESS_DENIED_CLOSE_CODE:
        return True
    return error is not None and str(ACCESS_DENIED_CLOSE_CODE) in str(error)


def _consume_result(task: "asyncio.Future"):
    # Callers may all have been cancelled; keep the loop from warning
    if not task.cancelled():
        task.exception()


class SessionConnection:
    """Owns the single remote control channel to one TV."""

    def __init__(
        self,
        device: DeviceDescriptor,
        store: CredentialStore,
        http_session: Optional[aiohttp.ClientSession] = None,
        client_name: str = DEFAULT_CLIENT_NAME,
        port: int = REMOTE_PORT,
        connect_timeout: float = CONNECT_TIMEOUT,
    ):
        """Initialize the connection (does not connect).

        Args:
            device: Target TV
            store: Credential storage for the channel token
            http_session: Shared aiohttp session. One is created (and owned) if omitted.
            client_name: Name shown on the TV's access prompt
            port: Remote channel port
            connect_timeout: Seconds allowed for handshake plus authorization
        """
        self.device = device
        self.client_name = client_name
        self.port = port
        self.connect_timeout = connect_timeout
        self._store = store
        self._http = http_session
        self._owns_http = http_session is None
        self._ssl_context: Optional[ssl.SSLContext] = None

        self._state = ConnectionState.DISCONNECTED
        self._session: Optional[Session] = None
        self._ws = None
        self._connect_task: Optional[asyncio.Task] = None
        self._receiver: Optional[asyncio.Task] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def is_ready(self) -> bool:
        session = self._session
        return self._state is ConnectionState.READY and session is not None and not session.closed

    def _set_state(self, state: ConnectionState):
        if state is not self._state:
            _LOGGER.debug("%s: %s -> %s", self.device.host, self._state.value, state.value)
            self._state = state

    def build_url(self, token: Optional[str] = None) -> str:
        """Build the channel URL (client name is base64 encoded)."""
        params = {"name": base64.b64encode(self.client_name.encode("utf-8")).decode("ascii")}
        if token:
            params["token"] = token
        return f"wss://{self.device.host}:{self.port}{REMOTE_CHANNEL_PATH}?{urlencode(params)}"

    def _get_http_session(self) -> aiohttp.ClientSession:
        if self._http is None or self._http.closed:
            self._http = aiohttp.ClientSession()
            self._owns_http = True
        return self._http

    async def ensure_connected(self) -> Session:
        """Return the ready session, connecting if needed.

        Concurrent callers share one in-flight attempt.

        Raises:
            TransportError: Connection failed or was closed during setup
            TimedOut: No authorization within connect_timeout
            NotAuthorized: Access was refused on the TV
        """
        if self.is_ready:
            return self._session

        if self._connect_task is None or self._connect_task.done():
            self._connect_task = asyncio.ensure_future(self._connect())
            self._connect_task.add_done_callback(_consume_result)

        return await asyncio.shield(self._connect_task)

    async def _connect(self) -> Session:
        await self._teardown()
        self._set_state(ConnectionState.CONNECTING)

        loop = asyncio.get_running_loop()
        credential = await loop.run_in_executor(None, self._store.load, self.device.device_id)
        if credential is None:
            _LOGGER.info(
                "No stored token for %s; accept the connection on the TV screen",
                self.device.name,
            )

        url = self.build_url(credential.token if credential else None)
        try:
            session = await asyncio.wait_for(self._open(url, credential), self.connect_timeout)
        except asyncio.TimeoutError as err:
            await self._fail()
            raise TimedOut(
                f"No authorization from {self.device.host} within {self.connect_timeout}s"
            ) from err
        except SamsungTVError:
            await self._fail()
            raise
        except (aiohttp.ClientError, OSError) as err:
            await self._fail()
            raise TransportError(f"Failed to connect to {self.device.host}: {err}") from err
        except asyncio.CancelledError:
            await self._fail()
            raise

        _LOGGER.info("Connected to %s (%s)", self.device.name, self.device.host)
        return session

    async def _open(self, url: str, credential: Optional[Credential]) -> Session:
        if self._ssl_context is None:
            self._ssl_context = _create_ssl_context()
        _LOGGER.debug("Connecting to wss://%s:%s", self.device.host, self.port)
        ws = await self._get_http_session().ws_connect(url, ssl=self._ssl_context)
        self._ws = ws
        self._set_state(ConnectionState.AUTHENTICATING)

        ready = asyncio.get_running_loop().create_future()
        self._receiver = asyncio.ensure_future(self._receive_loop(ws, credential, ready))
        return await ready

    async def _receive_loop(self, ws, credential: Optional[Credential], ready: asyncio.Future):
        """Read frames until the channel ends. Sole reader of ``ws``."""
        error: Optional[SamsungTVError] = None
        try:
            while True:
                msg = await ws.receive()

                if msg.type == aiohttp.WSMsgType.TEXT:
                    error = await self._handle_frame(msg.data, ws, credential, ready)
                    if error is not None:
                        break
                    if self._session is not None and self._session.ws is ws:
                        credential = self._session.credential

                elif msg.type == aiohttp.WSMsgType.BINARY:
                    _LOGGER.debug("Dropping binary frame from %s", self.device.host)

                elif msg.type == aiohttp.WSMsgType.ERROR:
                    # aiohttp reports a 1005 close status as a protocol error in msg.data
                    exc = msg.data if isinstance(msg.data, BaseException) else ws.exception()
                    if not ready.done() and _is_access_denied(ws.close_code, exc):
                        error = NotAuthorized(
                            f"{self.device.name} refused the connection; allow access on the TV"
                        )
                    else:
                        error = TransportError(f"Channel error from {self.device.host}: {exc}")
                    break

                elif msg.type in (
                    aiohttp.WSMsgType.CLOSE,
                    aiohttp.WSMsgType.CLOSING,
                    aiohttp.WSMsgType.CLOSED,
                ):
                    code = ws.close_code
                    if code is None and msg.type == aiohttp.WSMsgType.CLOSE:
                        code = msg.data
                    if not ready.done() and _is_access_denied(code):
                        error = NotAuthorized(
                            f"{self.device.name} refused the connection; allow access on the TV"
                        )
                    else:
                        error = TransportError(f"Channel closed by {self.device.host} (code {code})")
                    break
        finally:
            if not ready.done():
                ready.set_exception(error or TransportError(f"Channel to {self.device.host} ended"))
            session = self._session
            if session is not None and session.ws is ws:
                _LOGGER.warning("Lost connection to %s: %s", self.device.name, error)
                self._session = None
                self._set_state(ConnectionState.FAILED)
            if not ws.closed:
                await ws.close()

    async def _handle_frame(self, raw, ws, credential: Optional[Credential],
                            ready: asyncio.Future) -> Optional[SamsungTVError]:
        """Apply one text frame. Returns an error that ends the channel, if any."""
        try:
            event = protocol.parse_event(raw)
        except ValueError as err:
            _LOGGER.warning("Dropping malformed frame from %s: %s", self.device.host, err)
            return None

        if isinstance(event, protocol.ChannelConnected):
            if event.token and (credential is None or credential.token != event.token):
                _LOGGER.info("Received new token from %s", self.device.name)
                credential = Credential(token=event.token)
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(None, self._store.save, self.device.device_id, credential)

            current = self._session
            if current is not None and current.ws is ws:
                self._session = replace(current, credential=credential, client_id=event.client_id)
            else:
                self._session = Session(
                    ws=ws,
                    auth_status=AuthStatus.AUTHENTICATED,
                    credential=credential,
                    client_id=event.client_id,
                )
            self._set_state(ConnectionState.READY)
            if not ready.done():
                ready.set_result(self._session)
            return None

        if isinstance(event, protocol.ChannelUnauthorized):
            return NotAuthorized(f"{self.device.name} denied access; allow it on the TV")

        if isinstance(event, protocol.ChannelError):
            if not ready.done():
                return TransportError(f"Channel error from {self.device.host}: {event.message}")
            _LOGGER.warning("Channel error from %s: %s", self.device.name, event.message)
            return None

        _LOGGER.debug("Ignoring event %s from %s", event.event, self.device.host)
        return None

    async def send_command(self, payload: Dict[str, Any]):
        """Send one command on the ready session.

        Raises:
            NotConnected: No ready session
            TransportError: The write failed; the session is discarded
        """
        session = self._session
        if not self.is_ready:
            raise NotConnected(f"No ready session to {self.device.host}")

        _LOGGER.debug("Sending to %s: %s", self.device.host, payload)
        try:
            await session.ws.send_str(protocol.encode(payload))
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as err:
            if self._session is session:
                self._session = None
                self._set_state(ConnectionState.FAILED)
            await self._teardown()
            raise TransportError(f"Failed to send to {self.device.host}: {err}") from err

    async def _fail(self):
        self._session = None
        await self._teardown()
        self._set_state(ConnectionState.FAILED)

    async def _teardown(self):
        """Stop the receiver and close the socket, if any."""
        receiver, self._receiver = self._receiver, None
        if receiver is not None and receiver is not asyncio.current_task() and not receiver.done():
            receiver.cancel()
            try:
                await receiver
            except asyncio.CancelledError:
                pass
        ws, self._ws = self._ws, None
        if ws is not None and not ws.closed:
            await ws.close()

    async def close(self):
        """Close the channel and any owned HTTP session."""
        self._set_state(ConnectionState.DISCONNECTED)
        self._session = None
        task, self._connect_task = self._connect_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except (asyncio.CancelledError, SamsungTVError):
                pass
        await self._teardown()
        self._set_state(ConnectionState.DISCONNECTED)
        if self._owns_http and self._http is not None and not self._http.closed:
            await self._http.close()
        self._http = None
