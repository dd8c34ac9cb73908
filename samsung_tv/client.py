"""Async client for Samsung (Tizen) TVs.

Composes the status probe, remote channel, wake-on-lan and power controller
for one TV around a shared aiohttp session.

Example usage:
    async with await SamsungTV.from_host("192.168.1.60") as tv:
        await tv.async_turn_on()
        await tv.async_send_key("volup")
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

import aiohttp

from .config.constants import CONNECT_TIMEOUT, DEFAULT_CLIENT_NAME, PROBE_TIMEOUT
from .config.storage import CredentialStore
from .keys import RemoteKey
from .models import ActiveState, DeviceDescriptor, DeviceStatus, PowerState
from .power import PowerController, PowerTiming
from .remote import RemoteCommandSender
from .session import SessionConnection
from .status import StatusProbe
from .wol import WakeSignal

_LOGGER = logging.getLogger(__name__)


class SamsungTV:
    """Async controller for one Samsung TV.

    Connection to the remote channel is lazy: commands connect on demand, and
    a TV that has never been paired shows an "allow access" prompt the first
    time.
    """

    def __init__(
        self,
        device: DeviceDescriptor,
        store: Optional[CredentialStore] = None,
        http_session: Optional[aiohttp.ClientSession] = None,
        timing: Optional[PowerTiming] = None,
        client_name: str = DEFAULT_CLIENT_NAME,
        connect_timeout: float = CONNECT_TIMEOUT,
        on_state_change: Optional[Callable[[PowerState], None]] = None,
    ):
        """Initialize the client.

        Args:
            device: TV descriptor (see from_host to build it from a probe)
            store: Credential storage (default directory if None)
            http_session: Shared aiohttp session. One is created (and owned) if omitted.
            timing: Power change timing
            client_name: Name shown on the TV's access prompt
            connect_timeout: Remote channel connect timeout in seconds
            on_state_change: Callback for observed power state changes
        """
        self.device = device
        self.store = store or CredentialStore()
        self._owns_http = http_session is None
        self._http = http_session or aiohttp.ClientSession()
        self.timing = timing or PowerTiming()

        self.probe = StatusProbe(self._http)
        self.connection = SessionConnection(
            device,
            self.store,
            http_session=self._http,
            client_name=client_name,
            connect_timeout=connect_timeout,
        )
        self.waker = WakeSignal(host=device.host)
        self.power = PowerController(
            device,
            self.probe,
            self.connection,
            self.waker,
            timing=self.timing,
            on_state_change=on_state_change,
        )
        self.remote = RemoteCommandSender(self.connection, device)

    @classmethod
    async def from_host(
        cls,
        host: str,
        mac: Optional[str] = None,
        storage_dir: Optional[Union[str, Path]] = None,
        probe_timeout: float = PROBE_TIMEOUT,
        **kwargs,
    ) -> "SamsungTV":
        """Probe a TV once and build a client from its status document.

        Args:
            host: TV IP address
            mac: MAC address override (the TV reports its wifi MAC)
            storage_dir: Credential directory
            probe_timeout: Probe timeout in seconds
            **kwargs: Passed to the constructor

        Raises:
            TimedOut, TransportError: The TV did not answer the probe
        """
        http_session = kwargs.pop("http_session", None)
        owns_http = http_session is None
        if owns_http:
            http_session = aiohttp.ClientSession()
        try:
            status = await StatusProbe(http_session).probe(host, probe_timeout)
        except BaseException:
            if owns_http:
                await http_session.close()
            raise

        if not status.token_auth_support:
            _LOGGER.warning("%s does not report token authentication support", host)

        device = DeviceDescriptor.from_status(host, status, mac=mac)
        store = kwargs.pop("store", None) or CredentialStore(storage_dir)
        tv = cls(device, store=store, http_session=http_session, **kwargs)
        tv._owns_http = owns_http
        return tv

    # Properties
    @property
    def host(self) -> str:
        """TV IP address."""
        return self.device.host

    @property
    def is_connected(self) -> bool:
        """Check if the remote channel is ready."""
        return self.connection.is_ready

    @property
    def power_state(self) -> Optional[PowerState]:
        """Last observed power state."""
        return self.power.observed

    # Connection
    async def async_connect(self) -> bool:
        """Open (or reuse) the remote channel.

        Raises:
            TransportError, TimedOut, NotAuthorized
        """
        await self.connection.ensure_connected()
        return True

    async def async_close(self) -> None:
        """Stop pending work and release network resources."""
        await self.power.close()
        await self.connection.close()
        if self._owns_http and not self._http.closed:
            await self._http.close()

    # Status
    async def async_get_status(self, timeout: Optional[float] = None) -> DeviceStatus:
        """Fetch the full status document (raises on failure)."""
        return await self.probe.probe(self.host, timeout or self.timing.probe_timeout)

    async def async_get_power_state(self) -> PowerState:
        return await self.power.power_state()

    async def async_get_active_state(self) -> ActiveState:
        return await self.power.get_active_state()

    async def async_is_on(self) -> bool:
        return await self.power.get_active_state() is ActiveState.ACTIVE

    # Power
    async def async_set_power(self, target: PowerState) -> PowerState:
        return await self.power.set_target(target)

    async def async_turn_on(self) -> PowerState:
        """Turn the TV on, waking it over the network if needed."""
        return await self.power.set_target(PowerState.ON)

    async def async_turn_off(self) -> PowerState:
        """Put the TV in standby."""
        return await self.power.set_target(PowerState.STANDBY)

    async def async_wake(self) -> bool:
        """Send wake-on-lan packets only."""
        return await self.waker.wake(self.device.mac)

    # Remote input
    async def async_send_key(self, key: Union[str, RemoteKey], cmd: str = "Click") -> bool:
        return await self.remote.send_key(key, cmd)

    async def async_send_text(self, text: str) -> bool:
        return await self.remote.send_text(text)

    async def async_move_cursor(self, x: int, y: int, duration: int = 0) -> bool:
        return await self.remote.move_cursor(x, y, duration)

    async def async_open_browser(self, url: str) -> bool:
        return await self.remote.open_browser(url)

    async def async_launch_app(self, app_id: str, meta_tag: str = "") -> bool:
        return await self.remote.launch_app(app_id, meta_tag)

    async def __aenter__(self) -> "SamsungTV":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.async_close()
