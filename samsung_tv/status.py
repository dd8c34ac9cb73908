"""HTTP status probe for Samsung TVs (REST API on port 8001)."""

import asyncio
import logging
from typing import Optional

import aiohttp

from .config.constants import PROBE_TIMEOUT, STATUS_PATH, STATUS_PORT
from .exceptions import TimedOut, TransportError
from .models import DeviceStatus, PowerState

_LOGGER = logging.getLogger(__name__)


class StatusProbe:
    """Fetches and parses the TV status document with a hard time bound."""

    def __init__(self, session: Optional[aiohttp.ClientSession] = None, port: int = STATUS_PORT):
        """Initialize the probe.

        Args:
            session: Shared aiohttp session. One is created (and owned) if omitted.
            port: Status endpoint port
        """
        self._session = session
        self._owns_session = session is None
        self.port = port

    def url_for(self, host: str) -> str:
        return f"http://{host}:{self.port}{STATUS_PATH}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def probe(self, host: str, timeout: float = PROBE_TIMEOUT) -> DeviceStatus:
        """Query the status endpoint once.

        Args:
            host: TV IP address
            timeout: Seconds before the request is abandoned

        Returns:
            Parsed DeviceStatus

        Raises:
            TimedOut: No complete answer within ``timeout``
            TransportError: Connection failure, non-200 status or malformed body
        """
        try:
            return await asyncio.wait_for(self._fetch(host, timeout), timeout)
        except asyncio.TimeoutError as err:
            raise TimedOut(f"Status probe of {host} timed out after {timeout}s") from err

    async def _fetch(self, host: str, timeout: float) -> DeviceStatus:
        url = self.url_for(host)
        session = self._get_session()
        try:
            async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout)) as resp:
                if resp.status != 200:
                    raise TransportError(f"Status endpoint {url} returned HTTP {resp.status}")
                doc = await resp.json(content_type=None)
        except aiohttp.ClientError as err:
            raise TransportError(f"Status request to {url} failed: {err}") from err
        except ValueError as err:
            raise TransportError(f"Status endpoint {url} returned invalid JSON: {err}") from err

        try:
            status = DeviceStatus.from_document(doc)
        except ValueError as err:
            raise TransportError(f"Unexpected status document from {url}: {err}") from err

        _LOGGER.debug("Probe %s: %s", host, status.power_state.value)
        return status

    async def power_state(self, host: str, timeout: float = PROBE_TIMEOUT) -> PowerState:
        """Probe and return only the power state. Never raises library errors.

        An unanswered or failed probe is reported as UNREACHABLE.
        """
        try:
            status = await self.probe(host, timeout)
        except TimedOut:
            _LOGGER.debug("Probe %s: no answer within %ss", host, timeout)
            return PowerState.UNREACHABLE
        except TransportError as err:
            _LOGGER.debug("Probe %s: %s", host, err)
            return PowerState.UNREACHABLE
        return status.power_state

    async def close(self):
        """Close the HTTP session if this probe created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
