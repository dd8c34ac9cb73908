"""Tests for the HTTP status probe."""

import asyncio

import aiohttp
import pytest

from samsung_tv.exceptions import TimedOut, TransportError
from samsung_tv.models import PowerState
from samsung_tv.status import StatusProbe

from .conftest import MOCK_DEVICE_ID, MOCK_HOST, FakeHTTPSession, FakeResponse, make_status_document


async def test_probe_success() -> None:
    """Test a successful probe returns the parsed status."""
    http = FakeHTTPSession([FakeResponse(200, make_status_document("standby"))])
    probe = StatusProbe(http)

    status = await probe.probe(MOCK_HOST, 0.5)

    assert status.power_state is PowerState.STANDBY
    assert status.device_id == MOCK_DEVICE_ID
    assert http.requested == ["http://192.168.1.60:8001/api/v2/"]


async def test_probe_times_out() -> None:
    """Test a hanging endpoint fails within the timeout."""
    http = FakeHTTPSession([FakeResponse(200, make_status_document("on"), delay=5)])
    probe = StatusProbe(http)

    loop = asyncio.get_running_loop()
    started = loop.time()
    with pytest.raises(TimedOut):
        await probe.probe(MOCK_HOST, 0.05)

    assert loop.time() - started < 1.0


async def test_probe_http_error() -> None:
    """Test a non-200 answer is a transport error."""
    probe = StatusProbe(FakeHTTPSession([FakeResponse(500, {})]))

    with pytest.raises(TransportError):
        await probe.probe(MOCK_HOST, 0.5)


async def test_probe_invalid_json() -> None:
    """Test an unparseable body is a transport error."""
    probe = StatusProbe(FakeHTTPSession([FakeResponse(200, ValueError("Expecting value"))]))

    with pytest.raises(TransportError):
        await probe.probe(MOCK_HOST, 0.5)


async def test_probe_unexpected_document() -> None:
    """Test a JSON body without a device object is a transport error."""
    probe = StatusProbe(FakeHTTPSession([FakeResponse(200, {"id": "x"})]))

    with pytest.raises(TransportError):
        await probe.probe(MOCK_HOST, 0.5)


async def test_probe_connection_refused() -> None:
    """Test a client error is a transport error."""
    probe = StatusProbe(FakeHTTPSession([aiohttp.ClientConnectionError("refused")]))

    with pytest.raises(TransportError):
        await probe.probe(MOCK_HOST, 0.5)


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(200, make_status_document("on"), delay=5),
        FakeResponse(404, {}),
        aiohttp.ClientConnectionError("refused"),
    ],
)
async def test_power_state_unreachable(response) -> None:
    """Test any probe failure is reported as UNREACHABLE."""
    probe = StatusProbe(FakeHTTPSession([response]))

    assert await probe.power_state(MOCK_HOST, 0.05) is PowerState.UNREACHABLE


async def test_power_state_on() -> None:
    """Test power_state passes the document's state through."""
    probe = StatusProbe(FakeHTTPSession([FakeResponse(200, make_status_document("on"))]))

    assert await probe.power_state(MOCK_HOST, 0.5) is PowerState.ON


async def test_close_leaves_shared_session_open() -> None:
    """Test closing the probe does not close a session it does not own."""
    http = FakeHTTPSession([FakeResponse(200, make_status_document("on"))])
    probe = StatusProbe(http)

    await probe.close()

    assert http.closed is False
