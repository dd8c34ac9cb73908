"""Power state machine for Samsung TVs.

The TV has a single KEY_POWER toggle and rejects rapid successive toggles,
so requests are serialized through a single-slot queue:

- a request made while another is executing waits for it (and its cooldown);
- a request made while one is already queued replaces the queued target;
- callers of superseded requests resolve with the newest request's outcome.

Each attempt probes, wakes the TV over the network if it is unreachable and
should be on, sends one toggle, then polls until the target is observed or
the deadline passes.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .config.constants import (
    COOLDOWN,
    POLL_INTERVAL,
    POWER_CHANGE_TIMEOUT,
    PROBE_TIMEOUT,
    WAKE_INTERVAL,
)
from .exceptions import NotConnected, PowerChangeTimeout, TransportError
from .keys import KEY_POWER
from .models import ActiveState, DeviceDescriptor, PowerState
from .protocol import CMD_CLICK, CMD_PRESS, key_payload
from .session import SessionConnection
from .status import StatusProbe
from .wol import WakeSignal

_LOGGER = logging.getLogger(__name__)


class PowerPhase(Enum):
    IDLE = "idle"
    WAKING = "waking"
    TRANSITIONING = "transitioning"
    SETTLING = "settling"


@dataclass
class PowerTiming:
    """Timing of a power change, in seconds."""

    probe_timeout: float = PROBE_TIMEOUT
    change_timeout: float = POWER_CHANGE_TIMEOUT
    poll_interval: float = POLL_INTERVAL
    wake_interval: float = WAKE_INTERVAL
    cooldown: float = COOLDOWN

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]]) -> "PowerTiming":
        """Build from the config ``options`` section (missing keys keep defaults)."""
        options = options or {}
        defaults = cls()

        def get(key: str, default: float) -> float:
            value = options.get(key)
            return default if value is None else float(value)

        return cls(
            probe_timeout=get("probe_timeout", defaults.probe_timeout),
            change_timeout=get("power_timeout", defaults.change_timeout),
            poll_interval=get("poll_interval", defaults.poll_interval),
            wake_interval=get("wake_interval", defaults.wake_interval),
            cooldown=get("cooldown", defaults.cooldown),
        )


@dataclass
class PendingPowerChange:
    target: PowerState
    waiters: List[asyncio.Future] = field(default_factory=list)
    deadline: Optional[float] = None

    def resolve(self, state: PowerState):
        for waiter in self.waiters:
            if not waiter.done():
                waiter.set_result(state)

    def reject(self, error: Exception):
        for waiter in self.waiters:
            if not waiter.done():
                waiter.set_exception(error)

    def cancel(self):
        for waiter in self.waiters:
            waiter.cancel()


class PowerController:
    """Drives one TV to a requested power state."""

    def __init__(
        self,
        device: DeviceDescriptor,
        probe: StatusProbe,
        connection: SessionConnection,
        waker: WakeSignal,
        timing: Optional[PowerTiming] = None,
        on_state_change: Optional[Callable[[PowerState], None]] = None,
    ):
        """Initialize the controller.

        Args:
            device: Target TV
            probe: Status probe used for every state observation
            connection: Remote channel used to send the power toggle
            waker: Wake-on-LAN sender
            timing: Timeouts and intervals (defaults if None)
            on_state_change: Called with the new PowerState whenever the
                observed state changes
        """
        self.device = device
        self.timing = timing or PowerTiming()
        self.on_state_change = on_state_change
        self._probe = probe
        self._connection = connection
        self._waker = waker

        self._phase = PowerPhase.IDLE
        self._observed: Optional[PowerState] = None
        self._current: Optional[PendingPowerChange] = None
        self._queued: Optional[PendingPowerChange] = None
        self._worker: Optional[asyncio.Task] = None

    @property
    def phase(self) -> PowerPhase:
        return self._phase

    @property
    def observed(self) -> Optional[PowerState]:
        """Last observed power state (None before the first probe)."""
        return self._observed

    @property
    def target(self) -> Optional[PowerState]:
        """Most recently requested target that has not completed yet."""
        if self._queued is not None:
            return self._queued.target
        if self._current is not None:
            return self._current.target
        return None

    def _set_phase(self, phase: PowerPhase):
        if phase is not self._phase:
            _LOGGER.debug("%s power phase: %s -> %s", self.device.host, self._phase.value, phase.value)
            self._phase = phase

    def _set_observed(self, state: PowerState):
        changed = state is not self._observed
        self._observed = state
        if changed:
            _LOGGER.debug("%s power state: %s", self.device.host, state.value)
            if self.on_state_change:
                self.on_state_change(state)

    async def _observe(self) -> PowerState:
        state = await self._probe.power_state(self.device.host, self.timing.probe_timeout)
        self._set_observed(state)
        return state

    async def power_state(self) -> PowerState:
        """Probe the TV now. Never raises."""
        return await self._observe()

    async def get_active_state(self) -> ActiveState:
        """Probe the TV and map the result to ACTIVE/INACTIVE. Never raises."""
        return ActiveState.from_power_state(await self._observe())

    async def set_target(self, target: PowerState) -> PowerState:
        """Request a power state and wait until it is reached.

        Args:
            target: PowerState.ON or PowerState.STANDBY

        Returns:
            The observed state once the (possibly coalesced) request completed

        Raises:
            ValueError: If target is UNREACHABLE
            PowerChangeTimeout: Target not observed before the deadline
            TransportError: The toggle could not be sent
            NotAuthorized: The TV refused the remote channel
        """
        if target not in (PowerState.ON, PowerState.STANDBY):
            raise ValueError(f"Invalid power target: {target}")

        loop = asyncio.get_running_loop()
        waiter = loop.create_future()

        if self._queued is None:
            self._queued = PendingPowerChange(target=target)
        elif self._queued.target is not target:
            _LOGGER.debug("Replacing queued power target %s with %s", self._queued.target.value, target.value)
            self._queued.target = target
        self._queued.waiters.append(waiter)

        if self._current is not None and self._current.waiters:
            # The executing request is superseded; its callers follow the newest one
            self._queued.waiters.extend(self._current.waiters)
            self._current.waiters = []

        _LOGGER.debug("Queued power change of %s to %s", self.device.host, target.value)
        if self._worker is None or self._worker.done():
            self._worker = loop.create_task(self._run())

        return await waiter

    async def _run(self):
        """Drain the queue, one change at a time."""
        while self._queued is not None:
            change, self._queued = self._queued, None
            self._current = change
            acted = False
            try:
                acted = await self._execute(change)
            except asyncio.CancelledError:
                change.cancel()
                raise
            except Exception as err:
                _LOGGER.error("Power change of %s to %s failed: %s", self.device.name, change.target.value, err)
                change.reject(err)
            else:
                change.resolve(self._observed)
            finally:
                self._current = None

            if acted:
                self._set_phase(PowerPhase.SETTLING)
                await asyncio.sleep(self.timing.cooldown)
            self._set_phase(PowerPhase.IDLE)

    async def _execute(self, change: PendingPowerChange) -> bool:
        """Run one change under the overall deadline. Returns True if the TV was acted on."""
        loop = asyncio.get_running_loop()
        change.deadline = loop.time() + self.timing.change_timeout
        try:
            return await asyncio.wait_for(self._transition(change), self.timing.change_timeout)
        except asyncio.TimeoutError as err:
            raise PowerChangeTimeout(
                f"{self.device.name} did not reach {change.target.value} "
                f"within {self.timing.change_timeout}s",
                change.target,
                self._observed,
            ) from err

    async def _transition(self, change: PendingPowerChange) -> bool:
        target = change.target

        state = await self._observe()
        if state is target:
            _LOGGER.debug("%s already %s", self.device.host, target.value)
            return False

        if state is PowerState.UNREACHABLE:
            if target is PowerState.STANDBY:
                state = await self._await_reachable(change)
                if state is target:
                    return False
            else:
                state = await self._wake(change)
                if state is target:
                    return True

        self._set_phase(PowerPhase.TRANSITIONING)
        _LOGGER.info("Turning %s %s", self.device.name, "on" if target is PowerState.ON else "off")
        await self._send_toggle(target)

        while True:
            await self._sleep_before_poll(change, self.timing.poll_interval)
            state = await self._observe()
            if state is target:
                return True

    async def _wake(self, change: PendingPowerChange) -> PowerState:
        """Send wake packets until the TV answers probes again."""
        self._set_phase(PowerPhase.WAKING)
        while True:
            _LOGGER.debug("Waking %s", self.device.host)
            await self._waker.wake(self.device.mac)
            state = await self._observe()
            if state is not PowerState.UNREACHABLE:
                return state
            await self._sleep_before_poll(change, self.timing.wake_interval)

    async def _await_reachable(self, change: PendingPowerChange) -> PowerState:
        """Re-probe without waking until the TV answers again."""
        _LOGGER.info("%s is unreachable, waiting for it before turning it off", self.device.name)
        while True:
            await self._sleep_before_poll(change, self.timing.poll_interval)
            state = await self._observe()
            if state is not PowerState.UNREACHABLE:
                return state

    async def _sleep_before_poll(self, change: PendingPowerChange, interval: float):
        loop = asyncio.get_running_loop()
        remaining = change.deadline - loop.time()
        if remaining <= 0:
            raise PowerChangeTimeout(
                f"{self.device.name} did not reach {change.target.value} in time",
                change.target,
                self._observed,
            )
        await asyncio.sleep(min(interval, remaining))

    async def _send_toggle(self, target: PowerState):
        """Send KEY_POWER, reconnecting and retrying once on a transport failure."""
        # Press for standby so an early release is not read as a no-op
        payload = key_payload(KEY_POWER, CMD_CLICK if target is PowerState.ON else CMD_PRESS)
        for attempt in (1, 2):
            await self._connection.ensure_connected()
            try:
                await self._connection.send_command(payload)
                return
            except (TransportError, NotConnected) as err:
                if attempt == 2:
                    raise
                _LOGGER.warning("Power command to %s failed (%s), reconnecting", self.device.host, err)

    async def close(self):
        """Cancel any running change; pending callers see CancelledError."""
        queued, self._queued = self._queued, None
        if queued is not None:
            queued.cancel()
        worker, self._worker = self._worker, None
        if worker is not None and not worker.done():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass
        self._set_phase(PowerPhase.IDLE)
