"""Data model for Samsung TV control.

The status document served on port 8001 looks like::

    {
        "id": "uuid:...",
        "name": "[TV] Samsung Q70",
        "type": "Samsung SmartTV",
        "isSupport": "{\"remote_available\":\"true\", ...}",
        "device": {"PowerState": "on", "wifiMac": "aa:bb:...", ...}
    }

``isSupport`` is itself a JSON string and is parsed in a second pass.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Mapping, Optional


_LOGGER = logging.getLogger(__name__)


class PowerState(Enum):
    """Observed power state of a TV."""

    ON = "on"
    STANDBY = "standby"
    UNREACHABLE = "unreachable"


class ActiveState(IntEnum):
    """Binary on/off value exposed to hosts."""

    INACTIVE = 0
    ACTIVE = 1

    @classmethod
    def from_power_state(cls, state: PowerState) -> "ActiveState":
        return cls.ACTIVE if state is PowerState.ON else cls.INACTIVE


def _flag(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


@dataclass(frozen=True)
class Capabilities:
    """Feature flags from the status document's ``isSupport`` blob."""

    remote_available: bool = True
    token_auth_support: bool = True
    remote_four_directions: bool = False
    remote_touchpad: bool = False
    remote_voice_control: bool = False
    frame_tv_support: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_mapping(cls, flags: Mapping[str, Any]) -> "Capabilities":
        return cls(
            remote_available=_flag(flags.get("remote_available"), True),
            token_auth_support=_flag(flags.get("TokenAuthSupport"), True),
            remote_four_directions=_flag(flags.get("remote_fourDirections")),
            remote_touchpad=_flag(flags.get("remote_touchPad")),
            remote_voice_control=_flag(flags.get("remote_voiceControl")),
            frame_tv_support=_flag(flags.get("FrameTVSupport")),
            raw=dict(flags),
        )

    @classmethod
    def from_json(cls, blob: Optional[str]) -> "Capabilities":
        """Parse the stringified ``isSupport`` value.

        A missing or unparseable blob yields permissive defaults.
        """
        if not blob:
            return cls()
        try:
            flags = json.loads(blob)
        except ValueError:
            _LOGGER.warning("Unparseable isSupport value: %r", blob)
            return cls()
        if not isinstance(flags, dict):
            _LOGGER.warning("Unexpected isSupport value: %r", blob)
            return cls()
        return cls.from_mapping(flags)


@dataclass(frozen=True)
class DeviceStatus:
    """Result of one status probe."""

    power_state: PowerState
    device_id: str
    name: str = ""
    device_name: str = ""
    mac: Optional[str] = None
    model_name: Optional[str] = None
    ip: Optional[str] = None
    token_auth_support: bool = True
    capabilities: Capabilities = field(default_factory=Capabilities)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "DeviceStatus":
        """Build a status from the decoded JSON document.

        Raises:
            ValueError: If the document is not shaped like a status document.
        """
        if not isinstance(doc, Mapping):
            raise ValueError("status document is not an object")
        device = doc.get("device")
        if not isinstance(device, Mapping):
            raise ValueError("status document has no 'device' object")

        device_id = doc.get("id") or device.get("id")
        if not device_id:
            raise ValueError("status document has no device id")

        raw_state = device.get("PowerState")
        if raw_state is None:
            # Older firmware only answers while on and omits the field
            power_state = PowerState.ON
        elif raw_state == "on":
            power_state = PowerState.ON
        elif raw_state == "standby":
            power_state = PowerState.STANDBY
        else:
            _LOGGER.warning("Unknown PowerState %r, treating as standby", raw_state)
            power_state = PowerState.STANDBY

        return cls(
            power_state=power_state,
            device_id=str(device_id),
            name=doc.get("name") or "",
            device_name=device.get("name") or "",
            mac=device.get("wifiMac"),
            model_name=device.get("modelName"),
            ip=device.get("ip"),
            token_auth_support=_flag(device.get("TokenAuthSupport"), True),
            capabilities=Capabilities.from_json(doc.get("isSupport")),
        )


@dataclass(frozen=True)
class DeviceDescriptor:
    """Static identity of one TV. Built once, never mutated."""

    host: str
    mac: Optional[str]
    device_id: str
    name: str
    model: Optional[str] = None
    capabilities: Capabilities = field(default_factory=Capabilities)

    @classmethod
    def from_status(cls, host: str, status: DeviceStatus, mac: Optional[str] = None) -> "DeviceDescriptor":
        """Build a descriptor from a probe result.

        Args:
            host: Address the probe was sent to
            status: Probe result
            mac: Override for the MAC reported by the TV
        """
        return cls(
            host=host,
            mac=mac or status.mac,
            device_id=status.device_id,
            name=status.device_name or status.name or host,
            model=status.model_name,
            capabilities=status.capabilities,
        )

    @classmethod
    def from_config(cls, device_id: str, tv_config: Mapping[str, Any],
                    mac: Optional[str] = None) -> "DeviceDescriptor":
        """Build a descriptor from one ``tvs`` config entry."""
        host = tv_config["host"]
        return cls(
            host=host,
            mac=mac or tv_config.get("mac"),
            device_id=device_id,
            name=tv_config.get("name") or tv_config.get("alias") or host,
            model=tv_config.get("model"),
        )


@dataclass(frozen=True)
class Credential:
    """Opaque remote-channel token issued by the TV."""

    token: str
    version: int = 1
