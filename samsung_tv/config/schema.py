"""Configuration defaults, TV lookup and validation."""

import re
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
    COOLDOWN,
    DEFAULT_CLIENT_NAME,
    POLL_INTERVAL,
    POWER_CHANGE_TIMEOUT,
    PROBE_TIMEOUT,
    WAKE_INTERVAL,
)

# Power timing options and their defaults, in seconds. PowerTiming.from_options
# reads these keys; cooldown may be zero, the rest must be positive.
TIMING_OPTIONS: Dict[str, float] = {
    "probe_timeout": PROBE_TIMEOUT,
    "power_timeout": POWER_CHANGE_TIMEOUT,
    "poll_interval": POLL_INTERVAL,
    "wake_interval": WAKE_INTERVAL,
    "cooldown": COOLDOWN,
}

# One entry under "tvs", keyed by the TV's device id ("uuid:...")
DEFAULT_TV_CONFIG: Dict[str, Any] = {
    "host": None,
    "mac": None,    # without it the TV cannot be woken from deep standby
    "alias": None,
    "name": None,
    "model": None,
}

DEFAULT_CONFIG: Dict[str, Any] = {
    "mqtt": {
        "host": None,
        "port": 1883,
        "username": None,
        "password": None,
        "discovery_prefix": "homeassistant",
        "topic_prefix": "samsung2mqtt",
        "client_id": "samsung2mqtt",
    },
    "tvs": {},
    "default_tv": None,
    "options": {
        "client_name": DEFAULT_CLIENT_NAME,
        "storage_dir": None,
        **TIMING_OPTIONS,
        "status_interval": 10,
        "reconnect_interval": 30,
        "discovery": True,
        "log_level": "INFO",
    },
}

_MAC_RE = re.compile(r"^[0-9A-Fa-f]{2}([:-]?)(?:[0-9A-Fa-f]{2}\1){4}[0-9A-Fa-f]{2}$")


def deep_merge(base: Dict, override: Dict) -> Dict:
    """Return ``base`` updated with ``override``, recursing into dicts.

    None values in ``override`` leave the base value in place, so a YAML
    key written without a value keeps its default.
    """
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        elif value is not None:
            result[key] = value
    return result


def find_tv(config: Dict, id_or_alias: str) -> Optional[Tuple[str, Dict]]:
    """Find a TV by device id, alias or host.

    Returns:
        Tuple of (device_id, tv_config), or None if nothing matches
    """
    tvs = config.get("tvs") or {}
    if id_or_alias in tvs:
        return id_or_alias, tvs[id_or_alias]
    for field in ("alias", "host"):
        for device_id, tv_config in tvs.items():
            if tv_config.get(field) == id_or_alias:
                return device_id, tv_config
    return None


def _positive(value: Any, allow_zero: bool = False) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return value >= 0 if allow_zero else value > 0


def validate_config(config: Dict, for_bridge: bool = False) -> List[str]:
    """Validate configuration and return list of errors.

    Args:
        config: Configuration dictionary
        for_bridge: Also check the MQTT broker and bridge options

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    tvs = config.get("tvs") or {}
    if not tvs:
        errors.append("No TVs configured in 'tvs' section")

    aliases: Dict[str, str] = {}
    for device_id, tv_config in tvs.items():
        if not tv_config.get("host"):
            errors.append(f"tvs.{device_id}.host is required")
        mac = tv_config.get("mac")
        if mac and not _MAC_RE.match(str(mac)):
            errors.append(f"tvs.{device_id}.mac is not a valid MAC address: {mac}")
        alias = tv_config.get("alias")
        if alias:
            if alias in aliases:
                errors.append(f"Alias '{alias}' is used by both {aliases[alias]} and {device_id}")
            aliases[alias] = device_id

    default_tv = config.get("default_tv")
    if default_tv and tvs and find_tv(config, default_tv) is None:
        errors.append(f"default_tv '{default_tv}' does not match any configured TV")

    options = config.get("options") or {}
    for key in TIMING_OPTIONS:
        value = options.get(key)
        if value is not None and not _positive(value, allow_zero=(key == "cooldown")):
            errors.append(f"options.{key} must be a positive number")

    poll_interval = options.get("poll_interval")
    power_timeout = options.get("power_timeout")
    if _positive(poll_interval) and _positive(power_timeout) and poll_interval >= power_timeout:
        errors.append("options.poll_interval must be shorter than options.power_timeout")

    if for_bridge:
        mqtt = config.get("mqtt") or {}
        if not mqtt.get("host"):
            errors.append("mqtt.host is required for bridge mode")
        port = mqtt.get("port")
        if not isinstance(port, int) or isinstance(port, bool) or not 0 < port < 65536:
            errors.append(f"mqtt.port must be a port number: {port}")
        if not _positive(options.get("status_interval")):
            errors.append("options.status_interval must be a positive number")

    return errors
