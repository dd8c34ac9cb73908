"""Home Assistant MQTT Discovery for samsung2mqtt."""

import re
from typing import List, Tuple

from samsung_tv.keys import RemoteKey

from . import __version__

# Intent -> (name, icon)
BUTTONS = {
    RemoteKey.ARROW_UP: ("Up", "mdi:chevron-up"),
    RemoteKey.ARROW_DOWN: ("Down", "mdi:chevron-down"),
    RemoteKey.ARROW_LEFT: ("Left", "mdi:chevron-left"),
    RemoteKey.ARROW_RIGHT: ("Right", "mdi:chevron-right"),
    RemoteKey.SELECT: ("Select", "mdi:checkbox-marked-circle"),
    RemoteKey.BACK: ("Back", "mdi:arrow-left"),
    RemoteKey.EXIT: ("Home", "mdi:home"),
    RemoteKey.PLAY_PAUSE: ("Play/Pause", "mdi:play-pause"),
    RemoteKey.INFORMATION: ("Info", "mdi:information-outline"),
    RemoteKey.REWIND: ("Rewind", "mdi:rewind"),
    RemoteKey.FAST_FORWARD: ("Fast Forward", "mdi:fast-forward"),
}


def node_id(device_id: str) -> str:
    """Topic-safe form of a device id ("uuid:ab-cd" -> "uuid_ab-cd")."""
    return re.sub(r"[^A-Za-z0-9_-]", "_", device_id)


def base_topic(config: dict, device_id: str) -> str:
    prefix = config.get("mqtt", {}).get("topic_prefix", "samsung2mqtt")
    return f"{prefix}/{node_id(device_id)}"


def get_device_info(tv_config: dict, device_id: str) -> dict:
    """Generate Home Assistant device info from the TV config."""
    return {
        "identifiers": [f"samsung_{node_id(device_id)}"],
        "name": tv_config.get("name") or tv_config.get("alias") or "Samsung TV",
        "manufacturer": "Samsung",
        "model": tv_config.get("model") or "Tizen Smart TV",
        "sw_version": __version__,
    }


def get_availability(config: dict, device_id: str) -> List[dict]:
    return [
        {
            "topic": f"{base_topic(config, device_id)}/state/available",
            "payload_available": "online",
            "payload_not_available": "offline",
        }
    ]


def generate_power_switch_discovery(config: dict, tv_config: dict, device_id: str) -> Tuple[str, dict]:
    """Generate switch for power control.

    Returns:
        Tuple of (topic, payload)
    """
    discovery_prefix = config.get("mqtt", {}).get("discovery_prefix", "homeassistant")
    uid = f"samsung_{node_id(device_id)}_power"
    base = base_topic(config, device_id)

    topic = f"{discovery_prefix}/switch/{uid}/config"
    payload = {
        "name": "Power",
        "unique_id": uid,
        "object_id": uid,
        "device": get_device_info(tv_config, device_id),
        "availability": get_availability(config, device_id),
        "state_topic": f"{base}/state/power",
        "command_topic": f"{base}/set/power",
        "payload_on": "ON",
        "payload_off": "OFF",
        "state_on": "ON",
        "state_off": "OFF",
        "icon": "mdi:power",
    }
    return topic, payload


def generate_button_discovery(config: dict, tv_config: dict, device_id: str,
                              intent: RemoteKey, name: str, icon: str) -> Tuple[str, dict]:
    """Generate a button that sends one remote intent."""
    discovery_prefix = config.get("mqtt", {}).get("discovery_prefix", "homeassistant")
    uid = f"samsung_{node_id(device_id)}_{intent.value}"
    base = base_topic(config, device_id)

    topic = f"{discovery_prefix}/button/{uid}/config"
    payload = {
        "name": name,
        "unique_id": uid,
        "object_id": uid,
        "device": get_device_info(tv_config, device_id),
        "availability": get_availability(config, device_id),
        "command_topic": f"{base}/set/key",
        "payload_press": intent.name,
        "icon": icon,
    }
    return topic, payload


def generate_text_discovery(config: dict, tv_config: dict, device_id: str) -> Tuple[str, dict]:
    """Generate a text entity that types into the focused field."""
    discovery_prefix = config.get("mqtt", {}).get("discovery_prefix", "homeassistant")
    uid = f"samsung_{node_id(device_id)}_text"
    base = base_topic(config, device_id)

    topic = f"{discovery_prefix}/text/{uid}/config"
    payload = {
        "name": "Text Input",
        "unique_id": uid,
        "object_id": uid,
        "device": get_device_info(tv_config, device_id),
        "availability": get_availability(config, device_id),
        "command_topic": f"{base}/set/text",
        "icon": "mdi:keyboard",
    }
    return topic, payload


def generate_all_discoveries(config: dict, tv_config: dict, device_id: str) -> List[Tuple[str, dict]]:
    """Generate all discovery messages for one TV."""
    discoveries = [
        generate_power_switch_discovery(config, tv_config, device_id),
        generate_text_discovery(config, tv_config, device_id),
    ]
    for intent, (name, icon) in BUTTONS.items():
        discoveries.append(generate_button_discovery(config, tv_config, device_id, intent, name, icon))
    return discoveries


def remove_all_discoveries(config: dict, device_id: str) -> List[str]:
    """Topics to publish an empty payload to when removing the TV."""
    discovery_prefix = config.get("mqtt", {}).get("discovery_prefix", "homeassistant")
    uid = f"samsung_{node_id(device_id)}"

    topics = [
        f"{discovery_prefix}/switch/{uid}_power/config",
        f"{discovery_prefix}/text/{uid}_text/config",
    ]
    for intent in BUTTONS:
        topics.append(f"{discovery_prefix}/button/{uid}_{intent.value}/config")
    return topics
