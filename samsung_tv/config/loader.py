"""Configuration loading with YAML support and env overrides.

The merged config is cached per process. CLI commands and the bridge read
it through the helpers below, which resolve which TV to talk to and hand
out the options section with storage and power timing filled in.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .schema import DEFAULT_CONFIG, DEFAULT_TV_CONFIG, TIMING_OPTIONS, deep_merge, find_tv
from .storage import CredentialStore

_LOGGER = logging.getLogger(__name__)

# Searched in order when no path is given; the first readable file wins
CONFIG_SEARCH_PATHS = [
    Path("config.yaml"),
    Path("/app/config.yaml"),
    Path.home() / ".config" / "samsung_tv" / "config.yaml",
    Path("/etc/samsung_tv/config.yaml"),
]

# "ENV_VAR": ("section", "key", converter). "_default_tv" targets the
# default TV entry, creating one keyed by host if none is configured.
ENV_MAPPINGS = {
    "TV_HOST": ("_default_tv", "host", str),
    "TV_MAC": ("_default_tv", "mac", str),
    "TV_NAME": ("_default_tv", "name", str),
    "MQTT_HOST": ("mqtt", "host", str),
    "MQTT_PORT": ("mqtt", "port", int),
    "MQTT_USERNAME": ("mqtt", "username", str),
    "MQTT_PASSWORD": ("mqtt", "password", str),
    "LOG_LEVEL": ("options", "log_level", str),
    "CLIENT_NAME": ("options", "client_name", str),
    "STORAGE_DIR": ("options", "storage_dir", str),
    "STATUS_INTERVAL": ("options", "status_interval", float),
}
ENV_MAPPINGS.update({key.upper(): ("options", key, float) for key in TIMING_OPTIONS})

_cached_config: Optional[Dict] = None


def load_config(config_path: Optional[str] = None, use_cache: bool = True) -> Dict[str, Any]:
    """Load configuration from YAML file with environment overrides.

    Args:
        config_path: Explicit path to config file, or None to search
        use_cache: Return the previously loaded config if there is one

    Returns:
        Merged configuration dictionary. ``_loaded_from`` holds the file
        path, or None when only defaults and env were used.
    """
    global _cached_config

    if use_cache and _cached_config is not None:
        return _cached_config

    config = copy.deepcopy(DEFAULT_CONFIG)
    loaded_path = None

    search_paths = ([Path(config_path)] if config_path else []) + list(CONFIG_SEARCH_PATHS)
    for path in search_paths:
        if path.suffix not in (".yaml", ".yml") or not path.exists():
            continue
        try:
            with open(path) as f:
                user_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            _LOGGER.warning("Failed to load %s: %s", path, e)
            continue
        config = deep_merge(config, user_config)
        loaded_path = path
        _LOGGER.info("Loaded config from %s", path)
        break

    _apply_env_overrides(config)
    config["_loaded_from"] = str(loaded_path) if loaded_path else None

    _cached_config = config
    return config


def _apply_env_overrides(config: Dict):
    tv_overrides = {}

    for env_var, (section, key, converter) in ENV_MAPPINGS.items():
        raw = os.environ.get(env_var)
        if raw is None:
            continue
        try:
            value = converter(raw)
        except ValueError:
            _LOGGER.warning("Ignoring %s=%r: expected %s", env_var, raw, converter.__name__)
            continue
        if section == "_default_tv":
            tv_overrides[key] = value
        else:
            config.setdefault(section, {})[key] = value

    if not tv_overrides:
        return

    found = find_tv(config, config["default_tv"]) if config.get("default_tv") else None
    if found is not None:
        found[1].update(tv_overrides)
    elif tv_overrides.get("host"):
        host = tv_overrides["host"]
        config.setdefault("tvs", {})[host] = deep_merge(DEFAULT_TV_CONFIG, tv_overrides)
        config["default_tv"] = host
    else:
        _LOGGER.warning("TV_* variables set without TV_HOST and no default TV configured")


def save_config(config: Dict, path: Optional[Path] = None) -> bool:
    """Write ``config`` back as YAML.

    Goes to ``path``, else to the file it was loaded from, else to
    ./config.yaml. Keys starting with "_" are not written.

    Returns:
        True if saved successfully
    """
    if path is None:
        path = Path(config.get("_loaded_from") or "config.yaml")

    data = {key: value for key, value in config.items() if not key.startswith("_")}
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        _LOGGER.error("Failed to save config to %s: %s", path, e)
        return False

    _LOGGER.info("Saved config to %s", path)
    return True


def get_options(config: Optional[Dict] = None) -> Dict[str, Any]:
    """Return the options section with unset timing keys at their defaults."""
    if config is None:
        config = load_config()
    options = dict(config.get("options") or {})
    for key, default in TIMING_OPTIONS.items():
        if options.get(key) is None:
            options[key] = default
    return options


def get_credential_store(config: Optional[Dict] = None) -> CredentialStore:
    """Credential store for the configured ``options.storage_dir``."""
    storage_dir = get_options(config).get("storage_dir")
    return CredentialStore(Path(storage_dir).expanduser() if storage_dir else None)


def select_tv(tv_id: Optional[str] = None, config: Optional[Dict] = None) -> Optional[Tuple[str, Dict]]:
    """Pick a TV: the one named, else the default, else the first configured.

    Args:
        tv_id: Device id, alias or host
        config: Config to search (the loaded config if None)

    Returns:
        Tuple of (device_id, tv_config), or None if nothing matches
    """
    if config is None:
        config = load_config()
    tvs = config.get("tvs") or {}
    wanted = tv_id or config.get("default_tv")
    if wanted:
        return find_tv(config, wanted)
    return next(iter(tvs.items()), None)


def get_tv_config(tv_id: Optional[str] = None) -> Optional[Dict]:
    """Config of the selected TV (see select_tv), or None."""
    selected = select_tv(tv_id)
    return selected[1] if selected else None


def list_tvs() -> List[Dict]:
    """Configured TVs, each with ``device_id`` and ``is_default`` added."""
    config = load_config()
    default = select_tv(config=config)
    default_id = default[0] if default else None
    return [
        {"device_id": device_id, "is_default": device_id == default_id, **tv_config}
        for device_id, tv_config in (config.get("tvs") or {}).items()
    ]


def add_tv(device_id: str, host: str, alias: Optional[str] = None, **fields) -> bool:
    """Add or replace a TV entry and save the config.

    The first TV added becomes the default.

    Args:
        device_id: The TV's own "uuid:..." id
        host: TV IP address
        alias: Short name for --tv
        **fields: mac, name, model

    Returns:
        True if the config was saved
    """
    config = load_config()
    tvs = config.setdefault("tvs", {})
    tvs[device_id] = deep_merge(DEFAULT_TV_CONFIG, {"host": host, "alias": alias, **fields})
    if len(tvs) == 1:
        config["default_tv"] = alias or device_id
    return save_config(config)


def set_default_tv(id_or_alias: str) -> bool:
    """Make a configured TV the default and save the config.

    Returns:
        False if no TV matches
    """
    config = load_config()
    if find_tv(config, id_or_alias) is None:
        _LOGGER.error("TV not found: %s", id_or_alias)
        return False
    config["default_tv"] = id_or_alias
    return save_config(config)
