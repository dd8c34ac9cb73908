"""Configuration management for Samsung TV control.

Provides:
- YAML-based configuration with environment variable overrides
- Multi-TV support with the TV's device id as unique identifier
- Per-device credential storage
- Single source of truth for all constants
"""

# Constants - single source of truth
from .constants import (
    # Network
    STATUS_PORT,
    REMOTE_PORT,
    STATUS_PATH,
    REMOTE_CHANNEL,
    REMOTE_CHANNEL_PATH,
    BROADCAST_ADDR,
    WOL_PORTS,
    # Client identification
    DEFAULT_CLIENT_NAME,
    # Credentials
    CREDENTIAL_VERSION,
    # Timing
    PROBE_TIMEOUT,
    POWER_CHANGE_TIMEOUT,
    POLL_INTERVAL,
    WAKE_INTERVAL,
    COOLDOWN,
    CONNECT_TIMEOUT,
)

# Schema and validation
from .schema import (
    DEFAULT_CONFIG,
    DEFAULT_TV_CONFIG,
    TIMING_OPTIONS,
    deep_merge,
    find_tv,
    validate_config,
)

# Configuration loading
from .loader import (
    load_config,
    save_config,
    get_options,
    get_credential_store,
    select_tv,
    get_tv_config,
    list_tvs,
    add_tv,
    set_default_tv,
    CONFIG_SEARCH_PATHS,
)

# Credential storage
from .storage import CredentialStore


__all__ = [
    # Constants
    "STATUS_PORT",
    "REMOTE_PORT",
    "STATUS_PATH",
    "REMOTE_CHANNEL",
    "REMOTE_CHANNEL_PATH",
    "BROADCAST_ADDR",
    "WOL_PORTS",
    "DEFAULT_CLIENT_NAME",
    "CREDENTIAL_VERSION",
    "PROBE_TIMEOUT",
    "POWER_CHANGE_TIMEOUT",
    "POLL_INTERVAL",
    "WAKE_INTERVAL",
    "COOLDOWN",
    "CONNECT_TIMEOUT",
    # Schema
    "DEFAULT_CONFIG",
    "DEFAULT_TV_CONFIG",
    "TIMING_OPTIONS",
    "deep_merge",
    "find_tv",
    "validate_config",
    # Loader
    "load_config",
    "save_config",
    "get_options",
    "get_credential_store",
    "select_tv",
    "get_tv_config",
    "list_tvs",
    "add_tv",
    "set_default_tv",
    "CONFIG_SEARCH_PATHS",
    # Storage
    "CredentialStore",
]
