"""Samsung (Tizen) TV power and remote control library.

Talks to the TV's REST status endpoint (port 8001) and its remote control
WebSocket channel (port 8002), and wakes it with Wake-on-LAN.
"""

from .client import SamsungTV
from .config import (
    CredentialStore,
    load_config,
    get_tv_config,
    STATUS_PORT,
    REMOTE_PORT,
)
from .exceptions import (
    SamsungTVError,
    TransportError,
    TimedOut,
    NotAuthorized,
    NotConnected,
    PowerChangeTimeout,
)
from .keys import (
    KEY_POWER,
    KEY_UP,
    KEY_DOWN,
    KEY_LEFT,
    KEY_RIGHT,
    KEY_ENTER,
    KEY_RETURN,
    KEY_HOME,
    KEY_VOLUME_UP,
    KEY_VOLUME_DOWN,
    KEY_MUTE,
    KEY_PLAY_BACK,
    KEY_INFO,
    ALL_KEYS,
    KEY_NAME_MAP,
    RemoteKey,
    get_key,
)
from .models import (
    ActiveState,
    Capabilities,
    Credential,
    DeviceDescriptor,
    DeviceStatus,
    PowerState,
)
from .power import PowerController, PowerPhase, PowerTiming
from .remote import CursorMove, LaunchApp, OpenBrowser, RemoteCommandSender, TextInput
from .session import AuthStatus, ConnectionState, Session, SessionConnection
from .status import StatusProbe
from .wol import WakeSignal, create_magic_packet, wake_tv

__version__ = "0.1.0"
__all__ = [
    # Client
    "SamsungTV",
    # Components
    "StatusProbe",
    "SessionConnection",
    "Session",
    "ConnectionState",
    "AuthStatus",
    "PowerController",
    "PowerPhase",
    "PowerTiming",
    "RemoteCommandSender",
    "WakeSignal",
    "create_magic_packet",
    "wake_tv",
    # Intents
    "RemoteKey",
    "TextInput",
    "CursorMove",
    "OpenBrowser",
    "LaunchApp",
    # Models
    "ActiveState",
    "Capabilities",
    "Credential",
    "DeviceDescriptor",
    "DeviceStatus",
    "PowerState",
    # Errors
    "SamsungTVError",
    "TransportError",
    "TimedOut",
    "NotAuthorized",
    "NotConnected",
    "PowerChangeTimeout",
    # Keys
    "KEY_POWER",
    "KEY_UP",
    "KEY_DOWN",
    "KEY_LEFT",
    "KEY_RIGHT",
    "KEY_ENTER",
    "KEY_RETURN",
    "KEY_HOME",
    "KEY_VOLUME_UP",
    "KEY_VOLUME_DOWN",
    "KEY_MUTE",
    "KEY_PLAY_BACK",
    "KEY_INFO",
    "ALL_KEYS",
    "KEY_NAME_MAP",
    "get_key",
    # Config
    "CredentialStore",
    "load_config",
    "get_tv_config",
    "STATUS_PORT",
    "REMOTE_PORT",
]
