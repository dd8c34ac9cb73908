"""All constants for Samsung TV control - single source of truth.

Used by:
- status.py (HTTP status endpoint)
- session.py (remote control channel, connect timeout)
- power.py (power change timing)
- wol.py (wake-on-lan addresses/ports)
- storage.py (credential file format)
"""

# === Network Ports ===
STATUS_PORT = 8001             # Plain HTTP REST API (status document)
REMOTE_PORT = 8002             # TLS WebSocket API (remote control channel)

# === Endpoints ===
STATUS_PATH = "/api/v2/"
REMOTE_CHANNEL = "samsung.remote.control"
REMOTE_CHANNEL_PATH = "/api/v2/channels/" + REMOTE_CHANNEL

# === Network Addresses ===
BROADCAST_ADDR = "255.255.255.255"
WOL_PORTS = (9, 7)

# === Client Identification ===
# Shown on the TV's "allow access" prompt
DEFAULT_CLIENT_NAME = "Python - Samsung TV"

# === Credential Storage ===
CREDENTIAL_VERSION = 1
CREDENTIAL_FILE_PREFIX = "samsung-tv-"

# === Timing (seconds) ===
PROBE_TIMEOUT = 1.0            # Single status probe
POWER_CHANGE_TIMEOUT = 20.0    # Ceiling for one power transition
POLL_INTERVAL = 0.4            # Status poll while waiting for a transition
WAKE_INTERVAL = 1.0            # Between wake-on-lan attempts
COOLDOWN = 1.0                 # Settle time after a successful transition
CONNECT_TIMEOUT = 10.0         # WebSocket handshake + channel authorization

# === Remote Channel ===
# Close status the TV uses when the user has not approved access on screen
ACCESS_DENIED_CLOSE_CODE = 1005
BROWSER_APP_ID = "org.tizen.browser"
