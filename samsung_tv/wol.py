"""Wake-on-LAN support for Samsung TVs."""

import asyncio
import logging
import socket
from typing import Iterable, List, Optional, Sequence

from .config.constants import BROADCAST_ADDR, WOL_PORTS

_LOGGER = logging.getLogger(__name__)


def create_magic_packet(mac_address: str) -> bytes:
    """Create a Wake-on-LAN magic packet.

    The magic packet consists of:
    - 6 bytes of 0xFF
    - 16 repetitions of the target MAC address (6 bytes each)

    Args:
        mac_address: MAC address in format XX:XX:XX:XX:XX:XX or XX-XX-XX-XX-XX-XX

    Returns:
        Magic packet as bytes

    Raises:
        ValueError: If the MAC address is malformed
    """
    mac = mac_address.upper().replace(":", "").replace("-", "").replace(".", "")
    if len(mac) != 12:
        raise ValueError(f"Invalid MAC address: {mac_address}")

    mac_bytes = bytes.fromhex(mac)

    return b"\xff" * 6 + mac_bytes * 16


def send_wol(packet: bytes, broadcast: str = BROADCAST_ADDR, port: int = 9):
    """Send a magic packet to one broadcast address.

    Raises:
        OSError: If the packet could not be sent
    """
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        sock.sendto(packet, (broadcast, port))


def subnet_broadcast(ip: Optional[str]) -> Optional[str]:
    """Return the /24 directed broadcast for an IPv4 address, e.g. 10.0.0.255."""
    if not ip:
        return None
    parts = ip.split(".")
    if len(parts) != 4 or not all(p.isdigit() for p in parts):
        return None
    return ".".join(parts[:3] + ["255"])


def wake_tv(mac_address: str, broadcasts: Iterable[str] = (BROADCAST_ADDR,),
            ports: Sequence[int] = WOL_PORTS) -> bool:
    """Wake up the TV using Wake-on-LAN.

    Sends the magic packet to every broadcast address on every port.

    Args:
        mac_address: TV's MAC address
        broadcasts: Broadcast addresses to send to
        ports: WoL ports (9 and 7 by default)

    Returns:
        True if at least one packet was sent
    """
    try:
        packet = create_magic_packet(mac_address)
    except ValueError as e:
        _LOGGER.error("WoL error: %s", e)
        return False

    success = False
    for bcast in broadcasts:
        for port in ports:
            try:
                send_wol(packet, bcast, port)
                success = True
            except OSError as e:
                _LOGGER.warning("WoL send to %s:%s failed: %s", bcast, port, e)

    return success


class WakeSignal:
    """Async wrapper that sends wake packets from the executor."""

    def __init__(self, broadcasts: Optional[List[str]] = None, ports: Sequence[int] = WOL_PORTS,
                 host: Optional[str] = None):
        """Initialize the wake signal.

        Args:
            broadcasts: Broadcast addresses (default 255.255.255.255)
            ports: Destination UDP ports
            host: TV IP; adds its /24 directed broadcast when given
        """
        self.broadcasts = list(broadcasts or [BROADCAST_ADDR])
        directed = subnet_broadcast(host)
        if directed and directed not in self.broadcasts:
            self.broadcasts.append(directed)
        self.ports = tuple(ports)

    async def wake(self, mac: Optional[str]) -> bool:
        """Send the wake packets. Never raises.

        Returns:
            True if at least one packet was sent
        """
        if not mac:
            _LOGGER.warning("Cannot wake TV: no MAC address configured")
            return False
        loop = asyncio.get_running_loop()
        sent = await loop.run_in_executor(None, wake_tv, mac, self.broadcasts, self.ports)
        if sent:
            _LOGGER.debug("Sent wake-on-lan to %s via %s", mac, self.broadcasts)
        else:
            _LOGGER.warning("Failed to send wake-on-lan to %s", mac)
        return sent
