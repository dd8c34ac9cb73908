#!/usr/bin/env python3
"""Command-line interface for Samsung TV control."""

import argparse
import asyncio
import logging
import sys
from typing import Awaitable, Callable, Optional

import aiohttp

from .client import SamsungTV
from .config import (
    DEFAULT_CLIENT_NAME,
    add_tv,
    get_credential_store,
    get_options,
    get_tv_config,
    list_tvs,
    select_tv,
    set_default_tv,
)
from .exceptions import NotAuthorized, SamsungTVError
from .keys import ALL_KEYS, KEY_NAME_MAP, RemoteKey
from .models import ActiveState, DeviceDescriptor, PowerState
from .power import PowerTiming
from .protocol import KEY_COMMANDS
from .status import StatusProbe
from .wol import WakeSignal


async def create_tv_client(tv_id: Optional[str] = None, ip: Optional[str] = None,
                           mac: Optional[str] = None) -> SamsungTV:
    """Create TV client with config settings.

    Args:
        tv_id: TV identifier (device_id or alias). Uses default TV if not provided.
        ip: Override IP address (takes precedence over tv_id). The TV is probed
            once to learn its device id.
        mac: Override MAC address

    Returns:
        Configured SamsungTV client

    Raises:
        ValueError: No usable TV configuration
        TimedOut, TransportError: --ip given and the TV did not answer
    """
    options = get_options()
    kwargs = {
        "store": get_credential_store(),
        "timing": PowerTiming.from_options(options),
        "client_name": options.get("client_name") or DEFAULT_CLIENT_NAME,
    }

    if ip:
        return await SamsungTV.from_host(ip, mac=mac, probe_timeout=kwargs["timing"].probe_timeout, **kwargs)

    selected = select_tv(tv_id)
    if selected is None:
        if tv_id:
            raise ValueError(f"TV '{tv_id}' not found. Use 'samsung-tv config show' to see configured TVs.")
        raise ValueError("No default TV configured. Use 'samsung-tv config add <ip>' to add a TV.")

    device_id, tv_config = selected
    if not tv_config.get("host"):
        raise ValueError(f"TV '{tv_id or device_id}' has no host configured.")

    return SamsungTV(DeviceDescriptor.from_config(device_id, tv_config, mac=mac), **kwargs)


def _run_with_tv(args, action: Callable[[SamsungTV], Awaitable[int]]) -> int:
    """Create the client, run an async action, and map errors to exit codes."""

    async def _main() -> int:
        tv = await create_tv_client(getattr(args, "tv", None), args.ip, getattr(args, "mac", None))
        async with tv:
            return await action(tv)

    try:
        return asyncio.run(_main())
    except NotAuthorized as e:
        print(f"{e}", file=sys.stderr)
        print("Accept the connection on the TV screen, then try again.", file=sys.stderr)
        return 1
    except (SamsungTVError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_status(args):
    """Get TV status."""
    tv_id = getattr(args, "tv", None)
    host = args.ip
    if not host:
        tv_config = get_tv_config(tv_id)
        host = tv_config.get("host") if tv_config else None
    if not host:
        print("No TV configured. Use 'samsung-tv config add <ip>' or --ip.", file=sys.stderr)
        return 1

    async def _probe():
        async with aiohttp.ClientSession() as session:
            return await StatusProbe(session).probe(host, get_options()["probe_timeout"])

    try:
        status = asyncio.run(_probe())
    except SamsungTVError as e:
        print(f"TV at {host} is unreachable ({e})", file=sys.stderr)
        return 1

    print(f"TV Status ({host}):")
    print(f"  Power:      {status.power_state.value}")
    print(f"  Name:       {status.device_name or status.name}")
    print(f"  Model:      {status.model_name or '(unknown)'}")
    print(f"  MAC:        {status.mac or '(unknown)'}")
    print(f"  Device ID:  {status.device_id}")
    print(f"  Token auth: {'yes' if status.token_auth_support else 'no'}")
    caps = status.capabilities
    print(f"  Remote:     {'available' if caps.remote_available else 'unavailable'}")
    if caps.frame_tv_support:
        print("  Frame TV:   yes")
    return 0


def cmd_active(args):
    """Print ACTIVE or INACTIVE."""
    async def _action(tv: SamsungTV) -> int:
        state = await tv.async_get_active_state()
        print(state.name)
        return 0 if state is ActiveState.ACTIVE else 3

    return _run_with_tv(args, _action)


def cmd_on(args):
    """Turn TV on (wake + toggle + wait)."""
    async def _action(tv: SamsungTV) -> int:
        print(f"Turning on {tv.device.name}...")
        state = await tv.async_turn_on()
        print(f"TV is {state.value}")
        return 0

    return _run_with_tv(args, _action)


def cmd_off(args):
    """Put TV in standby (checks state first)."""
    async def _action(tv: SamsungTV) -> int:
        if await tv.async_get_power_state() is PowerState.UNREACHABLE:
            print("TV is not reachable (already off).")
            return 0
        print(f"Turning off {tv.device.name}...")
        state = await tv.async_turn_off()
        print(f"TV is {state.value}")
        return 0

    return _run_with_tv(args, _action)


def cmd_key(args):
    """Send a key press."""
    name = args.key
    intent = None
    if name.isupper() and name in RemoteKey.__members__:
        intent = RemoteKey[name]

    async def _action(tv: SamsungTV) -> int:
        sent = await tv.async_send_key(intent or name, args.cmd)
        if not sent:
            print(f"Nothing sent for '{name}'")
            return 0
        print(f"Sent: {name}")
        return 0

    return _run_with_tv(args, _action)


def cmd_keys(args):
    """List available keys."""
    print("Key names:")
    for name, key in sorted(KEY_NAME_MAP.items()):
        print(f"  {name:<12} {key}")
    print("\nRemote intents:")
    for intent in RemoteKey:
        print(f"  {intent.name}")
    print("\nKey codes:")
    print("  " + ", ".join(ALL_KEYS))
    return 0


def cmd_text(args):
    """Type text into the focused input field."""
    async def _action(tv: SamsungTV) -> int:
        await tv.async_send_text(args.text)
        print("Text sent")
        return 0

    return _run_with_tv(args, _action)


def cmd_browser(args):
    """Open a URL in the TV browser."""
    async def _action(tv: SamsungTV) -> int:
        await tv.async_open_browser(args.url)
        print(f"Opening {args.url}")
        return 0

    return _run_with_tv(args, _action)


def cmd_app(args):
    """Launch an app by id."""
    async def _action(tv: SamsungTV) -> int:
        await tv.async_launch_app(args.app_id, args.meta or "")
        print(f"Launching {args.app_id}")
        return 0

    return _run_with_tv(args, _action)


def cmd_move(args):
    """Move the pointer."""
    async def _action(tv: SamsungTV) -> int:
        await tv.async_move_cursor(args.x, args.y, args.time)
        return 0

    return _run_with_tv(args, _action)


def cmd_wake(args):
    """Wake TV using Wake-on-LAN."""
    tv_config = get_tv_config(getattr(args, "tv", None))

    mac = getattr(args, "mac", None)
    host = args.ip
    if tv_config:
        mac = mac or tv_config.get("mac")
        host = host or tv_config.get("host")

    if not mac:
        print("No MAC address specified.", file=sys.stderr)
        print("Use: samsung-tv wake --mac AA:BB:CC:DD:EE:FF", file=sys.stderr)
        print("Or configure a TV first: samsung-tv config add <ip>", file=sys.stderr)
        return 1

    print(f"Sending Wake-on-LAN to {mac}...")
    if asyncio.run(WakeSignal(host=host).wake(mac)):
        print("Magic packet sent!")
        return 0
    print("Failed to send wake packet", file=sys.stderr)
    return 1


def cmd_auth(args):
    """View or manage the stored channel token."""
    if args.action == "pair":
        async def _action(tv: SamsungTV) -> int:
            print(f"Connecting to {tv.device.name}; accept the prompt on the TV screen...")
            await tv.async_connect()
            session = tv.connection.session
            if session is not None and session.credential is not None:
                print("Paired. Token saved.")
            else:
                print("Connected (the TV did not issue a token).")
            return 0

        return _run_with_tv(args, _action)

    selected = select_tv(getattr(args, "tv", None))
    device_id = selected[0] if selected else None
    store = get_credential_store()

    if args.action == "status":
        if device_id is None:
            devices = store.list_devices()
            if not devices:
                print("No stored tokens.")
            for name in devices:
                print(f"  {name}")
            return 0
        credential = store.load(device_id)
        if credential is None:
            print(f"No stored token for {device_id}. Run 'samsung-tv auth pair'.")
        else:
            print(f"Token stored for {device_id} ({store.path_for(device_id)})")
        return 0

    if args.action == "clear":
        if device_id is None:
            print("No TV selected. Use --tv.", file=sys.stderr)
            return 1
        if store.delete(device_id):
            print("Stored token cleared.")
        else:
            print("No stored token.")
        return 0

    return 0


def cmd_config(args):
    """View or set configuration."""
    if args.action == "show":
        tvs = list_tvs()
        if not tvs:
            print("No TVs configured. Use 'samsung-tv config add <ip>' to add a TV.")
            return 0

        print("Configured TVs:")
        for tv in tvs:
            is_default = " (default)" if tv.get("is_default") else ""
            alias = tv.get("alias")
            alias_str = f" [{alias}]" if alias else ""
            name = tv.get("name")
            name_str = f" - {name}" if name else ""

            print(f"\n  {tv['device_id']}{alias_str}{is_default}{name_str}")
            print(f"    Host:  {tv.get('host') or '(not set)'}")
            print(f"    MAC:   {tv.get('mac') or '(not set)'}")
            if tv.get("model"):
                print(f"    Model: {tv['model']}")

    elif args.action == "add":
        if not args.value:
            print("Please provide IP address: samsung-tv config add 192.168.1.100", file=sys.stderr)
            return 1
        ip = args.value

        async def _probe():
            async with aiohttp.ClientSession() as session:
                return await StatusProbe(session).probe(ip, 3.0)

        try:
            status = asyncio.run(_probe())
        except SamsungTVError as e:
            print(f"Could not reach TV at {ip}: {e}", file=sys.stderr)
            print("The TV must be on to be added.", file=sys.stderr)
            return 1

        add_tv(
            status.device_id,
            ip,
            alias=args.alias,
            mac=getattr(args, "mac", None) or status.mac,
            name=status.device_name or status.name,
            model=status.model_name,
        )
        print(f"Added {status.device_name or status.name} at {ip}")
        print(f"  Device ID: {status.device_id}")
        if args.alias:
            print(f"  Alias: {args.alias}")
        print("Use 'samsung-tv auth pair' to authorize this computer on the TV.")

    elif args.action == "set-default":
        if not args.value:
            print("Please provide TV ID or alias: samsung-tv config set-default living_room", file=sys.stderr)
            return 1
        if not set_default_tv(args.value):
            print(f"TV not found: {args.value}", file=sys.stderr)
            return 1
        print(f"Default TV set to: {args.value}")

    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="samsung-tv",
        description="Control your Samsung TV from the command line",
    )
    parser.add_argument("--tv", help="TV ID or alias (uses default TV if not specified)")
    parser.add_argument("--ip", help="TV IP address (overrides --tv and config)")
    parser.add_argument("--mac", help="TV MAC address (overrides config)")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    p_status = subparsers.add_parser("status", help="Get TV status")
    p_status.set_defaults(func=cmd_status)

    p_active = subparsers.add_parser("active", help="Print ACTIVE/INACTIVE (exit 3 when inactive)")
    p_active.set_defaults(func=cmd_active)

    p_on = subparsers.add_parser("on", help="Turn TV on (wake + wait)")
    p_on.set_defaults(func=cmd_on)

    p_off = subparsers.add_parser("off", help="Turn TV off (checks state first)")
    p_off.set_defaults(func=cmd_off)

    p_key = subparsers.add_parser("key", help="Send a key press")
    p_key.add_argument("key", help="Key name (e.g., up, enter, KEY_MUTE, ARROW_UP)")
    p_key.add_argument("--cmd", choices=KEY_COMMANDS, default="Click", help="Key action")
    p_key.set_defaults(func=cmd_key)

    p_keys = subparsers.add_parser("keys", help="List available keys")
    p_keys.set_defaults(func=cmd_keys)

    p_text = subparsers.add_parser("text", help="Type text into the focused field")
    p_text.add_argument("text")
    p_text.set_defaults(func=cmd_text)

    p_browser = subparsers.add_parser("browser", help="Open a URL in the TV browser")
    p_browser.add_argument("url")
    p_browser.set_defaults(func=cmd_browser)

    p_app = subparsers.add_parser("app", help="Launch an app by id")
    p_app.add_argument("app_id")
    p_app.add_argument("--meta", help="Launch metaTag (e.g. a deep link)")
    p_app.set_defaults(func=cmd_app)

    p_move = subparsers.add_parser("move", help="Move the pointer")
    p_move.add_argument("x", type=int)
    p_move.add_argument("y", type=int)
    p_move.add_argument("--time", type=int, default=0, help="Move duration")
    p_move.set_defaults(func=cmd_move)

    p_wake = subparsers.add_parser("wake", help="Wake TV using Wake-on-LAN")
    p_wake.set_defaults(func=cmd_wake)

    p_auth = subparsers.add_parser("auth", help="Manage the remote channel token")
    p_auth.add_argument(
        "action",
        choices=["status", "pair", "clear"],
        nargs="?",
        default="status",
        help="status: show stored token, pair: connect and accept on the TV, clear: remove token",
    )
    p_auth.set_defaults(func=cmd_auth)

    p_cfg = subparsers.add_parser("config", help="View or set configuration")
    p_cfg.add_argument("action", choices=["show", "add", "set-default"], nargs="?", default="show")
    p_cfg.add_argument("value", nargs="?", help="IP address (add) or TV ID/alias (set-default)")
    p_cfg.add_argument("--alias", help="Alias when adding a TV")
    p_cfg.set_defaults(func=cmd_config)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
