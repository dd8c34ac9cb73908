#!/usr/bin/env python3
"""Entry point for samsung2mqtt."""

import argparse
import logging
import sys

from samsung_tv.config import load_config, validate_config

from . import __version__
from .bridge import SamsungMQTTBridge


def setup_logging(level: str = "INFO"):
    """Set up logging configuration."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from paho-mqtt and aiohttp
    logging.getLogger("paho").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="samsung2mqtt",
        description="MQTT bridge for Samsung TV power and remote control",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "--tv",
        help="TV ID or alias to bridge (default TV if not specified)",
    )
    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"samsung2mqtt {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate config and exit",
    )
    parser.add_argument(
        "--remove-discovery",
        action="store_true",
        help="Remove Home Assistant discovery messages for the TV and exit",
    )

    args = parser.parse_args()

    config = load_config(args.config)

    log_level = "DEBUG" if args.debug else config.get("options", {}).get("log_level", "INFO")
    setup_logging(log_level)

    logger = logging.getLogger(__name__)
    logger.info(f"Loaded config from: {config.get('_loaded_from') or 'defaults'}")

    errors = validate_config(config, for_bridge=True)
    if errors:
        for error in errors:
            logger.error(f"Config error: {error}")
        if args.validate:
            print("Configuration is INVALID")
        sys.exit(1)

    try:
        bridge = SamsungMQTTBridge(config, args.tv)
    except ValueError as e:
        logger.error(f"Config error: {e}")
        sys.exit(1)

    if args.validate:
        options = config["options"]
        print("Configuration is valid")
        print(f"  MQTT Broker: {config['mqtt']['host']}:{config['mqtt']['port']}")
        print(f"  TV ID: {bridge.device_id}")
        print(f"  TV Host: {bridge.tv_config['host']}")
        print(f"  TV MAC: {bridge.tv_config.get('mac') or 'not set'}")
        print(f"  Status Interval: {options['status_interval']}s")
        print(f"  Discovery: {options['discovery']}")
        sys.exit(0)

    if args.remove_discovery:
        try:
            bridge.remove_discovery()
        except (OSError, RuntimeError, ValueError) as e:
            logger.error(f"Failed to remove discovery messages: {e}")
            sys.exit(1)
        sys.exit(0)

    logger.info(f"samsung2mqtt v{__version__} starting...")

    try:
        bridge.run_forever()
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
