"""MQTT bridge for Samsung TV power and remote control."""

__version__ = "0.1.0"
