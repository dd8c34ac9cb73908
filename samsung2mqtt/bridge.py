"""Main bridge class for samsung2mqtt."""

import asyncio
import json
import logging
import signal
from typing import Optional

import paho.mqtt.client as mqtt

from samsung_tv.client import SamsungTV
from samsung_tv.config import DEFAULT_CLIENT_NAME, get_credential_store, get_options, select_tv, validate_config
from samsung_tv.exceptions import NotAuthorized, SamsungTVError
from samsung_tv.keys import get_remote_key
from samsung_tv.models import DeviceDescriptor, PowerState
from samsung_tv.power import PowerTiming

from .discovery import base_topic, generate_all_discoveries, remove_all_discoveries

logger = logging.getLogger(__name__)

COMMANDS = ("power", "key", "text", "browser", "app")


class SamsungMQTTBridge:
    """Bridge between an MQTT broker and one Samsung TV."""

    def __init__(self, config: dict, tv_id: Optional[str] = None):
        """Initialize the bridge.

        Args:
            config: Configuration dictionary
            tv_id: TV device_id or alias (default TV if None)
        """
        self.config = config
        selected = select_tv(tv_id, config)
        if selected is None:
            raise ValueError(f"TV '{tv_id}' not found in config" if tv_id else "No TVs configured")
        self.device_id, self.tv_config = selected
        self.base_topic = base_topic(config, self.device_id)
        self.running = False

        self._power_state: Optional[str] = None
        self._reachable: Optional[bool] = None
        self._broker_client: Optional[mqtt.Client] = None
        self._tv: Optional[SamsungTV] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._poll_task: Optional[asyncio.Task] = None

    def _setup_broker_client(self):
        """Set up MQTT broker client."""
        mqtt_config = self.config.get("mqtt", {})
        base_id = mqtt_config.get("client_id", "samsung2mqtt")
        client_id = f"{base_id}_{self.base_topic.rsplit('/', 1)[-1]}"

        self._broker_client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=client_id,
            clean_session=True,
        )

        username = mqtt_config.get("username")
        password = mqtt_config.get("password")
        if username:
            self._broker_client.username_pw_set(username, password)

        self._broker_client.on_connect = self._on_broker_connect
        self._broker_client.on_disconnect = self._on_broker_disconnect
        self._broker_client.on_message = self._on_broker_message

        # Last Will and Testament
        self._broker_client.will_set(
            f"{self.base_topic}/state/available",
            payload="offline",
            qos=1,
            retain=True,
        )

    def _setup_tv_client(self):
        """Set up Samsung TV client (must run inside the event loop)."""
        options = get_options(self.config)
        self._tv = SamsungTV(
            DeviceDescriptor.from_config(self.device_id, self.tv_config),
            store=get_credential_store(self.config),
            timing=PowerTiming.from_options(options),
            client_name=options.get("client_name") or DEFAULT_CLIENT_NAME,
            on_state_change=self._on_tv_state_change,
        )

    def _on_broker_connect(self, client, userdata, flags, reason_code, properties):
        """Handle broker connection."""
        if reason_code.is_failure:
            logger.error(f"Failed to connect to MQTT broker: {reason_code}")
            return

        logger.info("Connected to MQTT broker")

        base = f"{self.base_topic}/set"
        client.subscribe([(f"{base}/{command}", 0) for command in COMMANDS])
        logger.info(f"Subscribed to command topics: {base}/#")

        if self.config.get("options", {}).get("discovery", True):
            self._publish_discovery()

        self._publish_availability(True)
        if self._power_state is not None:
            self._publish_state("power", self._power_state)

    def _on_broker_disconnect(self, client, userdata, flags, reason_code, properties):
        """Handle broker disconnection."""
        logger.warning(f"Disconnected from MQTT broker: {reason_code}")

    def _on_broker_message(self, client, userdata, msg):
        """Handle incoming MQTT messages (paho network thread)."""
        topic = msg.topic
        try:
            payload = msg.payload.decode("utf-8").strip()
        except UnicodeDecodeError:
            logger.warning(f"Ignoring non UTF-8 payload on {topic}")
            return

        logger.debug(f"Received: {topic} = {payload}")

        prefix = f"{self.base_topic}/set/"
        if not topic.startswith(prefix):
            return
        command = topic[len(prefix):]

        if self._loop is None or self._loop.is_closed():
            logger.warning(f"Bridge not running, dropping command: {command}")
            return
        asyncio.run_coroutine_threadsafe(self._handle_command(command, payload), self._loop)

    async def _handle_command(self, command: str, payload: str):
        """Handle a command from MQTT."""
        logger.info(f"Command: {command} = {payload}")

        try:
            if command == "power":
                await self._handle_power(payload)
            elif command == "key":
                await self._handle_key(payload)
            elif command == "text":
                await self._tv.async_send_text(payload)
            elif command == "browser":
                await self._tv.async_open_browser(payload)
            elif command == "app":
                await self._tv.async_launch_app(payload)
            else:
                logger.warning(f"Unknown command: {command}")
        except NotAuthorized as e:
            logger.error(f"{e}. Accept the connection on the TV, then retry.")
        except SamsungTVError as e:
            logger.error(f"Command {command} failed: {e}")

    async def _handle_power(self, payload: str):
        """Handle power command."""
        payload = payload.upper()
        if payload == "ON":
            await self._tv.async_turn_on()
        elif payload == "OFF":
            await self._tv.async_turn_off()
        else:
            logger.warning(f"Invalid power payload: {payload}")

    async def _handle_key(self, payload: str):
        """Handle key command (RemoteKey name, KEY_ constant or friendly name)."""
        intent = get_remote_key(payload) if payload.isupper() and not payload.startswith("KEY_") else None
        key = intent if intent is not None else payload
        if await self._tv.async_send_key(key):
            logger.info(f"Sent key: {payload}")

    def _on_tv_state_change(self, state: PowerState):
        """Handle observed power state changes (callback from PowerController)."""
        reachable = state is not PowerState.UNREACHABLE
        if reachable != self._reachable:
            # Availability tracks the bridge, not the TV, so it stays online here
            if not reachable:
                logger.warning(f"TV at {self.tv_config['host']} is unreachable, reporting power OFF")
            elif self._reachable is False:
                logger.info(f"TV at {self.tv_config['host']} is reachable again")
            self._reachable = reachable

        value = "ON" if state is PowerState.ON else "OFF"
        logger.debug(f"TV power state: {state.value}")
        if value != self._power_state:
            self._power_state = value
            logger.info(f"TV power state: {value}")
            self._publish_state("power", value)

    def _publish_state(self, state_type: str, value: str):
        """Publish state to MQTT broker."""
        if self._broker_client and self._broker_client.is_connected():
            topic = f"{self.base_topic}/state/{state_type}"
            self._broker_client.publish(topic, value, qos=0, retain=True)
            logger.debug(f"Published: {topic} = {value}")

    def _publish_availability(self, available: bool):
        """Publish availability to MQTT broker."""
        if self._broker_client and self._broker_client.is_connected():
            topic = f"{self.base_topic}/state/available"
            value = "online" if available else "offline"
            self._broker_client.publish(topic, value, qos=1, retain=True)
            logger.info(f"Availability: {value}")

    def _publish_discovery(self):
        """Publish Home Assistant discovery messages."""
        discoveries = generate_all_discoveries(self.config, self.tv_config, self.device_id)

        for topic, payload in discoveries:
            self._broker_client.publish(topic, json.dumps(payload), qos=0, retain=True)
            logger.debug(f"Discovery: {topic}")

        logger.info(f"Published {len(discoveries)} discovery messages")

    def remove_discovery(self):
        """Clear the retained Home Assistant discovery messages for this TV.

        Connects to the broker on its own; used by --remove-discovery.
        """
        if self._broker_client is None:
            self._setup_broker_client()

        mqtt_config = self.config.get("mqtt", {})
        self._broker_client.connect(mqtt_config.get("host", "localhost"), int(mqtt_config.get("port", 1883)), 60)
        self._broker_client.loop_start()
        try:
            topics = remove_all_discoveries(self.config, self.device_id)
            for topic in topics:
                self._broker_client.publish(topic, "", qos=1, retain=True).wait_for_publish(5)
            logger.info(f"Removed {len(topics)} discovery messages")
        finally:
            self._broker_client.disconnect()
            self._broker_client.loop_stop()

    async def _poll_state(self):
        """Probe the TV periodically; changes are published by the state callback."""
        interval = float(self.config.get("options", {}).get("status_interval", 10))
        logger.info(f"Status poll started (interval: {interval}s)")

        while self.running:
            await self._tv.async_get_power_state()
            try:
                await asyncio.wait_for(self._stop_event.wait(), interval)
            except asyncio.TimeoutError:
                pass

    async def start(self):
        """Start the bridge."""
        logger.info("Starting samsung2mqtt bridge...")

        errors = validate_config(self.config, for_bridge=True)
        if errors:
            for error in errors:
                logger.error(f"Config error: {error}")
            raise ValueError("Invalid configuration")

        self._loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()
        self.running = True

        self._setup_broker_client()
        self._setup_tv_client()

        mqtt_config = self.config.get("mqtt", {})
        host = mqtt_config.get("host", "localhost")
        port = int(mqtt_config.get("port", 1883))
        reconnect_interval = float(self.config.get("options", {}).get("reconnect_interval", 30))

        logger.info(f"Connecting to MQTT broker at {host}:{port}")
        while self.running:
            try:
                await self._loop.run_in_executor(None, self._broker_client.connect, host, port, 60)
                break
            except OSError as e:
                logger.error(f"Failed to connect to MQTT broker: {e}")
                logger.info(f"Retrying in {reconnect_interval} seconds...")
                try:
                    await asyncio.wait_for(self._stop_event.wait(), reconnect_interval)
                except asyncio.TimeoutError:
                    pass

        if not self.running:
            return

        self._broker_client.loop_start()
        self._poll_task = asyncio.ensure_future(self._poll_state())

        logger.info("samsung2mqtt bridge started")

    async def stop(self):
        """Stop the bridge."""
        logger.info("Stopping samsung2mqtt bridge...")
        self.running = False
        if self._stop_event is not None:
            self._stop_event.set()

        if self._poll_task is not None:
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass
            self._poll_task = None

        self._publish_availability(False)

        if self._tv:
            await self._tv.async_close()

        if self._broker_client:
            self._broker_client.loop_stop()
            self._broker_client.disconnect()

        logger.info("samsung2mqtt bridge stopped")

    async def run(self):
        """Run the bridge until stop() is called or a signal arrives."""
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self._request_stop, signum)
            except NotImplementedError:
                pass  # Windows

        await self.start()
        try:
            await self._stop_event.wait()
        finally:
            await self.stop()

    def _request_stop(self, signum: int):
        logger.info(f"Received signal {signum}")
        self.running = False
        self._stop_event.set()

    def run_forever(self):
        """Run the bridge until interrupted."""
        try:
            asyncio.run(self.run())
        except KeyboardInterrupt:
            pass
