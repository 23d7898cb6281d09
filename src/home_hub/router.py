"""
Router - the hub's event loop.

The Router is the only consumer of the inbound fabric. It classifies each
event, updates the device registry, sends outbound messages through the
adapter dispatch table, and publishes named triggers to the subscription
engine. Because everything happens on this one thread, the registry and
the boolean store need no locking.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Type, get_args

from home_hub.adapters.base import AdapterRegistry
from home_hub.adapters.devicegroup import DeviceGroupAdapter
from home_hub.automation.engine import SubscriptionEngine
from home_hub.core.booleans import Clock, utc_now
from home_hub.core.devices import Device, DeviceRegistry
from home_hub.core.errors import HubError
from home_hub.core.events import (
    BatteryReport,
    BlinkMsg,
    BlinkRequest,
    BrightnessMsg,
    BrightnessRequest,
    ColorMsg,
    ColorRequest,
    ColorTemperatureMsg,
    ColorTemperatureRequest,
    ContactReport,
    EnvironmentReport,
    InboundEvent,
    InfraredMsg,
    InfraredRequest,
    LinkQualityReport,
    OutboundMessage,
    PersonPresenceChange,
    PlaybackMsg,
    PlaybackRequest,
    PowerKind,
    PowerMsg,
    PowerRequest,
    PublishRequest,
    PushButtonReport,
    RawInfraredEvent,
    WaterLeakReport,
    format_bool,
)
from home_hub.core.fabric import InboundFabric

logger = logging.getLogger(__name__)

MessageBuilder = Callable[[Device], OutboundMessage]


class Router:
    """
    Single consumer of the inbound fabric.

    Responsibilities:
    - Classify inbound events (one handler per event type)
    - Resolve power requests, including toggle and device groups
    - Track optimistic device state and sensor telemetry
    - Publish named triggers ("contact:<device>:<value>", ...)
    - Drive the periodic tick

    No error raised while handling an event ever escapes the loop.
    """

    def __init__(
        self,
        devices: DeviceRegistry,
        adapters: AdapterRegistry,
        fabric: InboundFabric,
        engine: SubscriptionEngine,
        clock: Clock = utc_now,
    ) -> None:
        self._devices = devices
        self._adapters = adapters
        self._fabric = fabric
        self._engine = engine
        self._clock = clock

        self._handlers: Dict[Type[Any], Callable[[Any], None]] = {
            PowerRequest: self._on_power,
            ColorRequest: self._on_color,
            ColorTemperatureRequest: self._on_color_temperature,
            BrightnessRequest: self._on_brightness,
            PlaybackRequest: self._on_playback,
            BlinkRequest: self._on_blink,
            InfraredRequest: self._on_infrared,
            RawInfraredEvent: self._on_raw_infrared,
            PersonPresenceChange: self._on_presence,
            ContactReport: self._on_contact,
            WaterLeakReport: self._on_water_leak,
            PushButtonReport: self._on_push_button,
            LinkQualityReport: self._on_link_quality,
            BatteryReport: self._on_battery,
            EnvironmentReport: self._on_environment,
            PublishRequest: self._on_publish,
        }

        missing = set(get_args(InboundEvent)) - set(self._handlers)
        if missing:
            names = ", ".join(sorted(t.__name__ for t in missing))
            raise TypeError(f"Router has no handler for: {names}")

    # =========================================================================
    # Loop
    # =========================================================================

    def run(
        self,
        stop: threading.Event,
        tick_interval: float,
        on_tick: Callable[[], None],
    ) -> None:
        """
        Process events until stop is set.

        Args:
            stop: Cooperative shutdown signal (call fabric.wakeup() after setting it)
            tick_interval: Seconds between on_tick calls
            on_tick: Periodic work (environment booleans, snapshot)
        """
        logger.info("Router started")
        next_tick = time.monotonic() + tick_interval

        while not stop.is_set():
            event = self._fabric.next(timeout=max(0.0, next_tick - time.monotonic()))
            if event is not None:
                self.handle(event)

            if time.monotonic() >= next_tick:
                try:
                    on_tick()
                except Exception as e:
                    logger.error(f"Error in periodic tick: {e}", exc_info=True)
                next_tick = time.monotonic() + tick_interval

        logger.info("Router stopped")

    def process_pending(self) -> int:
        """
        Handle queued events until the fabric is empty, without blocking.

        Includes events enqueued while handling (e.g. power actions).

        Returns:
            Number of events handled
        """
        handled = 0
        while True:
            events = self._fabric.drain()
            if not events:
                return handled
            for event in events:
                self.handle(event)
                handled += 1

    def handle(self, event: InboundEvent) -> None:
        """Handle one event. Errors are logged and the event is dropped."""
        kind = type(event).__name__
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.error(f"Unsupported inbound event: {kind}")
            return

        try:
            handler(event)
        except HubError as e:
            logger.error(f"Dropped {kind}: {e}")
        except Exception as e:
            logger.error(f"Error handling {kind} {event}: {e}", exc_info=True)

    # =========================================================================
    # Power
    # =========================================================================

    def _on_power(self, event: PowerRequest) -> None:
        self.device_power(self._devices.lookup(event.device_id), event.kind)

    def device_power(self, device: Device, kind: PowerKind) -> None:
        """
        Apply a power request to a device or device group.

        Toggle resolves to on/off from the optimistic flag and recurses
        exactly once. Groups forward the same request, toggle included, to
        every member before returning, so each member toggles from its own
        flag.
        """
        adapter = self._adapters.lookup(device.config.adapter_id)
        if isinstance(adapter, DeviceGroupAdapter):
            self._group_power(device, adapter, kind)
            return

        if kind is PowerKind.TOGGLE:
            logger.debug(
                f"Power toggle: {device.config.name}, current state = {device.probably_turned_on}"
            )
            resolved = PowerKind.OFF if device.probably_turned_on else PowerKind.ON
            self.device_power(device, resolved)
            return

        on = kind is PowerKind.ON
        logger.debug(f"Power {kind.value}: {device.config.name}")

        command = device.config.power_on_cmd if on else device.config.power_off_cmd
        adapter.send(PowerMsg(device.config.adapters_device_id, command, on))

        device.probably_turned_on = on

        self._engine.publish(f"device:{device.device_id}:power:{kind.value}")

    def _group_power(self, group: Device, adapter: DeviceGroupAdapter, kind: PowerKind) -> None:
        logger.debug(f"Power {kind.value}: group {group.config.name}")
        for member_id in adapter.members:
            try:
                self.device_power(self._devices.lookup(member_id), kind)
            except HubError as e:
                logger.error(f"Group {group.device_id}: power {kind.value} for {member_id}: {e}")

        # The group's own flag only drives its power:on/off event
        if kind is PowerKind.TOGGLE:
            on = not group.probably_turned_on
        else:
            on = kind is PowerKind.ON
        group.probably_turned_on = on

        self._engine.publish(f"device:{group.device_id}:power:{'on' if on else 'off'}")

    # =========================================================================
    # Other device commands
    # =========================================================================

    def _send(self, device: Device, build: MessageBuilder) -> None:
        """Send a message to a device, or to every member of a group."""
        adapter = self._adapters.lookup(device.config.adapter_id)
        if isinstance(adapter, DeviceGroupAdapter):
            build(device)
            for member_id in adapter.members:
                try:
                    self._send(self._devices.lookup(member_id), build)
                except HubError as e:
                    logger.error(f"Group {device.device_id}: sending to {member_id}: {e}")
            return

        adapter.send(build(device))

    def _on_color(self, event: ColorRequest) -> None:
        def build(device: Device) -> OutboundMessage:
            device.last_color = event.color
            return ColorMsg(device.config.adapters_device_id, event.color)

        self._send(self._devices.lookup(event.device_id), build)

    def _on_color_temperature(self, event: ColorTemperatureRequest) -> None:
        self._send(
            self._devices.lookup(event.device_id),
            lambda d: ColorTemperatureMsg(d.config.adapters_device_id, event.kelvin),
        )

    def _on_brightness(self, event: BrightnessRequest) -> None:
        self._send(
            self._devices.lookup(event.device_id),
            lambda d: BrightnessMsg(d.config.adapters_device_id, event.brightness, d.last_color),
        )

    def _on_playback(self, event: PlaybackRequest) -> None:
        self._send(
            self._devices.lookup(event.device_id),
            lambda d: PlaybackMsg(d.config.adapters_device_id, event.action),
        )

    def _on_blink(self, event: BlinkRequest) -> None:
        self._send(
            self._devices.lookup(event.device_id),
            lambda d: BlinkMsg(d.config.adapters_device_id),
        )

    def _on_infrared(self, event: InfraredRequest) -> None:
        self._send(
            self._devices.lookup(event.device_id),
            lambda d: InfraredMsg(d.config.adapters_device_id, event.command),
        )

    # =========================================================================
    # Sensors and triggers
    # =========================================================================

    def _mark_online(self, device_id: str) -> None:
        self._devices.lookup(device_id).mark_online(self._clock())

    def _on_raw_infrared(self, event: RawInfraredEvent) -> None:
        self._engine.publish(f"infrared:{event.remote}:{event.event}")

    def _on_presence(self, event: PersonPresenceChange) -> None:
        logger.info(f"Person {event.person_id} presence changed to {event.present}")

    def _on_contact(self, event: ContactReport) -> None:
        self._mark_online(event.device_id)
        self._engine.publish(f"contact:{event.device_id}:{format_bool(event.contact)}")

    def _on_water_leak(self, event: WaterLeakReport) -> None:
        self._mark_online(event.device_id)
        self._engine.publish(f"waterleak:{event.device_id}:{format_bool(event.water_detected)}")

    def _on_push_button(self, event: PushButtonReport) -> None:
        self._mark_online(event.device_id)
        self._engine.publish(f"pushbutton:{event.device_id}:{event.specifier}")

    def _on_link_quality(self, event: LinkQualityReport) -> None:
        self._mark_online(event.device_id)
        self._devices.update_runtime_field(event.device_id, "link_quality", event.link_quality)

    def _on_battery(self, event: BatteryReport) -> None:
        self._mark_online(event.device_id)
        self._devices.update_runtime_field(event.device_id, "battery_pct", event.battery_pct)
        self._devices.update_runtime_field(event.device_id, "battery_voltage", event.voltage)

    def _on_environment(self, event: EnvironmentReport) -> None:
        self._mark_online(event.device_id)
        self._devices.update_runtime_field(event.device_id, "last_environment", event)

    def _on_publish(self, event: PublishRequest) -> None:
        self._engine.publish(event.topic)
