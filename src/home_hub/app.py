"""
Application wiring and lifecycle.

Builds the runtime objects from a HubConfig, restores the device state
snapshot, runs the Router on its own thread, and writes a final snapshot
on shutdown.
"""

import logging
import threading
import time
from datetime import datetime
from typing import Callable, Optional

from home_hub.adapters.base import AdapterRegistry, create_adapter
from home_hub.automation.engine import SubscriptionEngine
from home_hub.automation.models import boolean_change_event
from home_hub.config import ANYBODY_HOME, ENVIRONMENT_HAS_LIGHT, HubConfig
from home_hub.core.booleans import BooleanStore, Clock, utc_now
from home_hub.core.devices import DeviceRegistry
from home_hub.core.errors import ConfigurationError, PersistenceError
from home_hub.core.fabric import InboundFabric
from home_hub.core.statefile import StateFile
from home_hub.router import Router
from home_hub.suntimes import Location, is_between_golden_hours

logger = logging.getLogger(__name__)

LightProbe = Callable[[datetime, Location], bool]


class Application:
    """
    A configured hub.

    Owns the fabric, the registries, the boolean store, the subscription
    engine and the Router. Nothing here is process-global, so several
    applications can coexist (tests do this).
    """

    def __init__(
        self,
        config: HubConfig,
        clock: Clock = utc_now,
        light_probe: LightProbe = is_between_golden_hours,
        sleep: Callable[[float], None] = time.sleep,
        state_file: Optional[StateFile] = None,
    ) -> None:
        """
        Build every component from configuration.

        Args:
            config: Validated hub configuration
            clock: Source of "now"
            light_probe: Decides whether the environment has daylight
            sleep: Used by the sleep action
            state_file: Snapshot storage (defaults to config.state_file)

        Raises:
            ConfigurationError: If an adapter cannot be created
        """
        self.config = config
        self._clock = clock
        self._light_probe = light_probe
        self.state_file = state_file or StateFile(config.state_file)

        self.fabric = InboundFabric()
        self.booleans = BooleanStore(config.booleans, clock=clock)

        self.adapters = AdapterRegistry()
        for adapter_config in config.adapters:
            self.adapters.add(create_adapter(adapter_config, self.fabric))

        self.devices = DeviceRegistry()
        for device_config in config.devices:
            if device_config.adapter_id not in self.adapters:
                raise ConfigurationError(
                    f"device {device_config.device_id} references unknown adapter "
                    f"{device_config.adapter_id}"
                )
            self.devices.add(device_config)
        self._restore_state_snapshot()

        self.engine = SubscriptionEngine(
            self.booleans,
            self.devices,
            self.adapters,
            self.fabric,
            clock=clock,
            sleep=sleep,
            max_cascade_depth=config.max_cascade_depth,
        )
        for subscription in config.subscriptions:
            self.engine.add_subscription(subscription)

        self.router = Router(self.devices, self.adapters, self.fabric, self.engine, clock=clock)

        self.booleans.set(ANYBODY_HOME, True)
        self.update_environment_light_status(broadcast_changes=False)

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

        logger.info(
            f"Configured {len(self.adapters.all_adapters())} adapters, "
            f"{len(self.devices)} devices, {len(self.engine.subscriptions())} subscriptions"
        )

    # =========================================================================
    # Periodic work
    # =========================================================================

    def update_environment_light_status(self, broadcast_changes: bool = True) -> None:
        """Recompute environmentHasLight; publish only if it changed."""
        has_light = self._light_probe(self._clock(), self.config.location)
        changed = self.booleans.set(ENVIRONMENT_HAS_LIGHT, has_light)
        if changed and broadcast_changes:
            logger.info(f"{ENVIRONMENT_HAS_LIGHT} changed to {has_light}")
            self.engine.publish(boolean_change_event(ENVIRONMENT_HAS_LIGHT, has_light))

    def save_state_snapshot(self) -> bool:
        """
        Write the device state snapshot.

        Returns:
            True on success. Failures are logged; the next tick retries.
        """
        try:
            self.state_file.write(self.devices.snapshot_all())
        except PersistenceError as e:
            logger.error(f"failed saving state: {e}")
            return False
        return True

    def tick(self) -> None:
        self.update_environment_light_status()
        self.save_state_snapshot()

    def _restore_state_snapshot(self) -> None:
        try:
            snapshots = self.state_file.read()
        except PersistenceError as e:
            logger.error(f"failed loading state, using defaults: {e}")
            return
        self.devices.restore(snapshots)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Start adapters and the Router thread."""
        if self._thread is not None:
            raise RuntimeError("application already started")

        self.adapters.start_all()
        self._thread = threading.Thread(target=self._router_main, name="router", daemon=True)
        self._thread.start()
        logger.info("home-hub started")

    def _router_main(self) -> None:
        try:
            self.router.run(self._stop, self.config.tick_interval_seconds, self.tick)
        finally:
            if not self.save_state_snapshot():
                logger.error("failed saving state on shutting down")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal shutdown, wait for the Router to finish, then stop adapters."""
        self._stop.set()
        self.fabric.wakeup()
        if self._thread is not None:
            self._thread.join(timeout)
        self.adapters.stop_all()
        logger.info("all components stopped")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
