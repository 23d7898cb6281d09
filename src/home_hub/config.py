"""
Configuration loading.

The configuration is one YAML document (JSON works too, being a subset)
read once at startup. Device groups are expanded here into a synthetic
"devicegroup" adapter plus a device that inherits its type and category
from the group's first member.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import yaml

from home_hub.adapters.base import AdapterConfig
from home_hub.adapters.devicegroup import DEVICEGROUP_KIND
from home_hub.automation.engine import DEFAULT_MAX_CASCADE_DEPTH
from home_hub.automation.models import Subscription
from home_hub.core.devices import DeviceConfig
from home_hub.core.errors import ConfigurationError
from home_hub.suntimes import TAMPERE, Location

logger = logging.getLogger(__name__)

ANYBODY_HOME = "anybodyHome"
ENVIRONMENT_HAS_LIGHT = "environmentHasLight"
BUILTIN_BOOLEANS = (ANYBODY_HOME, ENVIRONMENT_HAS_LIGHT)

DEFAULT_STATE_FILE = "state-snapshot.json"
DEFAULT_TICK_INTERVAL = 60.0


def _number(data: Dict[str, Any], key: str, default: Any, convert: Callable[[Any], Any]) -> Any:
    value = data.get(key, default)
    try:
        return convert(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{key} must be a number, got {value!r}") from e


@dataclass(frozen=True)
class DeviceGroupConfig:
    """A virtual device fanning commands out to its members."""

    device_id: str
    name: str
    devices: List[str]

    @property
    def adapter_id(self) -> str:
        return f"{self.device_id}Group"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeviceGroupConfig":
        device_id = data.get("id")
        devices = data.get("devices") or []
        if not device_id:
            raise ConfigurationError(f"device group is missing an id: {data}")
        if not devices:
            raise ConfigurationError(f"device group {device_id} has no devices")
        return cls(device_id=device_id, name=data.get("name", device_id), devices=list(devices))


@dataclass(frozen=True)
class PersonConfig:
    id: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PersonConfig":
        if not data.get("id"):
            raise ConfigurationError(f"person is missing an id: {data}")
        return cls(id=data["id"])


@dataclass
class HubConfig:
    """
    Complete hub configuration.

    Attributes:
        adapters: Adapter configs, including generated device group adapters
        devices: Device configs, including generated device group devices
        device_groups: The groups as declared
        persons: Known persons (presence tracking)
        booleans: Every boolean name the store will accept
        subscriptions: Subscriptions, at most one per event
        location: Where the sun is computed for
        state_file: Path of the device state snapshot
        tick_interval_seconds: Period of the environment/snapshot timer
        max_cascade_depth: Limit for nested boolean-change publishes
    """

    adapters: List[AdapterConfig] = field(default_factory=list)
    devices: List[DeviceConfig] = field(default_factory=list)
    device_groups: List[DeviceGroupConfig] = field(default_factory=list)
    persons: List[PersonConfig] = field(default_factory=list)
    booleans: List[str] = field(default_factory=lambda: list(BUILTIN_BOOLEANS))
    subscriptions: List[Subscription] = field(default_factory=list)
    location: Location = TAMPERE
    state_file: str = DEFAULT_STATE_FILE
    tick_interval_seconds: float = DEFAULT_TICK_INTERVAL
    max_cascade_depth: int = DEFAULT_MAX_CASCADE_DEPTH

    def find_device(self, device_id: str) -> Optional[DeviceConfig]:
        for device in self.devices:
            if device.device_id == device_id:
                return device
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HubConfig":
        """
        Build and validate a configuration from a parsed document.

        Raises:
            ConfigurationError: On any structural or referential problem
        """
        if not isinstance(data, dict):
            raise ConfigurationError("configuration must be a mapping")

        adapters = [AdapterConfig.from_dict(a) for a in data.get("adapters") or []]
        devices = [DeviceConfig.from_dict(d) for d in data.get("devices") or []]
        groups = [DeviceGroupConfig.from_dict(g) for g in data.get("device_groups") or []]
        persons = [PersonConfig.from_dict(p) for p in data.get("persons") or []]

        booleans = list(BUILTIN_BOOLEANS)
        for name in data.get("booleans") or []:
            if name not in booleans:
                booleans.append(name)

        subscriptions = [Subscription.from_dict(s) for s in data.get("subscriptions") or []]

        location = TAMPERE
        if data.get("location"):
            loc = data["location"]
            try:
                location = Location(
                    latitude=float(loc["latitude"]), longitude=float(loc["longitude"])
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigurationError(f"invalid location: {loc}") from e

        config = cls(
            adapters=adapters,
            devices=devices,
            device_groups=groups,
            persons=persons,
            booleans=booleans,
            subscriptions=subscriptions,
            location=location,
            state_file=data.get("state_file", DEFAULT_STATE_FILE),
            tick_interval_seconds=_number(data, "tick_interval_seconds", DEFAULT_TICK_INTERVAL, float),
            max_cascade_depth=_number(data, "max_cascade_depth", DEFAULT_MAX_CASCADE_DEPTH, int),
        )
        config._expand_device_groups()
        config._validate()
        return config

    def _expand_device_groups(self) -> None:
        """Turn each device group into a synthetic adapter + device pair."""
        for group in self.device_groups:
            for member in group.devices:
                if self.find_device(member) is None:
                    raise ConfigurationError(
                        f"device group {group.device_id}: device not found: {member}"
                    )

            # Capabilities come from the first member rather than an intersection
            first = self.find_device(group.devices[0])

            self.adapters.append(
                AdapterConfig(
                    id=group.adapter_id,
                    kind=DEVICEGROUP_KIND,
                    params={"devices": list(group.devices)},
                )
            )
            self.devices.append(
                DeviceConfig(
                    device_id=group.device_id,
                    adapter_id=group.adapter_id,
                    name=group.name,
                    description="Device group",
                    type=first.type,
                    category=first.category,
                )
            )

    def _validate(self) -> None:
        adapter_ids = set()
        for adapter in self.adapters:
            if adapter.id in adapter_ids:
                raise ConfigurationError(f"duplicate adapter id {adapter.id}")
            adapter_ids.add(adapter.id)

        device_ids = set()
        for device in self.devices:
            if device.device_id in device_ids:
                raise ConfigurationError(f"duplicate device id {device.device_id}")
            if device.adapter_id not in adapter_ids:
                raise ConfigurationError(
                    f"device {device.device_id} references unknown adapter {device.adapter_id}"
                )
            device_ids.add(device.device_id)

        events = set()
        for subscription in self.subscriptions:
            if subscription.event in events:
                raise ConfigurationError(
                    f"two subscriptions for event not supported; event: {subscription.event}"
                )
            events.add(subscription.event)

        if self.tick_interval_seconds <= 0:
            raise ConfigurationError("tick_interval_seconds must be positive")


def load_config(path: Union[str, Path]) -> HubConfig:
    """
    Load configuration from a YAML or JSON file.

    Raises:
        ConfigurationError: If the file cannot be read or is invalid
    """
    logger.info(f"Loading config from {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"cannot parse {path}: {e}") from e

    return HubConfig.from_dict(data or {})
