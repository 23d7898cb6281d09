"""
Device model and registry.

A Device pairs static configuration with optimistic runtime state: the
last commanded power and colour, never hardware-confirmed state. Only
those two fields survive a restart; everything else is session-only.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from home_hub.core.errors import ConfigurationError, UnknownDevice
from home_hub.core.events import RGB, EnvironmentReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceConfig:
    """
    Static device configuration.

    Attributes:
        device_id: Unique identifier within the hub
        adapter_id: Adapter that controls this device
        adapters_device_id: The device's identifier inside its adapter
        name: Human-readable name
        description: Free-form description
        type: Device type, implies a capability set (e.g. "light", "tv")
        power_on_cmd: Adapter command string for power on
        power_off_cmd: Adapter command string for power off
        category: Category tag (e.g. "LIGHT", "SMARTPLUG")
    """

    device_id: str
    adapter_id: str
    name: str
    adapters_device_id: str = ""
    description: str = ""
    type: str = ""
    power_on_cmd: str = ""
    power_off_cmd: str = ""
    category: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeviceConfig":
        """Deserialize from a configuration entry."""
        try:
            device_id = data["id"]
            adapter_id = data["adapter"]
        except KeyError as e:
            raise ConfigurationError(f"device entry is missing {e}: {data}") from e

        return cls(
            device_id=device_id,
            adapter_id=adapter_id,
            name=data.get("name", device_id),
            adapters_device_id=str(data.get("adapters_device_id", "")),
            description=data.get("description", ""),
            type=data.get("type", ""),
            power_on_cmd=data.get("power_on_cmd", ""),
            power_off_cmd=data.get("power_off_cmd", ""),
            category=data.get("category", ""),
        )


@dataclass(frozen=True)
class DeviceStateSnapshot:
    """The persisted part of a device's runtime state."""

    probably_turned_on: bool = False
    last_color: RGB = field(default_factory=RGB.white)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "probably_turned_on": self.probably_turned_on,
            "last_color": self.last_color.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeviceStateSnapshot":
        return cls(
            probably_turned_on=bool(data.get("probably_turned_on", False)),
            last_color=RGB.from_dict(data["last_color"]) if "last_color" in data else RGB.white(),
        )


@dataclass
class Device:
    """A configured device and its optimistic runtime state."""

    config: DeviceConfig
    probably_turned_on: bool = False
    last_color: RGB = field(default_factory=RGB.white)

    # Session-only
    link_quality: Optional[int] = None
    battery_pct: Optional[int] = None
    battery_voltage: Optional[float] = None
    last_environment: Optional[EnvironmentReport] = None
    last_online: Optional[datetime] = None

    @property
    def device_id(self) -> str:
        return self.config.device_id

    @classmethod
    def from_snapshot(cls, config: DeviceConfig, snapshot: DeviceStateSnapshot) -> "Device":
        return cls(
            config=config,
            probably_turned_on=snapshot.probably_turned_on,
            last_color=snapshot.last_color,
        )

    def snapshot_state(self) -> DeviceStateSnapshot:
        return DeviceStateSnapshot(
            probably_turned_on=self.probably_turned_on,
            last_color=self.last_color,
        )

    def mark_online(self, now: datetime) -> None:
        self.last_online = now


# Fields that update_runtime_field() may touch
RUNTIME_FIELDS = frozenset(
    {
        "probably_turned_on",
        "last_color",
        "link_quality",
        "battery_pct",
        "battery_voltage",
        "last_environment",
        "last_online",
    }
)


class DeviceRegistry:
    """
    Owns every Device for the lifetime of the process.

    Devices are added once at startup and never removed. All mutation
    happens on the Router thread.
    """

    def __init__(self) -> None:
        self._devices: Dict[str, Device] = {}

    def add(self, config: DeviceConfig, snapshot: Optional[DeviceStateSnapshot] = None) -> Device:
        """
        Create a device from configuration and an optional restored snapshot.

        Raises:
            ConfigurationError: If the device id is already registered
        """
        if config.device_id in self._devices:
            raise ConfigurationError(f"duplicate device id {config.device_id}")

        device = Device.from_snapshot(config, snapshot or DeviceStateSnapshot())
        self._devices[config.device_id] = device
        logger.debug(f"Registered device: {config.device_id} ({config.name})")
        return device

    def lookup(self, device_id: str) -> Device:
        """
        Get a device by ID.

        Raises:
            UnknownDevice: If no device has this ID
        """
        device = self._devices.get(device_id)
        if device is None:
            raise UnknownDevice(device_id)
        return device

    def get(self, device_id: str) -> Optional[Device]:
        return self._devices.get(device_id)

    def all_devices(self) -> List[Device]:
        return list(self._devices.values())

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._devices

    def update_runtime_field(self, device_id: str, field_name: str, value: Any) -> None:
        """
        Set one runtime field on a device.

        Raises:
            UnknownDevice: If no device has this ID
            ValueError: If field_name is not a runtime field
        """
        if field_name not in RUNTIME_FIELDS:
            raise ValueError(f"not a runtime field: {field_name}")
        setattr(self.lookup(device_id), field_name, value)

    def snapshot_all(self) -> Dict[str, DeviceStateSnapshot]:
        """Persisted state of every device, keyed by device id."""
        return {device_id: device.snapshot_state() for device_id, device in self._devices.items()}

    def restore(self, snapshots: Dict[str, DeviceStateSnapshot]) -> None:
        """
        Apply previously persisted state.

        Snapshots for devices that are no longer configured are ignored.
        """
        for device_id, snapshot in snapshots.items():
            device = self._devices.get(device_id)
            if device is None:
                logger.debug(f"Ignoring snapshot for unconfigured device {device_id}")
                continue
            device.probably_turned_on = snapshot.probably_turned_on
            device.last_color = snapshot.last_color
