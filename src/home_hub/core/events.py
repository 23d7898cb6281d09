"""
Event and message types.

Inbound events are produced by adapters (or by subscription actions) and
consumed by the Router. Outbound messages are produced by the Router and
handed to an adapter's send(). Both are immutable value objects.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


def format_bool(value: bool) -> str:
    """Render a boolean the way it appears in published topics."""
    return "true" if value else "false"


@dataclass(frozen=True)
class RGB:
    """A colour with 0-255 components."""

    red: int
    green: int
    blue: int

    def __post_init__(self) -> None:
        for component in (self.red, self.green, self.blue):
            if not 0 <= component <= 255:
                raise ValueError(f"colour component out of range: {component}")

    @classmethod
    def white(cls) -> "RGB":
        return cls(255, 255, 255)

    def to_dict(self) -> Dict[str, int]:
        return {"red": self.red, "green": self.green, "blue": self.blue}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RGB":
        return cls(int(data["red"]), int(data["green"]), int(data["blue"]))


class PowerKind(Enum):
    """Requested power transition."""

    ON = "on"
    OFF = "off"
    TOGGLE = "toggle"


# =============================================================================
# Inbound events
# =============================================================================


@dataclass(frozen=True)
class PowerRequest:
    """Turn a device or device group on, off, or toggle it."""

    device_id: str
    kind: PowerKind


@dataclass(frozen=True)
class ColorRequest:
    device_id: str
    color: RGB


@dataclass(frozen=True)
class ColorTemperatureRequest:
    device_id: str
    kelvin: int


@dataclass(frozen=True)
class BrightnessRequest:
    device_id: str
    brightness: int  # 0-100


@dataclass(frozen=True)
class PlaybackRequest:
    device_id: str
    action: str  # e.g. "play", "pause"


@dataclass(frozen=True)
class BlinkRequest:
    device_id: str


@dataclass(frozen=True)
class InfraredRequest:
    """Send an infrared command through the device's adapter."""

    device_id: str
    command: str


@dataclass(frozen=True)
class RawInfraredEvent:
    """A key press received from an infrared remote."""

    remote: str
    event: str


@dataclass(frozen=True)
class PersonPresenceChange:
    person_id: str
    present: bool


@dataclass(frozen=True)
class ContactReport:
    device_id: str
    contact: bool


@dataclass(frozen=True)
class WaterLeakReport:
    device_id: str
    water_detected: bool


@dataclass(frozen=True)
class PushButtonReport:
    device_id: str
    specifier: str  # e.g. "single", "double", "long"


@dataclass(frozen=True)
class LinkQualityReport:
    device_id: str
    link_quality: int


@dataclass(frozen=True)
class BatteryReport:
    device_id: str
    battery_pct: int
    voltage: float


@dataclass(frozen=True)
class EnvironmentReport:
    """Temperature / humidity / pressure reading from a sensor."""

    device_id: str
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None


@dataclass(frozen=True)
class PublishRequest:
    """Publish a named trigger to the subscription engine."""

    topic: str


InboundEvent = (
    PowerRequest
    | ColorRequest
    | ColorTemperatureRequest
    | BrightnessRequest
    | PlaybackRequest
    | BlinkRequest
    | InfraredRequest
    | RawInfraredEvent
    | PersonPresenceChange
    | ContactReport
    | WaterLeakReport
    | PushButtonReport
    | LinkQualityReport
    | BatteryReport
    | EnvironmentReport
    | PublishRequest
)


# =============================================================================
# Outbound messages
# =============================================================================
#
# Addressed with the adapter-local device id, never the hub's device id.


@dataclass(frozen=True)
class PowerMsg:
    adapters_device_id: str
    command: str
    on: bool


@dataclass(frozen=True)
class ColorMsg:
    adapters_device_id: str
    color: RGB


@dataclass(frozen=True)
class ColorTemperatureMsg:
    adapters_device_id: str
    kelvin: int


@dataclass(frozen=True)
class BrightnessMsg:
    adapters_device_id: str
    brightness: int
    last_color: RGB


@dataclass(frozen=True)
class PlaybackMsg:
    adapters_device_id: str
    action: str


@dataclass(frozen=True)
class BlinkMsg:
    adapters_device_id: str


@dataclass(frozen=True)
class InfraredMsg:
    adapters_device_id: str
    command: str


OutboundMessage = (
    PowerMsg
    | ColorMsg
    | ColorTemperatureMsg
    | BrightnessMsg
    | PlaybackMsg
    | BlinkMsg
    | InfraredMsg
)
