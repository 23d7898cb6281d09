"""
Core components of home-hub.

This package contains:
- errors: exception taxonomy
- events: inbound event variants and outbound messages
- fabric: the inbound event queue
- booleans: named boolean flags
- devices: device model and registry
- statefile: device state snapshot persistence
"""

from home_hub.core.booleans import BooleanStore
from home_hub.core.devices import Device, DeviceConfig, DeviceRegistry, DeviceStateSnapshot
from home_hub.core.fabric import InboundFabric
from home_hub.core.statefile import StateFile

__all__ = [
    "BooleanStore",
    "Device",
    "DeviceConfig",
    "DeviceRegistry",
    "DeviceStateSnapshot",
    "InboundFabric",
    "StateFile",
]
