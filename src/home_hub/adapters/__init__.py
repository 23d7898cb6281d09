"""
Adapters for home-hub.

Concrete device ecosystems live outside the core; this package holds the
adapter contract, the dispatch table, and the built-in adapter kinds:

- devicegroup: synthetic adapter generated for each device group
- recording: logs and records outbound messages (dry runs, tests)
"""

from .base import (
    Adapter,
    AdapterConfig,
    AdapterRegistry,
    adapter_kinds,
    create_adapter,
    register_adapter_kind,
)
from .devicegroup import DEVICEGROUP_KIND, DeviceGroupAdapter
from .recording import RecordingAdapter

__all__ = [
    "Adapter",
    "AdapterConfig",
    "AdapterRegistry",
    "adapter_kinds",
    "create_adapter",
    "register_adapter_kind",
    "DEVICEGROUP_KIND",
    "DeviceGroupAdapter",
    "RecordingAdapter",
]
