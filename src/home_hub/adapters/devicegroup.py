"""Synthetic adapter backing a device group."""

from typing import List

from home_hub.adapters.base import Adapter, AdapterConfig, register_adapter_kind
from home_hub.core.errors import AdapterError, ConfigurationError
from home_hub.core.events import OutboundMessage
from home_hub.core.fabric import InboundFabric

DEVICEGROUP_KIND = "devicegroup"


@register_adapter_kind(DEVICEGROUP_KIND)
class DeviceGroupAdapter(Adapter):
    """
    Adapter generated for each configured device group.

    Holds the member device ids. The Router expands requests addressed to
    a group into per-member requests, so nothing is ever sent here.
    """

    def __init__(self, config: AdapterConfig, fabric: InboundFabric) -> None:
        super().__init__(config, fabric)
        members = config.params.get("devices") or []
        if not members:
            raise ConfigurationError(f"device group adapter {config.id} has no members")
        self.members: List[str] = list(members)

    def send(self, msg: OutboundMessage) -> None:
        raise AdapterError(
            f"device group {self.id} cannot send {type(msg).__name__}; members are addressed individually"
        )
