"""Adapter that logs and records outbound messages instead of sending them."""

import threading
from typing import List

from home_hub.adapters.base import Adapter, AdapterConfig, register_adapter_kind
from home_hub.core.events import OutboundMessage
from home_hub.core.fabric import InboundFabric


@register_adapter_kind("recording")
class RecordingAdapter(Adapter):
    """
    Dry-run adapter.

    Useful for trying out a configuration without hardware, and in tests.
    """

    def __init__(self, config: AdapterConfig, fabric: InboundFabric) -> None:
        super().__init__(config, fabric)
        self._lock = threading.Lock()
        self._sent: List[OutboundMessage] = []

    def send(self, msg: OutboundMessage) -> None:
        self.log.info(f"send: {msg}")
        with self._lock:
            self._sent.append(msg)

    @property
    def sent(self) -> List[OutboundMessage]:
        """Copy of every message sent so far."""
        with self._lock:
            return list(self._sent)

    def clear(self) -> None:
        with self._lock:
            self._sent.clear()
