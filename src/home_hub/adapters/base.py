"""
Adapter interface and dispatch table.

An adapter is the boundary to one device ecosystem. The hub talks to it
through a single operation, send(), and the adapter talks back by
pushing inbound events onto the fabric. Everything else (connections,
processes, polling) is internal to the adapter.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Type, TypeVar

from home_hub.core.errors import ConfigurationError, UnknownAdapter
from home_hub.core.events import InboundEvent, OutboundMessage
from home_hub.core.fabric import InboundFabric

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdapterConfig:
    """
    Adapter configuration slice.

    Attributes:
        id: Unique adapter identifier
        kind: Adapter kind, selects the implementation
        params: Kind-specific parameters
    """

    id: str
    kind: str
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdapterConfig":
        try:
            adapter_id = data["id"]
            kind = data["type"]
        except KeyError as e:
            raise ConfigurationError(f"adapter entry is missing {e}: {data}") from e

        params = {k: v for k, v in data.items() if k not in ("id", "type")}
        return cls(id=adapter_id, kind=kind, params=params)


class Adapter(ABC):
    """
    Base class for adapters.

    Subclasses implement send() and may override start()/stop() to manage
    background work. They must never touch the device registry or the
    boolean store directly.
    """

    kind: str = ""

    def __init__(self, config: AdapterConfig, fabric: InboundFabric) -> None:
        self.config = config
        self._fabric = fabric
        self.log = logging.getLogger(f"{__name__}.{config.id}")

    @property
    def id(self) -> str:
        return self.config.id

    def receive(self, event: InboundEvent) -> None:
        """Push an inbound event to the hub."""
        self._fabric.receive(event)

    def start(self) -> None:
        """Start background work. Called once at startup."""
        pass

    def stop(self) -> None:
        """Stop background work. Called once at shutdown."""
        pass

    @abstractmethod
    def send(self, msg: OutboundMessage) -> None:
        """
        Accept one outbound message.

        Args:
            msg: The message, addressed by adapter-local device id

        Raises:
            AdapterError: If the message cannot be handled
        """
        pass


# =============================================================================
# Adapter kinds
# =============================================================================

_ADAPTER_KINDS: Dict[str, Type[Adapter]] = {}

A = TypeVar("A", bound=Type[Adapter])


def register_adapter_kind(kind: str) -> Callable[[A], A]:
    """Class decorator registering an adapter implementation for a kind."""

    def decorator(cls: A) -> A:
        if kind in _ADAPTER_KINDS and _ADAPTER_KINDS[kind] is not cls:
            raise ValueError(f"adapter kind already registered: {kind}")
        cls.kind = kind
        _ADAPTER_KINDS[kind] = cls
        return cls

    return decorator


def adapter_kinds() -> List[str]:
    return sorted(_ADAPTER_KINDS)


def create_adapter(config: AdapterConfig, fabric: InboundFabric) -> Adapter:
    """
    Instantiate the adapter implementation for config.kind.

    Raises:
        ConfigurationError: If no implementation is registered for the kind
    """
    cls = _ADAPTER_KINDS.get(config.kind)
    if cls is None:
        raise ConfigurationError(f"unknown adapter kind: {config.kind} (adapter {config.id})")
    return cls(config, fabric)


# =============================================================================
# Dispatch table
# =============================================================================


class AdapterRegistry:
    """Maps adapter ids to adapter instances."""

    def __init__(self) -> None:
        self._adapters: Dict[str, Adapter] = {}

    def add(self, adapter: Adapter) -> None:
        if adapter.id in self._adapters:
            raise ConfigurationError(f"duplicate adapter id {adapter.id}")
        self._adapters[adapter.id] = adapter

    def lookup(self, adapter_id: str) -> Adapter:
        """
        Get an adapter by ID.

        Raises:
            UnknownAdapter: If no adapter has this ID
        """
        adapter = self._adapters.get(adapter_id)
        if adapter is None:
            raise UnknownAdapter(adapter_id)
        return adapter

    def __contains__(self, adapter_id: object) -> bool:
        return adapter_id in self._adapters

    def all_adapters(self) -> List[Adapter]:
        return list(self._adapters.values())

    def start_all(self) -> None:
        for adapter in self._adapters.values():
            logger.info(f"Starting adapter {adapter.id} ({adapter.kind})")
            adapter.start()

    def stop_all(self) -> None:
        for adapter in self._adapters.values():
            try:
                adapter.stop()
            except Exception as e:
                logger.error(f"Error stopping adapter {adapter.id}: {e}", exc_info=True)
