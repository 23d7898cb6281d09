"""
home-hub: a small home automation hub.

Device adapters feed events into a single event loop which keeps an
optimistic model of every device, a set of named booleans, and runs
subscriptions ("when X happens, if these booleans hold, do Y").
"""

__version__ = "0.3.0"

from home_hub.core.booleans import BooleanStore
from home_hub.core.devices import DeviceRegistry
from home_hub.core.fabric import InboundFabric
from home_hub.automation.engine import SubscriptionEngine
from home_hub.router import Router
from home_hub.config import HubConfig, load_config
from home_hub.app import Application

__all__ = [
    "BooleanStore",
    "DeviceRegistry",
    "InboundFabric",
    "SubscriptionEngine",
    "Router",
    "HubConfig",
    "load_config",
    "Application",
]
