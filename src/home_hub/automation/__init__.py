"""
Subscription engine for home-hub.

A subscription maps one trigger event name to conditions and actions:

    event: "contact:frontdoor:true"
    conditions: [boolean-is-true anybodyHome]
    actions: [powerOn hallwayLight]

Features:
- Boolean conditions, including a debounce (boolean-not-changed-within)
- Power/blink actions re-entering the inbound fabric
- Direct ir/playback commands to the device's adapter
- Boolean actions that cascade "boolean:<name>:changes-to-<value>" events
- Bounded cascade depth
- Publish history for debugging
"""

from .models import (
    ConditionType,
    ActionVerb,
    BooleanCondition,
    ActionConfig,
    Subscription,
    PublishRecord,
    boolean_change_event,
)
from .evaluators import ConditionEvaluator
from .engine import SubscriptionEngine, PublishResult, DEFAULT_MAX_CASCADE_DEPTH

__all__ = [
    "SubscriptionEngine",
    "PublishResult",
    "DEFAULT_MAX_CASCADE_DEPTH",
    "ConditionEvaluator",
    "ConditionType",
    "ActionVerb",
    "BooleanCondition",
    "ActionConfig",
    "Subscription",
    "PublishRecord",
    "boolean_change_event",
]
