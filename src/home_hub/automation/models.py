"""
Data models for the subscription engine.

A subscription is a trigger event name, conditions that must all hold,
and actions executed in order.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from home_hub.core.errors import ConfigurationError


# =============================================================================
# Enums
# =============================================================================


class ConditionType(Enum):
    """Types of conditions that gate a subscription."""

    BOOLEAN_IS_TRUE = "boolean-is-true"
    BOOLEAN_IS_FALSE = "boolean-is-false"
    BOOLEAN_NOT_CHANGED_WITHIN = "boolean-not-changed-within"  # debounce


class ActionVerb(Enum):
    """Things a subscription can do."""

    POWER_ON = "powerOn"
    POWER_OFF = "powerOff"
    POWER_TOGGLE = "powerToggle"
    BLINK = "blink"
    IR = "ir"
    PLAYBACK = "playback"
    SET_BOOLEAN_TRUE = "setBooleanTrue"
    SET_BOOLEAN_FALSE = "setBooleanFalse"
    SLEEP = "sleep"


DEVICE_VERBS = frozenset(
    {
        ActionVerb.POWER_ON,
        ActionVerb.POWER_OFF,
        ActionVerb.POWER_TOGGLE,
        ActionVerb.BLINK,
        ActionVerb.IR,
        ActionVerb.PLAYBACK,
    }
)

BOOLEAN_VERBS = frozenset({ActionVerb.SET_BOOLEAN_TRUE, ActionVerb.SET_BOOLEAN_FALSE})


def boolean_change_event(name: str, value: bool) -> str:
    """Event name published when a boolean changes value."""
    return f"boolean:{name}:changes-to-{'true' if value else 'false'}"


def _duration_seconds(data: Dict[str, Any], owner: str) -> int:
    value = data.get("duration_seconds", 0)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{owner}: duration_seconds must be a number, got {value!r}") from e


# =============================================================================
# Conditions and actions
# =============================================================================


@dataclass(frozen=True)
class BooleanCondition:
    """Check a named boolean's value or how long it has been stable."""

    type: ConditionType
    boolean: str
    duration_seconds: int = 0  # used by boolean-not-changed-within

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.type.value, "boolean": self.boolean}
        if self.type is ConditionType.BOOLEAN_NOT_CHANGED_WITHIN:
            result["duration_seconds"] = self.duration_seconds
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BooleanCondition":
        try:
            condition_type = ConditionType(data["type"])
        except KeyError as e:
            raise ConfigurationError(f"condition is missing {e}: {data}") from e
        except ValueError as e:
            raise ConfigurationError(f"unknown condition type: {data['type']}") from e

        boolean = data.get("boolean")
        if not boolean:
            raise ConfigurationError(f"condition {condition_type.value} needs a boolean")

        duration = _duration_seconds(data, f"condition {condition_type.value}")
        if condition_type is ConditionType.BOOLEAN_NOT_CHANGED_WITHIN and duration <= 0:
            raise ConfigurationError(
                f"condition {condition_type.value} on {boolean} needs a positive duration_seconds"
            )

        return cls(type=condition_type, boolean=boolean, duration_seconds=duration)


@dataclass(frozen=True)
class ActionConfig:
    """A single action. Which fields are used depends on the verb."""

    verb: ActionVerb
    device: Optional[str] = None  # device verbs
    boolean: Optional[str] = None  # setBooleanTrue/setBooleanFalse
    ir_command: Optional[str] = None  # ir
    playback_action: Optional[str] = None  # playback
    duration_seconds: int = 0  # sleep

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"verb": self.verb.value}
        for key in ("device", "boolean", "ir_command", "playback_action"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.verb is ActionVerb.SLEEP:
            result["duration_seconds"] = self.duration_seconds
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActionConfig":
        try:
            verb = ActionVerb(data["verb"])
        except KeyError as e:
            raise ConfigurationError(f"action is missing {e}: {data}") from e
        except ValueError as e:
            raise ConfigurationError(f"unknown action verb: {data['verb']}") from e

        action = cls(
            verb=verb,
            device=data.get("device"),
            boolean=data.get("boolean"),
            ir_command=data.get("ir_command"),
            playback_action=data.get("playback_action"),
            duration_seconds=_duration_seconds(data, f"action {verb.value}"),
        )

        if verb in DEVICE_VERBS and not action.device:
            raise ConfigurationError(f"action {verb.value} needs a device")
        if verb in BOOLEAN_VERBS and not action.boolean:
            raise ConfigurationError(f"action {verb.value} needs a boolean")
        if verb is ActionVerb.IR and not action.ir_command:
            raise ConfigurationError(f"action ir on {action.device} needs an ir_command")
        if verb is ActionVerb.PLAYBACK and not action.playback_action:
            raise ConfigurationError(f"action playback on {action.device} needs a playback_action")
        if verb is ActionVerb.SLEEP and action.duration_seconds < 0:
            raise ConfigurationError("action sleep needs a non-negative duration_seconds")

        return action


# =============================================================================
# Subscription
# =============================================================================


@dataclass
class Subscription:
    """
    A named trigger with ordered conditions and ordered actions.

    Attributes:
        event: Trigger event name (e.g. "contact:frontdoor:true")
        conditions: All must hold; evaluation stops at the first failure
        actions: Executed in order; a failing action does not stop the rest
    """

    event: str
    conditions: List[BooleanCondition] = field(default_factory=list)
    actions: List[ActionConfig] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.event,
            "conditions": [c.to_dict() for c in self.conditions],
            "actions": [a.to_dict() for a in self.actions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Subscription":
        event = data.get("event")
        if not event:
            raise ConfigurationError(f"subscription is missing an event: {data}")

        return cls(
            event=event,
            conditions=[BooleanCondition.from_dict(c) for c in data.get("conditions") or []],
            actions=[ActionConfig.from_dict(a) for a in data.get("actions") or []],
        )


# =============================================================================
# Execution Records
# =============================================================================


@dataclass
class PublishRecord:
    """Record of one publish() that matched a subscription (for debugging)."""

    event: str
    conditions_met: bool
    actions_executed: int
    errors: List[str]
    depth: int
    timestamp: datetime
