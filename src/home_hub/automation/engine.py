"""
Subscription engine - core rule processing logic.

Handles trigger lookup, condition evaluation, and action execution.
Power and blink actions re-enter the inbound fabric; ir and playback
actions go straight to the device's adapter; boolean actions cascade
into nested publish() calls when the value changes.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List, Optional

from home_hub.adapters.base import AdapterRegistry
from home_hub.core.booleans import BooleanStore, Clock, utc_now
from home_hub.core.devices import DeviceRegistry
from home_hub.core.errors import (
    ActionExecutionError,
    CascadeLimitExceeded,
    ConfigurationError,
    HubError,
)
from home_hub.core.events import (
    BlinkRequest,
    InfraredMsg,
    PlaybackMsg,
    PowerKind,
    PowerRequest,
)
from home_hub.core.fabric import InboundFabric

from .evaluators import ConditionEvaluator
from .models import ActionConfig, ActionVerb, PublishRecord, Subscription, boolean_change_event

logger = logging.getLogger(__name__)

DEFAULT_MAX_CASCADE_DEPTH = 16

_POWER_VERBS = {
    ActionVerb.POWER_ON: PowerKind.ON,
    ActionVerb.POWER_OFF: PowerKind.OFF,
    ActionVerb.POWER_TOGGLE: PowerKind.TOGGLE,
}


@dataclass
class PublishResult:
    """Result of publishing one event (including nested cascades)."""

    matched: bool = False
    conditions_met: bool = False
    actions_executed: int = 0
    errors: List[str] = field(default_factory=list)


class SubscriptionEngine:
    """
    Evaluates subscriptions for published event names.

    Responsibilities:
    - Hold at most one subscription per trigger event
    - Evaluate conditions (short-circuit AND)
    - Execute actions in order, isolating failures per action
    - Bound boolean-change cascades to max_cascade_depth
    - Track publish history

    Runs on the Router thread only.
    """

    HISTORY_SIZE = 100  # Number of publish records to keep

    def __init__(
        self,
        booleans: BooleanStore,
        devices: DeviceRegistry,
        adapters: AdapterRegistry,
        fabric: InboundFabric,
        clock: Clock = utc_now,
        sleep: Callable[[float], None] = time.sleep,
        max_cascade_depth: int = DEFAULT_MAX_CASCADE_DEPTH,
    ) -> None:
        self._booleans = booleans
        self._devices = devices
        self._adapters = adapters
        self._fabric = fabric
        self._clock = clock
        self._sleep = sleep
        self._max_cascade_depth = max_cascade_depth
        self._evaluator = ConditionEvaluator(booleans, clock)

        self._subscriptions: Dict[str, Subscription] = {}
        self._history: Deque[PublishRecord] = deque(maxlen=self.HISTORY_SIZE)

    # =========================================================================
    # Configuration
    # =========================================================================

    def add_subscription(self, subscription: Subscription) -> None:
        """
        Register a subscription.

        Raises:
            ConfigurationError: If a subscription already exists for the event
        """
        if subscription.event in self._subscriptions:
            raise ConfigurationError(
                f"two subscriptions for event not supported; event: {subscription.event}"
            )
        self._subscriptions[subscription.event] = subscription
        logger.debug(
            f"Subscribed {subscription.event}: {len(subscription.conditions)} conditions, "
            f"{len(subscription.actions)} actions"
        )

    def get_subscription(self, event: str) -> Optional[Subscription]:
        return self._subscriptions.get(event)

    def subscriptions(self) -> List[Subscription]:
        return list(self._subscriptions.values())

    # =========================================================================
    # Publishing
    # =========================================================================

    def publish(self, event: str, _depth: int = 0) -> PublishResult:
        """
        Publish an event name.

        Unmapped events are ignored. Condition errors (unknown boolean)
        abort the publish and are logged, never raised.

        Args:
            event: Event name (e.g. "contact:frontdoor:true")

        Returns:
            What happened, including nested cascades

        Raises:
            CascadeLimitExceeded: If called deeper than max_cascade_depth
                through boolean-change cascades
        """
        if _depth > self._max_cascade_depth:
            raise CascadeLimitExceeded(event, _depth)

        result = PublishResult()

        subscription = self._subscriptions.get(event)
        if subscription is None:
            logger.debug(f"event {event} ignored")
            return result

        logger.debug(f"event {event}")
        result.matched = True

        try:
            conditions_met = self._evaluator.evaluate_all(subscription.conditions)
        except HubError as e:
            logger.error(f"error evaluating condition for {event}: {e}")
            result.errors.append(str(e))
            self._record(event, result, _depth)
            return result

        if not conditions_met:
            self._record(event, result, _depth)
            return result

        result.conditions_met = True

        for action in subscription.actions:
            try:
                self._run_action(action, _depth, result)
            except ActionExecutionError as e:
                logger.error(f"failure running action for {event}: {e}")
                result.errors.append(str(e))
                continue
            result.actions_executed += 1

        self._record(event, result, _depth)
        return result

    # =========================================================================
    # Action Execution
    # =========================================================================

    def _run_action(self, action: ActionConfig, depth: int, result: PublishResult) -> None:
        """
        Execute one action.

        Raises:
            ActionExecutionError: Wrapping whatever went wrong
        """
        try:
            self._execute(action, depth, result)
        except ActionExecutionError:
            raise
        except Exception as e:
            target = action.device or action.boolean or ""
            raise ActionExecutionError(action.verb.value, f"{target}: {e}") from e

    def _execute(self, action: ActionConfig, depth: int, result: PublishResult) -> None:
        verb = action.verb

        if verb in _POWER_VERBS:
            self._devices.lookup(action.device)
            self._fabric.receive(PowerRequest(action.device, _POWER_VERBS[verb]))

        elif verb is ActionVerb.BLINK:
            self._devices.lookup(action.device)
            self._fabric.receive(BlinkRequest(action.device))

        elif verb is ActionVerb.IR:
            device = self._devices.lookup(action.device)
            adapter = self._adapters.lookup(device.config.adapter_id)
            adapter.send(InfraredMsg(device.config.adapters_device_id, action.ir_command))

        elif verb is ActionVerb.PLAYBACK:
            device = self._devices.lookup(action.device)
            adapter = self._adapters.lookup(device.config.adapter_id)
            adapter.send(PlaybackMsg(device.config.adapters_device_id, action.playback_action))

        elif verb in (ActionVerb.SET_BOOLEAN_TRUE, ActionVerb.SET_BOOLEAN_FALSE):
            value = verb is ActionVerb.SET_BOOLEAN_TRUE
            if self._booleans.set(action.boolean, value):
                nested = self.publish(boolean_change_event(action.boolean, value), depth + 1)
                result.actions_executed += nested.actions_executed
                result.errors.extend(nested.errors)

        elif verb is ActionVerb.SLEEP:
            logger.debug(f"Sleeping {action.duration_seconds}s")
            self._sleep(action.duration_seconds)

        else:
            raise ActionExecutionError(verb.value, "unknown verb")

    # =========================================================================
    # History
    # =========================================================================

    def _record(self, event: str, result: PublishResult, depth: int) -> None:
        self._history.append(
            PublishRecord(
                event=event,
                conditions_met=result.conditions_met,
                actions_executed=result.actions_executed,
                errors=list(result.errors),
                depth=depth,
                timestamp=self._clock(),
            )
        )

    def get_history(self, event: Optional[str] = None, limit: int = 20) -> List[PublishRecord]:
        """
        Get publish history.

        Args:
            event: Filter by event name (optional)
            limit: Maximum entries to return

        Returns:
            List of PublishRecord entries (newest first)
        """
        records = []
        for record in reversed(self._history):
            if event and record.event != event:
                continue
            records.append(record)
            if len(records) >= limit:
                break
        return records
