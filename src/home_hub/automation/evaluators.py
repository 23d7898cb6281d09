"""
Condition evaluators for the subscription engine.

Each condition reads the boolean store. Unknown booleans raise
UnknownBoolean; the engine treats that as a failed publish.
"""

import logging
from datetime import timedelta
from typing import Iterable

from home_hub.core.booleans import BooleanStore, Clock, utc_now

from .models import BooleanCondition, ConditionType

logger = logging.getLogger(__name__)


class ConditionEvaluator:
    """Evaluates subscription conditions against the boolean store."""

    def __init__(self, booleans: BooleanStore, clock: Clock = utc_now) -> None:
        self._booleans = booleans
        self._clock = clock

    def evaluate(self, condition: BooleanCondition) -> bool:
        """
        Evaluate a condition.

        Args:
            condition: The condition to evaluate

        Returns:
            True if condition is met

        Raises:
            UnknownBoolean: If the condition names an undefined boolean
        """
        if condition.type is ConditionType.BOOLEAN_IS_TRUE:
            return self._check_value(condition, True)
        elif condition.type is ConditionType.BOOLEAN_IS_FALSE:
            return self._check_value(condition, False)
        elif condition.type is ConditionType.BOOLEAN_NOT_CHANGED_WITHIN:
            return self._check_not_changed_within(condition)
        else:
            logger.warning(f"Unknown condition type: {condition.type}")
            return False

    def evaluate_all(self, conditions: Iterable[BooleanCondition]) -> bool:
        """
        Evaluate all conditions (AND logic), stopping at the first failure.

        Returns:
            True if ALL conditions are met
        """
        for condition in conditions:
            if not self.evaluate(condition):
                return False
        return True

    # =========================================================================
    # Condition Implementations
    # =========================================================================

    def _check_value(self, condition: BooleanCondition, expected: bool) -> bool:
        actual = self._booleans.get(condition.boolean)
        if actual != expected:
            logger.debug(
                f"bool {condition.boolean} expected {expected} but got {actual} - bailing out"
            )
            return False
        return True

    def _check_not_changed_within(self, condition: BooleanCondition) -> bool:
        last_change = self._booleans.last_change_time(condition.boolean)
        if last_change is None:
            return True

        if self._clock() - last_change < timedelta(seconds=condition.duration_seconds):
            logger.debug(
                f"boolean {condition.boolean} changed within "
                f"{condition.duration_seconds} seconds - bailing out"
            )
            return False
        return True
