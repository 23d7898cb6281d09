"""Tests for subscription models and parsing."""

import pytest

from home_hub.automation import (
    ActionConfig,
    ActionVerb,
    BooleanCondition,
    ConditionType,
    Subscription,
    boolean_change_event,
)
from home_hub.core.errors import ConfigurationError


class TestSubscriptionParsing:
    """Test Subscription.from_dict / to_dict."""

    def test_full_subscription(self):
        data = {
            "event": "pushbutton:remote:single",
            "conditions": [
                {"type": "boolean-is-false", "boolean": "environmentHasLight"},
                {
                    "type": "boolean-not-changed-within",
                    "boolean": "anybodyHome",
                    "duration_seconds": 120,
                },
            ],
            "actions": [
                {"verb": "powerToggle", "device": "lamp"},
                {"verb": "sleep", "duration_seconds": 2},
                {"verb": "ir", "device": "tv", "ir_command": "KEY_MUTE"},
                {"verb": "setBooleanTrue", "boolean": "anybodyHome"},
            ],
        }

        sub = Subscription.from_dict(data)

        assert sub.event == "pushbutton:remote:single"
        assert sub.conditions[0] == BooleanCondition(
            ConditionType.BOOLEAN_IS_FALSE, "environmentHasLight"
        )
        assert sub.conditions[1].duration_seconds == 120
        assert [a.verb for a in sub.actions] == [
            ActionVerb.POWER_TOGGLE,
            ActionVerb.SLEEP,
            ActionVerb.IR,
            ActionVerb.SET_BOOLEAN_TRUE,
        ]
        assert Subscription.from_dict(sub.to_dict()) == sub

    def test_empty_lists(self):
        sub = Subscription.from_dict({"event": "x"})
        assert sub.conditions == []
        assert sub.actions == []

    def test_missing_event(self):
        with pytest.raises(ConfigurationError, match="event"):
            Subscription.from_dict({"actions": []})


class TestValidation:
    """Test that malformed conditions and actions are configuration errors."""

    def test_unknown_condition_type(self):
        with pytest.raises(ConfigurationError, match="unknown condition type"):
            BooleanCondition.from_dict({"type": "boolean-is-maybe", "boolean": "x"})

    def test_condition_needs_boolean(self):
        with pytest.raises(ConfigurationError, match="needs a boolean"):
            BooleanCondition.from_dict({"type": "boolean-is-true"})

    def test_debounce_needs_duration(self):
        with pytest.raises(ConfigurationError, match="duration_seconds"):
            BooleanCondition.from_dict({"type": "boolean-not-changed-within", "boolean": "x"})

    def test_unknown_verb(self):
        with pytest.raises(ConfigurationError, match="unknown action verb: notify"):
            ActionConfig.from_dict({"verb": "notify"})

    @pytest.mark.parametrize("verb", ["powerOn", "powerOff", "powerToggle", "blink"])
    def test_device_verbs_need_device(self, verb):
        with pytest.raises(ConfigurationError, match="needs a device"):
            ActionConfig.from_dict({"verb": verb})

    def test_boolean_verbs_need_boolean(self):
        with pytest.raises(ConfigurationError, match="needs a boolean"):
            ActionConfig.from_dict({"verb": "setBooleanFalse"})

    def test_ir_needs_command(self):
        with pytest.raises(ConfigurationError, match="ir_command"):
            ActionConfig.from_dict({"verb": "ir", "device": "tv"})

    def test_playback_needs_action(self):
        with pytest.raises(ConfigurationError, match="playback_action"):
            ActionConfig.from_dict({"verb": "playback", "device": "tv"})


def test_boolean_change_event():
    assert boolean_change_event("anybodyHome", True) == "boolean:anybodyHome:changes-to-true"
    assert boolean_change_event("anybodyHome", False) == "boolean:anybodyHome:changes-to-false"


class TestNumericFields:
    """Test non-numeric durations are configuration errors."""

    def test_condition_duration(self):
        with pytest.raises(ConfigurationError, match="duration_seconds must be a number"):
            BooleanCondition.from_dict(
                {"type": "boolean-not-changed-within", "boolean": "x", "duration_seconds": "an hour"}
            )

    def test_action_duration(self):
        with pytest.raises(ConfigurationError, match="duration_seconds must be a number"):
            ActionConfig.from_dict({"verb": "sleep", "duration_seconds": [1]})
