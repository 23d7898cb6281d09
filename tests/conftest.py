"""Shared fixtures for home-hub tests."""

from datetime import datetime, timedelta, UTC

import pytest

from home_hub.app import Application
from home_hub.config import HubConfig
from home_hub.core.statefile import StateFile


class FakeClock:
    """Controllable clock for tests."""

    def __init__(self, start: datetime = datetime(2025, 1, 15, 20, 0, 0, tzinfo=UTC)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class SleepRecorder:
    """Stand-in for time.sleep that only records durations."""

    def __init__(self) -> None:
        self.calls = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeper():
    return SleepRecorder()


@pytest.fixture
def config_data():
    """A small but complete configuration document."""
    return {
        "booleans": ["kitchenBusy"],
        "persons": [{"id": "joonas"}],
        "adapters": [
            {"id": "rec", "type": "recording"},
            {"id": "ir", "type": "recording"},
        ],
        "devices": [
            {
                "id": "hallwayLight",
                "adapter": "rec",
                "adapters_device_id": "hall",
                "name": "Hallway light",
                "power_on_cmd": "hall-on",
                "power_off_cmd": "hall-off",
                "type": "light",
                "category": "LIGHT",
            },
            {
                "id": "kitchenLight",
                "adapter": "rec",
                "adapters_device_id": "kitchen",
                "name": "Kitchen light",
                "power_on_cmd": "kitchen-on",
                "power_off_cmd": "kitchen-off",
                "type": "light",
                "category": "LIGHT",
            },
            {
                "id": "tv",
                "adapter": "ir",
                "adapters_device_id": "samsung",
                "name": "TV",
                "power_on_cmd": "KEY_POWER",
                "power_off_cmd": "KEY_POWER",
                "type": "tv",
                "category": "TV",
            },
            {"id": "frontdoor", "adapter": "rec", "name": "Front door sensor"},
        ],
        "device_groups": [
            {"id": "allLights", "name": "All lights", "devices": ["hallwayLight", "kitchenLight"]},
        ],
        "subscriptions": [
            {
                "event": "contact:frontdoor:true",
                "conditions": [{"type": "boolean-is-true", "boolean": "anybodyHome"}],
                "actions": [{"verb": "powerOn", "device": "hallwayLight"}],
            },
        ],
    }


@pytest.fixture
def make_app(tmp_path, clock, sleeper):
    """Factory building an Application around a config document."""

    def factory(data, light=False, state_path=None):
        config = HubConfig.from_dict(data)
        return Application(
            config,
            clock=clock,
            light_probe=lambda ts, location: light,
            sleep=sleeper,
            state_file=StateFile(state_path or tmp_path / "state.json"),
        )

    return factory


@pytest.fixture
def app(make_app, config_data):
    return make_app(config_data)
