"""Tests for the Router: event classification, power handling and groups."""

from dataclasses import dataclass
from typing import Union

import pytest

import home_hub.router as router_module
from home_hub.core.events import (
    RGB,
    BatteryReport,
    BlinkMsg,
    BlinkRequest,
    BrightnessMsg,
    BrightnessRequest,
    ColorMsg,
    ColorRequest,
    ContactReport,
    EnvironmentReport,
    InfraredMsg,
    InfraredRequest,
    LinkQualityReport,
    PersonPresenceChange,
    PowerKind,
    PowerMsg,
    PowerRequest,
    PublishRequest,
    PushButtonReport,
    RawInfraredEvent,
    WaterLeakReport,
)
from home_hub.router import Router


@pytest.fixture
def rec(app):
    return app.adapters.lookup("rec")


@pytest.fixture
def published(app, monkeypatch):
    """Record every event name the Router publishes."""
    events = []
    original = app.engine.publish

    def spy(event, _depth=0):
        events.append(event)
        return original(event, _depth)

    monkeypatch.setattr(app.engine, "publish", spy)
    return events


def dispatch(app, *events):
    for event in events:
        app.fabric.receive(event)
    return app.router.process_pending()


class TestHandlerTable:
    """Tests for the per-type handler table."""

    def test_every_inbound_event_has_a_handler(self, app):
        # Constructing the Router would raise otherwise
        assert app.router is not None

    def test_missing_handler_fails_at_construction(self, app, monkeypatch):
        @dataclass(frozen=True)
        class StrayEvent:
            device_id: str

        monkeypatch.setattr(
            router_module, "InboundEvent", Union[PowerRequest, StrayEvent]
        )

        with pytest.raises(TypeError, match="StrayEvent"):
            Router(app.devices, app.adapters, app.fabric, app.engine)

    def test_unsupported_object_is_dropped(self, app):
        app.router.handle("not an event")

    def test_errors_do_not_escape(self, app, rec):
        """Test an event for an unknown device is dropped and later events still run."""
        handled = dispatch(
            app,
            PowerRequest("ghost", PowerKind.ON),
            PowerRequest("hallwayLight", PowerKind.ON),
        )

        assert handled == 2
        assert rec.sent == [PowerMsg("hall", "hall-on", True)]


class TestPower:
    """Tests for power requests on single devices."""

    def test_power_on(self, app, rec, published):
        dispatch(app, PowerRequest("hallwayLight", PowerKind.ON))

        assert rec.sent == [PowerMsg("hall", "hall-on", True)]
        assert app.devices.lookup("hallwayLight").probably_turned_on is True
        assert published == ["device:hallwayLight:power:on"]

    def test_power_off(self, app, rec, published):
        dispatch(app, PowerRequest("kitchenLight", PowerKind.OFF))

        assert rec.sent == [PowerMsg("kitchen", "kitchen-off", False)]
        assert app.devices.lookup("kitchenLight").probably_turned_on is False
        assert published == ["device:kitchenLight:power:off"]

    def test_toggle_twice(self, app, rec, published):
        """Test two toggles issue on then off and return to the start state."""
        dispatch(
            app,
            PowerRequest("hallwayLight", PowerKind.TOGGLE),
            PowerRequest("hallwayLight", PowerKind.TOGGLE),
        )

        assert rec.sent == [
            PowerMsg("hall", "hall-on", True),
            PowerMsg("hall", "hall-off", False),
        ]
        assert app.devices.lookup("hallwayLight").probably_turned_on is False
        assert published == ["device:hallwayLight:power:on", "device:hallwayLight:power:off"]

    def test_state_is_optimistic(self, app, rec):
        """Test power-on is re-sent even if the device is believed on."""
        dispatch(
            app,
            PowerRequest("hallwayLight", PowerKind.ON),
            PowerRequest("hallwayLight", PowerKind.ON),
        )
        assert len(rec.sent) == 2

    def test_routes_to_device_adapter(self, app, rec):
        dispatch(app, PowerRequest("tv", PowerKind.ON))

        assert rec.sent == []
        assert app.adapters.lookup("ir").sent == [PowerMsg("samsung", "KEY_POWER", True)]


class TestDeviceGroups:
    """Tests for requests addressed to a device group."""

    def test_power_fans_out(self, app, rec, published):
        dispatch(app, PowerRequest("allLights", PowerKind.ON))

        assert rec.sent == [
            PowerMsg("hall", "hall-on", True),
            PowerMsg("kitchen", "kitchen-on", True),
        ]
        for device_id in ("allLights", "hallwayLight", "kitchenLight"):
            assert app.devices.lookup(device_id).probably_turned_on is True
        assert published == [
            "device:hallwayLight:power:on",
            "device:kitchenLight:power:on",
            "device:allLights:power:on",
        ]

    def test_toggle_forwarded_to_members(self, app, rec, published):
        """Test each member toggles from its own optimistic flag."""
        app.devices.lookup("hallwayLight").probably_turned_on = True

        dispatch(app, PowerRequest("allLights", PowerKind.TOGGLE))

        assert rec.sent == [
            PowerMsg("hall", "hall-off", False),
            PowerMsg("kitchen", "kitchen-on", True),
        ]
        assert app.devices.lookup("hallwayLight").probably_turned_on is False
        assert app.devices.lookup("kitchenLight").probably_turned_on is True
        assert published == [
            "device:hallwayLight:power:off",
            "device:kitchenLight:power:on",
            "device:allLights:power:on",
        ]

    def test_toggle_twice_restores_members(self, app, rec):
        app.devices.lookup("hallwayLight").probably_turned_on = True

        dispatch(
            app,
            PowerRequest("allLights", PowerKind.TOGGLE),
            PowerRequest("allLights", PowerKind.TOGGLE),
        )

        assert len(rec.sent) == 4
        assert app.devices.lookup("hallwayLight").probably_turned_on is True
        assert app.devices.lookup("kitchenLight").probably_turned_on is False

    def test_color_fans_out(self, app, rec):
        red = RGB(255, 0, 0)
        dispatch(app, ColorRequest("allLights", red))

        assert rec.sent == [ColorMsg("hall", red), ColorMsg("kitchen", red)]
        for device_id in ("allLights", "hallwayLight", "kitchenLight"):
            assert app.devices.lookup(device_id).last_color == red

    def test_blink_fans_out(self, app, rec):
        dispatch(app, BlinkRequest("allLights"))
        assert rec.sent == [BlinkMsg("hall"), BlinkMsg("kitchen")]


class TestOtherCommands:
    """Tests for colour, brightness, blink and infrared."""

    def test_brightness_carries_last_color(self, app, rec):
        blue = RGB(0, 0, 255)
        dispatch(
            app,
            ColorRequest("hallwayLight", blue),
            BrightnessRequest("hallwayLight", 40),
        )

        assert rec.sent == [ColorMsg("hall", blue), BrightnessMsg("hall", 40, blue)]

    def test_brightness_defaults_to_white(self, app, rec):
        dispatch(app, BrightnessRequest("kitchenLight", 10))
        assert rec.sent == [BrightnessMsg("kitchen", 10, RGB.white())]

    def test_infrared(self, app):
        dispatch(app, InfraredRequest("tv", "KEY_VOLUMEUP"))
        assert app.adapters.lookup("ir").sent == [InfraredMsg("samsung", "KEY_VOLUMEUP")]


class TestTriggers:
    """Tests for sensor reports and the event names they publish."""

    @pytest.mark.parametrize(
        "event, name",
        [
            (ContactReport("frontdoor", False), "contact:frontdoor:false"),
            (WaterLeakReport("frontdoor", True), "waterleak:frontdoor:true"),
            (PushButtonReport("frontdoor", "double"), "pushbutton:frontdoor:double"),
            (RawInfraredEvent("livingroom", "KEY_UP"), "infrared:livingroom:KEY_UP"),
            (PublishRequest("custom:thing"), "custom:thing"),
        ],
    )
    def test_published_names(self, app, published, event, name):
        dispatch(app, event)
        assert published == [name]

    def test_sensor_marks_online(self, app, clock):
        dispatch(app, ContactReport("frontdoor", True))
        assert app.devices.lookup("frontdoor").last_online == clock()

    def test_telemetry_is_recorded(self, app):
        env = EnvironmentReport("frontdoor", temperature=21.5, humidity=40.0)
        dispatch(
            app,
            LinkQualityReport("frontdoor", 87),
            BatteryReport("frontdoor", 64, 2.9),
            env,
        )

        device = app.devices.lookup("frontdoor")
        assert device.link_quality == 87
        assert device.battery_pct == 64
        assert device.battery_voltage == 2.9
        assert device.last_environment == env

    def test_report_from_unknown_device_is_dropped(self, app, published):
        dispatch(app, ContactReport("ghost", True))
        assert published == []

    def test_presence_publishes_nothing(self, app, published):
        dispatch(app, PersonPresenceChange("joonas", False))
        assert published == []


class TestFrontDoorScenario:
    """End-to-end: contact report -> subscription -> power request -> adapter."""

    def test_lights_on_when_somebody_home(self, app, rec):
        dispatch(app, ContactReport("frontdoor", True))

        assert rec.sent == [PowerMsg("hall", "hall-on", True)]
        assert app.devices.lookup("hallwayLight").probably_turned_on is True

    def test_nothing_when_nobody_home(self, app, rec):
        app.booleans.set("anybodyHome", False)

        dispatch(app, ContactReport("frontdoor", True))

        assert rec.sent == []
