#!/usr/bin/env python3
"""
Quick example demonstrating home-hub basic usage.

Uses recording adapters, so nothing is sent anywhere; every outbound
message is printed instead.

Run with: PYTHONPATH=src python3 example.py
"""

from datetime import datetime, UTC

from home_hub.app import Application
from home_hub.config import HubConfig
from home_hub.core.events import (
    RGB,
    BrightnessRequest,
    ColorRequest,
    ContactReport,
    PowerKind,
    PowerRequest,
    PushButtonReport,
)
from home_hub.core.statefile import StateFile

print("=" * 60)
print("home-hub Example")
print("=" * 60)

# 1. Configuration
print("\n1. Building configuration...")
config = HubConfig.from_dict(
    {
        "booleans": ["movieMode"],
        "adapters": [
            {"id": "zigbee", "type": "recording"},
            {"id": "lirc", "type": "recording"},
        ],
        "devices": [
            {"id": "hallwayLight", "adapter": "zigbee", "adapters_device_id": "0x01",
             "name": "Hallway light", "type": "light", "category": "LIGHT",
             "power_on_cmd": "ON", "power_off_cmd": "OFF"},
            {"id": "livingRoomLight", "adapter": "zigbee", "adapters_device_id": "0x02",
             "name": "Living room light", "type": "light", "category": "LIGHT",
             "power_on_cmd": "ON", "power_off_cmd": "OFF"},
            {"id": "amplifier", "adapter": "lirc", "adapters_device_id": "onkyo",
             "name": "Amplifier", "power_on_cmd": "KEY_POWER", "power_off_cmd": "KEY_POWER2"},
            {"id": "frontdoor", "adapter": "zigbee", "adapters_device_id": "0x10"},
            {"id": "remote", "adapter": "zigbee", "adapters_device_id": "0x11"},
        ],
        "device_groups": [
            {"id": "downstairs", "name": "Downstairs", "devices": ["hallwayLight", "livingRoomLight"]},
        ],
        "subscriptions": [
            {
                "event": "contact:frontdoor:true",
                "conditions": [
                    {"type": "boolean-is-true", "boolean": "anybodyHome"},
                    {"type": "boolean-is-false", "boolean": "environmentHasLight"},
                ],
                "actions": [{"verb": "powerOn", "device": "hallwayLight"}],
            },
            {
                "event": "pushbutton:remote:double",
                "actions": [
                    {"verb": "powerToggle", "device": "downstairs"},
                    {"verb": "setBooleanTrue", "boolean": "movieMode"},
                ],
            },
            {
                "event": "boolean:movieMode:changes-to-true",
                "actions": [{"verb": "powerOn", "device": "amplifier"}],
            },
        ],
    }
)
print(f"   ✓ {len(config.devices)} devices, {len(config.subscriptions)} subscriptions")

# 2. Application (fixed evening clock, no daylight)
print("\n2. Creating application...")
evening = datetime(2025, 1, 15, 20, 0, 0, tzinfo=UTC)
app = Application(
    config,
    clock=lambda: evening,
    light_probe=lambda ts, location: False,
    state_file=StateFile("example-state.json"),
)
print(f"   ✓ Booleans: {app.booleans.snapshot()}")


def run(*events):
    for event in events:
        app.fabric.receive(event)
    app.router.process_pending()
    for adapter_id in ("zigbee", "lirc"):
        adapter = app.adapters.lookup(adapter_id)
        for msg in adapter.sent:
            print(f"   → {adapter_id}: {msg}")
        adapter.clear()


# 3. Front door opens while somebody is home
print("\n3. Front door opens...")
run(ContactReport("frontdoor", True))

# 4. Double press on the remote toggles the group and starts movie mode
print("\n4. Remote double press...")
run(PushButtonReport("remote", "double"))

# 5. Colour and brightness
print("\n5. Dim the living room to orange...")
run(ColorRequest("livingRoomLight", RGB(255, 120, 0)), BrightnessRequest("livingRoomLight", 30))

# 6. Everything off
print("\n6. Downstairs off...")
run(PowerRequest("downstairs", PowerKind.OFF))

for device in app.devices.all_devices():
    print(f"   ✓ {device.device_id}: on={device.probably_turned_on}")

print("\n" + "=" * 60)
print("Example complete!")
print("=" * 60)
