"""Tests for the adapter base, kind registry and built-in adapters."""

import pytest

from home_hub.adapters import (
    Adapter,
    AdapterConfig,
    AdapterRegistry,
    DeviceGroupAdapter,
    RecordingAdapter,
    adapter_kinds,
    create_adapter,
)
from home_hub.core.errors import AdapterError, ConfigurationError, UnknownAdapter
from home_hub.core.events import BlinkMsg, ContactReport, PowerMsg
from home_hub.core.fabric import InboundFabric


class FailingStopAdapter(Adapter):
    def __init__(self, config, fabric):
        super().__init__(config, fabric)
        self.started = False

    def start(self):
        self.started = True

    def stop(self):
        raise OSError("already closed")

    def send(self, msg):
        pass


@pytest.fixture
def fabric():
    return InboundFabric()


class TestAdapterConfig:
    def test_from_dict(self):
        config = AdapterConfig.from_dict({"id": "zb", "type": "zigbee", "port": "/dev/ttyACM0"})

        assert config.id == "zb"
        assert config.kind == "zigbee"
        assert config.params == {"port": "/dev/ttyACM0"}

    def test_missing_type(self):
        with pytest.raises(ConfigurationError, match="type"):
            AdapterConfig.from_dict({"id": "zb"})


class TestAdapterKinds:
    """Test the kind registry used to build adapters from configuration."""

    def test_builtin_kinds(self):
        assert {"devicegroup", "recording"} <= set(adapter_kinds())

    def test_create(self, fabric):
        adapter = create_adapter(AdapterConfig("rec", "recording"), fabric)
        assert isinstance(adapter, RecordingAdapter)
        assert adapter.kind == "recording"

    def test_unknown_kind(self, fabric):
        with pytest.raises(ConfigurationError, match="unknown adapter kind: hue"):
            create_adapter(AdapterConfig("lights", "hue"), fabric)


class TestAdapterRegistry:
    """Test the dispatch table."""

    def test_lookup(self, fabric):
        registry = AdapterRegistry()
        adapter = RecordingAdapter(AdapterConfig("rec", "recording"), fabric)
        registry.add(adapter)

        assert registry.lookup("rec") is adapter
        assert "rec" in registry

    def test_unknown_adapter(self):
        with pytest.raises(UnknownAdapter):
            AdapterRegistry().lookup("nope")

    def test_duplicate(self, fabric):
        registry = AdapterRegistry()
        registry.add(RecordingAdapter(AdapterConfig("rec", "recording"), fabric))
        with pytest.raises(ConfigurationError, match="duplicate"):
            registry.add(RecordingAdapter(AdapterConfig("rec", "recording"), fabric))

    def test_stop_errors_are_logged(self, fabric, caplog):
        """Test one adapter failing to stop does not keep the others running."""
        registry = AdapterRegistry()
        failing = FailingStopAdapter(AdapterConfig("bad", "custom"), fabric)
        registry.add(failing)
        registry.add(RecordingAdapter(AdapterConfig("rec", "recording"), fabric))

        registry.start_all()
        registry.stop_all()

        assert failing.started
        assert "Error stopping adapter bad" in caplog.text


class TestRecordingAdapter:
    def test_records_messages(self, fabric):
        adapter = RecordingAdapter(AdapterConfig("rec", "recording"), fabric)
        adapter.send(PowerMsg("1", "on", True))
        adapter.send(BlinkMsg("1"))

        assert adapter.sent == [PowerMsg("1", "on", True), BlinkMsg("1")]

        adapter.clear()
        assert adapter.sent == []

    def test_receive_feeds_fabric(self, fabric):
        adapter = RecordingAdapter(AdapterConfig("rec", "recording"), fabric)
        adapter.receive(ContactReport("door", True))
        assert fabric.drain() == [ContactReport("door", True)]


class TestDeviceGroupAdapter:
    def test_members(self, fabric):
        adapter = create_adapter(
            AdapterConfig("allGroup", "devicegroup", {"devices": ["a", "b"]}), fabric
        )
        assert isinstance(adapter, DeviceGroupAdapter)
        assert adapter.members == ["a", "b"]

    def test_needs_members(self, fabric):
        with pytest.raises(ConfigurationError, match="no members"):
            DeviceGroupAdapter(AdapterConfig("emptyGroup", "devicegroup"), fabric)

    def test_send_is_rejected(self, fabric):
        adapter = DeviceGroupAdapter(
            AdapterConfig("allGroup", "devicegroup", {"devices": ["a"]}), fabric
        )
        with pytest.raises(AdapterError):
            adapter.send(BlinkMsg("x"))
