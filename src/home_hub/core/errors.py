"""
Exception taxonomy for home-hub.

Startup errors are fatal; everything raised while processing an event is
caught by the Router, logged, and the event is dropped.
"""


class HubError(Exception):
    """Base class for all home-hub errors."""


class ConfigurationError(HubError):
    """Invalid configuration. Aborts startup."""


class UnknownDevice(HubError):
    """A device id that is not in the device registry."""

    def __init__(self, device_id: str) -> None:
        super().__init__(f"unknown device: {device_id}")
        self.device_id = device_id


class UnknownBoolean(HubError):
    """A boolean name outside the fixed set of the boolean store."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown boolean: {name}")
        self.name = name


class UnknownAdapter(HubError):
    """An adapter id that is not in the adapter registry."""

    def __init__(self, adapter_id: str) -> None:
        super().__init__(f"unknown adapter: {adapter_id}")
        self.adapter_id = adapter_id


class AdapterError(HubError):
    """An adapter refused or failed to accept an outbound message."""


class ActionExecutionError(HubError):
    """A single subscription action failed."""

    def __init__(self, verb: str, message: str) -> None:
        super().__init__(f"action {verb} failed: {message}")
        self.verb = verb


class CascadeLimitExceeded(HubError):
    """Nested publish calls went deeper than the configured limit."""

    def __init__(self, event: str, depth: int) -> None:
        super().__init__(f"cascade depth {depth} exceeded while publishing {event}")
        self.event = event
        self.depth = depth


class PersistenceError(HubError):
    """The state snapshot could not be read or written."""
