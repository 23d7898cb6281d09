"""Named boolean flags with last-change timestamps."""

import logging
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Callable, Dict, Iterable, List, Optional

from home_hub.core.errors import UnknownBoolean

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


@dataclass
class BooleanEntry:
    value: bool = False
    last_change: Optional[datetime] = None  # None = never changed


class BooleanStore:
    """
    Key/value store of named booleans.

    The set of valid names is fixed at construction. Reading or writing any
    other name raises UnknownBoolean; names are never created implicitly.
    """

    def __init__(self, names: Iterable[str], clock: Clock = utc_now) -> None:
        """
        Initialize the store.

        Args:
            names: The complete set of boolean names
            clock: Source of "now" for change timestamps
        """
        self._clock = clock
        self._entries: Dict[str, BooleanEntry] = {name: BooleanEntry() for name in names}

    def _entry(self, name: str) -> BooleanEntry:
        entry = self._entries.get(name)
        if entry is None:
            raise UnknownBoolean(name)
        return entry

    def names(self) -> List[str]:
        return list(self._entries)

    def get(self, name: str) -> bool:
        """
        Get the current value of a boolean.

        Raises:
            UnknownBoolean: If the name is not defined
        """
        return self._entry(name).value

    def set(self, name: str, value: bool) -> bool:
        """
        Set a boolean.

        The change timestamp only moves when the value actually changes.

        Args:
            name: Boolean name
            value: New value

        Returns:
            True if the stored value changed

        Raises:
            UnknownBoolean: If the name is not defined
        """
        entry = self._entry(name)
        if entry.value == value:
            return False

        entry.value = value
        entry.last_change = self._clock()
        logger.debug(f"Boolean {name} changed to {value}")
        return True

    def last_change_time(self, name: str) -> Optional[datetime]:
        """
        Get when a boolean last changed value.

        Returns:
            Timestamp of the last change, or None if it never changed

        Raises:
            UnknownBoolean: If the name is not defined
        """
        return self._entry(name).last_change

    def snapshot(self) -> Dict[str, bool]:
        """Current values of all booleans."""
        return {name: entry.value for name, entry in self._entries.items()}
