"""
State snapshot persistence.

The snapshot is a JSON document keyed by device id. Writes go to a
temporary file in the same directory which then replaces the old file, so
a crash mid-write never leaves a partial snapshot behind.
"""

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Dict, Union

from home_hub.core.devices import DeviceStateSnapshot
from home_hub.core.errors import PersistenceError

logger = logging.getLogger(__name__)

STATEFILE_VERSION = 1
DEFAULT_FILE_MODE = 0o644


class StateFile:
    """Reads and writes device state snapshots."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def read(self) -> Dict[str, DeviceStateSnapshot]:
        """
        Load the snapshot.

        Returns:
            Device id -> snapshot. Empty if the file does not exist.

        Raises:
            PersistenceError: If the file exists but cannot be parsed
        """
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.info(f"No state snapshot at {self.path}, starting fresh")
            return {}
        except (OSError, ValueError) as e:
            raise PersistenceError(f"reading {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceError(f"malformed snapshot in {self.path}: not a mapping")
        if data.get("version") != STATEFILE_VERSION:
            raise PersistenceError(f"unsupported state file version: {data.get('version')}")

        devices = data.get("devices", {})
        if not isinstance(devices, dict):
            raise PersistenceError(f"malformed snapshot in {self.path}: devices is not a mapping")

        snapshots: Dict[str, DeviceStateSnapshot] = {}
        try:
            for device_id, entry in devices.items():
                if not isinstance(entry, dict):
                    raise PersistenceError(
                        f"malformed snapshot in {self.path}: entry for {device_id} is not a mapping"
                    )
                snapshots[device_id] = DeviceStateSnapshot.from_dict(entry)
            return snapshots
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"malformed snapshot in {self.path}: {e}") from e

    def write(self, snapshots: Dict[str, DeviceStateSnapshot]) -> None:
        """
        Atomically replace the snapshot file.

        Raises:
            PersistenceError: If the file cannot be written
        """
        document = {
            "version": STATEFILE_VERSION,
            "devices": {
                device_id: snapshot.to_dict() for device_id, snapshot in sorted(snapshots.items())
            },
        }

        directory = self.path.parent
        try:
            try:
                mode = stat.S_IMODE(os.stat(self.path).st_mode)
            except FileNotFoundError:
                mode = DEFAULT_FILE_MODE

            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                # mkstemp creates 0600; keep the existing file's mode
                os.chmod(tmp_path, mode)
                os.replace(tmp_path, self.path)
            except BaseException:
                os.unlink(tmp_path)
                raise
        except OSError as e:
            raise PersistenceError(f"writing {self.path}: {e}") from e

        logger.debug(f"Wrote state snapshot for {len(snapshots)} devices to {self.path}")
