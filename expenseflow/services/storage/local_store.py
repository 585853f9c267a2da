"""
Local Key-Value Stores

DESIGN DECISION: The app only needs what browser local storage offers:
string keys, string values, a byte quota, and a way to notice that
another "tab" changed a key. Two backends provide that:

- InMemoryKeyValueStore: a dict. Instances can share one dict, which is
  how tests model two tabs over the same storage.
- JsonFileKeyValueStore: one <key>.json file per key in a directory.
  Several processes can point at the same directory.

TRADEOFFS:
- No locking between writers (concurrent writers are out of scope)
- Writes replace the whole value; there is no partial update
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from expenseflow.logging_config import get_logger
from expenseflow.services.storage.interface import (
    KeyValueStore,
    StorageError,
    StorageReadError,
)


logger = get_logger(__name__)


class InMemoryKeyValueStore(KeyValueStore):
    """
    Dict-backed store.

    Pass the same `data` dict to several instances to let them see each
    other's writes through poll_changes().
    """

    def __init__(
        self,
        data: Optional[dict[str, str]] = None,
        quota_bytes: Optional[int] = None,
    ):
        super().__init__(quota_bytes=quota_bytes)
        self._data = data if data is not None else {}
        self._take_snapshot()

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._check_quota(key, value)
        self._data[key] = value
        self._remember(key, value)

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)
        self._remember(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Directory-backed store with one file per key.

    Values are written to a temporary file and moved into place, so a
    reader never sees a half-written value.
    """

    SUFFIX = ".json"

    def __init__(
        self,
        data_dir: Union[str, Path],
        quota_bytes: Optional[int] = None,
    ):
        super().__init__(quota_bytes=quota_bytes)
        self._data_dir = Path(data_dir)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self._data_dir}: {e}")
        self._take_snapshot()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key:
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}{self.SUFFIX}"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read {path}: {e}")

    def set_item(self, key: str, value: str) -> None:
        self._check_quota(key, value)
        path = self._path(key)
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir, prefix=f".{key}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except OSError as e:
            logger.error("file_write_failed", path=str(path), error=str(e))
            raise StorageError(f"Failed to write {path}: {e}")
        self._remember(key, value)

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove {path}: {e}")
        self._remember(key, None)

    def keys(self) -> list[str]:
        return sorted(
            path.name[: -len(self.SUFFIX)]
            for path in self._data_dir.glob(f"*{self.SUFFIX}")
            if not path.name.startswith(".")
        )
