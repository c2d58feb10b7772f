"""Key-value storage backends for persisted credentials.

Values are always strings and an absent key is equivalent to an empty
credential. ``JsonFileStorage`` keeps the whole mapping in one JSON file and
rewrites it atomically on every change.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import STOREFRONT_STORAGE_WRITE_ATTEMPTS


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage; forgets everything when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._items)


class JsonFileStorage:
    """JSON file backed storage with atomic writes.

    The file is read once on construction; later reads are served from the
    in-memory copy. Each mutation rewrites the file through a temp file and
    ``os.replace`` so a crash never leaves a half-written file behind.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        write_attempts: int = STOREFRONT_STORAGE_WRITE_ATTEMPTS,
    ) -> None:
        if not isinstance(path, str | os.PathLike):
            raise TypeError("path must be str or os.PathLike")
        self.path = Path(path)
        self._write_attempts = max(1, write_attempts)
        self._items: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        try:
            with self.path.open(encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logging.error(f"💥 Credential file unreadable path={self.path}: {type(e).__name__}")
            return {}
        if not isinstance(data, dict):
            logging.warning(f"⚠️ Ignoring credential file with unexpected layout path={self.path}")
            return {}
        return {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str)}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._items.get(key) == value:
            return
        self._items[key] = value
        self._persist()

    def remove_item(self, key: str) -> None:
        if key not in self._items:
            return
        del self._items[key]
        self._persist()

    def _persist(self) -> None:
        retrying = Retrying(
            stop=stop_after_attempt(self._write_attempts),
            wait=wait_exponential(multiplier=0.05, max=1),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )
        retrying(self._atomic_write, dict(self._items))

    def _atomic_write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
                encoding="utf-8",
            ) as tmp:
                temp_path = tmp.name
                json.dump(data, tmp, indent=2, sort_keys=True)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.chmod(temp_path, 0o600)
            os.replace(temp_path, self.path)
            logging.debug(f"💾 Credentials saved keys={sorted(data)}")
        except OSError as e:
            if temp_path and os.path.exists(temp_path):
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass
            logging.warning(f"⚠️ Credential save failed: {type(e).__name__}")
            raise
