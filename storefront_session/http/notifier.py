"""Transient user notifications (toast equivalents)."""

from __future__ import annotations

import logging
from typing import Protocol


class Notifier(Protocol):
    def success(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Default notifier: routes notifications to the log."""

    def success(self, message: str) -> None:
        logging.info(f"✅ {message}")

    def error(self, message: str) -> None:
        logging.warning(f"❌ {message}")


class RecordingNotifier:
    """Keeps notifications in memory; used by UIs that render their own toasts."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    @property
    def errors(self) -> list[str]:
        return [m for kind, m in self.messages if kind == "error"]

    @property
    def successes(self) -> list[str]:
        return [m for kind, m in self.messages if kind == "success"]
