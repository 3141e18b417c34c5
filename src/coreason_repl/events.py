# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_repl

"""Minimal listener registry with explicit subscription handles."""

from typing import Callable, Generic, TypeVar

from loguru import logger

T = TypeVar("T")


class Subscription:
    """Handle for a registered listener. Closing it detaches the listener."""

    def __init__(self, detach: Callable[[], None]):
        self._detach: Callable[[], None] | None = detach

    @property
    def active(self) -> bool:
        return self._detach is not None

    def close(self) -> None:
        """Detach the listener. Safe to call more than once."""
        detach, self._detach = self._detach, None
        if detach is not None:
            detach()


class EventSource(Generic[T]):
    """Fan-out of a single event type to any number of listeners."""

    def __init__(self, name: str = "event"):
        self.name = name
        self._listeners: list[Callable[[T], None]] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Callable[[T], None]) -> Subscription:
        self._listeners.append(listener)
        return Subscription(lambda: self._remove(listener))

    def _remove(self, listener: Callable[[T], None]) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def emit(self, value: T) -> None:
        # Snapshot: listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception as e:
                logger.error(f"Listener for {self.name} failed: {e}")

    def clear(self) -> None:
        self._listeners.clear()
