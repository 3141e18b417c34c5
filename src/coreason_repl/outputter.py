# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_repl

import asyncio
from abc import ABC, abstractmethod
from typing import Callable

from coreason_repl.events import EventSource, Subscription


class Outputter(ABC):
    """
    Sink for the output of executed code blocks.

    Receives stdout/stderr text and emits data events for user input that
    must be forwarded to the running program.
    """

    def __init__(self) -> None:
        self._data = EventSource[str]("outputter data")

    @abstractmethod
    def queue_block(self) -> None:
        """Signals that a block has been submitted and is waiting to run."""
        pass  # pragma: no cover

    @abstractmethod
    def start_block(self) -> None:
        """Signals that the queued block has started running."""
        pass  # pragma: no cover

    @abstractmethod
    def write(self, text: str) -> None:
        """Receives standard output of the running block."""
        pass  # pragma: no cover

    @abstractmethod
    def write_err(self, text: str) -> None:
        """Receives standard error of the running block."""
        pass  # pragma: no cover

    @abstractmethod
    def clear(self) -> None:
        """Drops previously buffered output that has not been flushed yet."""
        pass  # pragma: no cover

    def on_data(self, listener: Callable[[str], None]) -> Subscription:
        """Registers a listener for user input emitted by this outputter."""
        return self._data.subscribe(listener)

    def emit_data(self, data: str) -> None:
        self._data.emit(data)

    @property
    def data_listener_count(self) -> int:
        return len(self._data)


class BufferedOutputter(Outputter):
    """In-memory outputter collecting the text of every block it receives.

    If ``stdin`` is given, it is typed into the program as soon as a block
    starts running.
    """

    def __init__(self, stdin: str = "") -> None:
        super().__init__()
        self.stdin = stdin
        self.stdout = ""
        self.stderr = ""
        self.queued_blocks = 0
        self.started_blocks = 0

    def queue_block(self) -> None:
        self.queued_blocks += 1

    def start_block(self) -> None:
        self.started_blocks += 1
        if self.stdin:
            # Deferred until the executor has attached its input listener
            asyncio.get_running_loop().call_soon(self.send_input, self.stdin)

    def write(self, text: str) -> None:
        self.stdout += text

    def write_err(self, text: str) -> None:
        self.stderr += text

    def clear(self) -> None:
        self.stdout = ""
        self.stderr = ""

    def send_input(self, data: str) -> None:
        """Types ``data`` into the running program."""
        self.emit_data(data)
