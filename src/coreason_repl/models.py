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
import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from coreason_repl.outputter import Outputter

_job_ids = itertools.count(1)


class SessionState(str, Enum):
    STARTING = "starting"
    READY = "ready"
    CLOSED = "closed"


class JobState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"


class LaunchFailure(BaseModel):
    """Report emitted when the interpreter process cannot be spawned.

    Attributes:
        binary_path: The configured interpreter binary.
        args: The full argument list, joined with spaces.
        stdout: Output captured before the failure (always empty on launch).
        error: The underlying OS error.
        exit_code: Exit code of the process, ``None`` since it never ran.
        message: A human-readable description of the failure.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    binary_path: str
    args: str
    stdout: str = ""
    error: OSError
    exit_code: int | None = None
    message: str


ErrorReporter = Callable[[LaunchFailure], None]


@dataclass
class Job:
    """A queued unit of work: one code fragment bound for the REPL."""

    code: str
    outputter: "Outputter"
    future: asyncio.Future[None]
    id: int = field(default_factory=lambda: next(_job_ids))
    state: JobState = JobState.PENDING
    sentinel: str | None = None

    def resolve(self) -> None:
        """Mark the job done. Extra calls are ignored."""
        self.state = JobState.DONE
        if not self.future.done():
            self.future.set_result(None)

    def reject(self, exc: BaseException) -> None:
        self.state = JobState.DONE
        if not self.future.done():
            self.future.set_exception(exc)
