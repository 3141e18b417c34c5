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
import codecs
import os
from typing import Callable

from loguru import logger

from coreason_repl.dialects import ReplDialect
from coreason_repl.events import EventSource, Subscription
from coreason_repl.models import ErrorReporter, LaunchFailure, SessionState


def log_launch_failure(failure: LaunchFailure) -> None:
    """Default error reporter."""
    logger.error(f"{failure.message} (command: {failure.binary_path} {failure.args})")


class InteractiveSession:
    """Owns one interpreter subprocess running a quiet interactive loop.

    Exposes raw stdin writes and per-stream listeners for stdout and stderr.
    The close event fires exactly once, whatever ended the process.
    """

    def __init__(
        self,
        dialect: ReplDialect,
        stop_timeout: float = 5.0,
        read_chunk_size: int = 65536,
        on_error: ErrorReporter | None = None,
    ):
        """Initializes the InteractiveSession.

        Args:
            dialect: Language-specific bootstrap and environment.
            stop_timeout: Seconds to wait after SIGTERM before sending SIGKILL.
            read_chunk_size: Maximum bytes read from stdout/stderr at once.
            on_error: Receives a LaunchFailure if the process cannot be spawned.
        """
        self.dialect = dialect
        self.stop_timeout = stop_timeout
        self.read_chunk_size = read_chunk_size
        self.on_error = on_error or log_launch_failure

        self.state = SessionState.STARTING
        self.process: asyncio.subprocess.Process | None = None
        self.binary_path: str | None = None
        self.args: list[str] = []
        self.returncode: int | None = None

        self._stdout = EventSource[str]("stdout")
        self._stderr = EventSource[str]("stderr")
        self._close = EventSource[None]("close")
        self._closed = asyncio.Event()
        self._watch_task: asyncio.Task[None] | None = None
        self._stopping = False

    @property
    def closed(self) -> bool:
        return self.state is SessionState.CLOSED

    async def start(self, binary_path: str, extra_args: list[str] | None = None) -> None:
        """Launch the interpreter.

        Extra arguments follow the dialect's bootstrap arguments. Launch errors
        are reported through ``on_error`` and leave the session closed.

        Raises:
            RuntimeError: If the session was already started.
        """
        if self.process is not None or self.closed:
            raise RuntimeError("Session already started")

        self.binary_path = binary_path
        self.args = [*self.dialect.bootstrap_args(), *(extra_args or [])]

        logger.info(f"Starting {self.dialect.display_name} session with {binary_path}")
        try:
            process = await asyncio.create_subprocess_exec(
                binary_path,
                *self.args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env={**os.environ, **self.dialect.environment()},
            )
        except OSError as e:
            self.on_error(
                LaunchFailure(
                    binary_path=binary_path,
                    args=" ".join(self.args),
                    stdout="",
                    error=e,
                    exit_code=None,
                    message=f"Error launching {self.dialect.display_name} process: {e}",
                )
            )
            self._mark_closed()
            return

        if self.closed:
            # stop() ran while the process was spawning
            logger.info(f"{self.dialect.display_name} session stopped during startup")
            await self._terminate(process)
            await process.wait()
            return

        self.process = process
        self.state = SessionState.READY
        self._watch_task = asyncio.create_task(self._watch(process))
        logger.info(f"{self.dialect.display_name} session started: pid {process.pid}")

        # A lone newline keeps any intro message from being read as block output
        self.write("\n")

    async def stop(self) -> None:
        """Terminate the interpreter and wait for the close event.

        Safe to call repeatedly or concurrently: only the first call signals the
        process, every call returns once the session is closed.
        """
        if self.closed:
            return

        process, self.process = self.process, None
        if process is None:
            if self._watch_task is None:
                # Never launched
                self._mark_closed()
                return
        elif not self._stopping:
            self._stopping = True
            await self._terminate(process)

        await self._closed.wait()

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return

        logger.info(f"Stopping {self.dialect.display_name} session: pid {process.pid}")
        try:
            process.terminate()
        except ProcessLookupError:
            return

        try:
            await asyncio.wait_for(process.wait(), timeout=self.stop_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Process {process.pid} ignored SIGTERM for {self.stop_timeout}s. Killing.")
            try:
                process.kill()
            except ProcessLookupError:
                pass

    def write(self, data: str) -> None:
        """Write raw text to the interpreter's stdin."""
        process = self.process
        if process is None or process.stdin is None or process.stdin.is_closing():
            logger.warning("Attempted to write to a closed session")
            return
        try:
            process.stdin.write(data.encode("utf-8"))
        except (BrokenPipeError, ConnectionResetError) as e:
            logger.warning(f"Write to session stdin failed: {e}")

    def on_stdout(self, listener: Callable[[str], None]) -> Subscription:
        return self._stdout.subscribe(listener)

    def on_stderr(self, listener: Callable[[str], None]) -> Subscription:
        return self._stderr.subscribe(listener)

    def on_close(self, listener: Callable[[], None]) -> Subscription:
        """Register a listener for the process exit.

        A listener registered after the session closed is called immediately.
        """
        if self.closed:
            listener()
            return Subscription(lambda: None)
        return self._close.subscribe(lambda _: listener())

    def listener_count(self) -> int:
        return len(self._stdout) + len(self._stderr) + len(self._close)

    async def _watch(self, process: asyncio.subprocess.Process) -> None:
        try:
            await asyncio.gather(
                self._pump(process.stdout, self._stdout),
                self._pump(process.stderr, self._stderr),
            )
            self.returncode = await process.wait()
        finally:
            self._mark_closed()

    async def _pump(self, stream: asyncio.StreamReader | None, source: EventSource[str]) -> None:
        if stream is None:
            return  # pragma: no cover
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await stream.read(self.read_chunk_size)
            if not chunk:
                break
            text = decoder.decode(chunk)
            if text:
                source.emit(text)
        tail = decoder.decode(b"", final=True)
        if tail:
            source.emit(tail)

    def _mark_closed(self) -> None:
        if self.closed and self._closed.is_set():
            return
        self.state = SessionState.CLOSED
        self.process = None
        self._closed.set()
        logger.info(f"{self.dialect.display_name} session closed (exit code {self.returncode})")
        self._close.emit(None)
        self._close.clear()
