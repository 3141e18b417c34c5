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

from loguru import logger

from coreason_repl.dialects import ReplDialect
from coreason_repl.events import Subscription
from coreason_repl.job_queue import JobQueue
from coreason_repl.models import ErrorReporter, Job, SessionState
from coreason_repl.outputter import Outputter
from coreason_repl.sentinel import SentinelScanner, make_sentinel
from coreason_repl.session import InteractiveSession


class ReplExecutor:
    """Runs code blocks one at a time in a long-lived interactive interpreter.

    Blocks are queued and run in submission order. Each block is followed by
    a unique sentinel written to stdout; output is streamed to the block's
    outputter until the sentinel shows up at the end of a stdout chunk.
    """

    def __init__(
        self,
        dialect: ReplDialect,
        binary_path: str,
        extra_args: list[str] | None = None,
        file: str = "",
        stop_timeout: float = 5.0,
        read_chunk_size: int = 65536,
        on_error: ErrorReporter | None = None,
    ):
        """Initializes the ReplExecutor.

        Args:
            dialect: Language-specific bootstrap and payload wrapping.
            binary_path: The interpreter binary.
            extra_args: Arguments appended after the bootstrap arguments.
            file: Name of the document this executor belongs to.
            stop_timeout: Seconds to wait after SIGTERM before sending SIGKILL.
            read_chunk_size: Maximum bytes read from stdout/stderr at once.
            on_error: Receives a LaunchFailure if the interpreter cannot be spawned.
        """
        self.dialect = dialect
        self.language = dialect.language
        self.binary_path = binary_path
        self.extra_args = list(extra_args or [])
        self.file = file
        self.session: InteractiveSession | None = InteractiveSession(
            dialect,
            stop_timeout=stop_timeout,
            read_chunk_size=read_chunk_size,
            on_error=on_error,
        )
        self.queue = JobQueue(self._dispatch)

    async def __aenter__(self) -> "ReplExecutor":
        await self.start()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.stop()

    @property
    def closed(self) -> bool:
        return self.session is None or self.session.closed

    async def start(self) -> None:
        """Boot the interpreter. Launch failures leave the executor closed."""
        session = self.session
        if session is None:
            raise RuntimeError("Executor already stopped")
        await session.start(self.binary_path, self.extra_args)
        session.on_close(self._on_session_close)

    async def stop(self) -> None:
        """Close the interpreter. Returns once the process has exited."""
        session, self.session = self.session, None
        if session is not None:
            await session.stop()

    async def run(self, code: str, outputter: Outputter) -> None:
        """Run ``code`` and stream its output to ``outputter``.

        Returns once the block's sentinel has been read, or once the interpreter
        has gone away. It never raises because of a teardown race.

        Raises:
            RuntimeError: If the executor was never started.
        """
        outputter.queue_block()
        job = Job(code=code, outputter=outputter, future=asyncio.get_running_loop().create_future())
        await self.queue.add_job(job)

    def _on_session_close(self) -> None:
        # The process is gone; queued jobs resolve as no-ops on dispatch
        self.session = None

    def _dispatch(self, job: Job) -> None:
        session = self.session
        if session is None or session.closed:
            logger.debug(f"Job {job.id} skipped: session closed")
            job.resolve()
            return
        if session.state is SessionState.STARTING:
            raise RuntimeError("Executor not started")

        outputter = job.outputter
        job.sentinel = make_sentinel(job.code)
        scanner = SentinelScanner(job.sentinel)
        subscriptions: list[Subscription] = []

        def finish() -> None:
            for subscription in subscriptions:
                subscription.close()
            job.resolve()

        def on_stdout(data: str) -> None:
            text, done = scanner.feed(data)
            if text:
                outputter.write(text)
            if done:
                logger.debug(f"Job {job.id} completed")
                finish()

        def on_stderr(data: str) -> None:
            outputter.write_err(data)

        def on_close() -> None:
            held = scanner.flush()
            if held:
                outputter.write(held)
            logger.warning(f"Session closed while job {job.id} was running")
            finish()

        outputter.start_block()
        outputter.clear()

        logger.debug(f"Dispatching job {job.id} ({len(job.code)} chars)")
        session.write(self.dialect.wrap(job.code, job.sentinel))

        subscriptions.append(outputter.on_data(session.write))
        subscriptions.append(session.on_stdout(on_stdout))
        subscriptions.append(session.on_stderr(on_stderr))
        subscriptions.append(session.on_close(on_close))

        # Detach even if the caller cancels the wait
        job.future.add_done_callback(lambda _f: finish())
