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
import time
from dataclasses import dataclass

from loguru import logger

from coreason_repl.config import Language, ReplConfig
from coreason_repl.executor import ReplExecutor
from coreason_repl.factory import ExecutorFactory
from coreason_repl.models import ErrorReporter

ExecutorKey = tuple[str, str]


@dataclass
class ManagedExecutor:
    executor: ReplExecutor
    last_accessed: float


class ExecutorManager:
    """Keeps one running executor per (file, language).

    Executors are started on first use, dropped once their interpreter exits,
    and stopped by a background reaper after sitting idle for too long.
    """

    def __init__(self, config: ReplConfig | None = None, on_error: ErrorReporter | None = None):
        """Initializes the ExecutorManager.

        Args:
            config: Optional configuration object. If not provided, defaults are used.
            on_error: Receives launch failures of any executor created here.
        """
        self.config = config or ReplConfig()
        self.on_error = on_error
        self.executors: dict[ExecutorKey, ManagedExecutor] = {}
        self._reaper_task: asyncio.Task[None] | None = None
        self._creation_lock = asyncio.Lock()

    async def get_or_create(self, file: str, language: Language | None = None) -> ReplExecutor:
        """Retrieve the executor for ``file`` or start a new one.

        Updates the last_accessed timestamp of the executor.

        Raises:
            ValueError: If file is empty or the language is not supported.
        """
        if not file:
            raise ValueError("File name is required")
        key = (file, language or self.config.language)

        await self._start_reaper_if_needed()

        async with self._creation_lock:
            managed = self.executors.get(key)
            if managed is not None and not managed.executor.closed:
                managed.last_accessed = time.time()
                return managed.executor

            executor = ExecutorFactory.get_executor(self.config, file=file, language=key[1], on_error=self.on_error)
            logger.info(f"Starting executor for {file} ({key[1]})")
            await executor.start()

            managed = ManagedExecutor(executor=executor, last_accessed=time.time())
            self.executors[key] = managed
            if executor.session is not None:
                executor.session.on_close(lambda: self._evict(key, managed))
            else:
                self._evict(key, managed)
            return executor

    def _evict(self, key: ExecutorKey, managed: ManagedExecutor) -> None:
        # Only drop the entry if it still belongs to the executor that closed
        if self.executors.get(key) is managed:
            logger.info(f"Executor for {key[0]} ({key[1]}) closed")
            del self.executors[key]

    def touch(self, file: str, language: Language | None = None) -> None:
        managed = self.executors.get((file, language or self.config.language))
        if managed is not None:
            managed.last_accessed = time.time()

    async def stop(self, file: str, language: Language | None = None) -> bool:
        """Stop the executor for ``file``. Returns False if there was none."""
        managed = self.executors.pop((file, language or self.config.language), None)
        if managed is None:
            return False
        await managed.executor.stop()
        return True

    async def _start_reaper_if_needed(self) -> None:
        if self._reaper_task is None or self._reaper_task.done():
            self._reaper_task = asyncio.create_task(self._reaper_loop())

    async def _reaper_loop(self) -> None:
        """Background task that stops executors idle for longer than idle_timeout."""
        logger.info("Executor reaper started")
        try:
            while True:
                await asyncio.sleep(self.config.reaper_interval)
                await self.reap_idle()
        except asyncio.CancelledError:
            logger.info("Executor reaper cancelled")
        except Exception as e:
            logger.error(f"Executor reaper crashed: {e}")

    async def reap_idle(self) -> list[ExecutorKey]:
        """Stop every executor that is idle and past idle_timeout."""
        now = time.time()
        expired = [
            key
            for key, managed in self.executors.items()
            if now - managed.last_accessed > self.config.idle_timeout and managed.executor.queue.idle
        ]

        for key in expired:
            logger.info(f"Executor for {key[0]} ({key[1]}) expired. Stopping.")
            managed = self.executors.pop(key, None)
            if managed:
                try:
                    await managed.executor.stop()
                except Exception as e:
                    logger.error(f"Error stopping expired executor for {key[0]}: {e}")
        return expired

    async def shutdown(self) -> None:
        """Stop the reaper and every executor."""
        if self._reaper_task and not self._reaper_task.done():
            self._reaper_task.cancel()
            try:
                await self._reaper_task
            except asyncio.CancelledError:
                pass
            self._reaper_task = None

        logger.info(f"Shutting down ExecutorManager. Stopping {len(self.executors)} executors.")

        # Snapshot: stopping triggers eviction callbacks
        to_stop = list(self.executors.values())
        self.executors.clear()

        for managed in to_stop:
            try:
                await managed.executor.stop()
            except Exception as e:
                logger.error(f"Error stopping executor during shutdown: {e}")
