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
from collections import deque
from typing import Callable

from loguru import logger

from coreason_repl.models import Job, JobState

Dispatch = Callable[[Job], None]


class JobQueue:
    """Serializes jobs against a single consumer.

    Jobs are dispatched strictly in submission order. The next job is handed
    to ``dispatch`` only once the previous job's future is done, however it
    got there (resolved, rejected or cancelled).
    """

    def __init__(self, dispatch: Dispatch):
        """Initializes the JobQueue.

        Args:
            dispatch: Called with each job when it reaches the head of the queue.
                It must eventually resolve or reject the job.
        """
        self._dispatch = dispatch
        self._pending: deque[Job] = deque()
        self.running: Job | None = None

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def idle(self) -> bool:
        return self.running is None and not self._pending

    def add_job(self, job: Job) -> asyncio.Future[None]:
        """Enqueue ``job`` and return its completion future.

        Enqueueing is synchronous, so two jobs added back to back keep their
        order even if the caller never yields in between.
        """
        job.state = JobState.PENDING
        self._pending.append(job)
        logger.debug(f"Job {job.id} queued ({len(self._pending)} pending)")
        if self.running is None:
            self._next()
        return job.future

    def _next(self) -> None:
        while self.running is None and self._pending:
            job = self._pending.popleft()
            if job.future.done():
                # Cancelled by the caller while still queued
                job.state = JobState.DONE
                continue

            self.running = job
            job.state = JobState.RUNNING
            job.future.add_done_callback(lambda _f, job=job: self._finished(job))
            try:
                self._dispatch(job)
            except Exception as e:
                logger.error(f"Dispatch of job {job.id} failed: {e}")
                job.reject(e)

    def _finished(self, job: Job) -> None:
        job.state = JobState.DONE
        if self.running is job:
            self.running = None
        logger.debug(f"Job {job.id} finished")
        self._next()
