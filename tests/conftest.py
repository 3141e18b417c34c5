import sys
from typing import Any, AsyncGenerator
from unittest.mock import MagicMock

import pytest
import pytest_asyncio

from coreason_repl.dialects import NodeDialect, PythonDialect
from coreason_repl.executor import ReplExecutor
from coreason_repl.models import SessionState
from coreason_repl.outputter import BufferedOutputter
from coreason_repl.session import InteractiveSession


@pytest.fixture
def outputter() -> BufferedOutputter:
    return BufferedOutputter()


@pytest_asyncio.fixture
async def python_executor() -> AsyncGenerator[ReplExecutor, None]:
    executor = ReplExecutor(PythonDialect(), binary_path=sys.executable, file="test.md", stop_timeout=2.0)
    await executor.start()
    try:
        yield executor
    finally:
        await executor.stop()


@pytest_asyncio.fixture
async def node_executor() -> AsyncGenerator[ReplExecutor, None]:
    executor = ReplExecutor(NodeDialect(), binary_path="node", file="test.md", stop_timeout=2.0)
    await executor.start()
    try:
        yield executor
    finally:
        await executor.stop()


@pytest.fixture
def fake_session() -> Any:
    """A session that never spawns a process: writes are recorded, output is emitted by hand."""
    session = InteractiveSession(PythonDialect())
    session.state = SessionState.READY
    session.write = MagicMock()  # type: ignore[method-assign]
    return session


@pytest.fixture
def fake_executor(fake_session: Any) -> ReplExecutor:
    executor = ReplExecutor(PythonDialect(), binary_path="python3")
    executor.session = fake_session
    return executor
