# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_repl

from typing import Literal

from mcp.server.fastmcp import FastMCP
from mcp.types import TextContent

from coreason_repl.manager import ExecutorManager
from coreason_repl.models import LaunchFailure
from coreason_repl.outputter import BufferedOutputter
from coreason_repl.utils.logger import logger

# Launch failures reported by executors, newest last
launch_failures: list[LaunchFailure] = []

# Initialize Executor Logic
manager = ExecutorManager(on_error=launch_failures.append)

# Initialize MCP Server
mcp = FastMCP("coreason-repl")


@mcp.tool()  # type: ignore[misc]
async def run_code(
    file: str, code: str, language: Literal["js", "python"] = "js", stdin: str = ""
) -> list[TextContent]:
    """
    Run a code block in the interactive interpreter attached to `file`.
    State persists between calls for the same file and language.
    Returns stdout and stderr of the block.
    """
    seen_failures = len(launch_failures)
    try:
        executor = await manager.get_or_create(file, language)
    except Exception as e:
        return [TextContent(type="text", text=f"Error starting executor: {e!s}")]

    if executor.closed and len(launch_failures) > seen_failures:
        return [TextContent(type="text", text=launch_failures[-1].message)]

    outputter = BufferedOutputter(stdin=stdin)
    await executor.run(code, outputter)
    manager.touch(file, language)

    output: list[TextContent] = []

    # Stdout
    if outputter.stdout:
        output.append(TextContent(type="text", text=f"STDOUT:\n{outputter.stdout}"))

    # Stderr
    if outputter.stderr:
        output.append(TextContent(type="text", text=f"STDERR:\n{outputter.stderr}"))

    if not output:
        output.append(TextContent(type="text", text="(no output)"))

    return output


@mcp.tool()  # type: ignore[misc]
async def stop_executor(file: str, language: Literal["js", "python"] = "js") -> str:
    """
    Stop the interpreter attached to `file`, discarding its state.
    """
    try:
        stopped = await manager.stop(file, language)
    except Exception as e:
        return f"Error stopping executor: {e!s}"
    if not stopped:
        return f"No {language} executor running for {file}."
    return f"Executor for {file} ({language}) stopped."


@mcp.tool()  # type: ignore[misc]
async def list_executors() -> list[str]:
    """
    List the running interpreters as `file (language)`.
    """
    return [f"{file} ({language})" for file, language in manager.executors]


def main() -> None:
    """Entry point for the MCP server."""
    logger.info("Starting coreason-repl MCP server")
    mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
