# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_repl

import json
from abc import ABC, abstractmethod


class ReplDialect(ABC):
    """
    Abstract base class for the language-specific parts of a REPL executor.
    Follows the Strategy Pattern.
    """

    language: str
    display_name: str

    @abstractmethod
    def bootstrap_args(self) -> list[str]:
        """Arguments that start a quiet interactive loop.

        The loop must not print prompts or echo expression results, and it must
        take its host process down when it exits.
        """
        pass  # pragma: no cover

    @abstractmethod
    def wrap(self, code: str, sentinel: str) -> str:
        """Wrap ``code`` for the REPL's stdin.

        The payload runs the code inside an error-catching scope, reporting
        errors to stderr, and then unconditionally writes ``sentinel`` to
        stdout.
        """
        pass  # pragma: no cover

    def environment(self) -> dict[str, str]:
        """Extra environment variables for the interpreter process."""
        return {}


class NodeDialect(ReplDialect):
    """Node.js ``repl`` module driven through stdin."""

    language = "js"
    display_name = "NodeJS"

    BOOTSTRAP = (
        'require("repl").start({prompt: "", preview: false, ignoreUndefined: true})'
        '.on("exit", () => process.exit())'
    )

    def bootstrap_args(self) -> list[str]:
        return ["-e", self.BOOTSTRAP]

    def wrap(self, code: str, sentinel: str) -> str:
        # JSON string literals are valid JavaScript string literals. The REPL's
        # own console writes to stdout, so errors go to process.stderr directly.
        return (
            f"\ntry {{ eval({json.dumps(code)}); }} "
            f"catch(e) {{ void process.stderr.write(String(e && e.stack || e) + \"\\n\"); }}\n"
            f"process.stdout.write({json.dumps(sentinel)})&&undefined;\n"
        )


class PythonDialect(ReplDialect):
    """CPython interactive console (``code.interact``) driven through stdin.

    The console reads lines through ``sys.stdin``, the same buffer user code
    reads from, so input typed into a running block is not swallowed as the
    next console line.
    """

    language = "python"
    display_name = "Python"

    HELPER = "__coreason_run_block__"

    BOOTSTRAP = "\n".join(
        [
            "import code, sys, traceback",
            "sys.ps1 = sys.ps2 = ''",
            f"def {HELPER}(source, sentinel):",
            "    try:",
            "        exec(compile(source, '<block>', 'exec'), sys.modules['__main__'].__dict__)",
            "    except Exception:",
            "        traceback.print_exc()",
            "    sys.stderr.flush()",
            "    sys.stdout.write(sentinel)",
            "    sys.stdout.flush()",
            "code.interact(banner='', local=globals(), exitmsg='')",
        ]
    )

    def bootstrap_args(self) -> list[str]:
        return ["-u", "-c", self.BOOTSTRAP]

    def environment(self) -> dict[str, str]:
        return {"PYTHONIOENCODING": "utf-8"}

    def wrap(self, code: str, sentinel: str) -> str:
        # One physical line: the console compiles line by line
        return f"{self.HELPER}({code!r}, {sentinel!r})\n"


DIALECTS: dict[str, type[ReplDialect]] = {
    NodeDialect.language: NodeDialect,
    PythonDialect.language: PythonDialect,
}


def get_dialect(language: str) -> ReplDialect:
    """Returns the dialect registered for ``language``."""
    try:
        return DIALECTS[language]()
    except KeyError:
        raise ValueError(f"Unsupported language: {language}") from None
