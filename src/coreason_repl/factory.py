# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_repl

from coreason_repl.config import Language, ReplConfig
from coreason_repl.dialects import get_dialect
from coreason_repl.executor import ReplExecutor
from coreason_repl.models import ErrorReporter


class ExecutorFactory:
    """
    Factory to create ReplExecutor instances based on configuration.
    """

    @staticmethod
    def get_executor(
        config: ReplConfig,
        file: str = "",
        language: Language | None = None,
        on_error: ErrorReporter | None = None,
    ) -> ReplExecutor:
        """
        Returns an unstarted executor for ``language`` (default: the configured one).
        """
        language = language or config.language
        dialect = get_dialect(language)

        return ReplExecutor(
            dialect,
            binary_path=config.binary_path(language),
            extra_args=config.extra_args(language),
            file=file,
            stop_timeout=config.stop_timeout,
            read_chunk_size=config.read_chunk_size,
            on_error=on_error,
        )
