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

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

Language = Literal["js", "python"]


class ReplConfig(BaseSettings):
    """
    Configuration for interactive REPL executors.
    """

    language: Language = "js"

    # NodeJS
    node_path: str = "node"
    node_args: str = ""

    # Python
    python_path: str = "python3"
    python_args: str = ""

    stop_timeout: float = Field(default=5.0, gt=0)
    read_chunk_size: int = Field(default=65536, gt=0)
    idle_timeout: float = 600.0  # 10 minutes
    reaper_interval: float = 60.0  # Check every minute

    model_config = SettingsConfigDict(
        env_prefix="COREASON_REPL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def binary_path(self, language: Language) -> str:
        """Interpreter binary configured for ``language``."""
        if language == "js":
            return self.node_path
        if language == "python":
            return self.python_path
        raise ValueError(f"Unknown language: {language}")

    def extra_args(self, language: Language) -> list[str]:
        """Split the space-separated extra-arguments string for ``language``."""
        raw = self.node_args if language == "js" else self.python_args
        return raw.split() if raw else []
