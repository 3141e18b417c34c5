# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_repl

"""
coreason-repl
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .config import ReplConfig
from .dialects import NodeDialect, PythonDialect, ReplDialect, get_dialect
from .executor import ReplExecutor
from .factory import ExecutorFactory
from .job_queue import JobQueue
from .manager import ExecutorManager
from .models import Job, JobState, LaunchFailure, SessionState
from .outputter import BufferedOutputter, Outputter
from .session import InteractiveSession

__all__ = [
    "ReplConfig",
    "ReplDialect",
    "NodeDialect",
    "PythonDialect",
    "get_dialect",
    "ReplExecutor",
    "ExecutorFactory",
    "JobQueue",
    "ExecutorManager",
    "Job",
    "JobState",
    "LaunchFailure",
    "SessionState",
    "BufferedOutputter",
    "Outputter",
    "InteractiveSession",
]
