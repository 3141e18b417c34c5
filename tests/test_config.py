from unittest.mock import patch

import pytest
from pydantic import ValidationError

from coreason_repl.config import ReplConfig


def test_defaults() -> None:
    with patch.dict("os.environ", {}, clear=True):
        config = ReplConfig(_env_file=None)
    assert config.language == "js"
    assert config.node_path == "node"
    assert config.extra_args("js") == []
    assert config.stop_timeout == 5.0


def test_env_overrides() -> None:
    env = {
        "COREASON_REPL_NODE_PATH": "/opt/node/bin/node",
        "COREASON_REPL_NODE_ARGS": "--max-old-space-size=256  --no-warnings",
        "COREASON_REPL_LANGUAGE": "python",
    }
    with patch.dict("os.environ", env, clear=True):
        config = ReplConfig(_env_file=None)

    assert config.language == "python"
    assert config.binary_path("js") == "/opt/node/bin/node"
    # Runs of spaces do not produce empty arguments
    assert config.extra_args("js") == ["--max-old-space-size=256", "--no-warnings"]


def test_python_settings() -> None:
    config = ReplConfig(python_path="/usr/bin/python3", python_args="-X dev", _env_file=None)
    assert config.binary_path("python") == "/usr/bin/python3"
    assert config.extra_args("python") == ["-X", "dev"]


def test_unknown_language_binary() -> None:
    config = ReplConfig(_env_file=None)
    with pytest.raises(ValueError, match="Unknown language"):
        config.binary_path("ruby")  # type: ignore[arg-type]


def test_invalid_values_rejected() -> None:
    with pytest.raises(ValidationError):
        ReplConfig(language="ruby", _env_file=None)  # type: ignore[arg-type]
    with pytest.raises(ValidationError):
        ReplConfig(stop_timeout=0, _env_file=None)
