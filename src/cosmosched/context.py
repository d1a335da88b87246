"""State shared between the CLI callback and the commands it dispatches to."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class _CliState:
    config_path: Path | None = None  # From the global --config option


_state = _CliState()


def get_config_path() -> Path | None:
    """Get the config file named on the command line, if any."""
    return _state.config_path


def set_config_path(path: Path | None) -> None:
    """Record the config file named on the command line."""
    _state.config_path = path


def reset_context() -> None:
    """Forget everything set by a previous invocation."""
    global _state  # noqa: PLW0603
    _state = _CliState()
