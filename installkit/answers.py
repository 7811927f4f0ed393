"""Answers file persistence.

The answers file maps each module name to either a mapping of parameter
values, ``true`` (enabled, nothing stored) or ``false`` (disabled).
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError, NoAnswerFileError

_logging = logging.getLogger(__name__)


class YamlAnswerStore:
    """Reads prior answers and writes resolved answers as YAML."""

    def load(self, path: Path) -> dict[str, Any]:
        """Load answers from ``path``.

        Raises:
            NoAnswerFileError: If the file does not exist
            ConfigError: If the file is unreadable or not a YAML mapping
        """
        if not path.exists():
            raise NoAnswerFileError(f"No answers file at {path} found, can not continue")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Answers file {path} is not valid YAML: {e}") from e
        except OSError as e:
            raise ConfigError(f"Error reading answers file {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"Answers file {path} must be a mapping, got {type(data).__name__}"
            )
        return data

    def store(self, data: dict[str, Any], path: Path) -> None:
        """Write ``data`` to ``path``, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        _logging.debug(f"Answers stored in {path}")


__all__ = ["YamlAnswerStore"]
