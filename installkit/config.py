"""Installer configuration loading.

The configuration is read once at startup into a ``Configuration`` object
that is handed to every component needing it.
"""

import logging
import shlex
from pathlib import Path
from typing import Any

import yaml

from .answers import YamlAnswerStore
from .errors import ConfigError, DefaultsError

_logging = logging.getLogger(__name__)

LOG_LEVELS = ("debug", "info", "warning", "error")

DEFAULTS: dict[str, Any] = {
    "name": "installkit",
    "description": "",
    "installer_dir": ".",
    "answer_file": "config/answers.yaml",
    "modules_dir": "modules",
    "default_values_file": None,
    "checks_dir": "checks",
    "log_dir": "/var/log/installkit",
    "log_level": "info",
    "colors": True,
    "no_prefix": False,
    "dont_save_answers": False,
    "check_hostname": True,
    "engine_command": "puppet apply",
    "manifest_class": "installkit_configure",
}


def _load_yaml_mapping(path: Path, error_cls: type[Exception], what: str) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise error_cls(f"{what} not found: {path}")
    except yaml.YAMLError as e:
        raise error_cls(f"{what} {path} is not valid YAML: {e}") from e
    except OSError as e:
        raise error_cls(f"Error reading {what.lower()} {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise error_cls(f"{what} {path} must be a mapping, got {type(data).__name__}")
    return data


class Configuration:
    """Installer settings plus access to the answers and default values files."""

    def __init__(
        self,
        path: Path,
        settings: dict[str, Any] | None = None,
        answer_store: YamlAnswerStore | None = None,
    ):
        self.path = Path(path)
        self.answer_store = answer_store or YamlAnswerStore()
        raw = settings if settings is not None else self._read(self.path)
        self.app = self._merge(raw)

    @classmethod
    def load(cls, path: Path) -> "Configuration":
        return cls(path)

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        return _load_yaml_mapping(path, ConfigError, "Config file")

    @staticmethod
    def _merge(raw: dict[str, Any]) -> dict[str, Any]:
        app = dict(DEFAULTS)
        for key, value in raw.items():
            if key not in DEFAULTS:
                _logging.warning(f"Ignoring unknown configuration key '{key}'")
                continue
            app[key] = value

        level = str(app["log_level"]).lower()
        if level not in LOG_LEVELS:
            raise ConfigError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got '{app['log_level']}'"
            )
        app["log_level"] = level
        return app

    def _resolve(self, value: str | Path) -> Path:
        path = Path(value).expanduser()
        if path.is_absolute():
            return path
        return self.installer_dir / path

    @property
    def installer_dir(self) -> Path:
        path = Path(self.app["installer_dir"]).expanduser()
        if path.is_absolute():
            return path
        return (self.path.parent / path).resolve()

    @property
    def answer_file(self) -> Path:
        return self._resolve(self.app["answer_file"])

    @property
    def modules_dir(self) -> Path:
        return self._resolve(self.app["modules_dir"])

    @property
    def checks_dir(self) -> Path:
        return self._resolve(self.app["checks_dir"])

    @property
    def log_dir(self) -> Path:
        return self._resolve(self.app["log_dir"])

    @property
    def default_values_file(self) -> Path | None:
        value = self.app["default_values_file"]
        return self._resolve(value) if value else None

    @property
    def engine_command(self) -> list[str]:
        command = self.app["engine_command"]
        if isinstance(command, str):
            return shlex.split(command)
        return [str(part) for part in command]

    def answers(self) -> dict[str, Any]:
        """Return the stored answers (module name -> values, True or False)."""
        return self.answer_store.load(self.answer_file)

    def default_values(self) -> dict[str, dict[str, Any]]:
        """Return default value overrides keyed by module then parameter.

        Raises:
            DefaultsError: If the configured file is missing or malformed
        """
        path = self.default_values_file
        if path is None:
            return {}

        data = _load_yaml_mapping(path, DefaultsError, "Default values file")
        for module_name, values in data.items():
            if not isinstance(values, dict):
                raise DefaultsError(
                    f"Default values for module '{module_name}' must be a mapping"
                )
        return data

    def store(self, data: dict[str, Any], path: Path | None = None) -> Path:
        """Persist resolved answers, to the answers file unless ``path`` is given."""
        target = path or self.answer_file
        self.answer_store.store(data, target)
        return target


__all__ = ["Configuration", "DEFAULTS", "LOG_LEVELS"]
