"""Configuration path helpers for installkit."""

import os
import tempfile
from pathlib import Path

CONFIG_ENV_VAR = "INSTALLKIT_CONFIG"
SYSTEM_CONFIG_PATH = Path("/etc/installkit/installkit.yaml")


def get_local_config_path() -> Path:
    """Return ./config/installkit.yaml relative to the working directory"""
    return Path.cwd() / "config" / "installkit.yaml"


def get_config_path() -> Path:
    """Return path to the installer configuration file.

    Priority:
    1. INSTALLKIT_CONFIG environment variable (if set and the file exists)
    2. /etc/installkit/installkit.yaml
    3. ./config/installkit.yaml (may not exist; loading reports it)
    """
    custom = os.environ.get(CONFIG_ENV_VAR)
    if custom and Path(custom).exists():
        return Path(custom)
    if SYSTEM_CONFIG_PATH.exists():
        return SYSTEM_CONFIG_PATH
    return get_local_config_path()


def create_temp_answer_file(directory: Path | None = None) -> Path:
    """Create a uniquely named, empty answers file and return its path."""
    fd, name = tempfile.mkstemp(
        prefix="installkit_answers_", suffix=".yaml", dir=directory
    )
    os.close(fd)
    return Path(name)
