"""Pytest fixtures and utilities for installkit tests."""

import tempfile
from pathlib import Path
from typing import Callable, Generator
from unittest.mock import patch

import pytest
import yaml

from installkit.log import teardown_logging

NTP_DEFINITION = {
    "parameters": {
        "server": {
            "doc": "NTP server to synchronise with",
            "default": "pool.ntp.org",
            "required": True,
            "validate": ["string"],
        },
        "fallback_servers": {
            "doc": ["Additional servers", "tried in order"],
            "type": "array",
        },
        "iburst": {"type": "boolean", "default": True, "validate": ["bool"]},
    }
}

MOTD_DEFINITION = {
    "parameters": {
        "message": {"doc": "Banner shown at login", "required": True},
        "path": {"default": "/etc/motd", "validate": ["absolute_path"]},
    }
}


def write_yaml(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))
    return path


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    yield
    teardown_logging()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_installer(temp_dir: Path) -> Callable[..., Path]:
    """Factory writing an installer layout and returning its config file path."""

    def _create(
        answers: dict | None = None,
        modules: dict | None = None,
        **settings,
    ) -> Path:
        if modules is None:
            modules = {"ntp": NTP_DEFINITION}
        if answers is None:
            answers = {name: True for name in modules}

        for name, definition in modules.items():
            write_yaml(temp_dir / "modules" / name / "parameters.yaml", definition)
        if answers is not False:
            write_yaml(temp_dir / "config" / "answers.yaml", answers)

        config = {
            "name": "test-installer",
            "installer_dir": "..",
            "log_dir": str(temp_dir / "log"),
            "check_hostname": False,
            "engine_command": "/bin/sh -c 'exit 0'",
        }
        config.update(settings)
        return write_yaml(temp_dir / "config" / "installkit.yaml", config)

    return _create


@pytest.fixture
def answers_path(temp_dir: Path) -> Path:
    return temp_dir / "config" / "answers.yaml"


@pytest.fixture
def mock_tty() -> Generator[None, None, None]:
    """Mock sys.stdin.isatty to return True."""
    with patch("sys.stdin.isatty", return_value=True):
        yield


@pytest.fixture
def mock_no_tty() -> Generator[None, None, None]:
    """Mock sys.stdin.isatty to return False."""
    with patch("sys.stdin.isatty", return_value=False):
        yield


class MockQuestion:
    """Mock questionary question returning a canned answer."""

    def __init__(self, answer=None):
        self.answer = answer

    def ask(self):
        if isinstance(self.answer, BaseException):
            raise self.answer
        return self.answer


@pytest.fixture
def mock_question():
    """Factory for creating mock questionary questions."""

    def _create(answer=None):
        return MockQuestion(answer=answer)

    return _create
