"""Tests for preflight checks."""

import logging
from unittest.mock import patch

from installkit.checks import SystemChecker, check_hostname, get_hostname_f


class TestCheckHostname:
    def test_valid(self):
        assert check_hostname(fqdn="host.example.com", hostname="host.example.com") is None

    def test_mismatch(self):
        message = check_hostname(fqdn="host.example.com", hostname="other.example.com")
        assert "does not match" in message

    def test_no_dot(self):
        message = check_hostname(fqdn="localhost", hostname="localhost")
        assert message == "Invalid FQDN: localhost, check your hostname"

    def test_hostname_command_unavailable(self):
        with patch("installkit.checks.get_hostname_f", return_value=None):
            assert check_hostname(fqdn="host.example.com") is None

    def test_looks_up_fqdn(self):
        with (
            patch("installkit.checks.get_fqdn", return_value="nodot"),
            patch("installkit.checks.get_hostname_f", return_value="nodot"),
        ):
            assert "Invalid FQDN" in check_hostname()


def test_get_hostname_f_failure():
    with patch("installkit.checks.run_command", return_value=("not found", 127)):
        assert get_hostname_f() is None
    with patch("installkit.checks.run_command", return_value=("a.example.com\n", 0)):
        assert get_hostname_f() == "a.example.com"


class TestSystemChecker:
    def _script(self, directory, name, body, executable=True):
        path = directory / name
        path.write_text(f"#!/bin/sh\n{body}\n")
        if executable:
            path.chmod(0o755)
        return path

    def test_missing_directory_passes(self, temp_dir):
        assert SystemChecker(temp_dir / "checks").check()

    def test_all_pass(self, temp_dir):
        self._script(temp_dir, "a.sh", "exit 0")
        self._script(temp_dir, "b.sh", "exit 0")
        assert SystemChecker(temp_dir).check()

    def test_runs_every_check(self, temp_dir, caplog):
        self._script(temp_dir, "a.sh", "echo 'not enough memory'; exit 1")
        self._script(temp_dir, "b.sh", "echo 'disk full'; exit 2")
        self._script(temp_dir, "c.sh", "exit 0")
        with caplog.at_level(logging.ERROR):
            assert SystemChecker(temp_dir).check() is False
        assert "Check a.sh failed" in caplog.text
        assert "Check b.sh failed" in caplog.text
        assert "not enough memory" in caplog.text
        assert "disk full" in caplog.text

    def test_skips_non_executable(self, temp_dir):
        self._script(temp_dir, "README", "exit 1", executable=False)
        assert SystemChecker(temp_dir).checks() == []
