"""Preflight checks run before anything is resolved or applied."""

import logging
import os
import shlex
import socket
from pathlib import Path

from .execution import CHECK_TIMEOUT, run_command

_logging = logging.getLogger(__name__)


def get_fqdn() -> str:
    return socket.getfqdn()


def get_hostname_f() -> str | None:
    """Output of ``hostname -f``, or None when it cannot be determined."""
    output, returncode = run_command("hostname -f")
    if returncode != 0 or not output:
        return None
    return output.splitlines()[0].strip()


def check_hostname(fqdn: str | None = None, hostname: str | None = None) -> str | None:
    """Check that the host has a usable FQDN.

    Args:
        fqdn: FQDN as resolved by the system (looked up when omitted)
        hostname: Output of ``hostname -f`` (looked up when omitted)

    Returns:
        An error message, or None when the hostname is fine
    """
    fqdn = fqdn if fqdn is not None else get_fqdn()
    hostname = hostname if hostname is not None else get_hostname_f()

    if hostname is not None and fqdn != hostname:
        return f"FQDN '{fqdn}' does not match 'hostname -f' ({hostname})"
    if "." not in fqdn:
        return f"Invalid FQDN: {fqdn}, check your hostname"
    return None


class SystemChecker:
    """Runs every executable in the checks directory."""

    def __init__(self, checks_dir: Path, timeout: int = CHECK_TIMEOUT):
        self.checks_dir = checks_dir
        self.timeout = timeout

    def checks(self) -> list[Path]:
        if not self.checks_dir.is_dir():
            return []
        return sorted(
            path
            for path in self.checks_dir.iterdir()
            if path.is_file() and os.access(path, os.X_OK)
        )

    def run_check(self, path: Path) -> bool:
        output, returncode = run_command(shlex.quote(str(path)), timeout=self.timeout)
        if returncode != 0:
            _logging.error(f"Check {path.name} failed (exit code {returncode})")
            for line in output.splitlines():
                _logging.error(f"  {line}")
            return False
        _logging.debug(f"Check {path.name} passed")
        return True

    def check(self) -> bool:
        """Run all checks; every check runs even after a failure."""
        results = [self.run_check(path) for path in self.checks()]
        return all(results)


__all__ = [
    "check_hostname",
    "get_fqdn",
    "get_hostname_f",
    "SystemChecker",
]
