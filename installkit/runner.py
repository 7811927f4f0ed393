"""Supervised engine run inside a pseudo-terminal.

The engine is attached to a pty so it formats and flushes its output as it
would on a real terminal. Every line it writes is classified and forwarded to
the engine logging channel while the child runs.
"""

import codecs
import fcntl
import logging
import os
import shlex
import subprocess
import termios
from enum import Enum
from pathlib import Path
from typing import Iterator

from .engine import classify_line
from .exit_codes import RunOutcome
from .log import ENGINE_LOGGER

EXIT_SPAWN_FAILED = 127

_logging = logging.getLogger(__name__)


def _take_controlling_terminal() -> None:
    # Runs in the child after setsid(); stdin is the pty slave.
    fcntl.ioctl(0, termios.TIOCSCTTY, 0)


class RunnerState(Enum):
    NOT_STARTED = "not_started"
    SPAWNING = "spawning"
    STREAMING = "streaming"
    DRAINING = "draining"
    TERMINATED = "terminated"


def read_pty_lines(fd: int, chunk_size: int = 4096, encoding: str = "utf-8") -> Iterator[str]:
    """Yield lines written to the pty behind ``fd`` until end of stream.

    Reading the master side fails with EIO once the child side is closed;
    that, like any other read error, is treated as the end of the stream.
    """
    decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
    buffer = ""
    while True:
        try:
            chunk = os.read(fd, chunk_size)
        except OSError as e:
            _logging.debug(f"Engine output closed: {e}")
            chunk = b""
        if not chunk:
            break
        buffer += decoder.decode(chunk)
        while "\n" in buffer:
            line, buffer = buffer.split("\n", 1)
            yield line + "\n"

    buffer += decoder.decode(b"", final=True)
    if buffer:
        yield buffer


def exit_status(returncode: int) -> int:
    """Shell-style exit status: a child killed by signal N gives 128 + N."""
    if returncode < 0:
        return 128 - returncode
    return returncode


class InstallRunner:
    """Runs the engine once and turns its result into a RunOutcome."""

    def __init__(
        self,
        command: list[str],
        temp_answer_file: Path | None = None,
        env: dict[str, str] | None = None,
    ):
        self.command = command
        self.temp_answer_file = temp_answer_file
        self.env = env
        self.state = RunnerState.NOT_STARTED
        self.engine_logger = logging.getLogger(ENGINE_LOGGER)

    def run(self) -> RunOutcome:
        try:
            status = self._execute()
        finally:
            self._remove_temp_answer_file()
            self.state = RunnerState.TERMINATED
        _logging.info(f"Engine has finished with exit code {status}, bye!")
        return RunOutcome.of(status)

    def log_line(self, raw: str) -> None:
        line = classify_line(raw)
        self.engine_logger.log(line.level, line.message)

    def _execute(self) -> int:
        self.state = RunnerState.SPAWNING
        _logging.debug(f"Running engine: {shlex.join(self.command)}")

        master, slave = os.openpty()
        try:
            try:
                process = subprocess.Popen(
                    self.command,
                    stdin=slave,
                    stdout=slave,
                    stderr=slave,
                    env=self.env,
                    close_fds=True,
                    start_new_session=True,
                    preexec_fn=_take_controlling_terminal,
                )
            except (OSError, subprocess.SubprocessError) as e:
                _logging.error(f"Could not start engine '{self.command[0]}': {e}")
                return EXIT_SPAWN_FAILED
            finally:
                os.close(slave)

            self.state = RunnerState.STREAMING
            for raw in read_pty_lines(master):
                self.log_line(raw)

            self.state = RunnerState.DRAINING
            return exit_status(process.wait())
        finally:
            os.close(master)

    def _remove_temp_answer_file(self) -> None:
        if self.temp_answer_file is None:
            return
        try:
            self.temp_answer_file.unlink(missing_ok=True)
        except OSError as e:
            _logging.warning(f"Could not remove temporary answers file {self.temp_answer_file}: {e}")


__all__ = [
    "RunnerState",
    "InstallRunner",
    "read_pty_lines",
    "exit_status",
]
