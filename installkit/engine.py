"""External engine invocation and output classification."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from .config import Configuration

# Always passed to the engine, in this order.
ENGINE_FLAGS = (
    "--verbose",
    "--debug",
    "--color=false",
    "--show_diff",
    "--detailed-exitcodes",
)

SEVERITY_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

# First match wins; anything else is info.
LOG_RULES: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"^(?:Error|Err):(.*)", re.IGNORECASE | re.DOTALL), "error"),
    (re.compile(r"^(?:Warning|Notice):(.*)", re.IGNORECASE | re.DOTALL), "warn"),
    (re.compile(r"^Info:(.*)", re.IGNORECASE | re.DOTALL), "info"),
    (re.compile(r"^Debug:(.*)", re.IGNORECASE | re.DOTALL), "debug"),
)


@dataclass(frozen=True)
class LogLine:
    raw: str
    severity: str
    message: str

    @property
    def level(self) -> int:
        return SEVERITY_LEVELS[self.severity]


def classify_line(raw: str) -> LogLine:
    """Classify one line of engine output by its severity prefix."""
    line = raw.rstrip("\r\n")
    for pattern, severity in LOG_RULES:
        match = pattern.match(line)
        if match:
            return LogLine(raw=raw, severity=severity, message=match.group(1).removeprefix(" "))
    return LogLine(raw=raw, severity="info", message=line)


def build_manifest(config: Configuration, answer_file: Path | None = None) -> str:
    variables = [f'$installkit_config_file="{config.path}"']
    if answer_file is not None:
        variables.append(f'$installkit_answer_file="{answer_file}"')
    return " ".join(variables + [f"include {config.app['manifest_class']}"])


def build_engine_command(
    config: Configuration, noop: bool = False, answer_file: Path | None = None
) -> list[str]:
    """Build the engine argv.

    Args:
        config: Installer configuration (engine command, modules dir, manifest class)
        noop: Ask the engine for a dry run
        answer_file: Temporary answers file to hand over instead of the configured one
    """
    options = list(ENGINE_FLAGS)
    if noop:
        options.append("--noop")
    return [
        *config.engine_command,
        *options,
        "--modulepath",
        str(config.modules_dir),
        "-e",
        build_manifest(config, answer_file),
    ]


__all__ = [
    "ENGINE_FLAGS",
    "LOG_RULES",
    "LogLine",
    "classify_line",
    "build_manifest",
    "build_engine_command",
]
