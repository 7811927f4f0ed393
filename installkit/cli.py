"""installkit command line entry point.

The option set depends on the installer configuration, so the click command
is built at runtime from the loaded module model. Fatal conditions raise
InstallerExit; run() is the only place turning an outcome into an exit code.
"""

import functools
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn

import click

from .checks import SystemChecker, check_hostname
from .config import Configuration
from .engine import build_engine_command
from .errors import (
    ConfigError,
    DefaultsError,
    InstallerExit,
    ManifestError,
    NoAnswerFileError,
    UnknownModuleError,
    exit_with,
    format_error,
)
from .exit_codes import RunOutcome
from .log import add_console_handler, setup_logging
from .modules import ModuleSet, load_modules
from .options import CliInput, OptionSpec, build_command, build_option_specs
from .paths import create_temp_answer_file, get_config_path
from .resolution import preview_values, resolve, unset_parameters
from .runner import InstallRunner
from .validators import validate_all
from .wizard import Wizard

_logging = logging.getLogger(__name__)


@dataclass
class InstallerContext:
    """Everything loaded at startup, passed explicitly to the run."""

    config: Configuration
    module_set: ModuleSet
    defaults: dict[str, dict[str, Any]]
    answers: dict[str, Any]
    specs: list[OptionSpec]


def _fail(code: int | str, error: Exception) -> NoReturn:
    _logging.error(str(error))
    exit_with(code, format_error(str(error)))


def _merge_defaults(
    module_defaults: dict[str, dict[str, Any]], overrides: dict[str, dict[str, Any]]
) -> dict[str, dict[str, Any]]:
    merged = {name: dict(values) for name, values in module_defaults.items()}
    for name, values in overrides.items():
        merged.setdefault(name, {}).update(values)
    return merged


def load_context(config: Configuration) -> InstallerContext:
    """Check the host and load the module model described by ``config``."""
    if config.app["check_hostname"]:
        message = check_hostname()
        if message:
            _logging.error(message)
            exit_with("wrong_hostname", format_error(message))

    try:
        answers = config.answers()
    except NoAnswerFileError as e:
        _fail("no_answer_file", e)
    except ConfigError as e:
        _fail(1, e)

    try:
        module_set = load_modules(answers, config.modules_dir)
    except UnknownModuleError as e:
        _fail("unknown_module", e)
    except ManifestError as e:
        _fail("manifest_error", e)
    except ConfigError as e:
        _fail(1, e)

    try:
        defaults = _merge_defaults(module_set.defaults(), config.default_values())
    except DefaultsError as e:
        _fail("defaults_error", e)

    try:
        specs = build_option_specs(
            module_set,
            dont_save_answers=bool(config.app["dont_save_answers"]),
            no_prefix=bool(config.app["no_prefix"]),
            current=preview_values(module_set, defaults, answers),
        )
    except ManifestError as e:
        _fail("manifest_error", e)
    return InstallerContext(
        config=config,
        module_set=module_set,
        defaults=defaults,
        answers=answers,
        specs=specs,
    )


def store_answers(context: InstallerContext, dont_save_answers: bool) -> Path | None:
    """Persist resolved answers; returns the temporary file used, if any."""
    data = context.module_set.answers_data()
    if not dont_save_answers:
        context.config.store(data)
        return None

    temp_file = create_temp_answer_file()
    context.config.store(data, temp_file)
    return temp_file


def execute(context: InstallerContext, cli_input: CliInput) -> RunOutcome:
    config = context.config
    module_set = context.module_set

    if cli_input.verbose:
        add_console_handler(config.app["log_level"], colors=bool(config.app["colors"]))

    try:
        module_set.apply_enabled(cli_input.module_flags)
        resolve(module_set, context.defaults, context.answers, cli_input.overrides)
    except UnknownModuleError as e:
        _fail("unknown_module", e)

    for param in unset_parameters(module_set):
        _logging.debug(f"Parameter {param.identifier} has no value")

    if not SystemChecker(config.checks_dir).check():
        _logging.error("System checks failed")
        exit_with("invalid_system", "Your system does not meet configuration criteria")

    if cli_input.interactive:
        try:
            completed = Wizard(module_set).run()
        except RuntimeError as e:
            _fail(1, e)
        if not completed:
            exit_with(0)
    elif not validate_all(module_set.enabled_parameters()):
        exit_with("invalid_values", "Error during configuration, exiting")

    temp_file = store_answers(context, cli_input.dont_save_answers)
    command = build_engine_command(config, noop=cli_input.noop, answer_file=temp_file)
    return InstallRunner(command, temp_answer_file=temp_file).run()


def _run(argv: list[str] | None, config_path: Path | None) -> RunOutcome:
    config_path = config_path or get_config_path()
    try:
        config = Configuration.load(config_path)
    except ConfigError as e:
        exit_with(1, format_error(str(e)))

    setup_logging(config.log_dir, config.app["log_level"])
    _logging.debug(f"Using configuration {config_path}")
    context = load_context(config)

    command = build_command(
        context.specs,
        functools.partial(execute, context),
        name=config.app["name"],
        help=config.app["description"] or None,
    )
    result = command.main(
        args=argv, prog_name=config.app["name"], standalone_mode=False
    )
    if isinstance(result, RunOutcome):
        return result
    # --help and friends return click's exit code
    return RunOutcome.of(result or 0)


def run(argv: list[str] | None = None, config_path: Path | None = None) -> int:
    """Run the installer and return the process exit code."""
    try:
        outcome = _run(argv, config_path)
    except InstallerExit as e:
        outcome = e.outcome
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1

    if outcome.message:
        click.echo(outcome.message)
    return outcome.exit_code


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
