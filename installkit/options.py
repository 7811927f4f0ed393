"""Command-line surface generated from the module/parameter model.

build_option_specs() is pure: it walks the model and returns OptionSpec
descriptors. build_command() turns the descriptors into a click command
whose callback receives the parsed input as a CliInput.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

import click
from click.core import ParameterSource

from .errors import ManifestError
from .modules import ModuleSet

GLOBAL = "global"
MODULE = "module"
PARAM = "param"


@dataclass(frozen=True)
class OptionSpec:
    dest: str
    flags: tuple[str, ...]
    help: str
    kind: str
    is_flag: bool = False
    multiple: bool = False
    default: Any = None
    module: str | None = None
    param: str | None = None


@dataclass
class CliInput:
    interactive: bool = False
    verbose: bool = False
    noop: bool = False
    dont_save_answers: bool = False
    module_flags: dict[str, bool] = field(default_factory=dict)
    overrides: dict[str, dict[str, Any]] = field(default_factory=dict)


def global_option_specs(dont_save_answers: bool = False) -> list[OptionSpec]:
    return [
        OptionSpec("interactive", ("-i", "--interactive"), "Run in interactive mode", GLOBAL, is_flag=True, default=False),
        OptionSpec("verbose", ("-v", "--verbose"), "Display log on STDOUT", GLOBAL, is_flag=True, default=False),
        OptionSpec("noop", ("-n", "--noop"), "Run the engine in noop mode", GLOBAL, is_flag=True, default=False),
        OptionSpec(
            "dont_save_answers",
            ("-d", "--dont-save-answers"),
            "Skip saving answers to the answers file",
            GLOBAL,
            is_flag=True,
            default=bool(dont_save_answers),
        ),
    ]


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if isinstance(value, dict):
        return ", ".join(f"{k}:{v}" for k, v in value.items())
    return str(value)


def build_option_specs(
    module_set: ModuleSet,
    dont_save_answers: bool = False,
    no_prefix: bool = False,
    current: dict[str, dict[str, Any]] | None = None,
) -> list[OptionSpec]:
    """Describe every CLI option for the given model.

    Parameters of disabled modules are left out.

    Args:
        module_set: Modules and parameters to expose
        dont_save_answers: Default of --dont-save-answers
        no_prefix: Name parameter options without the module prefix
        current: module -> param -> value shown in the help text

    Raises:
        ManifestError: If two parameters map to the same option
    """
    specs = global_option_specs(dont_save_answers)

    for module in module_set:
        flag = f"enable-{module.name}".replace("_", "-")
        specs.append(
            OptionSpec(
                dest=f"enable_{module.name}".replace("-", "_"),
                flags=(f"--{flag}/--no-{flag}",),
                help=f"Enable module {module.name}?",
                kind=MODULE,
                is_flag=True,
                default=module.enabled,
                module=module.name,
            )
        )

    current = current or {}
    for module in module_set.enabled_modules():
        for param in module.params:
            doc = "\n".join(param.doc) if param.doc else "UNDOCUMENTED"
            value = current.get(module.name, {}).get(param.name, param.default)
            if value is not None:
                doc = f"{doc} (current: {_format_value(value)})"
            specs.append(
                OptionSpec(
                    dest=param.dest(no_prefix),
                    flags=(f"--{param.cli_name(no_prefix)}",),
                    help=doc,
                    kind=PARAM,
                    multiple=param.multivalued,
                    module=module.name,
                    param=param.name,
                )
            )

    seen: set[str] = set()
    for spec in specs:
        if spec.dest in seen:
            raise ManifestError(f"Option {spec.flags[0]} is defined more than once")
        seen.add(spec.dest)
    return specs


def collect_cli_input(
    specs: list[OptionSpec], values: dict[str, Any], supplied: set[str]
) -> CliInput:
    """Sort parsed option values into globals, module flags and overrides.

    Parameter values count as overrides only when given on the command line,
    even if empty.
    """
    cli_input = CliInput()
    for spec in specs:
        value = values.get(spec.dest)
        if spec.kind == GLOBAL:
            setattr(cli_input, spec.dest, bool(value))
        elif spec.kind == MODULE:
            cli_input.module_flags[spec.module] = bool(value)
        elif spec.dest in supplied:
            if spec.multiple:
                value = list(value or ())
            cli_input.overrides.setdefault(spec.module, {})[spec.param] = value
    return cli_input


def _click_option(spec: OptionSpec) -> click.Option:
    if spec.is_flag:
        return click.Option(
            [spec.dest, *spec.flags],
            is_flag=True,
            default=spec.default,
            help=spec.help,
        )
    return click.Option(
        [spec.dest, *spec.flags],
        multiple=spec.multiple,
        default=None,
        help=spec.help,
    )


def build_command(
    specs: list[OptionSpec],
    callback: Callable[[CliInput], Any],
    name: str = "installkit",
    help: str | None = None,
) -> click.Command:
    """Build a click command exposing ``specs``."""

    def _invoke(**values):
        ctx = click.get_current_context()
        supplied = {
            dest
            for dest in values
            if ctx.get_parameter_source(dest) == ParameterSource.COMMANDLINE
        }
        return callback(collect_cli_input(specs, values, supplied))

    return click.Command(
        name=name,
        callback=_invoke,
        params=[_click_option(spec) for spec in specs],
        help=help,
    )


__all__ = [
    "OptionSpec",
    "CliInput",
    "global_option_specs",
    "build_option_specs",
    "collect_cli_input",
    "build_command",
]
