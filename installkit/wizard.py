"""Interactive resolution of the parameter model.

Follows the same pattern as the rest of the prompts:
- questionary for the prompts, styled with a prompt_toolkit Style
- TTY guard before any prompt
- Ctrl+C or an aborted prompt cancels the whole wizard
"""

import sys
from typing import Any

import click
import questionary
from prompt_toolkit.styles import Style

from .modules import Module, ModuleSet
from .params import Parameter, ValueSource

WIZARD_STYLE = Style(
    [
        ("qmark", "fg:ansicyan bold"),
        ("question", "bold"),
        ("answer", "fg:ansigreen bold"),
        ("instruction", "fg:ansibrightblack"),
    ]
)

_CANCELLED = object()


def _ask(question) -> Any:
    try:
        answer = question.ask()
    except KeyboardInterrupt:
        return _CANCELLED
    return _CANCELLED if answer is None else answer


def _format_default(param: Parameter) -> str:
    value = param.value
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if isinstance(value, dict):
        return ", ".join(f"{k}:{v}" for k, v in value.items())
    return str(value)


def parse_answer(param: Parameter, answer: Any) -> Any:
    """Convert the prompt answer into a raw value for ``param``."""
    if isinstance(answer, bool):
        return answer
    text = str(answer).strip()
    if not text:
        return None
    if param.multivalued:
        return [item.strip() for item in text.split(",") if item.strip()]
    return text


class Wizard:
    """Walks through modules and parameters asking for values."""

    def __init__(self, module_set: ModuleSet):
        self.module_set = module_set

    def run(self) -> bool:
        """Run the wizard.

        Returns:
            True when every module was answered, False if the user cancelled

        Raises:
            RuntimeError: If not running in a TTY
        """
        if not sys.stdin.isatty():
            raise RuntimeError("Interactive mode requires a TTY")

        click.echo("Welcome to the installer, answer the questions below.")
        for module in self.module_set:
            if not self.configure_module(module):
                click.echo("Cancelled, nothing was saved. Bye!")
                return False
        return True

    def configure_module(self, module: Module) -> bool:
        enable = _ask(
            questionary.confirm(
                f"Enable module {module.name}?",
                default=module.enabled,
                style=WIZARD_STYLE,
            )
        )
        if enable is _CANCELLED:
            return False

        if not enable:
            module.disable()
            return True

        module.enable()
        for param in module.params:
            if not self.configure_param(param):
                return False
        return True

    def configure_param(self, param: Parameter) -> bool:
        """Prompt until the value of ``param`` validates."""
        while True:
            answer = _ask(self._question(param))
            if answer is _CANCELLED:
                return False

            param.set_value(parse_answer(param, answer), ValueSource.WIZARD)
            errors = param.validation_errors()
            if not errors:
                return True
            click.secho(f"  {param.identifier}: {'; '.join(errors)}", fg="red")

    def _question(self, param: Parameter):
        message = f"{param.identifier}"
        if param.doc:
            message = f"{message} ({param.doc[0]})"

        if param.param_type == "boolean":
            return questionary.confirm(
                message, default=param.value is True, style=WIZARD_STYLE
            )

        instruction = "comma separated" if param.multivalued else None
        return questionary.text(
            message,
            default=_format_default(param),
            instruction=instruction,
            style=WIZARD_STYLE,
        )


__all__ = ["Wizard", "WIZARD_STYLE", "parse_answer"]
