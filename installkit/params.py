"""Typed installer parameters."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .validators import Rule


class ValueSource(Enum):
    CLI = "cli"
    ANSWER = "answer"
    DEFAULT = "default"
    WIZARD = "wizard"
    UNSET = "unset"


PARAM_TYPES = ("string", "boolean", "integer", "array", "hash")
MULTIVALUED_TYPES = ("array", "hash")

TRUE_VALUES = {"true", "yes", "on", "1"}
FALSE_VALUES = {"false", "no", "off", "0"}


def _cast_hash(value: Any) -> Any:
    if isinstance(value, dict):
        return dict(value)
    items = [value] if isinstance(value, str) else list(value)
    result = {}
    for item in items:
        if not isinstance(item, str) or ":" not in item:
            return items
        key, item_value = item.split(":", 1)
        result[key.strip()] = item_value.strip()
    return result


def cast_value(param_type: str, value: Any) -> Any:
    """Cast a raw value to the parameter type.

    Values that cannot be cast are returned unchanged so that validation
    can report them; casting itself never fails.
    """
    if value is None:
        return None

    if param_type == "boolean":
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in TRUE_VALUES:
            return True
        if text in FALSE_VALUES:
            return False
        return value

    if param_type == "integer":
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        try:
            return int(str(value).strip())
        except ValueError:
            return value

    if param_type == "array":
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    if param_type == "hash":
        return _cast_hash(value)

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


@dataclass
class Parameter:
    name: str
    module: str
    doc: list[str] = field(default_factory=list)
    param_type: str = "string"
    default: Any = None
    required: bool = False
    rules: list[Rule] = field(default_factory=list)
    value: Any = None
    value_set: bool = False
    source: ValueSource = ValueSource.UNSET

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise ValueError("Parameter name must be a non-empty string")
        if self.param_type not in PARAM_TYPES:
            raise ValueError(
                f"type must be one of {', '.join(PARAM_TYPES)}, got '{self.param_type}'"
            )
        self.default = cast_value(self.param_type, self.default)

    @property
    def multivalued(self) -> bool:
        return self.param_type in MULTIVALUED_TYPES

    @property
    def identifier(self) -> str:
        return f"{self.module}::{self.name}"

    def cli_name(self, no_prefix: bool = False) -> str:
        """Long option name, e.g. ``ntp-server`` for module ntp's ``server``."""
        base = self.name if no_prefix else f"{self.module}_{self.name}"
        return base.replace("_", "-")

    def dest(self, no_prefix: bool = False) -> str:
        base = self.name if no_prefix else f"{self.module}_{self.name}"
        name = base.replace("-", "_")
        return f"{name}_list" if self.multivalued else name

    def set_default(self, default: Any) -> None:
        self.default = cast_value(self.param_type, default)

    def set_value(self, value: Any, source: ValueSource) -> None:
        self.value = cast_value(self.param_type, value)
        self.value_set = source in (ValueSource.CLI, ValueSource.ANSWER, ValueSource.WIZARD)
        self.source = source

    def unset(self) -> None:
        self.value = None
        self.value_set = False
        self.source = ValueSource.UNSET

    def validation_errors(self) -> list[str]:
        rules = ([Rule("required")] if self.required else []) + self.rules
        errors = []
        for rule in rules:
            error = rule.check(self.value)
            if error:
                errors.append(error)
        return errors

    def valid(self) -> bool:
        return not self.validation_errors()


__all__ = [
    "ValueSource",
    "PARAM_TYPES",
    "cast_value",
    "Parameter",
]
