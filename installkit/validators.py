"""Parameter validation rules and the aggregate validator.

Rules are declared in module definitions either by name (``- string``) or as
a one-key mapping carrying arguments (``- regexp: '^\\d+$'``,
``- integer: {min: 1}``). A rule returns an error message, or None when the
value passes. Unset values only fail the ``required`` rule.
"""

import inspect
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

_logging = logging.getLogger(__name__)


def _is_missing(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def _items(value: Any) -> list:
    return list(value) if isinstance(value, list) else [value]


def validate_required(value: Any) -> str | None:
    if _is_missing(value):
        return "is required"
    return None


def validate_string(value: Any) -> str | None:
    if not isinstance(value, str):
        return f"must be a string, got {type(value).__name__}"
    return None


def validate_bool(value: Any) -> str | None:
    if not isinstance(value, bool):
        return f"must be a boolean, got '{value}'"
    return None


def validate_integer(value: Any, min: int | None = None, max: int | None = None) -> str | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return f"must be an integer, got '{value}'"
    if min is not None and value < min:
        return f"must be at least {min}"
    if max is not None and value > max:
        return f"must be at most {max}"
    return None


def validate_array(value: Any) -> str | None:
    if not isinstance(value, list):
        return f"must be a list, got {type(value).__name__}"
    return None


def validate_hash(value: Any) -> str | None:
    if not isinstance(value, dict):
        return "must be a hash of key:value pairs"
    return None


def validate_absolute_path(value: Any) -> str | None:
    for item in _items(value):
        if not isinstance(item, str) or not os.path.isabs(item):
            return f"'{item}' is not an absolute path"
    return None


def validate_regexp(value: Any, pattern: str) -> str | None:
    for item in _items(value):
        if not re.search(str(pattern), str(item)):
            return f"'{item}' does not match /{pattern}/"
    return None


def validate_in(value: Any, *choices: Any) -> str | None:
    for item in _items(value):
        if item not in choices:
            allowed = ", ".join(str(c) for c in choices)
            return f"'{item}' is not one of: {allowed}"
    return None


RULES: dict[str, Callable[..., str | None]] = {
    "required": validate_required,
    "string": validate_string,
    "bool": validate_bool,
    "integer": validate_integer,
    "array": validate_array,
    "hash": validate_hash,
    "absolute_path": validate_absolute_path,
    "regexp": validate_regexp,
    "in": validate_in,
}


@dataclass
class Rule:
    name: str
    args: tuple = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.name not in RULES:
            raise ValueError(
                f"Unknown validation rule '{self.name}'. "
                f"Available: {', '.join(sorted(RULES))}"
            )
        try:
            bound = inspect.signature(RULES[self.name]).bind(None, *self.args, **self.kwargs)
        except TypeError as e:
            raise ValueError(f"Invalid arguments for rule '{self.name}': {e}") from e
        self._check_arguments(bound.arguments)

    def _check_arguments(self, arguments: dict[str, Any]) -> None:
        if self.name == "regexp":
            try:
                re.compile(str(arguments["pattern"]))
            except re.error as e:
                raise ValueError(f"Invalid pattern for rule 'regexp': {e}") from e
        elif self.name == "integer":
            for bound_name in ("min", "max"):
                limit = arguments.get(bound_name)
                if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int)):
                    raise ValueError(
                        f"Invalid arguments for rule 'integer': {bound_name} must be an integer, "
                        f"got '{limit}'"
                    )

    def check(self, value: Any) -> str | None:
        if value is None and self.name != "required":
            return None
        return RULES[self.name](value, *self.args, **self.kwargs)


def parse_rule(spec: Any) -> Rule:
    """Build a Rule from its declaration in a module definition.

    Raises:
        ValueError: If the declaration is malformed or names an unknown rule
    """
    if isinstance(spec, str):
        return Rule(spec)

    if isinstance(spec, dict) and len(spec) == 1:
        name, args = next(iter(spec.items()))
        if isinstance(args, dict):
            return Rule(str(name), kwargs=dict(args))
        if isinstance(args, list):
            return Rule(str(name), args=tuple(args))
        return Rule(str(name), args=(args,))

    raise ValueError(f"Validation rule must be a name or a one-key mapping, got {spec!r}")


def validate_all(parameters: Iterable, logger: logging.Logger | None = None) -> bool:
    """Run every rule of every parameter and report each failing parameter.

    Never stops at the first failure, so one run reports the complete set.

    Args:
        parameters: Parameters of enabled modules
        logger: Logger receiving one error entry per invalid parameter

    Returns:
        True if all parameters are valid
    """
    log = logger or _logging
    log.info("Running validation checks")

    results = []
    for param in parameters:
        errors = param.validation_errors()
        if errors:
            log.error(f"Parameter {param.identifier} invalid: {'; '.join(errors)}")
        results.append(not errors)
    return all(results)


__all__ = [
    "RULES",
    "Rule",
    "parse_rule",
    "validate_all",
]
