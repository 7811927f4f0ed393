"""Value resolution: CLI overrides, stored answers and defaults.

Precedence per parameter is CLI override > stored answer > default > unset.
"""

import logging
from typing import Any, Mapping

from .errors import UnknownModuleError
from .modules import ModuleSet
from .params import Parameter, ValueSource

_logging = logging.getLogger(__name__)

Values = Mapping[str, Any]


def _module_values(layer: Values | None, module_name: str) -> Mapping[str, Any]:
    if not layer:
        return {}
    values = layer.get(module_name)
    return values if isinstance(values, Mapping) else {}


def _check_references(module_set: ModuleSet, layer: Values | None, layer_name: str) -> None:
    for module_name, values in (layer or {}).items():
        if module_name not in module_set:
            raise UnknownModuleError(module_name, f"referenced by {layer_name}")
        if not isinstance(values, Mapping):
            continue
        module = module_set.get(module_name)
        for param_name in values:
            if module.get_param(param_name) is None:
                _logging.warning(
                    f"Ignoring unknown parameter '{param_name}' of module "
                    f"'{module_name}' in {layer_name}"
                )


def pick_value(
    param: Parameter,
    default: Any,
    stored: Mapping[str, Any],
    overrides: Mapping[str, Any],
) -> tuple[Any, ValueSource]:
    """Return the effective raw value of ``param`` and where it came from."""
    if param.name in overrides:
        return overrides[param.name], ValueSource.CLI
    if param.name in stored:
        return stored[param.name], ValueSource.ANSWER
    if default is not None:
        return default, ValueSource.DEFAULT
    return None, ValueSource.UNSET


def resolve(
    module_set: ModuleSet,
    defaults: Values | None = None,
    stored_answers: Values | None = None,
    cli_overrides: Values | None = None,
) -> dict[str, dict[str, Any]]:
    """Assign the final value of every parameter, disabled modules included.

    Args:
        module_set: Modules whose parameters get resolved
        defaults: module -> param -> default; falls back to the definition default
        stored_answers: module -> param -> value, or True/False per module
        cli_overrides: module -> param -> value for options given on the CLI

    Returns:
        Resolved values keyed by module then parameter

    Raises:
        UnknownModuleError: If any layer references a module not in the set
    """
    _check_references(module_set, defaults, "default values")
    _check_references(module_set, stored_answers, "answers file")
    _check_references(module_set, cli_overrides, "command line")

    resolved: dict[str, dict[str, Any]] = {}
    for module in module_set:
        module_defaults = _module_values(defaults, module.name)
        stored = _module_values(stored_answers, module.name)
        overrides = _module_values(cli_overrides, module.name)

        for param in module.params:
            if param.name in module_defaults:
                param.set_default(module_defaults[param.name])
            value, source = pick_value(param, param.default, stored, overrides)
            if source is ValueSource.UNSET:
                param.unset()
            else:
                param.set_value(value, source)

        resolved[module.name] = module.params_hash()
    return resolved


def preview_values(
    module_set: ModuleSet,
    defaults: Values | None = None,
    stored_answers: Values | None = None,
) -> dict[str, dict[str, Any]]:
    """Values the parameters would get without CLI overrides; nothing is mutated."""
    preview: dict[str, dict[str, Any]] = {}
    for module in module_set:
        module_defaults = _module_values(defaults, module.name)
        stored = _module_values(stored_answers, module.name)
        preview[module.name] = {
            p.name: pick_value(p, module_defaults.get(p.name, p.default), stored, {})[0]
            for p in module.params
        }
    return preview


def unset_parameters(module_set: ModuleSet) -> list[Parameter]:
    """Parameters of enabled modules that ended up without any value."""
    return [p for p in module_set.enabled_parameters() if p.source is ValueSource.UNSET]


__all__ = [
    "pick_value",
    "resolve",
    "preview_values",
    "unset_parameters",
]
