"""Installer modules and their parameter definitions.

A module definition lives in ``<modules_dir>/<name>/parameters.yaml``::

    parameters:
      server:
        doc: NTP server to synchronise with
        type: string
        default: pool.ntp.org
        required: true
        validate:
          - string
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

import yaml

from .errors import ConfigError, ManifestError, UnknownModuleError, format_field_error
from .params import Parameter
from .validators import parse_rule

_logging = logging.getLogger(__name__)

DEFINITION_FILE = "parameters.yaml"


@dataclass
class Module:
    name: str
    enabled: bool = True
    params: list[Parameter] = field(default_factory=list)

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def get_param(self, name: str) -> Parameter | None:
        return next((p for p in self.params if p.name == name), None)

    def params_hash(self) -> dict[str, Any]:
        return {p.name: p.value for p in self.params}


class ModuleSet:
    """Ordered collection of modules, looked up by name."""

    def __init__(self, modules: list[Module] | None = None):
        self._modules: dict[str, Module] = {}
        for module in modules or []:
            self.add(module)

    def add(self, module: Module) -> None:
        if module.name in self._modules:
            raise ValueError(f"Module '{module.name}' is defined twice")
        self._modules[module.name] = module

    def get(self, name: str) -> Module:
        try:
            return self._modules[name]
        except KeyError:
            raise UnknownModuleError(name) from None

    def __iter__(self) -> Iterator[Module]:
        return iter(self._modules.values())

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    @property
    def names(self) -> list[str]:
        return list(self._modules)

    def enabled_modules(self) -> list[Module]:
        return [m for m in self if m.enabled]

    def parameters(self) -> list[Parameter]:
        return [p for m in self for p in m.params]

    def enabled_parameters(self) -> list[Parameter]:
        return [p for m in self.enabled_modules() for p in m.params]

    def apply_enabled(self, flags: dict[str, bool]) -> None:
        """Enable or disable modules by name; unknown names raise."""
        for name, enabled in flags.items():
            module = self.get(name)
            if enabled:
                module.enable()
            else:
                module.disable()

    def defaults(self) -> dict[str, dict[str, Any]]:
        return {m.name: {p.name: p.default for p in m.params} for m in self}

    def answers_data(self) -> dict[str, Any]:
        """Data for the answers file; disabled modules are stored as False."""
        return {m.name: m.params_hash() if m.enabled else False for m in self}


def parse_parameter(module_name: str, name: str, definition: Any) -> Parameter:
    """Build a Parameter from its YAML definition.

    A scalar definition is shorthand for a string parameter with that default.

    Raises:
        ManifestError: If the definition is malformed
    """
    entity = f"Parameter '{module_name}::{name}'"

    if definition is None:
        definition = {}
    elif not isinstance(definition, dict):
        definition = {"default": definition}

    doc = definition.get("doc")
    if doc is None:
        doc_lines = []
    elif isinstance(doc, str):
        doc_lines = doc.strip().splitlines()
    elif isinstance(doc, list):
        doc_lines = [str(line) for line in doc]
    else:
        raise ManifestError(format_field_error(entity, "doc", "must be a string or a list"))

    validate = definition.get("validate") or []
    if not isinstance(validate, list):
        validate = [validate]

    try:
        rules = [parse_rule(spec) for spec in validate]
        return Parameter(
            name=str(name),
            module=module_name,
            doc=doc_lines,
            param_type=definition.get("type", "string"),
            default=definition.get("default"),
            required=bool(definition.get("required", False)),
            rules=rules,
        )
    except ValueError as e:
        raise ManifestError(f"{entity}: {e}") from e


def load_module_definition(name: str, modules_dir: Path) -> list[Parameter]:
    """Read the parameter definitions of module ``name``.

    Raises:
        UnknownModuleError: If the module has no definition file
        ManifestError: If the definition file is malformed
    """
    path = modules_dir / name / DEFINITION_FILE
    if not path.is_file():
        raise UnknownModuleError(name, f"no definition at {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ManifestError(f"Definition of module '{name}' is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"Definition of module '{name}' must be a mapping")

    parameters = data.get("parameters") or {}
    if not isinstance(parameters, dict):
        raise ManifestError(
            format_field_error(f"Module '{name}'", "parameters", "must be a mapping")
        )

    return [parse_parameter(name, p_name, p_def) for p_name, p_def in parameters.items()]


def load_modules(answers: dict[str, Any], modules_dir: Path) -> ModuleSet:
    """Build the ModuleSet for the modules listed in the answers file.

    Each answers entry is a mapping of stored values, True or None
    (enabled) or False (disabled).
    """
    module_set = ModuleSet()
    for name, entry in answers.items():
        if entry is not None and not isinstance(entry, (bool, dict)):
            raise ConfigError(
                f"Answers for module '{name}' must be a mapping, true or false"
            )
        params = load_module_definition(str(name), modules_dir)
        module_set.add(Module(name=str(name), enabled=entry is not False, params=params))
        _logging.debug(f"Loaded module {name} with {len(params)} parameters")
    return module_set


__all__ = [
    "Module",
    "ModuleSet",
    "parse_parameter",
    "load_module_definition",
    "load_modules",
]
