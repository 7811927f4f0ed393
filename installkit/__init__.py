"""installkit: installer front-end for pluggable configuration modules.

Parameters of each module are resolved from command-line options, a stored
answers file and module defaults, validated, saved and handed to an external
configuration-management engine whose run is supervised in a pseudo-terminal.
"""

__version__ = "0.1.0"

from .config import Configuration
from .errors import (
    ConfigError,
    DefaultsError,
    InstallerError,
    InstallerExit,
    ManifestError,
    NoAnswerFileError,
    UnknownModuleError,
    exit_with,
    format_error,
)
from .exit_codes import EXIT_CODES, RunOutcome, translate_exit_code
from .log import ENGINE_LOGGER, INSTALLER_LOGGER, setup_logging
from .modules import Module, ModuleSet, load_modules
from .params import Parameter, ValueSource
from .resolution import resolve
from .validators import Rule, validate_all

__all__ = [
    "__version__",
    "Configuration",
    "ConfigError",
    "DefaultsError",
    "InstallerError",
    "InstallerExit",
    "ManifestError",
    "NoAnswerFileError",
    "UnknownModuleError",
    "exit_with",
    "format_error",
    "EXIT_CODES",
    "RunOutcome",
    "translate_exit_code",
    "ENGINE_LOGGER",
    "INSTALLER_LOGGER",
    "setup_logging",
    "Module",
    "ModuleSet",
    "load_modules",
    "Parameter",
    "ValueSource",
    "resolve",
    "Rule",
    "validate_all",
]
