"""Exit code taxonomy and the run outcome value."""

from dataclasses import dataclass

SUCCESS = 0

EXIT_CODES: dict[str, int] = {
    "invalid_system": 20,
    "invalid_values": 21,
    "manifest_error": 22,
    "no_answer_file": 23,
    "unknown_module": 24,
    "defaults_error": 25,
    "wrong_hostname": 26,
}


def translate_exit_code(code: int | str) -> int:
    """Translate a symbolic exit code into its numeric value.

    Integers are returned unchanged so engine exit statuses pass through.

    Raises:
        AssertionError: If the symbol is not part of the taxonomy
    """
    if isinstance(code, int):
        return code
    if code in EXIT_CODES:
        return EXIT_CODES[code]
    raise AssertionError(f"Unknown exit code {code!r}")


@dataclass(frozen=True)
class RunOutcome:
    code: int | str
    exit_code: int
    message: str = ""

    @classmethod
    def of(cls, code: int | str, message: str = "") -> "RunOutcome":
        return cls(code=code, exit_code=translate_exit_code(code), message=message)

    @property
    def success(self) -> bool:
        return self.exit_code == SUCCESS


__all__ = [
    "SUCCESS",
    "EXIT_CODES",
    "translate_exit_code",
    "RunOutcome",
]
