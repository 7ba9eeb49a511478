from __future__ import annotations

from dataclasses import dataclass
from typing import Type


class SoftDiscError(Exception):
    pass


class ConfigurationError(SoftDiscError, ValueError):
    pass


class PhysicalParameterError(SoftDiscError, ValueError):
    pass


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of a configuration-time call.

    Setters return one of these instead of raising so that callers can inspect
    the failure; ``raise_for_error`` turns a failure into the matching exception.
    """

    ok: bool
    message: str = ""
    error_type: Type[SoftDiscError] = SoftDiscError

    def __bool__(self) -> bool:
        return self.ok

    @staticmethod
    def success() -> "Outcome":
        return _SUCCESS

    @staticmethod
    def invalid_configuration(message: str) -> "Outcome":
        return Outcome(False, message, ConfigurationError)

    @staticmethod
    def invalid_parameter(message: str) -> "Outcome":
        return Outcome(False, message, PhysicalParameterError)

    def raise_for_error(self) -> None:
        if not self.ok:
            raise self.error_type(self.message)


_SUCCESS = Outcome(True)
