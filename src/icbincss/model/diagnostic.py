"""Diagnostic model: structured findings from store verification."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    """Severity level for a diagnostic message."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


@dataclass(frozen=True)
class Diagnostic:
    """A single verification finding about the persisted store.

    Attributes:
        rule: Identifier for the verification rule that produced this diagnostic.
        severity: How serious the issue is.
        message: Human-readable description of the problem.
        table: The store table involved, if applicable.
        row_id: The offending row id, if applicable.
        fix: Suggested remediation, if available.
    """

    rule: str
    severity: Severity
    message: str
    table: str | None = None
    row_id: str | None = None
    fix: str | None = None

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING

    def __str__(self) -> str:
        location = ""
        if self.table and self.row_id:
            location = f" [{self.table}:{self.row_id}]"
        elif self.table:
            location = f" [{self.table}]"
        return f"{self.severity.value}{location}: {self.message}"
