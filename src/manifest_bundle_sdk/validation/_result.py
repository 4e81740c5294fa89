from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

Level = Literal["error", "warning"]


@dataclass(frozen=True)
class ValidationIssue:
    """One finding about a bundle.

    entry is the member name the finding is about, or None when it concerns the
    bundle as a whole (e.g. a missing manifest).
    """

    level: Level
    message: str
    entry: str | None = None

    def __str__(self) -> str:
        return f"{self.entry}: {self.message}" if self.entry else self.message


@dataclass
class ValidationResult:
    """Findings for one bundle; errors block installation, warnings never do."""

    issues: list[ValidationIssue] = field(default_factory=list)

    def error(self, message: str, entry: str | None = None) -> None:
        self.issues.append(ValidationIssue("error", message, entry))

    def warn(self, message: str, entry: str | None = None) -> None:
        self.issues.append(ValidationIssue("warning", message, entry))

    def _of_level(self, level: Level) -> list[ValidationIssue]:
        return [i for i in self.issues if i.level == level]

    @property
    def errors(self) -> list[ValidationIssue]:
        return self._of_level("error")

    @property
    def warnings(self) -> list[ValidationIssue]:
        return self._of_level("warning")

    @property
    def valid(self) -> bool:
        return not self.errors

    def summary(self) -> str:
        return "; ".join(str(i) for i in self.errors)
