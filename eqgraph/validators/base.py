"""Issue records shared by the connection rules, restore and graph checks."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """How much an issue matters for the equation graph."""

    ERROR = "error"  # blocks a connection or fails validation
    WARNING = "warning"  # suspicious, fails only in strict mode
    INFO = "info"  # a check that could not run


@dataclass
class ValidationIssue:
    """A problem found on a node or a connection.

    Port numbers and similar extras travel in ``details``.
    """

    code: str
    message: str
    severity: Severity
    node: str | None = None
    connection: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def location(self) -> str | None:
        """The node id, else the connection id the issue points at."""
        return self.node or self.connection

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data

    def __str__(self) -> str:
        where = f" [{self.location}]" if self.location else ""
        return f"{self.severity.value.upper()}: {self.code}{where} - {self.message}"


@dataclass
class ValidationResult:
    """Issues collected while checking a connection, an equation or a whole graph.

    Only errors make a result invalid.
    """

    issues: list[ValidationIssue] = field(default_factory=list)

    def of_severity(self, severity: Severity) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == severity]

    @property
    def errors(self) -> list[ValidationIssue]:
        return self.of_severity(Severity.ERROR)

    @property
    def warnings(self) -> list[ValidationIssue]:
        return self.of_severity(Severity.WARNING)

    @property
    def infos(self) -> list[ValidationIssue]:
        return self.of_severity(Severity.INFO)

    @property
    def has_errors(self) -> bool:
        return any(i.severity == Severity.ERROR for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(i.severity == Severity.WARNING for i in self.issues)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def error_messages(self) -> list[str]:
        """Messages of the errors, as shown on a rejected connection."""
        return [i.message for i in self.errors]

    def add_issue(self, issue: ValidationIssue) -> None:
        self.issues.append(issue)

    def add(
        self,
        severity: Severity,
        code: str,
        message: str,
        node: str | None = None,
        connection: str | None = None,
        **details: Any,
    ) -> ValidationIssue:
        """Record an issue and return it."""
        issue = ValidationIssue(code, message, Severity(severity), node, connection, details)
        self.issues.append(issue)
        return issue

    def add_error(
        self,
        code: str,
        message: str,
        node: str | None = None,
        connection: str | None = None,
        **details: Any,
    ) -> ValidationIssue:
        return self.add(Severity.ERROR, code, message, node, connection, **details)

    def add_warning(
        self,
        code: str,
        message: str,
        node: str | None = None,
        connection: str | None = None,
        **details: Any,
    ) -> ValidationIssue:
        return self.add(Severity.WARNING, code, message, node, connection, **details)

    def add_info(
        self,
        code: str,
        message: str,
        node: str | None = None,
        connection: str | None = None,
        **details: Any,
    ) -> ValidationIssue:
        return self.add(Severity.INFO, code, message, node, connection, **details)

    def merge(self, other: "ValidationResult") -> None:
        """Append the issues of another result, keeping their order."""
        self.issues.extend(other.issues)
