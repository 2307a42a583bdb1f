"""
Error types shared across agileflow.

Kept in one module so the workflow, issue store and commands can raise and
catch the same classes without circular imports.
"""


class AgileError(Exception):
    """Base class for every error a command reports to the operator."""

    exit_code = 1

    def details(self) -> list[str]:
        """Extra lines printed under the main message."""
        return []


class NotFound(AgileError):
    """An issue, spec or guidance document does not exist."""


class IssueNotFound(NotFound):
    def __init__(self, name: str, suggestion: str | None = None):
        self.name = name
        self.suggestion = suggestion
        super().__init__(f"Issue '{name}' not found")

    def details(self) -> list[str]:
        if self.suggestion:
            return [f"Did you mean '{self.suggestion}'?"]
        return []


class SpecNotFound(NotFound):
    def __init__(self, issue: str, spec: str, suggestion: str | None = None):
        self.issue = issue
        self.spec = spec
        self.suggestion = suggestion
        super().__init__(f"Spec '{spec}' not found in issue '{issue}'")

    def details(self) -> list[str]:
        if self.suggestion:
            return [f"Did you mean '{self.suggestion}'?"]
        return []


class GuidanceNotFound(NotFound):
    def __init__(self, issue: str):
        self.issue = issue
        super().__init__(f"Issue '{issue}' has no technical guidance document")


class InvalidTransition(AgileError):
    """Raised when the requested stage is not adjacent to the current one."""

    def __init__(self, from_stage: str, to_stage: str, allowed: list[str], issue: str = ""):
        self.from_stage = from_stage
        self.to_stage = to_stage
        self.allowed = allowed
        self.issue = issue
        super().__init__(
            f"Invalid transition: {from_stage} -> {to_stage}"
            + (f" (issue: {issue})" if issue else "")
        )

    def details(self) -> list[str]:
        return [f"Allowed from {self.from_stage}: {', '.join(self.allowed)}"]


class ValidationFailed(AgileError):
    """A readiness gate or BDD check failed. Carries every reason."""

    def __init__(self, message: str, missing: list[str]):
        self.missing = list(missing)
        super().__init__(message)

    def details(self) -> list[str]:
        return [f"- {m}" for m in self.missing]


class MalformedInput(AgileError):
    """An argument is not a valid slug or enum value."""

    exit_code = 2

    def __init__(self, message: str, accepted: list[str] | tuple[str, ...] | None = None):
        self.accepted = list(accepted) if accepted else []
        super().__init__(message)

    def details(self) -> list[str]:
        if self.accepted:
            return [f"Accepted values: {', '.join(self.accepted)}"]
        return []


class AlreadyExists(AgileError):
    """Refusing to overwrite an existing issue or spec."""

    exit_code = 2
