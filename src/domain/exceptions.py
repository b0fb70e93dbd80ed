"""Domain exceptions for commit sessions, problems and workspaces."""


class CodegrinderError(Exception):
    """Base error for the commit and problem core."""

    pass


class ValidationError(CodegrinderError, ValueError):
    """Malformed identifiers, empty submissions or invalid problem content."""

    pass


class NotFoundError(CodegrinderError, LookupError):
    """Assignment, commit or problem absent for the requested scope."""

    def __init__(self, kind: str, identifier: object, scope: str = ""):
        self.kind = kind
        self.identifier = identifier
        self.scope = scope
        message = f"No {kind} {identifier} found"
        if scope:
            message = f"{message} for {scope}"
        super().__init__(message)


class IntegrityError(CodegrinderError):
    """Problem signature does not match its content."""

    def __init__(self, problem_id: int, message: str = "signature mismatch"):
        self.problem_id = problem_id
        super().__init__(f"Problem {problem_id}: {message}")


class StorageError(CodegrinderError):
    """Transaction or persistence failure."""

    pass


class WorkspaceError(CodegrinderError):
    """Client workspace could not be resolved or is incomplete."""

    def __init__(self, message: str, missing: list[str] | None = None):
        self.missing = list(missing or [])
        if self.missing:
            details = "\n".join(f"  {name} not found" for name in self.missing)
            message = f"{message}\n{details}"
        super().__init__(message)
