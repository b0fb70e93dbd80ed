"""Protocol interfaces for persistent storage."""

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from domain.models import Assignment, Commit, ProblemBundle


class TransactionalStoreProtocol(Protocol):
    """Store whose writes inside ``transaction()`` commit or roll back together."""

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Open a transaction scope."""
        ...


class AssignmentRepositoryProtocol(Protocol):
    """Protocol for assignment lookups."""

    async def get_assignment(self, assignment_id: int, user_id: int) -> Assignment | None:
        """Get an assignment owned by a user."""
        ...


class CommitRepositoryProtocol(TransactionalStoreProtocol, Protocol):
    """Protocol for commit rows."""

    async def get_open_commit(self, assignment_id: int) -> Commit | None:
        """Get the open commit of an assignment, if any."""
        ...

    async def save_commit(self, commit: Commit) -> Commit:
        """Insert (id 0) or update a commit and return it with its id."""
        ...

    async def list_commits(self, user_id: int, assignment_id: int) -> list[Commit]:
        """List commits ordered by creation time."""
        ...

    async def get_last_commit(self, user_id: int, assignment_id: int) -> Commit | None:
        """Get the most recently created commit."""
        ...

    async def get_commit(self, commit_id: int, user_id: int, assignment_id: int) -> Commit | None:
        """Get one commit scoped by user and assignment."""
        ...

    async def delete_commit(self, commit_id: int, user_id: int, assignment_id: int) -> bool:
        """Delete one commit; return whether a row was removed."""
        ...

    async def delete_commits(self, user_id: int, assignment_id: int) -> int:
        """Delete all commits for a user and assignment; return the count."""
        ...


class ProblemRepositoryProtocol(TransactionalStoreProtocol, Protocol):
    """Protocol for signed problem definitions."""

    async def get_problem_bundle(self, problem_id: int) -> ProblemBundle | None:
        """Get a problem with its steps and stored signature."""
        ...

    async def save_problem_bundle(self, bundle: ProblemBundle) -> ProblemBundle:
        """Insert (id 0) or update a problem bundle."""
        ...
