"""Service for commit sessions: merging, closing and persisting submissions."""

import asyncio
import weakref
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from loguru import logger

from domain.exceptions import CodegrinderError, NotFoundError, StorageError, ValidationError
from domain.models import Commit
from domain.models.actions import parse_action_kind
from domain.models.commit import truncate_transcript
from infrastructure.storage import AssignmentRepositoryProtocol, CommitRepositoryProtocol

if TYPE_CHECKING:
    from services.problem import ProblemService

OPEN_COMMIT_TIMEOUT = timedelta(minutes=20)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Re-raise anything that is not a domain error as ``StorageError``."""
    try:
        yield
    except CodegrinderError:
        raise
    except Exception as e:
        logger.error(f"Storage error while {action}: {e}")
        raise StorageError(f"Storage error while {action}: {e}") from e


class CommitService:
    """Owns commit rows: at most one open commit per assignment.

    Submissions for one assignment are serialized by a per-assignment lock and
    run inside a single store transaction, so the read-decide-write sequence
    never interleaves and a failed write leaves no partial state.
    """

    def __init__(
        self,
        *,
        commit_repository: CommitRepositoryProtocol,
        assignment_repository: AssignmentRepositoryProtocol,
        problem_service: "ProblemService | None" = None,
        timeout: timedelta = OPEN_COMMIT_TIMEOUT,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize service with dependencies."""
        self.commit_repository = commit_repository
        self.assignment_repository = assignment_repository
        self.problem_service = problem_service
        self.timeout = timeout
        self.clock = clock
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, assignment_id: int) -> asyncio.Lock:
        """Return the assignment's lock; entries vanish once no holder or waiter remains."""
        lock = self._locks.get(assignment_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[assignment_id] = lock
        return lock

    async def submit(self, user_id: int, assignment_id: int, incoming: Commit) -> Commit:
        """
        Merge a submission into the assignment's open commit or start a new one.

        Args:
            user_id: Submitting user
            assignment_id: Assignment the submission belongs to
            incoming: Submitted commit data (its id and timestamps are ignored)

        Returns:
            The persisted commit

        Raises:
            ValidationError: Empty submission, unknown action or bad step number
            NotFoundError: The assignment does not exist for this user
            IntegrityError: The assignment's problem fails signature verification
            StorageError: Any persistence failure
        """
        now = self.clock()

        if not incoming.submission:
            raise ValidationError("Commit does not contain any submission files")
        parse_action_kind(incoming.action)

        async with self._lock_for(assignment_id):
            with storage_errors(f"saving commit for assignment {assignment_id}"):
                async with self.commit_repository.transaction():
                    return await self._submit_locked(user_id, assignment_id, incoming, now)

    async def _submit_locked(
        self,
        user_id: int,
        assignment_id: int,
        incoming: Commit,
        now: datetime,
    ) -> Commit:
        assignment = await self.assignment_repository.get_assignment(assignment_id, user_id)
        if assignment is None:
            raise NotFoundError("assignment", assignment_id, f"user {user_id}")

        if self.problem_service is not None:
            bundle = await self.problem_service.load_verified(assignment.problem_id)
            if not 1 <= incoming.problem_step_number <= len(bundle.steps):
                raise ValidationError(
                    f"Step {incoming.problem_step_number} is out of range for problem "
                    f"{bundle.problem.unique} with {len(bundle.steps)} step(s)"
                )

        open_commit = await self.commit_repository.get_open_commit(assignment_id)

        if open_commit is not None and self._is_stale(open_commit, incoming, now):
            open_commit.closed = True
            open_commit.updated_at = now
            await self.commit_repository.save_commit(open_commit)
            logger.info(f"Closed old commit {open_commit.id} due to timeout/wrong step number")
            open_commit = None

        commit = self._resolve(open_commit, incoming, user_id, assignment_id, now)
        saved = await self.commit_repository.save_commit(commit)

        outcome = "closed" if saved.closed else "open"
        logger.info(
            f"Saved commit {saved.id} for assignment {assignment_id} "
            f"step {saved.problem_step_number} ({outcome})"
        )
        return saved

    def _is_stale(self, open_commit: Commit, incoming: Commit, now: datetime) -> bool:
        if now - open_commit.updated_at > self.timeout:
            return True
        return open_commit.problem_step_number != incoming.problem_step_number

    def _resolve(
        self,
        open_commit: Commit | None,
        incoming: Commit,
        user_id: int,
        assignment_id: int,
        now: datetime,
    ) -> Commit:
        """Build the row to write: merged into the open commit or a fresh one."""
        if open_commit is not None:
            commit_id, created_at = open_commit.id, open_commit.created_at
        else:
            commit_id, created_at = 0, now

        # closure follows the submitted transcript; truncation may drop every event
        graded = incoming.is_graded
        transcript = truncate_transcript(incoming.transcript)
        score = incoming.score
        if incoming.report_card is not None:
            score = incoming.report_card.score

        commit = replace(
            incoming,
            id=commit_id,
            assignment_id=assignment_id,
            user_id=user_id,
            closed=graded,
            score=score,
            submission=dict(incoming.submission),
            transcript=transcript,
            created_at=created_at,
            updated_at=now,
        )

        return commit

    async def list_commits(self, user_id: int, assignment_id: int) -> list[Commit]:
        """List commits for a user and assignment ordered by creation time."""
        with storage_errors(f"getting commits for user {user_id} and assignment {assignment_id}"):
            return await self.commit_repository.list_commits(user_id, assignment_id)

    async def get_last_commit(self, user_id: int, assignment_id: int) -> Commit:
        """Get the most recent commit for a user and assignment."""
        with storage_errors(f"loading most recent commit for user {user_id} and assignment {assignment_id}"):
            commit = await self.commit_repository.get_last_commit(user_id, assignment_id)
        if commit is None:
            raise NotFoundError("commit", "", f"user {user_id} and assignment {assignment_id}")
        return commit

    async def get_commit(self, commit_id: int, user_id: int, assignment_id: int) -> Commit:
        """Get one commit scoped by user and assignment."""
        with storage_errors(f"loading commit {commit_id}"):
            commit = await self.commit_repository.get_commit(commit_id, user_id, assignment_id)
        if commit is None:
            raise NotFoundError("commit", commit_id, f"user {user_id} and assignment {assignment_id}")
        return commit

    async def delete_commit(self, commit_id: int, user_id: int, assignment_id: int) -> None:
        """Delete one commit scoped by user and assignment."""
        async with self._lock_for(assignment_id):
            with storage_errors(f"deleting commit {commit_id}"):
                async with self.commit_repository.transaction():
                    deleted = await self.commit_repository.delete_commit(
                        commit_id, user_id, assignment_id
                    )
        if not deleted:
            raise NotFoundError("commit", commit_id, f"user {user_id} and assignment {assignment_id}")
        logger.info(f"Deleted commit {commit_id} for user {user_id} and assignment {assignment_id}")

    async def delete_commits(self, user_id: int, assignment_id: int) -> int:
        """Delete every commit for a user and assignment."""
        async with self._lock_for(assignment_id):
            with storage_errors(f"deleting commits for assignment {assignment_id}"):
                async with self.commit_repository.transaction():
                    count = await self.commit_repository.delete_commits(user_id, assignment_id)
        logger.info(f"Deleted {count} commit(s) for user {user_id} and assignment {assignment_id}")
        return count
