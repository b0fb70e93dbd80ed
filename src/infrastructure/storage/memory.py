"""In-process store with transactional writes."""

import copy
import itertools
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from contextvars import ContextVar

from loguru import logger

from domain.models import Assignment, Commit, ProblemBundle

from .interfaces import (
    AssignmentRepositoryProtocol,
    CommitRepositoryProtocol,
    ProblemRepositoryProtocol,
)


class InMemoryStore(AssignmentRepositoryProtocol, CommitRepositoryProtocol, ProblemRepositoryProtocol):
    """Assignments, commits and problem bundles held in memory.

    Every write made inside ``transaction()`` is journaled and undone if the
    block raises. Rows are copied on the way in and out so callers never share
    state with the store.
    """

    def __init__(self):
        self._assignments: dict[int, Assignment] = {}
        self._commits: dict[int, Commit] = {}
        self._problems: dict[int, ProblemBundle] = {}
        self._commit_ids = itertools.count(1)
        self._problem_ids = itertools.count(1)
        self._journal: ContextVar[list[Callable[[], None]] | None] = ContextVar(
            f"journal-{id(self)}", default=None
        )

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if self._journal.get() is not None:
            # nested scopes join the outer transaction
            yield
            return

        undo: list[Callable[[], None]] = []
        token = self._journal.set(undo)
        try:
            yield
        except BaseException:
            logger.debug(f"Rolling back {len(undo)} write(s)")
            for action in reversed(undo):
                action()
            raise
        finally:
            self._journal.reset(token)

    def _record(self, table: dict, key: int) -> None:
        undo = self._journal.get()
        if undo is None:
            return
        if key in table:
            previous = table[key]
            undo.append(lambda: table.__setitem__(key, previous))
        else:
            undo.append(lambda: table.pop(key, None))

    # assignments

    def add_assignment(self, assignment: Assignment) -> None:
        self._assignments[assignment.id] = assignment

    async def get_assignment(self, assignment_id: int, user_id: int) -> Assignment | None:
        assignment = self._assignments.get(assignment_id)
        if assignment is None or assignment.user_id != user_id:
            return None
        return assignment

    # commits

    async def get_open_commit(self, assignment_id: int) -> Commit | None:
        for commit in self._commits.values():
            if commit.assignment_id == assignment_id and not commit.closed:
                return copy.deepcopy(commit)
        return None

    async def save_commit(self, commit: Commit) -> Commit:
        stored = copy.deepcopy(commit)
        if stored.id == 0:
            stored.id = next(self._commit_ids)
        self._record(self._commits, stored.id)
        self._commits[stored.id] = stored
        return copy.deepcopy(stored)

    async def list_commits(self, user_id: int, assignment_id: int) -> list[Commit]:
        commits = [
            copy.deepcopy(c)
            for c in self._commits.values()
            if c.user_id == user_id and c.assignment_id == assignment_id
        ]
        return sorted(commits, key=lambda c: (c.created_at, c.id))

    async def get_last_commit(self, user_id: int, assignment_id: int) -> Commit | None:
        commits = await self.list_commits(user_id, assignment_id)
        return commits[-1] if commits else None

    async def get_commit(self, commit_id: int, user_id: int, assignment_id: int) -> Commit | None:
        commit = self._commits.get(commit_id)
        if commit is None or commit.user_id != user_id or commit.assignment_id != assignment_id:
            return None
        return copy.deepcopy(commit)

    async def delete_commit(self, commit_id: int, user_id: int, assignment_id: int) -> bool:
        if await self.get_commit(commit_id, user_id, assignment_id) is None:
            return False
        self._record(self._commits, commit_id)
        del self._commits[commit_id]
        return True

    async def delete_commits(self, user_id: int, assignment_id: int) -> int:
        doomed = [c.id for c in await self.list_commits(user_id, assignment_id)]
        for commit_id in doomed:
            self._record(self._commits, commit_id)
            del self._commits[commit_id]
        return len(doomed)

    # problems

    async def get_problem_bundle(self, problem_id: int) -> ProblemBundle | None:
        bundle = self._problems.get(problem_id)
        return copy.deepcopy(bundle) if bundle is not None else None

    async def save_problem_bundle(self, bundle: ProblemBundle) -> ProblemBundle:
        stored = copy.deepcopy(bundle)
        if stored.problem.id == 0:
            stored.problem.id = next(self._problem_ids)
            for step in stored.steps:
                step.problem_id = stored.problem.id
        self._record(self._problems, stored.problem.id)
        self._problems[stored.problem.id] = stored
        return copy.deepcopy(stored)
