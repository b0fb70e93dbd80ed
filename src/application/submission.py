"""Client-side orchestration: resolve the workspace, gather files, submit."""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loguru import logger

from domain.models import Commit, DotFileInfo, ProblemInfo
from infrastructure.grinder_client import GrinderClient
from infrastructure.workspace import find_dot_file, gather_files, identify_problem


@dataclass
class PreparedCommit:
    """A commit gathered from disk and ready to send."""

    unique: str
    info: ProblemInfo
    dotfile: DotFileInfo
    problem_dir: Path
    commit: Commit

    def payload(self) -> dict[str, Any]:
        return {
            "problem_step_number": self.commit.problem_step_number,
            "action": self.commit.action,
            "comment": self.commit.comment,
            "submission": dict(self.commit.submission),
        }


class SubmissionOrchestrator:
    """Coordinates the steps of saving a workspace to the server."""

    def __init__(self, client: GrinderClient):
        self.client = client

    def gather(self, start_dir: Path | str, now: datetime | None = None) -> PreparedCommit:
        """
        Build a commit from the files of the problem containing ``start_dir``.

        Raises:
            WorkspaceError: If the workspace cannot be resolved or is incomplete
        """
        now = now or datetime.now(timezone.utc)

        logger.debug("Step 1: Locating workspace metadata")
        dotfile, problem_set_dir, problem_dir = find_dot_file(start_dir)

        logger.debug("Step 2: Identifying problem")
        unique, info, problem_dir = identify_problem(dotfile, problem_set_dir, problem_dir)

        logger.debug(f"Step 3: Gathering files for {unique} step {info.step}")
        files = gather_files(problem_dir, info.whitelist)

        commit = Commit(
            id=0,
            assignment_id=dotfile.assignment_id,
            problem_step_number=info.step,
            user_id=0,
            submission=files,
            created_at=now,
            updated_at=now,
        )
        return PreparedCommit(
            unique=unique,
            info=info,
            dotfile=dotfile,
            problem_dir=problem_dir,
            commit=commit,
        )

    async def save(self, start_dir: Path | str, comment: str = "saving from command line") -> dict[str, Any]:
        """
        Gather the workspace and send it as a plain save (no action).

        Raises:
            WorkspaceError: If the workspace cannot be resolved or is incomplete
            TransportError: If the server rejects the commit
        """
        prepared = self.gather(start_dir)
        prepared.commit.action = ""
        prepared.commit.comment = comment

        logger.debug("Step 4: Sending commit")
        saved = await self.client.post_commit(prepared.dotfile.assignment_id, prepared.payload())

        logger.info(f"Problem {prepared.unique} step {prepared.info.step} saved")
        return saved
