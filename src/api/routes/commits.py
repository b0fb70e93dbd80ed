"""API routes for commits."""

from litestar import Controller, delete, get, post
from litestar.status_codes import HTTP_200_OK
from loguru import logger

from api.schemas.commit import CommitRequest, CommitResponse, DeleteCommitsResponse
from services import CommitService


class MyCommitController(Controller):
    """Commits of the current user."""

    path = "/users/me/assignments/{assignment_id:int}/commits"

    @get("/", status_code=HTTP_200_OK)
    async def list_commits(
        self, assignment_id: int, current_user: int, commit_service: CommitService
    ) -> list[CommitResponse]:
        commits = await commit_service.list_commits(current_user, assignment_id)
        return [CommitResponse.model_validate(c) for c in commits]

    @get("/last", status_code=HTTP_200_OK)
    async def get_last_commit(
        self, assignment_id: int, current_user: int, commit_service: CommitService
    ) -> CommitResponse:
        commit = await commit_service.get_last_commit(current_user, assignment_id)
        return CommitResponse.model_validate(commit)

    @get("/{commit_id:int}", status_code=HTTP_200_OK)
    async def get_commit(
        self, assignment_id: int, commit_id: int, current_user: int, commit_service: CommitService
    ) -> CommitResponse:
        commit = await commit_service.get_commit(commit_id, current_user, assignment_id)
        return CommitResponse.model_validate(commit)

    @post("/", status_code=HTTP_200_OK)
    async def post_commit(
        self,
        assignment_id: int,
        data: CommitRequest,
        current_user: int,
        commit_service: CommitService,
    ) -> CommitResponse:
        """
        Add a commit, or merge into the open one, for the current user.

        The response reflects whether the submission merged into an open
        commit (same id) and whether the commit is now closed.
        """
        logger.debug(
            f"API request to save commit: assignment_id={assignment_id} "
            f"step={data.problem_step_number} files={len(data.submission)}"
        )
        commit = await commit_service.submit(
            current_user, assignment_id, data.to_domain(assignment_id, current_user)
        )
        return CommitResponse.model_validate(commit)


class UserCommitController(Controller):
    """Commits of any user, for instructors."""

    path = "/users/{user_id:int}/assignments/{assignment_id:int}/commits"

    @get("/", status_code=HTTP_200_OK)
    async def list_commits(
        self, user_id: int, assignment_id: int, commit_service: CommitService
    ) -> list[CommitResponse]:
        commits = await commit_service.list_commits(user_id, assignment_id)
        return [CommitResponse.model_validate(c) for c in commits]

    @get("/last", status_code=HTTP_200_OK)
    async def get_last_commit(
        self, user_id: int, assignment_id: int, commit_service: CommitService
    ) -> CommitResponse:
        commit = await commit_service.get_last_commit(user_id, assignment_id)
        return CommitResponse.model_validate(commit)

    @get("/{commit_id:int}", status_code=HTTP_200_OK)
    async def get_commit(
        self, user_id: int, assignment_id: int, commit_id: int, commit_service: CommitService
    ) -> CommitResponse:
        commit = await commit_service.get_commit(commit_id, user_id, assignment_id)
        return CommitResponse.model_validate(commit)

    @delete("/", status_code=HTTP_200_OK)
    async def delete_commits(
        self, user_id: int, assignment_id: int, commit_service: CommitService
    ) -> DeleteCommitsResponse:
        deleted = await commit_service.delete_commits(user_id, assignment_id)
        return DeleteCommitsResponse(deleted=deleted)

    @delete("/{commit_id:int}", status_code=HTTP_200_OK)
    async def delete_commit(
        self, user_id: int, assignment_id: int, commit_id: int, commit_service: CommitService
    ) -> DeleteCommitsResponse:
        await commit_service.delete_commit(commit_id, user_id, assignment_id)
        return DeleteCommitsResponse(deleted=1)
