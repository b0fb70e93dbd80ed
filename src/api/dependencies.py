from litestar import Request
from litestar.datastructures import State
from litestar.exceptions import NotAuthorizedException
from loguru import logger

from services import CommitService, ProblemService

USER_HEADER = "x-user-id"


async def provide_current_user(request: Request) -> int:
    """Identify the caller from the ``X-User-ID`` header.

    The auth layer in front of the API validates the ``codegrinder_session``
    cookie (issued at ``/api/v2/users/me/cookie``) and sets this header; the
    API never sees the cookie itself.
    """
    raw = request.headers.get(USER_HEADER)
    if raw is None:
        raise NotAuthorizedException("Missing user identity")
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Rejected malformed user id header: {raw!r}")
        raise NotAuthorizedException("Malformed user identity") from None


async def provide_commit_service(state: State) -> CommitService:
    return state.commit_service


async def provide_problem_service(state: State) -> ProblemService:
    return state.problem_service
