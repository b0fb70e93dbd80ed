"""API routes for problems and the current user."""

from litestar import Controller, get
from litestar.status_codes import HTTP_200_OK
from loguru import logger

from api.schemas.problem import ProblemResponse, UserResponse
from services import ProblemService


class ProblemController(Controller):
    """Problem definitions, served only after signature verification."""

    path = "/problems"

    @get("/{problem_id:int}", status_code=HTTP_200_OK)
    async def get_problem(self, problem_id: int, problem_service: ProblemService) -> ProblemResponse:
        logger.debug(f"API request for problem: problem_id={problem_id}")
        bundle = await problem_service.load_verified(problem_id)
        return ProblemResponse.from_bundle(bundle)


class UserController(Controller):
    path = "/users"

    @get("/me", status_code=HTTP_200_OK)
    async def get_me(self, current_user: int) -> UserResponse:
        return UserResponse(id=current_user)
