"""Litestar application wiring."""

from litestar import Litestar, MediaType, Request, Response, Router
from litestar.datastructures import State
from litestar.di import Provide
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)
from loguru import logger

from api.dependencies import provide_commit_service, provide_current_user, provide_problem_service
from api.routes import MyCommitController, ProblemController, UserCommitController, UserController
from domain.exceptions import (
    CodegrinderError,
    IntegrityError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from infrastructure.config import Settings, configure_logging, load_settings
from infrastructure.storage import InMemoryStore
from services import create_services

ERROR_STATUS = {
    ValidationError: HTTP_400_BAD_REQUEST,
    NotFoundError: HTTP_404_NOT_FOUND,
    IntegrityError: HTTP_409_CONFLICT,
    StorageError: HTTP_500_INTERNAL_SERVER_ERROR,
}


def handle_domain_error(request: Request, exc: CodegrinderError) -> Response:
    status = HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            status = code
            break
    logger.warning(f"{request.method} {request.url.path} failed with {status}: {exc}")
    return Response(
        content={"status_code": status, "detail": str(exc)},
        status_code=status,
        media_type=MediaType.JSON,
    )


def create_app(settings: Settings | None = None, store: InMemoryStore | None = None) -> Litestar:
    """Build the API application around one store."""
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    store = store if store is not None else InMemoryStore()

    commit_service, problem_service = create_services(store, settings)

    api = Router(
        path="/api/v2",
        route_handlers=[MyCommitController, UserCommitController, ProblemController, UserController],
    )

    return Litestar(
        route_handlers=[api],
        dependencies={
            "current_user": Provide(provide_current_user),
            "commit_service": Provide(provide_commit_service),
            "problem_service": Provide(provide_problem_service),
        },
        exception_handlers={CodegrinderError: handle_domain_error},
        state=State({"commit_service": commit_service, "problem_service": problem_service, "store": store}),
    )
