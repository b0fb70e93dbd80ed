"""Service for publishing signed problems and loading them back verified."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from loguru import logger

from domain.exceptions import NotFoundError
from domain.instructions import InstructionBuilder
from domain.models import Problem, ProblemBundle, ProblemStep
from domain.models.problem import normalize_problem
from domain.signature import compute_signature, verify_signature
from infrastructure.storage import ProblemRepositoryProtocol
from services.commit import storage_errors


class ProblemService:
    """Signs problem definitions on the way in and verifies them on the way out."""

    def __init__(
        self,
        *,
        problem_repository: ProblemRepositoryProtocol,
        secret: str,
        instruction_builder: Callable[[dict[str, str]], str] | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """Initialize service with dependencies."""
        self.problem_repository = problem_repository
        self.secret = secret
        self.instruction_builder = instruction_builder or InstructionBuilder()
        self.clock = clock

    async def publish(self, problem: Problem, steps: list[ProblemStep]) -> ProblemBundle:
        """
        Normalize, sign and store a problem.

        A problem with id 0 is created; any other id updates the stored problem
        and keeps its original creation time.

        Raises:
            ValidationError: If the problem or a step is invalid
            NotFoundError: If updating a problem that does not exist
            StorageError: Any persistence failure
        """
        now = self.clock()
        problem = replace(problem, tags=list(problem.tags), options=list(problem.options))
        steps = [replace(step, files=dict(step.files)) for step in steps]

        with storage_errors(f"publishing problem {problem.unique}"):
            async with self.problem_repository.transaction():
                if problem.id == 0:
                    problem.created_at = now
                else:
                    existing = await self.problem_repository.get_problem_bundle(problem.id)
                    if existing is None:
                        raise NotFoundError("problem", problem.id)
                    problem.created_at = existing.problem.created_at
                problem.updated_at = now

                normalize_problem(problem, steps, now, self.instruction_builder)

                # the id is part of the signed content, so store before signing
                bundle = await self.problem_repository.save_problem_bundle(
                    ProblemBundle(problem=problem, steps=steps)
                )
                bundle.signature = compute_signature(bundle.problem, bundle.steps, self.secret)
                bundle = await self.problem_repository.save_problem_bundle(bundle)

        logger.info(
            f"Published problem {bundle.problem.id} ({bundle.problem.unique}) "
            f"with {len(bundle.steps)} step(s)"
        )
        return bundle

    async def load_verified(self, problem_id: int) -> ProblemBundle:
        """
        Load a problem and check its signature before returning it.

        Raises:
            NotFoundError: If the problem does not exist
            IntegrityError: If the stored content does not match its signature
        """
        with storage_errors(f"loading problem {problem_id}"):
            bundle = await self.problem_repository.get_problem_bundle(problem_id)
        if bundle is None:
            raise NotFoundError("problem", problem_id)

        verify_signature(bundle.problem, bundle.steps, self.secret, bundle.signature)
        return bundle
