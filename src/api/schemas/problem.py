"""Pydantic schemas for problem API endpoints."""

from datetime import datetime

from pydantic import BaseModel

from domain.models import ProblemBundle


class ProblemStepResponse(BaseModel):
    """One step of a verified problem."""

    step: int
    note: str
    instructions: str
    weight: float
    files: dict[str, str]
    whitelist: list[str]


class ProblemResponse(BaseModel):
    """A problem whose signature has been checked."""

    id: int
    unique: str
    note: str
    problem_type: str
    tags: list[str]
    options: list[str]
    created_at: datetime
    updated_at: datetime
    signature: str
    steps: list[ProblemStepResponse]

    @classmethod
    def from_bundle(cls, bundle: ProblemBundle) -> "ProblemResponse":
        problem = bundle.problem
        steps = [
            ProblemStepResponse(
                step=step.step,
                note=step.note,
                instructions=step.instructions,
                weight=step.weight,
                files=step.files,
                whitelist=sorted(whitelist),
            )
            for step, whitelist in zip(bundle.steps, bundle.whitelists)
        ]
        return cls(
            id=problem.id,
            unique=problem.unique,
            note=problem.note,
            problem_type=problem.problem_type,
            tags=problem.tags,
            options=problem.options,
            created_at=problem.created_at,
            updated_at=problem.updated_at,
            signature=bundle.signature,
            steps=steps,
        )


class UserResponse(BaseModel):
    """The authenticated user as seen by the server."""

    id: int
