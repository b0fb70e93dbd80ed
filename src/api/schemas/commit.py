"""Pydantic schemas for commit API endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from domain.models import Commit, EventMessage, ReportCard


class ReportCardResultSchema(BaseModel):
    """Outcome of one graded test."""

    name: str
    outcome: str
    details: str = ""

    class Config:
        from_attributes = True


class ReportCardSchema(BaseModel):
    """Grading result attached to a commit."""

    passed: bool
    note: str = ""
    duration: float = 0.0
    results: list[ReportCardResultSchema] = Field(default_factory=list)

    class Config:
        from_attributes = True


class EventMessageSchema(BaseModel):
    """One transcript event."""

    event: str
    time: datetime | None = None
    stream_data: str = ""
    exit_status: int | None = None

    class Config:
        from_attributes = True


class CommitRequest(BaseModel):
    """Submission payload; the assignment comes from the URL path."""

    problem_step_number: int = Field(ge=1)
    submission: dict[str, str]
    action: str = ""
    comment: str = ""
    score: float = 0.0
    report_card: ReportCardSchema | None = None
    transcript: list[EventMessageSchema] = Field(default_factory=list)

    def to_domain(self, assignment_id: int, user_id: int) -> Commit:
        report_card = None
        if self.report_card is not None:
            report_card = ReportCard.from_dict(self.report_card.model_dump())
        transcript = []
        for event in self.transcript:
            transcript.append(EventMessage(**event.model_dump(exclude_none=True)))
        return Commit(
            id=0,
            assignment_id=assignment_id,
            problem_step_number=self.problem_step_number,
            user_id=user_id,
            action=self.action,
            comment=self.comment,
            score=self.score,
            report_card=report_card,
            submission=dict(self.submission),
            transcript=transcript,
        )


class CommitResponse(BaseModel):
    """A stored commit."""

    id: int
    assignment_id: int
    problem_step_number: int
    user_id: int
    action: str
    closed: bool
    comment: str
    score: float
    report_card: ReportCardSchema | None = None
    submission: dict[str, str]
    transcript: list[EventMessageSchema] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DeleteCommitsResponse(BaseModel):
    """Number of commits removed."""

    deleted: int
