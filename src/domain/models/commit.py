"""Commit session records and grading results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from loguru import logger

TRANSCRIPT_EVENT_COUNT_LIMIT = 500
TRANSCRIPT_DATA_LIMIT = 100_000


@dataclass
class ReportCardResult:
    """Outcome of one graded test."""

    name: str
    outcome: str
    details: str = ""

    @property
    def passed(self) -> bool:
        return self.outcome == "passed"


@dataclass
class ReportCard:
    """Grading result attached to a commit."""

    passed: bool
    note: str = ""
    duration: float = 0.0
    results: list[ReportCardResult] = field(default_factory=list)

    @property
    def score(self) -> float:
        """Fraction of passing results, or all-or-nothing without results."""
        if not self.results:
            return 1.0 if self.passed else 0.0
        passed = sum(1 for result in self.results if result.passed)
        return passed / len(self.results)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReportCard:
        return cls(
            passed=bool(data.get("passed", False)),
            note=data.get("note", ""),
            duration=float(data.get("duration", 0.0)),
            results=[ReportCardResult(**r) for r in data.get("results", [])],
        )


@dataclass
class EventMessage:
    """One execution event captured while a commit was run."""

    event: str
    time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    stream_data: str = ""
    exit_status: int | None = None

    @property
    def size(self) -> int:
        return len(self.stream_data.encode("utf-8", "surrogateescape"))


@dataclass
class Commit:
    """One submission session for an assignment step.

    An open commit absorbs further submissions for the same step; a closed one
    is never modified again.
    """

    id: int
    assignment_id: int
    problem_step_number: int
    user_id: int
    action: str = ""
    closed: bool = False
    comment: str = ""
    score: float = 0.0
    report_card: ReportCard | None = None
    submission: dict[str, str] = field(default_factory=dict)
    transcript: list[EventMessage] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_graded(self) -> bool:
        return self.report_card is not None or len(self.transcript) > 0


@dataclass(frozen=True)
class Assignment:
    """A user's enrollment in one problem."""

    id: int
    user_id: int
    problem_id: int


def truncate_transcript(events: list[EventMessage]) -> list[EventMessage]:
    """Drop events beyond the event-count and data-size budgets."""
    kept: list[EventMessage] = []
    total = 0
    for event in events:
        if len(kept) >= TRANSCRIPT_EVENT_COUNT_LIMIT:
            break
        if total + event.size > TRANSCRIPT_DATA_LIMIT:
            break
        kept.append(event)
        total += event.size

    if len(kept) < len(events):
        logger.warning(
            f"Transcript truncated from {len(events)} to {len(kept)} events ({total} bytes kept)"
        )
    return kept
