"""Problem-type actions as a closed set of typed variants."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Union

from domain.exceptions import ValidationError


class ActionKind(str, Enum):
    GRADE = "grade"
    TEST = "test"
    RUN = "run"
    DEBUG = "debug"
    STDIN = "stdin"


@dataclass(frozen=True)
class GradeAction:
    """Run the grading harness and attach a report card."""

    kind: Literal[ActionKind.GRADE] = ActionKind.GRADE
    button: str = "Grade"
    timeout_seconds: int = 60


@dataclass(frozen=True)
class RunTestsAction:
    """Run the visible tests without recording a grade."""

    kind: Literal[ActionKind.TEST] = ActionKind.TEST
    button: str = "Test"
    timeout_seconds: int = 60


@dataclass(frozen=True)
class RunAction:
    kind: Literal[ActionKind.RUN] = ActionKind.RUN
    button: str = "Run"
    timeout_seconds: int = 30


@dataclass(frozen=True)
class InteractiveAction:
    """Interactive session (debugger or stdin-driven run)."""

    kind: Literal[ActionKind.DEBUG, ActionKind.STDIN] = ActionKind.DEBUG
    button: str = "Debug"
    prompt: str = ""


ProblemTypeAction = Union[GradeAction, RunTestsAction, RunAction, InteractiveAction]


def parse_action_kind(value: str) -> ActionKind | None:
    """Return the action kind for a commit action string, None when empty."""
    if not value:
        return None
    try:
        return ActionKind(value)
    except ValueError:
        raise ValidationError(f"Unknown action: {value!r}") from None


def parse_action(data: dict[str, Any]) -> ProblemTypeAction:
    """Build the typed action variant tagged by ``data["action"]``."""
    kind = parse_action_kind(data.get("action", ""))
    if kind is None:
        raise ValidationError("Action tag is required")

    button = data.get("button") or kind.value.capitalize()
    if kind is ActionKind.GRADE:
        return GradeAction(button=button, timeout_seconds=int(data.get("timeout_seconds", 60)))
    if kind is ActionKind.TEST:
        return RunTestsAction(button=button, timeout_seconds=int(data.get("timeout_seconds", 60)))
    if kind is ActionKind.RUN:
        return RunAction(button=button, timeout_seconds=int(data.get("timeout_seconds", 30)))
    return InteractiveAction(kind=kind, button=button, prompt=data.get("prompt", ""))
