"""Domain models package."""

from .actions import ActionKind, ProblemTypeAction, parse_action
from .commit import Assignment, Commit, EventMessage, ReportCard, ReportCardResult
from .dotfile import DOTFILE_NAME, DotFileInfo, ProblemInfo
from .problem import Problem, ProblemBundle, ProblemStep, step_whitelists

__all__ = [
    "ActionKind",
    "Assignment",
    "Commit",
    "DOTFILE_NAME",
    "DotFileInfo",
    "EventMessage",
    "Problem",
    "ProblemBundle",
    "ProblemInfo",
    "ProblemStep",
    "ProblemTypeAction",
    "ReportCard",
    "ReportCardResult",
    "parse_action",
    "step_whitelists",
]
