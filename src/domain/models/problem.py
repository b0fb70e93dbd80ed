"""Problem definitions, step normalization and per-step file whitelists."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable
from urllib.parse import quote_plus

from loguru import logger

from domain.exceptions import ValidationError

BEGINNING_OF_TIME = datetime(2016, 1, 1, tzinfo=timezone.utc)

# Step files under these top-level directories only get newline fixes
RAW_DIRECTORIES = frozenset({"in", "out", "_doc"})

DOC_DIRECTORY = "_doc"


@dataclass
class Problem:
    """A versioned exercise definition."""

    id: int
    unique: str
    note: str
    problem_type: str
    tags: list[str] = field(default_factory=list)
    options: list[str] = field(default_factory=list)
    created_at: datetime = BEGINNING_OF_TIME
    updated_at: datetime = BEGINNING_OF_TIME


@dataclass
class ProblemStep:
    """One content increment of a problem.

    Root-level files are added to the student's working directory. Files in
    subdirectories are support content (fixtures, documentation).
    """

    problem_id: int
    step: int  # one-based
    note: str
    instructions: str = ""
    weight: float = 1.0
    files: dict[str, str] = field(default_factory=dict)


@dataclass
class ProblemBundle:
    """A problem together with its steps and the signature over both."""

    problem: Problem
    steps: list[ProblemStep]
    signature: str = ""

    @property
    def whitelists(self) -> list[set[str]]:
        return step_whitelists(self.steps)


def fix_line_endings(contents: str) -> str:
    """Convert CRLF, strip trailing spaces and collapse blank lines at EOF."""
    s = contents.replace("\r\n", "\n") + "\n"
    while " \n" in s:
        s = s.replace(" \n", "\n")
    while s.endswith("\n\n"):
        s = s[:-1]
    if s == "\n":
        s = ""
    return s


def fix_newlines(contents: str) -> str:
    """Convert CRLF and collapse blank lines at EOF."""
    s = contents.replace("\r\n", "\n") + "\n"
    while s.endswith("\n\n"):
        s = s[:-1]
    if s == "\n":
        s = ""
    return s


def _is_text(contents: str) -> bool:
    try:
        contents.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def clean_step_files(files: dict[str, str]) -> dict[str, str]:
    """Normalize line endings of every text file in a step."""
    clean = {}
    for name, contents in files.items():
        parts = name.split("/")
        fixed = contents
        raw = len(parts) > 1 and parts[0] in RAW_DIRECTORIES
        if _is_text(contents) and not raw:
            fixed = fix_line_endings(contents)
            if fixed != contents:
                logger.debug(f"Fixed line endings for {name}")
        elif _is_text(contents):
            fixed = fix_newlines(contents)
            if fixed != contents:
                logger.debug(f"Fixed newlines for {name}")
        clean[name] = fixed
    return clean


def normalize_step(
    step: ProblemStep,
    n: int,
    build_instructions: Callable[[dict[str, str]], str],
) -> None:
    """Renumber, validate and clean one step in place."""
    step.step = n
    step.note = step.note.strip()
    if not step.note:
        raise ValidationError(f"Missing note for step {n}")

    try:
        step.instructions = build_instructions(step.files)
    except ValidationError as e:
        raise ValidationError(f"Error building instructions for step {n}: {e}") from e

    if step.weight <= 0.0:
        step.weight = 1.0

    step.files = clean_step_files(step.files)


def normalize_problem(
    problem: Problem,
    steps: list[ProblemStep],
    now: datetime,
    build_instructions: Callable[[dict[str, str]], str],
) -> None:
    """Validate and canonicalize a problem and its steps in place.

    Raises:
        ValidationError: If any field is missing or out of range
    """
    problem.unique = problem.unique.strip()
    if not problem.unique:
        raise ValidationError("Unique ID cannot be empty")
    escaped = quote_plus(problem.unique)
    if escaped != problem.unique:
        raise ValidationError(
            f"Unique ID must be URL friendly: {problem.unique} is escaped as {escaped}"
        )

    problem.note = problem.note.strip()
    if not problem.note:
        raise ValidationError("Note cannot be empty")

    problem.tags = sorted(tag.strip() for tag in problem.tags)
    problem.options = [option.strip() for option in problem.options]

    if not steps:
        raise ValidationError("Problem must have at least one step")
    for n, step in enumerate(steps, start=1):
        step.problem_id = problem.id
        normalize_step(step, n, build_instructions)

    if problem.created_at < BEGINNING_OF_TIME or problem.created_at > now:
        raise ValidationError(f"Problem created_at time of {problem.created_at} is invalid")
    if problem.updated_at < problem.created_at or problem.updated_at > now:
        raise ValidationError(f"Problem updated_at time of {problem.updated_at} is invalid")


def step_whitelists(steps: list[ProblemStep]) -> list[set[str]]:
    """Return the cumulative set of submittable file names for each step.

    A name introduced at the root of any step stays available in every later
    step. Files in subdirectories are never part of a whitelist.
    """
    lists: list[set[str]] = []
    for step in steps:
        names = set(lists[-1]) if lists else set()
        names.update(name for name in step.files if "/" not in name)
        lists.append(names)
    return lists
