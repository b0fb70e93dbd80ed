"""Client-local workspace metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DOTFILE_NAME = ".grind"


@dataclass
class ProblemInfo:
    """Local hint about one problem of a problem set."""

    id: int
    step: int
    whitelist: set[str] = field(default_factory=set)


@dataclass
class DotFileInfo:
    """Parsed contents of the per-problem-set metadata file."""

    assignment_id: int
    problems: dict[str, ProblemInfo] = field(default_factory=dict)
    path: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: Path | None = None) -> DotFileInfo:
        problems = {}
        for unique, info in data.get("problems", {}).items():
            whitelist = {name for name, allowed in info.get("whitelist", {}).items() if allowed}
            problems[unique] = ProblemInfo(
                id=int(info["id"]),
                step=int(info["step"]),
                whitelist=whitelist,
            )
        return cls(
            assignment_id=int(data["assignmentID"]),
            problems=problems,
            path=path,
        )
