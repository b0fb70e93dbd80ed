"""Locates and reads the per-problem-set metadata file."""

import json
from pathlib import Path

from loguru import logger

from domain.exceptions import WorkspaceError
from domain.models import DOTFILE_NAME, DotFileInfo, ProblemInfo


def find_dot_file(start_dir: Path | str) -> tuple[DotFileInfo, Path, Path | None]:
    """
    Search a directory and its ancestors for the metadata file.

    Args:
        start_dir: Directory to start searching from

    Returns:
        The parsed metadata, the directory containing it (the problem-set
        root), and the last directory probed before it was found (the
        candidate problem directory, None if found in ``start_dir``)

    Raises:
        WorkspaceError: If no ancestor holds the file or it cannot be parsed
    """
    problem_set_dir = Path(start_dir).resolve()
    problem_dir: Path | None = None

    while not (problem_set_dir / DOTFILE_NAME).is_file():
        parent = problem_set_dir.parent
        if parent == problem_set_dir:
            raise WorkspaceError(f"Unable to find {DOTFILE_NAME} in {start_dir} or an ancestor directory")
        logger.debug(f"Could not find {DOTFILE_NAME} in {problem_set_dir}, trying {parent}")
        problem_dir = problem_set_dir
        problem_set_dir = parent

    path = problem_set_dir / DOTFILE_NAME
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        dotfile = DotFileInfo.from_dict(data, path=path)
    except OSError as e:
        raise WorkspaceError(f"Error reading {path}: {e}") from e
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise WorkspaceError(f"Error parsing {path}: {e}") from e

    return dotfile, problem_set_dir, problem_dir


def identify_problem(
    dotfile: DotFileInfo,
    problem_set_dir: Path,
    problem_dir: Path | None,
) -> tuple[str, ProblemInfo, Path]:
    """
    Work out which problem of the set the workspace refers to.

    Returns:
        The problem's unique key, its local info and its directory

    Raises:
        WorkspaceError: If the problem cannot be identified
    """
    if len(dotfile.problems) == 1:
        # a lone problem keeps its files next to the metadata file
        unique = next(iter(dotfile.problems))
        return unique, dotfile.problems[unique], problem_set_dir

    if problem_dir is None:
        raise WorkspaceError(
            "You must identify the problem within this problem set: "
            "run this from within the problem directory or name it as a parameter"
        )

    unique = problem_dir.name
    info = dotfile.problems.get(unique)
    if info is None:
        raise WorkspaceError(f"Unable to recognize the problem based on the directory name of {unique!r}")
    return unique, info, problem_dir
