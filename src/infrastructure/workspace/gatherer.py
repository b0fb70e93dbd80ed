"""Collects the whitelisted working files of a problem directory."""

from collections.abc import Callable, Iterable
from pathlib import Path

from loguru import logger

from domain.exceptions import WorkspaceError
from domain.models import DOTFILE_NAME


def list_candidate_files(problem_dir: Path) -> list[str]:
    """
    List regular files under a problem directory.

    Returns:
        Sorted POSIX paths relative to ``problem_dir``, without directories
        or the metadata file
    """
    candidates = []
    for path in problem_dir.rglob("*"):
        if not path.is_file() or path.is_symlink():
            continue
        if path.name == DOTFILE_NAME:
            continue
        candidates.append(path.relative_to(problem_dir).as_posix())
    return sorted(candidates)


def select_files(
    candidates: Iterable[str],
    whitelist: set[str],
    read: Callable[[str], str],
) -> dict[str, str]:
    """
    Keep and read the whitelisted candidates.

    Args:
        candidates: Relative file names found in the workspace
        whitelist: Names the student may submit at the current step
        read: Returns the contents of a relative file name

    Returns:
        Mapping of file name to contents

    Raises:
        WorkspaceError: If a whitelisted file is missing or cannot be read
    """
    files: dict[str, str] = {}
    for name in candidates:
        if name not in whitelist:
            logger.warning(f"Skipping {name!r} which is not a file introduced by the problem")
            continue
        try:
            files[name] = read(name)
        except OSError as e:
            raise WorkspaceError(f"Error reading {name}: {e}") from e

    if len(files) != len(whitelist):
        missing = sorted(name for name in whitelist if name not in files)
        for name in missing:
            logger.error(f"  {name} not found")
        raise WorkspaceError("Did not find all the expected files", missing=missing)

    return files


def gather_files(problem_dir: Path, whitelist: set[str]) -> dict[str, str]:
    """Walk a problem directory and read every whitelisted file."""
    problem_dir = Path(problem_dir)

    def read(name: str) -> str:
        return (problem_dir / name).read_bytes().decode("utf-8", "surrogateescape")

    try:
        candidates = list_candidate_files(problem_dir)
    except OSError as e:
        raise WorkspaceError(f"Walk error in {problem_dir}: {e}") from e

    logger.debug(f"Found {len(candidates)} candidate file(s) in {problem_dir}")
    return select_files(candidates, whitelist, read)
