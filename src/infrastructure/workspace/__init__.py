"""Client workspace discovery and file gathering."""

from .dotfile import find_dot_file, identify_problem
from .gatherer import gather_files, list_candidate_files, select_files

__all__ = [
    "find_dot_file",
    "gather_files",
    "identify_problem",
    "list_candidate_files",
    "select_files",
]
