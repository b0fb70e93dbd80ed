"""Storage backends for assignments, commits and problems."""

from .interfaces import (
    AssignmentRepositoryProtocol,
    CommitRepositoryProtocol,
    ProblemRepositoryProtocol,
    TransactionalStoreProtocol,
)
from .memory import InMemoryStore

__all__ = [
    "AssignmentRepositoryProtocol",
    "CommitRepositoryProtocol",
    "InMemoryStore",
    "ProblemRepositoryProtocol",
    "TransactionalStoreProtocol",
]
