from services.commit import CommitService
from services.problem import ProblemService


def create_services(store, settings) -> tuple[CommitService, ProblemService]:
    """Factory function to create the commit and problem services over one store."""
    problem_service = ProblemService(problem_repository=store, secret=settings.secret)
    commit_service = CommitService(
        commit_repository=store,
        assignment_repository=store,
        problem_service=problem_service,
        timeout=settings.commit_timeout,
    )
    return commit_service, problem_service


__all__ = ["CommitService", "ProblemService", "create_services"]
