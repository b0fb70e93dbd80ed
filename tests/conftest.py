"""Shared fixtures for the test suite."""

from datetime import datetime, timedelta, timezone

import pytest

from domain.models import Assignment, Commit, Problem, ProblemStep
from infrastructure.storage import InMemoryStore

SECRET = "test-secret"


class FakeClock:
    """Controllable replacement for ``datetime.now``."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    store = InMemoryStore()
    store.add_assignment(Assignment(id=7, user_id=42, problem_id=1))
    return store


def make_commit(step: int = 1, **overrides) -> Commit:
    fields = {
        "id": 0,
        "assignment_id": 7,
        "problem_step_number": step,
        "user_id": 42,
        "submission": {"main.py": "print('hello')\n"},
    }
    fields.update(overrides)
    return Commit(**fields)


def make_problem() -> tuple[Problem, list[ProblemStep]]:
    problem = Problem(
        id=0,
        unique="hello-world",
        note="Say hello",
        problem_type="python3unittest",
        tags=["intro", "basics"],
        options=["--quiet"],
    )
    steps = [
        ProblemStep(
            problem_id=0,
            step=1,
            note="Print a greeting",
            weight=0,
            files={
                "main.py": "print('hi')\r\n\r\n\r\n",
                "_doc/index.md": "# Step one\n\nWrite `main.py`.\n",
                "in/1.txt": "a  \r\n",
            },
        ),
        ProblemStep(
            problem_id=0,
            step=2,
            note="Add tests",
            weight=2.5,
            files={
                "helper.py": "def helper():  \n    return 1\n",
                "tests/test_main.py": "import main\n",
                "_doc/index.html": "<p>Now add tests</p>",
            },
        ),
    ]
    return problem, steps


@pytest.fixture
def commit_factory():
    return make_commit


@pytest.fixture
def problem_factory():
    return make_problem


@pytest.fixture
def secret():
    return SECRET
