"""Unit tests for publishing and verifying problems."""

from unittest.mock import AsyncMock

import pytest

from domain.exceptions import IntegrityError, NotFoundError, StorageError, ValidationError
from domain.signature import verify_signature
from services.problem import ProblemService


@pytest.fixture
def service(store, secret, clock):
    return ProblemService(problem_repository=store, secret=secret, clock=clock)


@pytest.mark.asyncio
async def test_publish_signs_and_normalizes(service, problem_factory, secret, clock):
    problem, steps = problem_factory()

    bundle = await service.publish(problem, steps)

    assert bundle.problem.id != 0
    assert bundle.problem.created_at == clock.now
    assert bundle.problem.tags == ["basics", "intro"]
    assert [s.problem_id for s in bundle.steps] == [bundle.problem.id] * 2
    assert bundle.steps[0].weight == 1.0
    assert bundle.steps[0].files["main.py"] == "print('hi')\n"
    assert bundle.steps[0].files["in/1.txt"] == "a  \n"
    assert "<h1>Step one</h1>" in bundle.steps[0].instructions
    assert bundle.whitelists == [{"main.py"}, {"main.py", "helper.py"}]
    verify_signature(bundle.problem, bundle.steps, secret, bundle.signature)


@pytest.mark.asyncio
async def test_publish_does_not_mutate_arguments(service, problem_factory):
    problem, steps = problem_factory()

    await service.publish(problem, steps)

    assert problem.id == 0
    assert problem.tags == ["intro", "basics"]
    assert steps[0].files["main.py"] == "print('hi')\r\n\r\n\r\n"


@pytest.mark.asyncio
async def test_load_verified_round_trip(service, problem_factory):
    published = await service.publish(*problem_factory())

    loaded = await service.load_verified(published.problem.id)

    assert loaded.problem == published.problem
    assert loaded.steps == published.steps
    assert loaded.signature == published.signature


@pytest.mark.asyncio
async def test_load_verified_missing(service):
    with pytest.raises(NotFoundError):
        await service.load_verified(99)


@pytest.mark.asyncio
async def test_tampered_file_is_detected(service, store, problem_factory):
    published = await service.publish(*problem_factory())

    stored = await store.get_problem_bundle(published.problem.id)
    stored.steps[1].files["helper.py"] = "def helper():\n    return 2\n"
    await store.save_problem_bundle(stored)

    with pytest.raises(IntegrityError):
        await service.load_verified(published.problem.id)


@pytest.mark.asyncio
async def test_republish_keeps_creation_time(service, problem_factory, clock):
    published = await service.publish(*problem_factory())
    created = clock.now

    clock.advance(hours=1)
    problem, steps = problem_factory()
    problem.id = published.problem.id
    problem.note = "Say hello again"
    updated = await service.publish(problem, steps)

    assert updated.problem.id == published.problem.id
    assert updated.problem.created_at == created
    assert updated.problem.updated_at == clock.now
    assert updated.signature != published.signature
    assert (await service.load_verified(updated.problem.id)).problem.note == "Say hello again"


@pytest.mark.asyncio
async def test_republish_unknown_problem(service, problem_factory):
    problem, steps = problem_factory()
    problem.id = 12

    with pytest.raises(NotFoundError):
        await service.publish(problem, steps)


@pytest.mark.asyncio
async def test_invalid_problem_stores_nothing(service, store, problem_factory):
    problem, steps = problem_factory()
    del steps[1].files["_doc/index.html"]

    with pytest.raises(ValidationError, match="step 2"):
        await service.publish(problem, steps)

    assert await store.get_problem_bundle(1) is None


@pytest.mark.asyncio
async def test_failed_signing_write_rolls_back(service, store, problem_factory, monkeypatch):
    original_save = store.save_problem_bundle
    calls = []

    async def flaky_save(bundle):
        calls.append(bundle)
        if len(calls) == 2:
            raise RuntimeError("disk full")
        return await original_save(bundle)

    monkeypatch.setattr(store, "save_problem_bundle", flaky_save)

    with pytest.raises(StorageError):
        await service.publish(*problem_factory())

    assert await store.get_problem_bundle(1) is None


@pytest.mark.asyncio
async def test_load_storage_failure():
    repository = AsyncMock()
    repository.get_problem_bundle.side_effect = RuntimeError("connection lost")
    service = ProblemService(problem_repository=repository, secret="s")

    with pytest.raises(StorageError):
        await service.load_verified(1)


@pytest.mark.asyncio
async def test_republish_with_clock_behind_creation_time(service, problem_factory, clock):
    published = await service.publish(*problem_factory())

    clock.advance(minutes=-5)
    problem, steps = problem_factory()
    problem.id = published.problem.id

    with pytest.raises(ValidationError):
        await service.publish(problem, steps)
