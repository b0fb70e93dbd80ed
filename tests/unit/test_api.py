"""Unit tests for the HTTP API."""

import asyncio

import pytest
from litestar.testing import TestClient

from api.app import create_app
from infrastructure.config import Settings
from services.problem import ProblemService

HEADERS = {"X-User-ID": "42"}
COMMITS = "/api/v2/users/me/assignments/7/commits"


@pytest.fixture
def app(store, secret):
    return create_app(Settings(secret=secret), store=store)


@pytest.fixture
def client(app):
    with TestClient(app=app) as client:
        yield client


def commit_body(**overrides):
    body = {
        "problem_step_number": 1,
        "submission": {"main.py": "print('hi')\n"},
        "action": "",
        "comment": "saving",
    }
    body.update(overrides)
    return body


@pytest.fixture
def published(store, secret, problem_factory):
    """Publish the fixture problem as problem 1, the problem of assignment 7."""
    service = ProblemService(problem_repository=store, secret=secret)
    return asyncio.run(service.publish(*problem_factory()))


def test_identity_is_required(client):
    response = client.get(COMMITS)

    assert response.status_code == 401


def test_current_user(client):
    response = client.get("/api/v2/users/me", headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"id": 42}


def test_post_then_merge(client, published):
    first = client.post(COMMITS, json=commit_body(), headers=HEADERS)
    second = client.post(COMMITS, json=commit_body(comment="again"), headers=HEADERS)

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["comment"] == "again"
    assert second.json()["closed"] is False


def test_report_card_closes_commit(client, published):
    body = commit_body(
        action="grade",
        report_card={
            "passed": False,
            "results": [
                {"name": "test_a", "outcome": "passed"},
                {"name": "test_b", "outcome": "failed"},
            ],
        },
    )

    response = client.post(COMMITS, json=body, headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["closed"] is True
    assert response.json()["score"] == pytest.approx(0.5)


def test_empty_submission_is_bad_request(client, published):
    response = client.post(COMMITS, json=commit_body(submission={}), headers=HEADERS)

    assert response.status_code == 400


def test_step_out_of_range_is_bad_request(client, published):
    response = client.post(COMMITS, json=commit_body(problem_step_number=3), headers=HEADERS)

    assert response.status_code == 400


def test_unknown_assignment_is_not_found(client, published):
    response = client.post("/api/v2/users/me/assignments/99/commits", json=commit_body(), headers=HEADERS)

    assert response.status_code == 404


def test_tampered_problem_is_conflict(client, store, published):
    bundle = asyncio.run(store.get_problem_bundle(published.problem.id))
    bundle.problem.note = "tampered"
    asyncio.run(store.save_problem_bundle(bundle))

    assert client.post(COMMITS, json=commit_body(), headers=HEADERS).status_code == 409
    assert client.get(f"/api/v2/problems/{published.problem.id}", headers=HEADERS).status_code == 409


def test_get_problem(client, published):
    response = client.get(f"/api/v2/problems/{published.problem.id}", headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["unique"] == "hello-world"
    assert data["signature"] == published.signature
    assert [step["whitelist"] for step in data["steps"]] == [["main.py"], ["helper.py", "main.py"]]


def test_queries_and_deletes(client, published):
    created = client.post(COMMITS, json=commit_body(), headers=HEADERS).json()

    listed = client.get(COMMITS, headers=HEADERS).json()
    assert [c["id"] for c in listed] == [created["id"]]
    assert client.get(f"{COMMITS}/last", headers=HEADERS).json()["id"] == created["id"]
    assert client.get(f"{COMMITS}/{created['id']}", headers=HEADERS).status_code == 200

    instructor = "/api/v2/users/42/assignments/7/commits"
    assert client.get(instructor, headers={"X-User-ID": "1"}).json()[0]["id"] == created["id"]

    response = client.delete(f"{instructor}/{created['id']}", headers={"X-User-ID": "1"})
    assert response.status_code == 200
    assert response.json() == {"deleted": 1}
    assert client.get(f"{COMMITS}/last", headers=HEADERS).status_code == 404
    assert client.delete(instructor, headers={"X-User-ID": "1"}).json() == {"deleted": 0}
