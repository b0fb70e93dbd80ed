"""Unit tests for problem signing and verification."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from domain.exceptions import IntegrityError
from domain.signature import (
    MultiDict,
    canonical_encoding,
    compute_signature,
    format_timestamp,
    format_weight,
    verify_signature,
)


@pytest.fixture
def signed(problem_factory, secret):
    problem, steps = problem_factory()
    problem.id = 3
    problem.created_at = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    problem.updated_at = datetime(2024, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
    return problem, steps, compute_signature(problem, steps, secret)


def test_signature_round_trip(signed, secret):
    problem, steps, signature = signed

    verify_signature(problem, steps, secret, signature)


def test_signature_is_deterministic(signed, secret):
    problem, steps, signature = signed

    assert compute_signature(problem, steps, secret) == signature
    assert compute_signature(problem, list(reversed(steps)), secret) == signature


def test_wrong_secret_fails(signed):
    problem, steps, signature = signed

    with pytest.raises(IntegrityError):
        verify_signature(problem, steps, "other-secret", signature)


def test_garbage_signature_fails(signed, secret):
    problem, steps, _ = signed

    with pytest.raises(IntegrityError):
        verify_signature(problem, steps, secret, "not a signature ✓")


@pytest.mark.parametrize(
    "mutate",
    [
        pytest.param(lambda p, s: setattr(p, "note", p.note + "!"), id="note"),
        pytest.param(lambda p, s: setattr(p, "unique", "hello-there"), id="unique"),
        pytest.param(lambda p, s: setattr(p, "id", 4), id="id"),
        pytest.param(lambda p, s: setattr(p, "problem_type", "python3inout"), id="type"),
        pytest.param(lambda p, s: p.tags.append("extra"), id="tag"),
        pytest.param(lambda p, s: p.options.clear(), id="options"),
        pytest.param(lambda p, s: setattr(p, "updated_at", p.updated_at + timedelta(seconds=1)), id="timestamp"),
        pytest.param(lambda p, s: setattr(s[1], "weight", 3.0), id="weight"),
        pytest.param(lambda p, s: setattr(s[0], "note", "changed"), id="step-note"),
        pytest.param(lambda p, s: s[0].files.__setitem__("main.py", "print('bye')\n"), id="file"),
        pytest.param(lambda p, s: s[1].files.__setitem__("extra.py", ""), id="added-file"),
        pytest.param(lambda p, s: s.pop(), id="dropped-step"),
    ],
)
def test_any_single_mutation_fails(signed, secret, mutate):
    problem, steps, signature = signed

    mutate(problem, steps)

    with pytest.raises(IntegrityError) as exc_info:
        verify_signature(problem, steps, secret, signature)
    assert exc_info.value.problem_id == problem.id


def test_instructions_are_not_signed(signed, secret):
    problem, steps, signature = signed

    steps[0] = replace(steps[0], instructions="<p>regenerated</p>")

    verify_signature(problem, steps, secret, signature)


def test_sub_second_timestamp_changes_round_away(signed, secret):
    problem, steps, signature = signed

    problem.updated_at = problem.updated_at + timedelta(microseconds=400_000)

    verify_signature(problem, steps, secret, signature)


def test_binary_file_content_is_signed(signed, secret):
    problem, steps, _ = signed
    steps[0].files["_doc/logo.png"] = b"\x89PNG\r\n\x1a\n\xff".decode("utf-8", "surrogateescape")

    signature = compute_signature(problem, steps, secret)
    verify_signature(problem, steps, secret, signature)

    steps[0].files["_doc/logo.png"] = b"\x89PNG\r\n\x1a\n\xfe".decode("utf-8", "surrogateescape")
    with pytest.raises(IntegrityError):
        verify_signature(problem, steps, secret, signature)


class TestCanonicalEncoding:
    def test_keys_sorted_and_list_order_kept(self):
        fields = MultiDict()
        fields.add("b", "2")
        fields.set_list("a", ["z", "y"])
        fields.add("c d", "x&y=z")

        assert fields.encode() == "a=z&a=y&b=2&c+d=x%26y%3Dz"

    def test_empty_list_is_omitted(self):
        fields = MultiDict()
        fields.set_list("tags", [])
        fields.add("id", "1")

        assert fields.encode() == "id=1"

    def test_problem_encoding_contains_step_fields(self, signed):
        problem, steps, _ = signed

        encoded = canonical_encoding(problem, steps).decode("ascii")

        assert "createdAt=2024-01-02T03%3A04%3A05Z" in encoded
        assert "problemType=python3unittest" in encoded
        assert "step-2-weight=2.5" in encoded
        assert "step-1-weight=0" in encoded
        assert "step-2-file-tests%2Ftest_main.py=import+main%0A" in encoded
        assert encoded.index("tags=intro") < encoded.index("tags=basics")

    @pytest.mark.parametrize(
        "value, expected",
        [
            (datetime(2024, 1, 1, 0, 0, 0, 499_999, tzinfo=timezone.utc), "2024-01-01T00:00:00Z"),
            (datetime(2024, 1, 1, 0, 0, 0, 500_000, tzinfo=timezone.utc), "2024-01-01T00:00:01Z"),
            (datetime(2024, 12, 31, 23, 59, 59, 900_000, tzinfo=timezone.utc), "2025-01-01T00:00:00Z"),
            (datetime(2024, 1, 1, 2, 0, tzinfo=timezone(timedelta(hours=2))), "2024-01-01T00:00:00Z"),
        ],
    )
    def test_format_timestamp(self, value, expected):
        assert format_timestamp(value) == expected

    @pytest.mark.parametrize(
        "weight, expected",
        [(1.0, "1"), (2.5, "2.5"), (0.1, "0.1"), (0, "0"), (1e21, "1e+21")],
    )
    def test_format_weight(self, weight, expected):
        assert format_weight(weight) == expected
