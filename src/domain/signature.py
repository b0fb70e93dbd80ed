"""Canonical encoding and HMAC signatures over problem content."""

import base64
import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from urllib.parse import quote_plus

from loguru import logger

from domain.exceptions import IntegrityError
from domain.models.problem import Problem, ProblemStep


def _escape(text: str) -> str:
    return quote_plus(text, encoding="utf-8", errors="surrogateescape")


class MultiDict:
    """Ordered multi-valued mapping with unique keys."""

    def __init__(self):
        self._values: dict[str, list[str]] = {}

    def add(self, key: str, value: str) -> None:
        self._values.setdefault(key, []).append(value)

    def set_list(self, key: str, values: list[str]) -> None:
        self._values[key] = list(values)

    def get_list(self, key: str) -> list[str]:
        return list(self._values.get(key, []))

    def encode(self) -> str:
        """Encode as a query string: keys sorted, values in insertion order."""
        parts = []
        for key in sorted(self._values):
            escaped_key = _escape(key)
            for value in self._values[key]:
                parts.append(f"{escaped_key}={_escape(value)}")
        return "&".join(parts)


def format_timestamp(value: datetime) -> str:
    """Round to the nearest second and format as an RFC 3339 UTC timestamp."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    rounded = value.replace(microsecond=0)
    if value.microsecond >= 500_000:
        rounded += timedelta(seconds=1)
    return rounded.strftime("%Y-%m-%dT%H:%M:%SZ")


def format_weight(weight: float) -> str:
    """Shortest round-trip decimal, without a trailing ``.0``."""
    text = repr(float(weight))
    if text.endswith(".0"):
        text = text[:-2]
    return text


def canonical_fields(problem: Problem, steps: list[ProblemStep]) -> MultiDict:
    """Gather every signed field of a problem and its steps."""
    fields = MultiDict()
    fields.add("id", str(problem.id))
    fields.add("unique", problem.unique)
    fields.add("note", problem.note)
    fields.add("problemType", problem.problem_type)
    fields.set_list("tags", problem.tags)
    fields.set_list("options", problem.options)
    fields.add("createdAt", format_timestamp(problem.created_at))
    fields.add("updatedAt", format_timestamp(problem.updated_at))

    for step in sorted(steps, key=lambda s: s.step):
        fields.add(f"step-{step.step}-note", step.note)
        fields.add(f"step-{step.step}-weight", format_weight(step.weight))
        for name in sorted(step.files):
            fields.add(f"step-{step.step}-file-{name}", step.files[name])

    return fields


def canonical_encoding(problem: Problem, steps: list[ProblemStep]) -> bytes:
    return canonical_fields(problem, steps).encode().encode("ascii")


def compute_signature(problem: Problem, steps: list[ProblemStep], secret: str) -> str:
    """Return the base64 HMAC-SHA256 signature of a problem and its steps."""
    mac = hmac.new(secret.encode("utf-8"), canonical_encoding(problem, steps), hashlib.sha256)
    return base64.b64encode(mac.digest()).decode("ascii")


def verify_signature(
    problem: Problem,
    steps: list[ProblemStep],
    secret: str,
    signature: str,
) -> None:
    """Recompute the signature and compare it with the supplied one.

    Raises:
        IntegrityError: If the signatures differ
    """
    expected = compute_signature(problem, steps, secret)
    if not hmac.compare_digest(expected.encode("ascii"), signature.encode("ascii", "replace")):
        logger.error(f"Signature mismatch for problem {problem.id} ({problem.unique})")
        raise IntegrityError(problem.id)
    logger.debug(f"Signature verified for problem {problem.id}")
