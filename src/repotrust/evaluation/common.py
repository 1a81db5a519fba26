"""Helpers shared by evaluators."""

from collections.abc import Iterable

from repotrust.checker.errors import InternalError
from repotrust.models.results import Finding, Outcome


def require_probes(findings: list[Finding], expected: Iterable[str]) -> None:
    """Ensure findings came from exactly the expected set of probes.

    Raises:
        InternalError: If a probe is missing or an unexpected one is present.
    """
    got = {f.probe for f in findings}
    want = set(expected)
    if got != want:
        missing = ", ".join(sorted(want - got)) or "-"
        extra = ", ".join(sorted(got - want)) or "-"
        raise InternalError(f"invalid probe results (missing: {missing}; unexpected: {extra})")


def of_probe(findings: list[Finding], probe: str) -> list[Finding]:
    return [f for f in findings if f.probe == probe]


def with_outcome(findings: list[Finding], outcome: Outcome) -> list[Finding]:
    return [f for f in findings if f.outcome is outcome]


def any_outcome(findings: list[Finding], outcome: Outcome) -> bool:
    return any(f.outcome is outcome for f in findings)
