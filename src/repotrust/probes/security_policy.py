"""Probes for the content of the security policy file."""

from collections.abc import Callable

from repotrust.models.raw import (
    SecurityPolicyData,
    SecurityPolicyFile,
    SecurityPolicyInformationType,
)
from repotrust.models.results import Finding, Location, Outcome

SECURITY_POLICY_PRESENT = "securityPolicyPresent"
SECURITY_POLICY_CONTAINS_LINKS = "securityPolicyContainsLinks"
SECURITY_POLICY_CONTAINS_TEXT = "securityPolicyContainsText"
SECURITY_POLICY_CONTAINS_DISCLOSURE = "securityPolicyContainsVulnerabilityDisclosure"

ALL_PROBES = (
    SECURITY_POLICY_PRESENT,
    SECURITY_POLICY_CONTAINS_LINKS,
    SECURITY_POLICY_CONTAINS_TEXT,
    SECURITY_POLICY_CONTAINS_DISCLOSURE,
)

_CONTACT_TYPES = (SecurityPolicyInformationType.LINK, SecurityPolicyInformationType.EMAIL)


def count_contacts(policy: SecurityPolicyFile) -> int:
    return sum(1 for i in policy.information if i.type in _CONTACT_TYPES)


def linked_content_length(policy: SecurityPolicyFile) -> int:
    return sum(len(i.match) for i in policy.information if i.type in _CONTACT_TYPES)


def count_disclosure_hits(policy: SecurityPolicyFile) -> int:
    return sum(1 for i in policy.information if i.type is SecurityPolicyInformationType.TEXT)


def _per_file(
    probe: str,
    raw: SecurityPolicyData,
    test: Callable[[SecurityPolicyFile], bool],
    passed: str,
    failed: str,
) -> list[Finding]:
    if not raw.policy_files:
        return [Finding(probe=probe, outcome=Outcome.FALSE, message="no security policy file detected")]
    findings = []
    for policy in raw.policy_files:
        ok = test(policy)
        findings.append(
            Finding(
                probe=probe,
                outcome=Outcome.TRUE if ok else Outcome.FALSE,
                message=passed if ok else failed,
                location=Location.from_file(policy.file),
            )
        )
    return findings


def security_policy_present(raw: SecurityPolicyData) -> list[Finding]:
    return _per_file(
        SECURITY_POLICY_PRESENT,
        raw,
        lambda _: True,
        "security policy file detected",
        "no security policy file detected",
    )


def security_policy_contains_links(raw: SecurityPolicyData) -> list[Finding]:
    return _per_file(
        SECURITY_POLICY_CONTAINS_LINKS,
        raw,
        lambda p: count_contacts(p) > 0,
        "found linked content in security policy",
        "no email or URL found in security policy",
    )


def security_policy_contains_text(raw: SecurityPolicyData) -> list[Finding]:
    """True when the file says more than its links and addresses."""
    return _per_file(
        SECURITY_POLICY_CONTAINS_TEXT,
        raw,
        lambda p: p.file.size > linked_content_length(p) + 1,
        "found text in security policy",
        "no text (beyond any linked content) found in security policy",
    )


def security_policy_contains_vulnerability_disclosure(raw: SecurityPolicyData) -> list[Finding]:
    return _per_file(
        SECURITY_POLICY_CONTAINS_DISCLOSURE,
        raw,
        lambda p: count_disclosure_hits(p) > 1,
        "found disclosure, vulnerability, and/or timelines in security policy",
        "one or no descriptive hints of disclosure, vulnerability, and/or timelines in security policy",
    )


PROBES = (
    security_policy_present,
    security_policy_contains_links,
    security_policy_contains_text,
    security_policy_contains_vulnerability_disclosure,
)
