"""Probe for contributors from distinct organizations or companies."""

from repotrust.models.evidence import User
from repotrust.models.raw import ContributorsData
from repotrust.models.results import Finding, Outcome

CONTRIBUTORS_FROM_ORG_OR_COMPANY = "contributorsFromOrgOrCompany"

ENTITY_KEY = "entity"

MIN_CONTRIBUTIONS = 5


def normalize_company(company: str) -> str:
    """Canonical company name: lowercased, trimmed, without a leading '@'."""
    return company.strip().lower().removeprefix("@").strip()


def _entities(user: User) -> set[str]:
    names = {org.login for org in user.organizations if org.login}
    names.update(c for c in (normalize_company(c) for c in user.companies) if c)
    return names


def contributors_from_org_or_company(raw: ContributorsData) -> list[Finding]:
    """One True finding per organization or company with a regular contributor."""
    entities: set[str] = set()
    for user in raw.users:
        if user.num_contributions < MIN_CONTRIBUTIONS or user.is_bot:
            continue
        entities.update(_entities(user))

    if not entities:
        return [
            Finding(
                probe=CONTRIBUTORS_FROM_ORG_OR_COMPANY,
                outcome=Outcome.FALSE,
                message="no contributor organizations or companies found",
            )
        ]
    return [
        Finding(
            probe=CONTRIBUTORS_FROM_ORG_OR_COMPANY,
            outcome=Outcome.TRUE,
            message=f"found contributions from: {entity}",
            values={ENTITY_KEY: entity},
        )
        for entity in sorted(entities)
    ]


PROBES = (contributors_from_org_or_company,)
