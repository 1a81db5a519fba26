"""Probe for the OpenSSF Best Practices badge."""

from repotrust.models.raw import BestPracticesData
from repotrust.models.results import Finding, Outcome

HAS_OPENSSF_BADGE = "hasOpenSSFBadge"

LEVEL_KEY = "badgeLevel"

NOT_FOUND = "not_found"
IN_PROGRESS = "in_progress"
PASSING = "passing"
SILVER = "silver"
GOLD = "gold"

KNOWN_LEVELS = (IN_PROGRESS, PASSING, SILVER, GOLD)


def has_openssf_badge(raw: BestPracticesData) -> list[Finding]:
    level = raw.badge
    if level == NOT_FOUND:
        return [
            Finding(
                probe=HAS_OPENSSF_BADGE,
                outcome=Outcome.FALSE,
                message="project does not have an OpenSSF best practices badge",
            )
        ]
    if level not in KNOWN_LEVELS:
        return [
            Finding(
                probe=HAS_OPENSSF_BADGE,
                outcome=Outcome.ERROR,
                message=f"unsupported badge level: {level}",
                values={LEVEL_KEY: level},
            )
        ]
    return [
        Finding(
            probe=HAS_OPENSSF_BADGE,
            outcome=Outcome.TRUE,
            message=f"OpenSSF best practices badge detected at the {level} level",
            values={LEVEL_KEY: level},
        )
    ]


PROBES = (has_openssf_badge,)
