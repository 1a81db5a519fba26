"""Probes for known vulnerabilities reported against HEAD."""

from repotrust.models.raw import VulnerabilitiesData
from repotrust.models.results import Finding, Outcome

HAS_OSV_VULNERABILITIES = "hasOSVVulnerabilities"

ID_KEY = "id"


def has_osv_vulnerabilities(raw: VulnerabilitiesData) -> list[Finding]:
    if not raw.commit:
        return [
            Finding(
                probe=HAS_OSV_VULNERABILITIES,
                outcome=Outcome.NOT_AVAILABLE,
                message="unable to determine the commit to query",
            )
        ]
    if not raw.vulnerability_ids:
        return [
            Finding(
                probe=HAS_OSV_VULNERABILITIES,
                outcome=Outcome.FALSE,
                message="Project does not contain OSV vulnerabilities",
            )
        ]
    return [
        Finding(
            probe=HAS_OSV_VULNERABILITIES,
            outcome=Outcome.TRUE,
            message=f"Project is vulnerable to: {vuln_id}",
            values={ID_KEY: vuln_id},
        )
        for vuln_id in raw.vulnerability_ids
    ]


PROBES = (has_osv_vulnerabilities,)
