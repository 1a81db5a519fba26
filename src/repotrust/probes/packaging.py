"""Probes for workflows that publish packages."""

from repotrust.models.raw import PackagingData
from repotrust.models.results import Finding, Location, Outcome

PACKAGED_WITH_AUTOMATED_WORKFLOW = "packagedWithAutomatedWorkflow"


def packaged_with_automated_workflow(raw: PackagingData) -> list[Finding]:
    if not raw.packages:
        return [
            Finding(
                probe=PACKAGED_WITH_AUTOMATED_WORKFLOW,
                outcome=Outcome.FALSE,
                message="no GitHub publishing workflow detected",
            )
        ]
    return [
        Finding(
            probe=PACKAGED_WITH_AUTOMATED_WORKFLOW,
            outcome=Outcome.TRUE,
            message=f"{package.name}: {package.files[0].path}" if package.files else package.name,
            location=Location.from_file(package.files[0]) if package.files else None,
        )
        for package in raw.packages
    ]


PROBES = (packaged_with_automated_workflow,)
