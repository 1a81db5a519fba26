"""Probe for changesets approved by someone other than their author."""

from repotrust.models.raw import Changeset, CodeReviewData
from repotrust.models.results import Finding, Outcome

CODE_APPROVED = "codeApproved"

REVISION_KEY = "revisionID"

APPROVED = "APPROVED"


def is_approved(changeset: Changeset) -> bool:
    author = changeset.author.login
    return any(
        review.state == APPROVED and review.author.login != author
        for review in changeset.reviews
    )


def code_approved(raw: CodeReviewData) -> list[Finding]:
    """One finding per human changeset: True if an independent reviewer approved it.

    Approved bot changesets are skipped; they say nothing about the review
    habits of the maintainers.
    """
    if not raw.changesets:
        return [
            Finding(
                probe=CODE_APPROVED,
                outcome=Outcome.NOT_APPLICABLE,
                message="no changesets detected",
            )
        ]

    findings = []
    for changeset in raw.changesets:
        approved = is_approved(changeset)
        if approved and changeset.author.is_bot:
            continue
        if approved:
            outcome = Outcome.TRUE
            message = f"changeset {changeset.revision_id} approved by a reviewer other than the author"
        else:
            outcome = Outcome.FALSE
            message = f"changeset {changeset.revision_id} not approved by a reviewer other than the author"
        findings.append(
            Finding(
                probe=CODE_APPROVED,
                outcome=outcome,
                message=message,
                values={REVISION_KEY: changeset.revision_id},
            )
        )

    if all(c.author.is_bot for c in raw.changesets):
        return [
            Finding(
                probe=CODE_APPROVED,
                outcome=Outcome.NOT_APPLICABLE,
                message=f"found no human activity in the last {len(raw.changesets)} changesets",
            )
        ]
    return findings


PROBES = (code_approved,)
