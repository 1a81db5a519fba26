"""Probes for branch protection settings.

Every probe emits one finding per branch, carrying the branch name in
``values["branchName"]``. A setting the caller could not observe becomes
``NotAvailable``; an unprotected branch makes every probe ``False``.
"""

from collections.abc import Callable

from repotrust.models.evidence import BranchRef, TriState
from repotrust.models.raw import BranchProtectionData
from repotrust.models.results import Finding, Outcome

BLOCKS_DELETE = "blocksDeleteOnBranches"
BLOCKS_FORCE_PUSH = "blocksForcePushOnBranches"
BRANCHES_ARE_PROTECTED = "branchesAreProtected"
APPLIES_TO_ADMINS = "branchProtectionAppliesToAdmins"
DISMISSES_STALE_REVIEWS = "dismissesStaleReviews"
REQUIRES_APPROVERS = "requiresApproversForPullRequests"
REQUIRES_CODE_OWNERS_REVIEW = "requiresCodeOwnersReview"
REQUIRES_LAST_PUSH_APPROVAL = "requiresLastPushApproval"
REQUIRES_UP_TO_DATE_BRANCHES = "requiresUpToDateBranches"
RUNS_STATUS_CHECKS = "runsStatusChecksBeforeMerging"
REQUIRES_PRS_TO_CHANGE_CODE = "requiresPRsToChangeCode"

BRANCH_NAME_KEY = "branchName"
REQUIRED_REVIEWERS_KEY = "numberOfRequiredReviewers"

ALL_PROBES = (
    BLOCKS_DELETE,
    BLOCKS_FORCE_PUSH,
    BRANCHES_ARE_PROTECTED,
    APPLIES_TO_ADMINS,
    DISMISSES_STALE_REVIEWS,
    REQUIRES_APPROVERS,
    REQUIRES_CODE_OWNERS_REVIEW,
    REQUIRES_LAST_PUSH_APPROVAL,
    REQUIRES_UP_TO_DATE_BRANCHES,
    RUNS_STATUS_CHECKS,
    REQUIRES_PRS_TO_CHANGE_CODE,
)


def _finding(probe: str, branch: BranchRef, outcome: Outcome, message: str, **values: str) -> Finding:
    return Finding(
        probe=probe,
        outcome=outcome,
        message=message,
        values={BRANCH_NAME_KEY: branch.name, **values},
    )


def _per_branch(
    probe: str,
    raw: BranchProtectionData,
    classify: Callable[[BranchRef], tuple[Outcome, str]],
    extra_values: Callable[[BranchRef], dict[str, str]] | None = None,
) -> list[Finding]:
    if not raw.branches:
        return [
            Finding(
                probe=probe,
                outcome=Outcome.NOT_APPLICABLE,
                message="no development/release branches found",
            )
        ]
    findings = []
    for branch in raw.branches:
        if branch.protected is TriState.FALSE:
            findings.append(
                _finding(probe, branch, Outcome.FALSE, f"branch '{branch.name}' is not protected")
            )
        elif branch.protected is TriState.UNKNOWN:
            findings.append(
                _finding(
                    probe,
                    branch,
                    Outcome.NOT_AVAILABLE,
                    f"unable to retrieve protection for branch '{branch.name}'",
                )
            )
        else:
            outcome, message = classify(branch)
            values = extra_values(branch) if extra_values else {}
            findings.append(_finding(probe, branch, outcome, message, **values))
    return findings


def _tri(value: TriState, on: str, off: str, unknown: str) -> tuple[Outcome, str]:
    """Classify a setting whose True value is the protective one."""
    if value is TriState.TRUE:
        return Outcome.TRUE, on
    if value is TriState.FALSE:
        return Outcome.FALSE, off
    return Outcome.NOT_AVAILABLE, unknown


def _tri_inverted(value: TriState, on: str, off: str, unknown: str) -> tuple[Outcome, str]:
    """Classify a setting whose True value is the risky one (e.g. allow deletions)."""
    if value is TriState.FALSE:
        return Outcome.TRUE, on
    if value is TriState.TRUE:
        return Outcome.FALSE, off
    return Outcome.NOT_AVAILABLE, unknown


def blocks_delete_on_branches(raw: BranchProtectionData) -> list[Finding]:
    return _per_branch(
        BLOCKS_DELETE,
        raw,
        lambda b: _tri_inverted(
            b.rule.allow_deletions,
            f"branch '{b.name}' does not allow deletion",
            f"branch '{b.name}' allows deletion",
            f"unable to retrieve whether branch '{b.name}' allows deletion",
        ),
    )


def blocks_force_push_on_branches(raw: BranchProtectionData) -> list[Finding]:
    return _per_branch(
        BLOCKS_FORCE_PUSH,
        raw,
        lambda b: _tri_inverted(
            b.rule.allow_force_pushes,
            f"branch '{b.name}' does not allow force push",
            f"branch '{b.name}' allows force push",
            f"unable to retrieve whether branch '{b.name}' allows force push",
        ),
    )


def branches_are_protected(raw: BranchProtectionData) -> list[Finding]:
    return _per_branch(
        BRANCHES_ARE_PROTECTED,
        raw,
        lambda b: (Outcome.TRUE, f"branch '{b.name}' is protected"),
    )


def branch_protection_applies_to_admins(raw: BranchProtectionData) -> list[Finding]:
    return _per_branch(
        APPLIES_TO_ADMINS,
        raw,
        lambda b: _tri(
            b.rule.enforce_admins,
            f"branch protection settings apply to administrators on branch '{b.name}'",
            f"branch protection settings do not apply to administrators on branch '{b.name}'",
            f"unable to retrieve whether protection applies to administrators on branch '{b.name}'",
        ),
    )


def dismisses_stale_reviews(raw: BranchProtectionData) -> list[Finding]:
    return _per_branch(
        DISMISSES_STALE_REVIEWS,
        raw,
        lambda b: _tri(
            b.rule.pull_request_reviews.dismiss_stale_reviews,
            f"stale review dismissal enabled on branch '{b.name}'",
            f"stale review dismissal disabled on branch '{b.name}'",
            f"unable to retrieve review dismissal on branch '{b.name}'",
        ),
    )


def requires_approvers_for_pull_requests(raw: BranchProtectionData) -> list[Finding]:
    def classify(b: BranchRef) -> tuple[Outcome, str]:
        count = b.rule.pull_request_reviews.required_approving_review_count
        if count is None:
            return (
                Outcome.NOT_AVAILABLE,
                f"unable to retrieve required approving review count on branch '{b.name}'",
            )
        outcome = Outcome.TRUE if count > 0 else Outcome.FALSE
        return outcome, f"required approving review count is {count} on branch '{b.name}'"

    def count_value(b: BranchRef) -> dict[str, str]:
        count = b.rule.pull_request_reviews.required_approving_review_count
        return {} if count is None else {REQUIRED_REVIEWERS_KEY: str(count)}

    return _per_branch(REQUIRES_APPROVERS, raw, classify, count_value)


def requires_code_owners_review(raw: BranchProtectionData) -> list[Finding]:
    has_codeowners = bool(raw.codeowners_files)

    def classify(b: BranchRef) -> tuple[Outcome, str]:
        setting = b.rule.pull_request_reviews.require_code_owner_reviews
        if setting is TriState.TRUE and not has_codeowners:
            return (
                Outcome.FALSE,
                f"codeowners review is required on branch '{b.name}' but no codeowners file found in repo",
            )
        return _tri(
            setting,
            f"codeowner review is required on branch '{b.name}'",
            f"codeowner review is not required on branch '{b.name}'",
            f"unable to retrieve codeowner review requirement on branch '{b.name}'",
        )

    return _per_branch(REQUIRES_CODE_OWNERS_REVIEW, raw, classify)


def requires_last_push_approval(raw: BranchProtectionData) -> list[Finding]:
    return _per_branch(
        REQUIRES_LAST_PUSH_APPROVAL,
        raw,
        lambda b: _tri(
            b.rule.require_last_push_approval,
            f"last push approval enabled on branch '{b.name}'",
            f"last push approval disabled on branch '{b.name}'",
            f"unable to retrieve last push approval on branch '{b.name}'",
        ),
    )


def requires_up_to_date_branches(raw: BranchProtectionData) -> list[Finding]:
    return _per_branch(
        REQUIRES_UP_TO_DATE_BRANCHES,
        raw,
        lambda b: _tri(
            b.rule.status_checks.up_to_date_before_merge,
            f"status checks require up-to-date branches for '{b.name}'",
            f"status checks do not require up-to-date branches for '{b.name}'",
            f"unable to retrieve up-to-date branch requirement for '{b.name}'",
        ),
    )


def runs_status_checks_before_merging(raw: BranchProtectionData) -> list[Finding]:
    def classify(b: BranchRef) -> tuple[Outcome, str]:
        checks = b.rule.status_checks
        if checks.requires_status_checks is TriState.TRUE and checks.contexts:
            return Outcome.TRUE, f"status check found to merge onto branch '{b.name}'"
        if checks.requires_status_checks is TriState.UNKNOWN:
            return Outcome.NOT_AVAILABLE, f"unable to retrieve status checks for branch '{b.name}'"
        return Outcome.FALSE, f"no status checks found to merge onto branch '{b.name}'"

    return _per_branch(RUNS_STATUS_CHECKS, raw, classify)


def requires_prs_to_change_code(raw: BranchProtectionData) -> list[Finding]:
    return _per_branch(
        REQUIRES_PRS_TO_CHANGE_CODE,
        raw,
        lambda b: _tri(
            b.rule.pull_request_reviews.required,
            f"PRs are required in order to make changes on branch '{b.name}'",
            f"PRs are not required to make changes on branch '{b.name}'; or we don't have data to detect it",
            f"unable to retrieve whether PRs are required on branch '{b.name}'",
        ),
    )


PROBES = (
    blocks_delete_on_branches,
    blocks_force_push_on_branches,
    branches_are_protected,
    branch_protection_applies_to_admins,
    dismisses_stale_reviews,
    requires_approvers_for_pull_requests,
    requires_code_owners_review,
    requires_last_push_approval,
    requires_up_to_date_branches,
    runs_status_checks_before_merging,
    requires_prs_to_change_code,
)
