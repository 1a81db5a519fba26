"""Probes for dangerous GitHub Actions workflow patterns."""

from repotrust.models.raw import DangerousWorkflowData, DangerousWorkflowType
from repotrust.models.results import Finding, Location, Outcome

HAS_UNTRUSTED_CHECKOUT = "hasDangerousWorkflowUntrustedCheckout"
HAS_SCRIPT_INJECTION = "hasDangerousWorkflowScriptInjection"

JOB_KEY = "job"


def _probe(
    probe: str,
    kind: DangerousWorkflowType,
    raw: DangerousWorkflowData,
    describe: str,
    clean: str,
) -> list[Finding]:
    if raw.num_workflows == 0:
        return [Finding(probe=probe, outcome=Outcome.NOT_APPLICABLE, message="no workflows found")]

    findings = [
        Finding(
            probe=probe,
            outcome=Outcome.TRUE,
            message=describe.format(snippet=w.file.snippet),
            values={JOB_KEY: w.job} if w.job else {},
            location=Location.from_file(w.file),
        )
        for w in raw.workflows
        if w.type is kind
    ]
    if not findings:
        return [Finding(probe=probe, outcome=Outcome.FALSE, message=clean)]
    return findings


def has_dangerous_workflow_untrusted_checkout(raw: DangerousWorkflowData) -> list[Finding]:
    return _probe(
        HAS_UNTRUSTED_CHECKOUT,
        DangerousWorkflowType.UNTRUSTED_CHECKOUT,
        raw,
        "untrusted code checkout '{snippet}'",
        "no untrusted code checkout detected",
    )


def has_dangerous_workflow_script_injection(raw: DangerousWorkflowData) -> list[Finding]:
    return _probe(
        HAS_SCRIPT_INJECTION,
        DangerousWorkflowType.SCRIPT_INJECTION,
        raw,
        "script injection with untrusted input '{snippet}'",
        "no script injection detected",
    )


PROBES = (
    has_dangerous_workflow_untrusted_checkout,
    has_dangerous_workflow_script_injection,
)
