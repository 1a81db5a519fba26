"""The fixed set of checks, one module per check."""

from repotrust.checker.registry import CheckRegistry
from repotrust.checks import (
    binary_artifacts,
    branch_protection,
    ci_tests,
    cii_best_practices,
    code_review,
    contributors,
    dangerous_workflow,
    dependency_update_tool,
    license,
    maintained,
    packaging,
    sast,
    security_policy,
    signed_releases,
    vulnerabilities,
)

CHECK_MODULES = (
    binary_artifacts,
    branch_protection,
    ci_tests,
    cii_best_practices,
    code_review,
    contributors,
    dangerous_workflow,
    dependency_update_tool,
    license,
    maintained,
    packaging,
    sast,
    security_policy,
    signed_releases,
    vulnerabilities,
)


def build_registry() -> CheckRegistry:
    """Build a fresh registry holding every check."""
    registry = CheckRegistry()
    for module in CHECK_MODULES:
        registry.add(module.registration())
    registry.validate()
    return registry


__all__ = ["CHECK_MODULES", "build_registry"]
