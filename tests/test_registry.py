"""Tests for the check registry."""

import pytest

from repotrust.checker.errors import DuplicateCheckError, InternalError
from repotrust.checker.registry import CheckRegistry, Pipeline, Registration
from repotrust.checks import CHECK_MODULES, build_registry
from repotrust.models.evidence import AccessMode
from repotrust.models.raw import BestPracticesData
from repotrust.models.results import RiskLevel

COMMIT = frozenset({AccessMode.COMMIT_BASED})


async def _collect(req):
    return BestPracticesData(badge="none")


def _evaluate(name, findings, dl):
    raise AssertionError("not called")


PIPELINE = Pipeline(_collect, (), _evaluate)


class TestCheckRegistry:
    """Tests for CheckRegistry."""

    def test_register_and_get(self):
        registry = CheckRegistry()
        reg = registry.register("A", PIPELINE, COMMIT, risk=RiskLevel.LOW)

        assert registry.get("A") == reg
        assert "A" in registry
        assert registry.get("B") is None
        assert reg.supports(AccessMode.COMMIT_BASED)
        assert not reg.supports(AccessMode.FILE_BASED)

    def test_duplicate_name_rejected(self):
        registry = CheckRegistry()
        registry.register("A", PIPELINE, COMMIT)
        with pytest.raises(DuplicateCheckError):
            registry.register("A", PIPELINE, COMMIT)
        assert len(registry) == 1

    def test_no_modes_rejected(self):
        with pytest.raises(InternalError):
            CheckRegistry().register("A", PIPELINE, [])

    def test_names_sorted(self):
        registry = CheckRegistry()
        for name in ("b", "C", "a"):
            registry.register(name, PIPELINE, COMMIT)
        assert registry.names() == ["C", "a", "b"]

    def test_add_registration(self):
        registry = CheckRegistry()
        registry.add(Registration(name="A", pipeline=PIPELINE, supported_modes=COMMIT))
        assert registry.get("A").risk == RiskLevel.MEDIUM

    def test_unknown_dependency(self):
        registry = CheckRegistry()
        registry.register("A", PIPELINE, COMMIT, depends_on=["missing"])
        with pytest.raises(InternalError, match="unknown check missing"):
            registry.validate()

    def test_dependency_cycle(self):
        registry = CheckRegistry()
        registry.register("A", PIPELINE, COMMIT, depends_on=["B"])
        registry.register("B", PIPELINE, COMMIT, depends_on=["A"])
        with pytest.raises(InternalError, match="cycle"):
            registry.validate()


class TestBuildRegistry:
    """Tests for the compiled set of checks."""

    def test_every_check_registered(self):
        registry = build_registry()
        assert len(registry) == len(CHECK_MODULES) == 15
        assert registry.names() == [
            "Binary-Artifacts",
            "Branch-Protection",
            "CI-Tests",
            "CII-Best-Practices",
            "Code-Review",
            "Contributors",
            "Dangerous-Workflow",
            "Dependency-Update-Tool",
            "License",
            "Maintained",
            "Packaging",
            "SAST",
            "Security-Policy",
            "Signed-Releases",
            "Vulnerabilities",
        ]

    def test_fresh_registry_each_time(self):
        first = build_registry()
        second = build_registry()
        assert first is not second
        assert first.names() == second.names()

    def test_file_based_checks(self):
        registry = build_registry()
        file_based = [
            name
            for name in registry.names()
            if registry.get(name).supports(AccessMode.FILE_BASED)
        ]
        assert file_based == [
            "Binary-Artifacts",
            "CII-Best-Practices",
            "Dangerous-Workflow",
            "Dependency-Update-Tool",
            "License",
            "Packaging",
            "Security-Policy",
        ]

    def test_risk_levels(self):
        registry = build_registry()
        assert registry.get("Dangerous-Workflow").risk == RiskLevel.CRITICAL
        assert registry.get("Branch-Protection").risk == RiskLevel.HIGH
        assert registry.get("Contributors").risk == RiskLevel.LOW
