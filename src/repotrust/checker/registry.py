"""Check registry: the fixed table of check pipelines.

The registry is an explicit object built at start-up from the registrations
each check module returns; nothing is registered as an import side effect.
"""

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from repotrust.checker.detail_logger import DetailLogger
from repotrust.checker.errors import DuplicateCheckError, InternalError
from repotrust.checker.request import CheckRequest
from repotrust.models.evidence import AccessMode
from repotrust.models.results import CheckResult, Finding, RiskLevel

Collector = Callable[[CheckRequest], Awaitable[BaseModel]]
Probe = Callable[[Any], list[Finding]]
Evaluator = Callable[[str, list[Finding], DetailLogger], CheckResult]


@dataclass(frozen=True)
class Pipeline:
    """Collector -> probes -> evaluator for one check.

    Probes run in order and their findings are concatenated before being
    handed to the evaluator.
    """

    collector: Collector
    probes: tuple[Probe, ...]
    evaluator: Evaluator


@dataclass(frozen=True)
class Registration:
    """What a check module contributes to the registry."""

    name: str
    pipeline: Pipeline
    supported_modes: frozenset[AccessMode]
    risk: RiskLevel = RiskLevel.MEDIUM
    description: str = ""
    depends_on: tuple[str, ...] = field(default_factory=tuple)

    def supports(self, mode: AccessMode) -> bool:
        return mode in self.supported_modes


class CheckRegistry:
    """Append-only table mapping check names to their registrations."""

    def __init__(self) -> None:
        self._checks: dict[str, Registration] = {}

    def register(
        self,
        name: str,
        pipeline: Pipeline,
        supported_modes: Iterable[AccessMode],
        *,
        risk: RiskLevel = RiskLevel.MEDIUM,
        description: str = "",
        depends_on: Iterable[str] = (),
    ) -> Registration:
        """Add a check.

        Raises:
            DuplicateCheckError: If ``name`` is already registered.
            InternalError: If the check supports no access mode.
        """
        if name in self._checks:
            raise DuplicateCheckError(name)
        modes = frozenset(supported_modes)
        if not modes:
            raise InternalError(f"check {name} supports no access mode")
        registration = Registration(
            name=name,
            pipeline=pipeline,
            supported_modes=modes,
            risk=risk,
            description=description,
            depends_on=tuple(depends_on),
        )
        self._checks[name] = registration
        return registration

    def add(self, registration: Registration) -> None:
        """Register a prepared ``Registration``."""
        self.register(
            registration.name,
            registration.pipeline,
            registration.supported_modes,
            risk=registration.risk,
            description=registration.description,
            depends_on=registration.depends_on,
        )

    def get(self, name: str) -> Registration | None:
        return self._checks.get(name)

    def names(self) -> list[str]:
        return sorted(self._checks)

    def validate(self) -> None:
        """Ensure every dependency exists and the dependency graph is acyclic.

        Raises:
            InternalError: On a missing dependency or a cycle.
        """
        for reg in self._checks.values():
            for dep in reg.depends_on:
                if dep not in self._checks:
                    raise InternalError(f"check {reg.name} depends on unknown check {dep}")

        visiting: set[str] = set()
        done: set[str] = set()

        def visit(name: str) -> None:
            if name in done:
                return
            if name in visiting:
                raise InternalError(f"dependency cycle through check {name}")
            visiting.add(name)
            for dep in self._checks[name].depends_on:
                visit(dep)
            visiting.discard(name)
            done.add(name)

        for name in self._checks:
            visit(name)

    def __contains__(self, name: str) -> bool:
        return name in self._checks

    def __len__(self) -> int:
        return len(self._checks)
