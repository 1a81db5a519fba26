"""Check evaluation core: registry, dispatcher, scoring and evidence cache."""

from repotrust.checker.context import RunContext
from repotrust.checker.registry import CheckRegistry, Pipeline, Registration
from repotrust.checker.report import build_report, run_checks
from repotrust.checker.request import CheckRequest
from repotrust.checker.runner import Dispatcher

__all__ = [
    "CheckRegistry",
    "CheckRequest",
    "Dispatcher",
    "Pipeline",
    "Registration",
    "RunContext",
    "build_report",
    "run_checks",
]
