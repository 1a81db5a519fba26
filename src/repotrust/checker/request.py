"""The per-check request handed to collectors."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from repotrust.checker.context import RunContext
from repotrust.checker.detail_logger import DetailLogger
from repotrust.checker.evidence import EvidenceStore
from repotrust.models.evidence import AccessMode, RepoRef
from repotrust.models.raw import RawResults


@dataclass(frozen=True)
class CheckRequest:
    """Everything one check needs to collect its evidence.

    ``evidence`` and ``raw_results`` are shared by all checks of a run;
    ``dlogger`` belongs to a single check.
    """

    repo: RepoRef
    access_mode: AccessMode
    ctx: RunContext
    evidence: EvidenceStore
    dlogger: DetailLogger = field(default_factory=DetailLogger)
    raw_results: RawResults | None = None
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
