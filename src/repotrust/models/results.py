"""Findings, check results and the repository report."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from repotrust.models.evidence import RepoRef
from repotrust.models.raw import File, FileType


class Outcome(str, Enum):
    """Classification a probe assigns to one observation."""

    TRUE = "True"
    FALSE = "False"
    NOT_AVAILABLE = "NotAvailable"
    NOT_APPLICABLE = "NotApplicable"
    ERROR = "Error"


class Location(BaseModel):
    """Where in the repository a finding applies."""

    model_config = ConfigDict(frozen=True)

    path: str
    type: FileType = FileType.SOURCE
    line_start: int | None = None
    line_end: int | None = None
    snippet: str | None = None

    @classmethod
    def from_file(cls, file: File) -> "Location":
        return cls(
            path=file.path,
            type=file.type,
            line_start=file.offset,
            line_end=file.end_offset or None,
            snippet=file.snippet or None,
        )


class Finding(BaseModel):
    """An atomic, classified observation emitted by a probe."""

    model_config = ConfigDict(frozen=True)

    probe: str
    outcome: Outcome
    message: str = ""
    values: dict[str, str] = Field(default_factory=dict)
    location: Location | None = None

    def with_message(self, message: str) -> "Finding":
        return self.model_copy(update={"message": message})


class DetailType(str, Enum):
    """Severity of a user-facing log message."""

    INFO = "Info"
    WARN = "Warn"
    DEBUG = "Debug"


class LogMessage(BaseModel):
    """A user-facing explanation attached to a check result."""

    model_config = ConfigDict(frozen=True)

    text: str
    path: str = ""
    type: FileType = FileType.NONE
    offset: int = 0
    end_offset: int = 0
    snippet: str = ""
    remediation: str = ""
    finding: Finding | None = None


class CheckDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: DetailType
    msg: LogMessage


class RiskLevel(str, Enum):
    """How much a check's failure matters to the overall score."""

    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def weight(self) -> float:
        return RISK_WEIGHTS[self]


RISK_WEIGHTS = {
    RiskLevel.CRITICAL: 10.0,
    RiskLevel.HIGH: 7.5,
    RiskLevel.MEDIUM: 5.0,
    RiskLevel.LOW: 2.5,
}


class CheckStatus(str, Enum):
    """Terminal (and in-flight) states of one check in a dispatcher run."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


class CheckResult(BaseModel):
    """Outcome of one check: a score in [-1, 10] and its explanation."""

    name: str
    score: int
    reason: str = ""
    error: str | None = None
    status: CheckStatus = CheckStatus.SUCCEEDED
    details: list[CheckDetail] = Field(default_factory=list)
    findings: list[Finding] = Field(default_factory=list)

    @property
    def is_inconclusive(self) -> bool:
        return self.score < 0


class ScoredCheck(BaseModel):
    """A check result together with the risk weight it contributes."""

    result: CheckResult
    risk: RiskLevel


class Report(BaseModel):
    """Repository-level summary of a dispatcher run."""

    repo: RepoRef
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    checks: list[ScoredCheck] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def overall_score(self) -> float | None:
        """Risk-weighted mean of conclusive check scores, one decimal."""
        total = 0.0
        weights = 0.0
        for entry in self.checks:
            if entry.result.is_inconclusive:
                continue
            total += entry.result.score * entry.risk.weight
            weights += entry.risk.weight
        if weights == 0:
            return None
        return round(total / weights, 1)

    @property
    def results(self) -> list[CheckResult]:
        return [entry.result for entry in self.checks]
