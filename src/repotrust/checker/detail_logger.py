"""User-facing structured log messages attached to check results.

This is separate from process logging (``logging``): messages collected here
end up in the report as remediation hints.
"""

from repotrust.models.results import CheckDetail, DetailType, Finding, LogMessage


class DetailLogger:
    """Append-only collector of Info/Warn/Debug messages for one check."""

    def __init__(self) -> None:
        self._details: list[CheckDetail] = []

    def info(self, msg: LogMessage) -> None:
        self._details.append(CheckDetail(type=DetailType.INFO, msg=msg))

    def warn(self, msg: LogMessage) -> None:
        self._details.append(CheckDetail(type=DetailType.WARN, msg=msg))

    def debug(self, msg: LogMessage) -> None:
        self._details.append(CheckDetail(type=DetailType.DEBUG, msg=msg))

    def log(self, level: DetailType, msg: LogMessage) -> None:
        self._details.append(CheckDetail(type=level, msg=msg))

    def flush(self) -> list[CheckDetail]:
        """Return accumulated details and reset the logger."""
        details = self._details
        self._details = []
        return details

    def __len__(self) -> int:
        return len(self._details)


def message_from_finding(finding: Finding) -> LogMessage:
    """Turn a finding into a log message pointing at its location."""
    if finding.location is None:
        return LogMessage(text=finding.message, finding=finding)
    loc = finding.location
    return LogMessage(
        text=finding.message,
        path=loc.path,
        type=loc.type,
        offset=loc.line_start or 0,
        end_offset=loc.line_end or 0,
        snippet=loc.snippet or "",
        finding=finding,
    )


def log_findings(dl: DetailLogger, findings: list[Finding], level: DetailType) -> None:
    for finding in findings:
        dl.log(level, message_from_finding(finding))
