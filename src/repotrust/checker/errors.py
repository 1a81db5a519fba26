"""Exception hierarchy for repotrust.

Collectors, probes and clients raise these; the dispatcher is the only place
that turns them into inconclusive check results.
"""


class RepoTrustError(Exception):
    """Base class for all repotrust errors."""


class InternalError(RepoTrustError):
    """Something inside repotrust went wrong that should not have."""


class UnhandledCaseError(InternalError):
    """A value reached a branch that has no defined handling."""

    def __init__(self, what: str, value: object) -> None:
        self.what = what
        self.value = value
        super().__init__(f"unhandled {what}: {value!r}")


class DuplicateCheckError(RepoTrustError):
    """A check name was registered twice."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"check already registered: {name}")


class UnknownCheckError(RepoTrustError):
    """A requested check name is not in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown check: {name}")


class UnsupportedCheckError(RepoTrustError):
    """A check cannot run with the current repository access mode."""

    def __init__(self, name: str, mode: str) -> None:
        self.name = name
        self.mode = mode
        super().__init__(f"check {name} does not support {mode}-based repository access")


class UnsupportedFeatureError(RepoTrustError):
    """A repository client does not implement a capability."""

    def __init__(self, client: str, feature: str) -> None:
        self.client = client
        self.feature = feature
        super().__init__(f"{client} does not support {feature}")


class RepoUnreachableError(RepoTrustError):
    """Evidence could not be fetched (network, auth, rate limit)."""


class InvalidWorkflowError(RepoTrustError):
    """A CI workflow file could not be parsed."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"invalid workflow {path}: {detail}")


class CheckTimeoutError(RepoTrustError):
    """A check exceeded its time limit."""

    def __init__(self, name: str, seconds: float) -> None:
        self.name = name
        self.seconds = seconds
        super().__init__(f"check {name} timed out after {seconds:g}s")


class CheckCancelledError(RepoTrustError):
    """The run context was cancelled while a check was in flight."""
