"""Dispatcher: runs a set of checks against one repository.

Each check moves Pending -> Running -> Succeeded | Skipped | Failed. Every
requested name yields exactly one result; errors from any stage are caught
here and turned into -1 results so one broken check never hides the others.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import replace

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger
from repotrust.checker.errors import (
    CheckCancelledError,
    CheckTimeoutError,
    UnknownCheckError,
    UnsupportedCheckError,
)
from repotrust.checker.registry import CheckRegistry, Registration
from repotrust.checker.request import CheckRequest
from repotrust.models.results import CheckResult, CheckStatus, Finding

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 4
DEFAULT_CHECK_TIMEOUT = 120.0

StatusCallback = Callable[[str, CheckStatus], None]


class Dispatcher:
    """Runs requested checks with bounded concurrency.

    Results are returned sorted by check name, independent of completion order.
    """

    def __init__(
        self,
        registry: CheckRegistry,
        concurrency: int = DEFAULT_CONCURRENCY,
        check_timeout: float | None = DEFAULT_CHECK_TIMEOUT,
        on_status: StatusCallback | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            registry: Checks available to run.
            concurrency: Maximum number of checks running at once.
            check_timeout: Per-check time limit in seconds, None for no limit.
            on_status: Called on every check status transition.
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.registry = registry
        self.concurrency = concurrency
        self.check_timeout = check_timeout
        self.on_status = on_status
        self.statuses: dict[str, CheckStatus] = {}

    def _set_status(self, name: str, status: CheckStatus) -> None:
        self.statuses[name] = status
        if self.on_status is not None:
            self.on_status(name, status)

    async def run(self, req: CheckRequest, names: Iterable[str]) -> dict[str, CheckResult]:
        """Run the named checks.

        Args:
            req: Shared request for this repository; each check gets a copy
                with its own detail logger.
            names: Check names. Duplicates are run once.

        Returns:
            Mapping of check name to result, ordered by name.
        """
        requested = list(dict.fromkeys(names))
        self.statuses = {}
        for name in requested:
            self._set_status(name, CheckStatus.PENDING)

        semaphore = asyncio.Semaphore(self.concurrency)
        finished = {name: asyncio.Event() for name in requested}
        results: dict[str, CheckResult] = {}

        async def run_one(name: str) -> None:
            try:
                result = await self._dispatch(req, name, semaphore, finished)
                results[name] = result
                self._set_status(name, result.status)
            finally:
                finished[name].set()

        req.ctx.start()
        try:
            await asyncio.gather(*(run_one(name) for name in requested))
        finally:
            req.ctx.stop()

        return {name: results[name] for name in sorted(results)}

    async def _dispatch(
        self,
        req: CheckRequest,
        name: str,
        semaphore: asyncio.Semaphore,
        finished: dict[str, asyncio.Event],
    ) -> CheckResult:
        registration = self.registry.get(name)
        if registration is None:
            logger.warning(f"Unknown check requested: {name}")
            return scoring.create_runtime_error_result(name, UnknownCheckError(name))

        if not registration.supports(req.access_mode):
            err = UnsupportedCheckError(name, req.access_mode.value)
            logger.info(str(err))
            return scoring.create_runtime_error_result(name, err, status=CheckStatus.SKIPPED)

        # Dependencies outside the requested set are not waited on.
        for dep in registration.depends_on:
            if dep in finished:
                await finished[dep].wait()

        async with semaphore:
            check_req = replace(req, dlogger=DetailLogger())
            if req.ctx.cancelled:
                return self._cancelled_result(name, check_req)
            self._set_status(name, CheckStatus.RUNNING)
            logger.debug(f"Running check {name}")
            try:
                return await asyncio.wait_for(
                    self._execute(registration, check_req), timeout=self.check_timeout
                )
            except asyncio.TimeoutError:
                timeout = self.check_timeout or 0.0
                logger.warning(f"Check {name} timed out after {timeout:g}s")
                return scoring.create_runtime_error_result(
                    name,
                    CheckTimeoutError(name, timeout),
                    details=check_req.dlogger.flush(),
                )
            except CheckCancelledError:
                return self._cancelled_result(name, check_req)
            except Exception as e:
                logger.warning(f"Check {name} failed: {e}")
                return scoring.create_runtime_error_result(
                    name, e, details=check_req.dlogger.flush()
                )

    def _cancelled_result(self, name: str, req: CheckRequest) -> CheckResult:
        reason = req.ctx.reason or "run cancelled"
        return scoring.create_runtime_error_result(
            name,
            CheckCancelledError(reason),
            status=CheckStatus.SKIPPED,
            details=req.dlogger.flush(),
        )

    async def _execute(self, registration: Registration, req: CheckRequest) -> CheckResult:
        """Collector -> probes -> evaluator, strictly in sequence."""
        pipeline = registration.pipeline
        raw = await pipeline.collector(req)
        if req.raw_results is not None:
            req.raw_results.records[registration.name] = raw

        findings: list[Finding] = []
        for probe in pipeline.probes:
            findings.extend(probe(raw))

        result = pipeline.evaluator(registration.name, findings, req.dlogger)
        return result.model_copy(
            update={
                "details": req.dlogger.flush(),
                "findings": findings,
                "status": CheckStatus.FAILED if result.error else CheckStatus.SUCCEEDED,
            }
        )
