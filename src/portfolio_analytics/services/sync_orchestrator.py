"""Batched, throttled, retried refresh cycles over a ticker universe."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, Optional

from portfolio_analytics.config.settings import get_settings

logger = logging.getLogger(__name__)

ItemWorker = Callable[[str], Awaitable[object]]
UniverseSource = Callable[[], Awaitable[Iterable[str]]]
Sleeper = Callable[[float], Awaitable[None]]


class CancellationToken:
    """Cooperative cancellation flag checked at batch boundaries."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class CycleResult:
    """
    Outcome of one full cycle, returned by value.

    ``failures`` holds the items still failing at the end of the cycle with
    their consecutive-failure counts; ``attempts`` counts every try.
    """

    rejected: bool = False
    completed: bool = False
    cancelled: bool = False
    succeeded: set[str] = field(default_factory=set)
    failures: dict[str, int] = field(default_factory=dict)
    attempts: dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def universe_size(self) -> int:
        return len(self.attempts)


@dataclass
class SyncStatus:
    """Observability snapshot of an orchestrator."""

    is_running: bool
    failures: dict[str, int]


class SyncOrchestrator:
    """
    Runs a worker over a universe of items in fixed-size batches.

    Items within a batch run concurrently; batches run one after another
    with a fixed pause between them (none after the last). After the full
    pass, failed items are retried with the same batching until each has
    been attempted ``max_retries`` times. Only one cycle may run at a time
    per orchestrator; a second request is rejected, never queued.
    """

    def __init__(
        self,
        name: str,
        worker: ItemWorker,
        universe: UniverseSource,
        max_retries: Optional[int] = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self._name = name
        self._worker = worker
        self._universe = universe
        self._max_retries = max_retries or get_settings().sync_max_retries
        self._sleep = sleep
        self._running = False
        self._failures: dict[str, int] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_running(self) -> bool:
        return self._running

    def status(self) -> SyncStatus:
        """Whether a cycle is active and the current failure map."""
        return SyncStatus(is_running=self._running, failures=dict(self._failures))

    async def run_full_cycle(
        self,
        batch_size: int,
        interval_seconds: float,
        cancel_token: Optional[CancellationToken] = None,
    ) -> CycleResult:
        """Process the whole universe, then retry failures up to the cap."""
        if self._running:
            logger.warning("[%s] Cycle already in progress, skipping request", self._name)
            return CycleResult(rejected=True)
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self._running = True
        self._failures = {}
        result = CycleResult()

        try:
            try:
                items = _dedupe(await self._universe())
            except Exception as e:
                logger.error("[%s] Could not build universe: %s", self._name, e)
                result.error = str(e)
                return result

            logger.info(
                "[%s] Starting cycle: %d items, batch=%d, interval=%.0fs",
                self._name, len(items), batch_size, interval_seconds,
            )

            pending = items
            while pending:
                finished = await self._process_list(
                    pending, batch_size, interval_seconds, result, cancel_token
                )
                if not finished:
                    result.cancelled = True
                    logger.info("[%s] Cycle cancelled", self._name)
                    break

                pending = [item for item, count in self._failures.items() if count < self._max_retries]
                if pending:
                    logger.info("[%s] Retrying %d failed items", self._name, len(pending))

            result.failures = dict(self._failures)
            result.completed = not result.cancelled
            if result.completed:
                logger.info(
                    "[%s] Cycle completed: %d ok, %d failing",
                    self._name, len(result.succeeded), len(result.failures),
                )
            return result
        finally:
            self._running = False

    async def _process_list(
        self,
        items: list[str],
        batch_size: int,
        interval_seconds: float,
        result: CycleResult,
        cancel_token: Optional[CancellationToken],
    ) -> bool:
        """Run one pass over ``items``; returns False if cancelled."""
        total_batches = (len(items) + batch_size - 1) // batch_size
        for index, start in enumerate(range(0, len(items), batch_size), start=1):
            if cancel_token is not None and cancel_token.cancelled:
                return False

            batch = items[start:start + batch_size]
            logger.debug("[%s] Batch %d/%d: %s", self._name, index, total_batches, ", ".join(batch))
            outcomes = await asyncio.gather(
                *(self._worker(item) for item in batch),
                return_exceptions=True,
            )
            for item, outcome in zip(batch, outcomes):
                self._record(item, outcome, result)

            if start + batch_size < len(items):
                if cancel_token is not None and cancel_token.cancelled:
                    return False
                await self._sleep(interval_seconds)
        return True

    def _record(self, item: str, outcome: object, result: CycleResult) -> None:
        result.attempts[item] = result.attempts.get(item, 0) + 1
        if isinstance(outcome, BaseException):
            count = self._failures.get(item, 0) + 1
            self._failures[item] = count
            result.succeeded.discard(item)
            logger.warning(
                "[%s] %s failed (attempt %d/%d): %s",
                self._name, item, count, self._max_retries, outcome,
            )
        else:
            self._failures.pop(item, None)
            result.succeeded.add(item)


def _dedupe(items: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for item in items:
        if item:
            seen.setdefault(item.upper(), None)
    return list(seen)
