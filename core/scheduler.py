"""Recurring claim loops.

A :class:`ClaimLoop` runs the claim attempt for one wallet once
immediately and then at every ``interval_ms`` boundary measured from the
loop's start.  Boundaries missed while the event loop was stalled are
skipped rather than run back-to-back.  Each tick launches the attempt as
its own asyncio task, so a slow attempt never delays the next tick, and an
attempt that fails (or raises) never stops the loop.

:func:`run_claim_loops` runs one loop per configured wallet concurrently.
Loops share nothing; one wallet's failures cannot block another's
attempts.
"""

import asyncio
import logging
import math
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Set

from core.config import ClaimConfig
from core.logging_setup import WalletLogAdapter

logger = logging.getLogger(__name__)

AttemptFunc = Callable[[ClaimConfig], Awaitable[Any]]


class ClaimLoop:
    """Fixed-interval recurring claim task for a single wallet.

    Attributes:
        config: The wallet's :class:`ClaimConfig`.
        attempt: Coroutine function performing one claim attempt.
        max_runs: Stop after this many ticks (``None`` runs forever).
        runs / successes / failures: Counters over finished attempts.
        last_result: Result of the most recently finished attempt.
    """

    def __init__(
        self,
        config: ClaimConfig,
        attempt: AttemptFunc,
        max_runs: Optional[int] = None,
    ) -> None:
        self.config = config
        self.attempt = attempt
        self.max_runs = max_runs
        self.runs = 0
        self.successes = 0
        self.failures = 0
        self.last_result: Any = None
        self.log = WalletLogAdapter(logger, config.label)
        self._stop_event = asyncio.Event()
        self._in_flight: Set["asyncio.Task[Any]"] = set()

    def stop(self) -> None:
        """Stop scheduling new attempts; in-flight ones still finish."""
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    async def run(self) -> None:
        """Tick until stopped or ``max_runs`` is reached.

        Waits for in-flight attempts before returning.  If the loop task
        itself is cancelled, in-flight attempts are cancelled too.
        """
        loop = asyncio.get_running_loop()
        interval = self.config.interval_seconds
        self.log.info(
            "Faucet claimer started. Will attempt to claim every %g seconds.",
            interval,
        )
        next_tick = loop.time()
        ticks = 0
        try:
            while not self._stop_event.is_set():
                ticks += 1
                self._launch(ticks)
                if self.max_runs is not None and ticks >= self.max_runs:
                    break
                next_tick = self._next_tick(next_tick, interval, loop.time())
                await self._sleep(next_tick - loop.time())
        except asyncio.CancelledError:
            for task in self._in_flight:
                task.cancel()
            raise
        finally:
            if self._in_flight:
                await asyncio.gather(*list(self._in_flight), return_exceptions=True)
            self.log.info(
                "Claim loop finished: %d attempts, %d succeeded, %d failed",
                self.runs, self.successes, self.failures,
            )

    def _next_tick(self, previous: float, interval: float, now: float) -> float:
        """Next boundary after *previous*; boundaries already past are skipped."""
        next_tick = previous + interval
        if interval <= 0 or next_tick >= now:
            return next_tick
        missed = math.floor((now - next_tick) / interval) + 1
        while next_tick + missed * interval < now:
            missed += 1
        self.log.warning("Loop fell behind; skipping %d missed claim tick(s)", missed)
        return next_tick + missed * interval

    async def _sleep(self, delay: float) -> None:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=max(0.0, delay))
        except asyncio.TimeoutError:
            pass

    def _launch(self, tick: int) -> None:
        task = asyncio.create_task(
            self._run_attempt(tick),
            name=f"claim-{self.config.label}-{tick}",
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run_attempt(self, tick: int) -> Any:
        try:
            result = await self.attempt(self.config)
        except Exception as e:
            self.runs += 1
            self.failures += 1
            self.log.exception("Claim attempt #%d raised: %s", tick, e)
            return None

        self.runs += 1
        self.last_result = result
        if getattr(result, "success", False):
            self.successes += 1
        else:
            self.failures += 1
        return result


async def run_claim_loops(
    configs: Sequence[ClaimConfig],
    attempt: AttemptFunc,
    max_runs: Optional[int] = None,
    stop_event: Optional[asyncio.Event] = None,
) -> List[ClaimLoop]:
    """Run one :class:`ClaimLoop` per config concurrently.

    Args:
        configs: One entry per wallet.
        attempt: Coroutine function performing one claim attempt.
        max_runs: Passed to every loop.
        stop_event: When set, every loop is stopped.

    Returns:
        The loops, after all of them have finished.
    """
    loops = [ClaimLoop(config, attempt, max_runs) for config in configs]
    if not loops:
        logger.warning("No wallets configured; nothing to claim.")
        return loops

    watcher: Optional["asyncio.Task[None]"] = None
    if stop_event is not None:
        async def stop_all() -> None:
            await stop_event.wait()
            for claim_loop in loops:
                claim_loop.stop()

        watcher = asyncio.create_task(stop_all())

    try:
        results = await asyncio.gather(
            *(claim_loop.run() for claim_loop in loops),
            return_exceptions=True,
        )
    finally:
        if watcher is not None:
            watcher.cancel()

    for claim_loop, outcome in zip(loops, results):
        if isinstance(outcome, BaseException):
            claim_loop.log.error("Claim loop stopped with error: %s", outcome)
    return loops
