"""Background Scheduler: periodic, deduplicated, time-boxed analyses.

Each tick lists recently active users, takes the first ``batch_size`` and
launches one analysis task per user that is not already in flight.  A task
loads inputs, runs the analyzers, aggregates, predicts and writes the bundle
to the Result Cache.  Whatever happens, the user's registry entry is
released when the task ends, even when it is cancelled before its first
step or its cross-thread hand-off never reaches the loop.

``launch`` is also the refresh-ahead hook for consumer reads; it is safe to
call from the scheduler's loop or from any other thread.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from cognition.config.settings import (
    COGNITIVE_ACTIVE_WINDOW_MINUTES,
    COGNITIVE_ANALYSIS_TIMEOUT,
    COGNITIVE_BATCH_SIZE,
    COGNITIVE_TICK_INTERVAL,
)
from cognition.data_pipeline.facade import DataAccessFacade
from cognition.engine.aggregator import aggregate
from cognition.engine.analyzers import Analyzer, run_analyzers
from cognition.engine.errors import (
    AnalysisTimeout,
    CacheUnavailable,
    DataUnavailable,
)
from cognition.engine.predictive import predict
from cognition.engine.registry import InFlightRegistry
from cognition.engine.result_cache import ResultCache
from cognition.models.profile import CacheEntry

logger = logging.getLogger(__name__)


class AnalysisScheduler:
    def __init__(
        self,
        facade: DataAccessFacade,
        cache: ResultCache,
        registry: InFlightRegistry | None = None,
        tick_interval: float = COGNITIVE_TICK_INTERVAL,
        active_window_minutes: int = COGNITIVE_ACTIVE_WINDOW_MINUTES,
        batch_size: int = COGNITIVE_BATCH_SIZE,
        analysis_timeout: float = COGNITIVE_ANALYSIS_TIMEOUT,
        clock: Callable[[], float] = time.time,
        analyzers: dict[str, Analyzer] | None = None,
    ):
        self.facade = facade
        self.cache = cache
        self.registry = registry or InFlightRegistry(clock=clock)
        self.tick_interval = tick_interval
        self.active_window_minutes = active_window_minutes
        self.batch_size = batch_size
        self.analysis_timeout = analysis_timeout
        self.clock = clock
        self.analyzers = analyzers

        self._loop: asyncio.AbstractEventLoop | None = None
        self._tasks: set[asyncio.Task] = set()
        self._unstarted: dict[asyncio.Task, str] = {}
        self._handoffs: set[str] = set()
        self._stop_event: asyncio.Event | None = None
        self.stats = {
            "ticks": 0,
            "launched": 0,
            "skipped": 0,
            "completed": 0,
            "rejected_writes": 0,
            "timeouts": 0,
            "failures": 0,
            "total_processing_time": 0.0,
        }

    # ── Tick ─────────────────────────────────────────────────────────────

    async def tick(self) -> list[str]:
        """Launch analyses for the current batch; returns the launched IDs."""
        self._loop = asyncio.get_running_loop()
        self.stats["ticks"] += 1
        try:
            user_ids = await self.facade.list_active_user_ids(self.active_window_minutes)
        except DataUnavailable as exc:
            logger.warning("Tick %d skipped: %s", self.stats["ticks"], exc)
            return []

        batch = user_ids[: self.batch_size]
        launched = [uid for uid in batch if self.launch(uid)]
        logger.info(
            "Tick %d: %d active, %d launched, %d in flight",
            self.stats["ticks"], len(user_ids), len(launched), len(self.registry),
        )
        return launched

    # ── Launch ───────────────────────────────────────────────────────────

    def launch(self, user_id: str) -> bool:
        """Start an analysis unless one is already running for this user.

        Returns False when skipped.  Raises RuntimeError when no event loop is
        available to run the task.
        """
        if not self.registry.try_acquire(user_id):
            self.stats["skipped"] += 1
            logger.debug("Analysis for %s already in flight, skipping", user_id)
            return False
        try:
            self._spawn(user_id)
        except Exception:
            self.registry.release(user_id)
            raise
        self.stats["launched"] += 1
        return True

    def _spawn(self, user_id: str) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is not None and (
            self._loop is None or self._loop.is_closed() or running is self._loop
        ):
            self._loop = running
            self._start_task(user_id)
            return

        if self._loop is None or self._loop.is_closed() or not self._loop.is_running():
            raise RuntimeError("scheduler event loop is not running")
        self._handoffs.add(user_id)
        self._loop.call_soon_threadsafe(self._start_task, user_id, True)

    def _start_task(self, user_id: str, handoff: bool = False) -> None:
        if handoff:
            if user_id not in self._handoffs:
                # Reclaimed by close() before the loop got to it
                return
            self._handoffs.discard(user_id)
        task = asyncio.get_running_loop().create_task(
            self._run(user_id), name=f"cognitive-analysis:{user_id}"
        )
        self._tasks.add(task)
        self._unstarted[task] = user_id
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        user_id = self._unstarted.pop(task, None)
        if user_id is not None:
            # Cancelled before _run's first step, so its finally never ran
            self.registry.release(user_id)
            logger.info("Analysis for %s cancelled before it started", user_id)

    def close(self) -> int:
        """Release entries whose cross-thread hand-off never reached the loop.

        Called on shutdown after ``drain``; a hand-off still queued at that
        point is dropped when the loop reaches it.  Returns how many entries
        were reclaimed.
        """
        orphaned = list(self._handoffs)
        self._handoffs.clear()
        for user_id in orphaned:
            self.registry.release(user_id)
        if orphaned:
            logger.warning("Released %d analyses that never started", len(orphaned))
        return len(orphaned)

    # ── Analysis ─────────────────────────────────────────────────────────

    async def _run(self, user_id: str) -> None:
        self._unstarted.pop(asyncio.current_task(), None)
        started = time.perf_counter()
        try:
            written = await self.run_analysis(user_id)
            self.stats["completed"] += 1
            if not written:
                self.stats["rejected_writes"] += 1
            logger.info(
                "Analysis for %s done in %.3fs (%s)",
                user_id, time.perf_counter() - started, "stored" if written else "superseded",
            )
        except AnalysisTimeout as exc:
            self.stats["timeouts"] += 1
            logger.warning("%s", exc)
        except (DataUnavailable, CacheUnavailable) as exc:
            self.stats["failures"] += 1
            logger.warning("Analysis for %s failed: %s", user_id, exc)
        except asyncio.CancelledError:
            logger.info("Analysis for %s cancelled", user_id)
            raise
        except Exception:
            self.stats["failures"] += 1
            logger.exception("Unexpected failure analyzing %s", user_id)
        finally:
            self.stats["total_processing_time"] += time.perf_counter() - started
            self.registry.release(user_id)

    async def run_analysis(self, user_id: str) -> bool:
        """Analyze one user under the configured timeout."""
        computed_at = self.clock()
        try:
            return await asyncio.wait_for(
                self.analyze(user_id, computed_at), timeout=self.analysis_timeout
            )
        except asyncio.TimeoutError as exc:
            raise AnalysisTimeout(user_id, self.analysis_timeout) from exc

    async def analyze(self, user_id: str, computed_at: float) -> bool:
        """Full pipeline for one user; returns whether the cache accepted it.

        The cache write runs in a worker thread like the facade reads.  A write
        abandoned by the timeout may still land later; ordering by
        ``computed_at`` keeps it from replacing a newer entry.
        """
        inputs = await self.facade.load_inputs(user_id)
        outputs = run_analyzers(inputs.window, inputs.emotional_summary, self.analyzers)
        profile = aggregate(outputs, data_points=len(inputs.window))
        bundle = predict(profile, inputs.window, inputs.prior_profile)
        entry = CacheEntry(
            user_id=user_id,
            profile=profile,
            bundle=bundle,
            computed_at=computed_at,
            ttl_seconds=self.cache.ttl,
        )
        return await asyncio.to_thread(self.cache.put, user_id, entry)

    # ── Lifecycle ────────────────────────────────────────────────────────

    async def run_forever(self) -> None:
        """Tick every ``tick_interval`` seconds until ``stop`` is called."""
        self._loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()
        logger.info("Cognitive scheduler started, ticking every %.1fs", self.tick_interval)
        while not self._stop_event.is_set():
            try:
                await self.tick()
            except Exception:
                logger.exception("Tick failed")
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.tick_interval)
            except asyncio.TimeoutError:
                pass
        await self.drain()
        self.close()
        logger.info("Cognitive scheduler stopped")

    def stop(self) -> None:
        if self._stop_event is None or self._loop is None:
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._stop_event.set()
        else:
            self._loop.call_soon_threadsafe(self._stop_event.set)

    async def drain(self, timeout: float | None = None) -> int:
        """Wait for outstanding analyses; returns how many are still pending."""
        if not self._tasks:
            return 0
        _, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        return len(pending)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def metrics(self) -> dict:
        finished = self.stats["completed"] + self.stats["timeouts"] + self.stats["failures"]
        avg = self.stats["total_processing_time"] / finished if finished else 0.0
        return {
            **self.stats,
            "in_flight": len(self.registry),
            "average_processing_time": round(avg, 4),
        }
