import asyncio
import json
import logging
import time
from typing import Optional, Protocol, Sequence, Set, Tuple

from .config import MonitorConfig
from .fetcher import FetchError
from .health import StateCounts, level_for, partition
from .models import HealthLevel, TargetRecord
from .signals import AmbientSignalAdapter, signal_for

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    async def fetch(self) -> Sequence[TargetRecord]: ...


class PollingLoop:
    """Polls the status feed on a fixed cadence and owns the latest snapshot.

    A cycle is started every ``refresh_interval_s`` seconds whether or not the
    previous one finished; each fetch is bounded by ``fetch_timeout_s``.
    ``stop()`` cancels the schedule and every cycle still in flight.
    """

    def __init__(self, fetcher: Fetcher, config: MonitorConfig, adapter: AmbientSignalAdapter):
        self.fetcher = fetcher
        self.config = config
        self.adapter = adapter
        self._snapshot: Tuple[TargetRecord, ...] = ()
        self.health = HealthLevel.HEALTHY
        self.counts = StateCounts()
        self.last_error: Optional[str] = None
        self.last_success_at: Optional[float] = None
        self.last_attempt_at: Optional[float] = None
        self.cycles = 0
        self._scheduler: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def snapshot(self) -> Tuple[TargetRecord, ...]:
        return self._snapshot

    @property
    def running(self) -> bool:
        return self._scheduler is not None and not self._scheduler.done()

    def _publish(self, level: HealthLevel) -> None:
        self.health = level
        self.adapter.apply(signal_for(level))

    async def tick(self) -> HealthLevel:
        started = time.monotonic()
        self.cycles += 1
        self.last_attempt_at = time.time()
        try:
            records = await asyncio.wait_for(self.fetcher.fetch(), timeout=self.config.fetch_timeout_s)
        except (FetchError, asyncio.TimeoutError) as e:
            self.last_error = str(e) or "fetch timed out"
            self._publish(HealthLevel.UNKNOWN)
            logger.warning(json.dumps({
                "outcome": "ERROR",
                "error": self.last_error,
                "health": self.health.value,
                "kept_records": len(self._snapshot),
                "elapsed_ms": int((time.monotonic() - started) * 1000),
                "url": self.config.status_url,
            }))
            return self.health

        snapshot = tuple(records)
        names = [r.name for r in snapshot]
        if len(set(names)) != len(names):
            logger.warning("status feed returned duplicate target names; rows may collide")

        self._snapshot = snapshot
        self.counts = partition(snapshot, self.config)
        self.last_error = None
        self.last_success_at = time.time()
        self._publish(level_for(self.counts, self.config))
        logger.info(json.dumps({
            "outcome": "OK",
            "records": len(snapshot),
            "health": self.health.value,
            **self.counts.to_dict(),
            "elapsed_ms": int((time.monotonic() - started) * 1000),
            "url": self.config.status_url,
        }))
        return self.health

    def start(self) -> None:
        if self.running:
            return
        logger.info(f"Polling {self.config.status_url} every {self.config.refresh_interval_s}s")
        self._scheduler = asyncio.create_task(self._run())

    async def _run(self) -> None:
        while True:
            task = asyncio.create_task(self.tick())
            self._inflight.add(task)
            task.add_done_callback(self._cycle_done)
            await asyncio.sleep(self.config.refresh_interval_s)

    def _cycle_done(self, task: asyncio.Task) -> None:
        self._inflight.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Poll cycle failed", exc_info=task.exception())

    async def stop(self) -> None:
        tasks = list(self._inflight)
        if self._scheduler is not None:
            tasks.append(self._scheduler)
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._scheduler = None
        self._inflight.clear()
        logger.info("Polling stopped")
