"""
Background threads that drive the monitor.

PeriodicTask runs one callable on a fixed cadence (settlement sweep, period
rollover, snapshot poll). SnapshotPipeline pairs the poll with a consumer
thread that runs the detector and records opportunities, joined by a bounded
queue that keeps only the freshest snapshots.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable

from executor.ledger import TradeLedger
from monitor.snapshotter import Snapshotter
from scanner.arbitrage import ArbitrageDetector
from scanner.models import ArbitrageOpportunity, MarketSnapshot

logger = logging.getLogger(__name__)

_JOIN_TIMEOUT_SEC = 10.0
_QUEUE_POLL_SEC = 0.5
DEFAULT_QUEUE_SIZE = 8


class PeriodicTask:
    """
    Daemon thread calling *fn* every *interval_sec*.

    The interval is measured start-to-start; a body that overruns starts the
    next run immediately. Exceptions from *fn* are logged and the loop goes on.
    """

    def __init__(
        self,
        name: str,
        interval_sec: float,
        fn: Callable[[], object],
        run_immediately: bool = True,
    ) -> None:
        self.name = name
        self._interval = interval_sec
        self._fn = fn
        self._run_immediately = run_immediately
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self.runs = 0
        self.failures = 0

    def start(self) -> None:
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()
        logger.debug("Task %s started (every %.1fs)", self.name, self._interval)

    def stop(self) -> None:
        """Signal the thread to exit and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=_JOIN_TIMEOUT_SEC)
            if self._thread.is_alive():
                logger.warning("Task %s did not stop within %.0fs", self.name, _JOIN_TIMEOUT_SEC)
            self._thread = None
        logger.debug("Task %s stopped after %d runs (%d failed)", self.name, self.runs, self.failures)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> None:
        """Run the body once, logging instead of raising."""
        self.runs += 1
        try:
            self._fn()
        except Exception:
            self.failures += 1
            logger.exception("Task %s failed (run %d)", self.name, self.runs)

    def _loop(self) -> None:
        if not self._run_immediately and self._stop_event.wait(timeout=self._interval):
            return
        while not self._stop_event.is_set():
            started = time.monotonic()
            self.run_once()
            remaining = self._interval - (time.monotonic() - started)
            if self._stop_event.wait(timeout=max(0.0, remaining)):
                break


class SnapshotPipeline:
    """
    snapshot-poll -> bounded queue -> opportunity-worker.

    When the worker falls behind, the oldest queued snapshot is discarded so
    the detector never trades on stale prices.
    """

    def __init__(
        self,
        snapshotter: Snapshotter,
        detector: ArbitrageDetector,
        ledger: TradeLedger,
        poll_interval_sec: float = 1.0,
        max_queued: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        self._snapshotter = snapshotter
        self._detector = detector
        self._ledger = ledger
        self._queue: queue.Queue[MarketSnapshot] = queue.Queue(maxsize=max_queued)
        self._stop_event = threading.Event()
        self._worker: threading.Thread | None = None
        self._poller = PeriodicTask("snapshot-poll", poll_interval_sec, self.poll)

        self.snapshots_captured = 0
        self.snapshots_dropped = 0
        self.opportunities_found = 0

    def start(self) -> None:
        self._stop_event.clear()
        self._worker = threading.Thread(target=self._consume, name="opportunity-worker", daemon=True)
        self._worker.start()
        self._poller.start()

    def stop(self) -> None:
        self._poller.stop()
        self._stop_event.set()
        if self._worker is not None:
            self._worker.join(timeout=_JOIN_TIMEOUT_SEC)
            self._worker = None
        logger.debug(
            "Snapshot pipeline stopped: %d captured, %d dropped, %d opportunities",
            self.snapshots_captured, self.snapshots_dropped, self.opportunities_found,
        )

    # -- Producer --

    def poll(self) -> None:
        """Capture one snapshot and enqueue it, evicting the oldest if full."""
        snapshot = self._snapshotter.capture_snapshot()
        self.snapshots_captured += 1
        self.enqueue(snapshot)

    def enqueue(self, snapshot: MarketSnapshot) -> None:
        while True:
            try:
                self._queue.put_nowait(snapshot)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    continue
                self.snapshots_dropped += 1
                logger.debug("Opportunity worker behind, dropped oldest snapshot")

    def pending(self) -> int:
        return self._queue.qsize()

    # -- Consumer --

    def process(self, snapshot: MarketSnapshot) -> list[ArbitrageOpportunity]:
        """Run the detector on one snapshot and record what it finds."""
        opportunities = self._detector.detect_opportunities(snapshot)
        for opp in opportunities:
            self.opportunities_found += 1
            self._ledger.record_opportunity(opp)
        return opportunities

    def _consume(self) -> None:
        while not self._stop_event.is_set():
            try:
                snapshot = self._queue.get(timeout=_QUEUE_POLL_SEC)
            except queue.Empty:
                continue
            try:
                self.process(snapshot)
            except Exception:
                logger.exception("Failed to process snapshot from %.3f", snapshot.timestamp)
