import logging
import threading
import time

logger = logging.getLogger('Currency-Exchange')


class ActivitySweeper:
    """Background thread that evicts clients idle past the inactivity timeout"""

    def __init__(self, registry, connection_log, interval_seconds=60,
                 timeout_seconds=300, clock=time.time):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be greater than 0, got {interval_seconds!r}")
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be greater than 0, got {timeout_seconds!r}")
        self.registry = registry
        self.connection_log = connection_log
        self.interval_seconds = interval_seconds
        self.timeout_seconds = timeout_seconds
        self.clock = clock
        self._stop_event = threading.Event()
        self._thread = None
        self.sweeps = 0
        self.failures = 0

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name='activity-sweeper', daemon=True
        )
        self._thread.start()
        logger.info(
            f"🧹 Activity sweeper started "
            f"(interval: {self.interval_seconds}s, timeout: {self.timeout_seconds}s)"
        )

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def sweep_once(self, now=None):
        """Evict stale clients and log a disconnect for each; returns the evicted records"""
        if now is None:
            now = self.clock()
        removed = self.registry.sweep_expired(now, self.timeout_seconds)
        for record in removed:
            self.connection_log.log_disconnect(record, now=now, reason='inactive')
        if removed:
            logger.info(f"🧹 Removed {len(removed)} inactive clients")
        self.sweeps += 1
        return removed

    def _run(self):
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.sweep_once()
            except Exception:
                self.failures += 1
                logger.exception("Error during inactivity sweep")

    def stop(self, timeout=5.0):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
