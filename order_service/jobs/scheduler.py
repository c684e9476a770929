import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class FixedRateScheduler:
    """Runs ``task`` every ``interval`` seconds on one daemon thread.

    Runs never overlap: when one overruns the interval the next starts as
    soon as it returns. A failing run is logged and the next tick still fires.
    """

    def __init__(
        self,
        name: str,
        task: Callable[[], object],
        interval: float,
        initial_delay: float = 0,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.task = task
        self.interval = interval
        self.initial_delay = initial_delay
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self):
        try:
            return self.task()
        except Exception:
            logger.exception(f"Scheduled task {self.name} failed, retrying next tick")
            return None

    def _run_loop(self):
        next_run = time.monotonic() + self.initial_delay
        while not self._stop_event.wait(max(0.0, next_run - time.monotonic())):
            self.run_once()
            next_run += self.interval
            # skip missed ticks instead of firing them back to back
            if next_run < time.monotonic():
                next_run = time.monotonic()

    def start(self):
        if self.is_running():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name=self.name, daemon=True)
        self._thread.start()
        logger.info(f"Scheduled task {self.name} started, every {self.interval}s")

    def stop(self, timeout: Optional[float] = None):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
        logger.info(f"Scheduled task {self.name} stopped")
