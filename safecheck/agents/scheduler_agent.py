# safecheck/agents/scheduler_agent.py: polls the check-in timer on a fixed cadence
import logging
import threading

logger = logging.getLogger(__name__)


class SchedulerLoop(threading.Thread):
    """Background thread that ticks the timer; one tick at a time."""

    def __init__(self, timer, interval_s: float = 30, stop_evt: threading.Event = None):
        super().__init__(name="checkin-scheduler", daemon=True)
        self.timer = timer
        self.interval_s = interval_s
        self.stop_evt = stop_evt or threading.Event()

    def run(self) -> None:
        logger.info("⏰ Auto-check interval: %s seconds", self.interval_s)
        while not self.stop_evt.is_set():
            try:
                self.timer.tick()
            except Exception:
                logger.exception("[scheduler] tick failed")
            self.stop_evt.wait(self.interval_s)

    def stop(self) -> None:
        self.stop_evt.set()
