# safecheck/agents/checkin_agent.py: the check-in countdown (dead-man's switch)
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

from safecheck.models import ValidationError
from safecheck.utils.helpers import fmt_minutes, fmt_ts, hms_to_ms, now_ms

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MS = 24 * 60 * 60 * 1000
DEFAULT_SETTLE_DELAY_S = 1.0
DEFAULT_ALERT_MESSAGE = (
    "🚨 SAFETY CHECK-IN MISSED!\n\n"
    "ምናልባት ችግር አጋጥሞኝ ሊሆን ስለሚችል እባክዎን ደውለው ደኅንነቴን ያረጋግጡ፡፡"
)


@dataclass
class CheckInState:
    deadline: Optional[int] = None  # epoch ms; None = unarmed
    timer_duration: int = DEFAULT_DURATION_MS
    contacts: list = field(default_factory=list)
    alert_sent_for_current_deadline: bool = False
    last_reset_by: Optional[str] = None


@dataclass(frozen=True)
class TimerStatus:
    deadline: Optional[int]
    time_left: int
    timer_duration: int
    alert_sent: bool
    contacts: tuple
    last_reset_by: Optional[str]

    def to_dict(self) -> dict:
        return {
            "deadline": self.deadline,
            "timeLeft": self.time_left,
            "timerDuration": self.timer_duration,
            "alertSent": self.alert_sent,
            "contacts": [c.to_dict() for c in self.contacts],
            "lastResetBy": self.last_reset_by,
        }


@dataclass(frozen=True)
class ResetResult:
    deadline: int
    duration: int


def _timer_rearm(delay_s: float, fn: Callable[[], None]) -> None:
    t = threading.Timer(delay_s, fn)
    t.daemon = True
    t.start()


class CheckInTimer:
    """
    Owns the single ``CheckInState`` and serializes every change to it.

    An expiry is handled in two phases. ``tick`` flips the alert flag under
    the lock, dispatches outside it, then schedules ``rearm`` after the
    settling delay. ``rearm`` starts the next cycle only if the alerted
    deadline is still current; a ``reset`` in between already did that.

    Parameters
    ----------
    dispatcher : AlertDispatcher
        Used for both the automatic and the manual alert path.
    clock : callable
        Returns "now" in epoch ms. Defaults to wall time.
    schedule_rearm : callable
        ``schedule_rearm(delay_s, fn)``; defaults to a daemon ``threading.Timer``.
    """

    def __init__(
        self,
        dispatcher,
        timer_duration: int = DEFAULT_DURATION_MS,
        alert_message: str = DEFAULT_ALERT_MESSAGE,
        settle_delay_s: float = DEFAULT_SETTLE_DELAY_S,
        clock: Callable[[], int] = now_ms,
        schedule_rearm: Callable[[float, Callable[[], None]], None] = _timer_rearm,
    ):
        if timer_duration <= 0:
            raise ValueError("timer_duration must be greater than 0")
        self.dispatcher = dispatcher
        self.alert_message = alert_message
        self.settle_delay_s = settle_delay_s
        self.clock = clock
        self.schedule_rearm = schedule_rearm
        self.state = CheckInState(timer_duration=int(timer_duration))
        self._lock = threading.Lock()

    # ---------------------------------------------------------------
    # Reads
    # ---------------------------------------------------------------
    def status(self, now: Optional[int] = None) -> TimerStatus:
        now = self.clock() if now is None else now
        with self._lock:
            s = self.state
            time_left = max(0, s.deadline - now) if s.deadline is not None else 0
            return TimerStatus(
                deadline=s.deadline,
                time_left=time_left,
                timer_duration=s.timer_duration,
                alert_sent=s.alert_sent_for_current_deadline,
                contacts=tuple(s.contacts),
                last_reset_by=s.last_reset_by,
            )

    # ---------------------------------------------------------------
    # Mutations
    # ---------------------------------------------------------------
    def arm(self, now: Optional[int] = None) -> int:
        """Start the first cycle without recording a resetter."""
        now = self.clock() if now is None else now
        with self._lock:
            duration = self.state.timer_duration
            self._set_deadline(now + duration)
            deadline = self.state.deadline
        logger.info("⏱️ Initial timer set: %s (deadline %s)", fmt_minutes(duration), fmt_ts(deadline))
        return deadline

    def reset(self, duration: Optional[int] = None, reset_by: Optional[str] = None,
              now: Optional[int] = None) -> ResetResult:
        now = self.clock() if now is None else now
        with self._lock:
            effective = duration if duration and duration > 0 else self.state.timer_duration
            self._set_deadline(now + effective)
            self.state.last_reset_by = reset_by or "Anonymous"
            result = ResetResult(deadline=self.state.deadline, duration=effective)
            who = self.state.last_reset_by

        logger.info("✅ Timer reset by %s", who)
        logger.info("   Using duration: %s", fmt_minutes(effective))
        logger.info("   Next deadline: %s", fmt_ts(result.deadline))
        return result

    def set_contacts(self, contacts) -> int:
        contacts = list(contacts)
        with self._lock:
            self.state.contacts = contacts
        logger.info("Contacts updated: %d total, %d reachable", len(contacts), sum(1 for c in contacts if c.reachable))
        return len(contacts)

    def set_duration(self, hours=0, minutes=0, seconds=0, now: Optional[int] = None) -> int:
        try:
            duration = hms_to_ms(hours, minutes, seconds)
        except (ValueError, OverflowError):
            raise ValidationError("Duration must be a finite number") from None
        if duration <= 0:
            raise ValidationError("Duration must be greater than 0")

        now = self.clock() if now is None else now
        with self._lock:
            s = self.state
            old_duration = s.timer_duration
            s.timer_duration = duration
            # armed: keep the time already spent in this cycle.
            # alerted: the pending rearm starts the next cycle with the new duration.
            if s.deadline is not None and not s.alert_sent_for_current_deadline:
                elapsed = now - (s.deadline - old_duration)
                s.deadline = now + duration - elapsed
            deadline = s.deadline

        logger.info("Timer duration set to %s (deadline %s)", fmt_minutes(duration), fmt_ts(deadline))
        return duration

    # ---------------------------------------------------------------
    # Expiry
    # ---------------------------------------------------------------
    def tick(self, now: Optional[int] = None):
        """Fire the alert once for an expired deadline; returns the DispatchResult or None."""
        now = self.clock() if now is None else now
        with self._lock:
            s = self.state
            if s.deadline is None or now < s.deadline or s.alert_sent_for_current_deadline:
                return None
            s.alert_sent_for_current_deadline = True
            alerted_deadline = s.deadline
            contacts = list(s.contacts)

        logger.warning("⏰ TIMER EXPIRED! Sending alert...")
        try:
            result = self.dispatcher.dispatch(self.alert_message, contacts)
            logger.info("📊 Alert results: %d/%d sent, %d failed", result.sent, result.total, result.failed)
        finally:
            self.schedule_rearm(self.settle_delay_s, lambda: self.rearm(alerted_deadline))
        return result

    def rearm(self, expected_deadline: int, now: Optional[int] = None) -> bool:
        """Second phase of an expiry: start the next cycle if nothing else already did."""
        now = self.clock() if now is None else now
        with self._lock:
            s = self.state
            if s.deadline != expected_deadline or not s.alert_sent_for_current_deadline:
                logger.info("Re-arm skipped; timer was reset after the alert")
                return False
            self._set_deadline(now + s.timer_duration)
            deadline = s.deadline
        logger.info("🔄 Timer auto-reset. Next deadline: %s", fmt_ts(deadline))
        return True

    def alert(self, message: str):
        """Manual alert to the current contacts; timer state is not touched."""
        with self._lock:
            contacts = list(self.state.contacts)
        result = self.dispatcher.dispatch(message, contacts)
        logger.info("📊 Manual alert results: %d/%d sent, %d failed", result.sent, result.total, result.failed)
        return result

    def _set_deadline(self, deadline: int) -> None:
        # caller holds the lock
        self.state.deadline = deadline
        self.state.alert_sent_for_current_deadline = False
