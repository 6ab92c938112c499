# safecheck/agents/dispatch_agent.py: fans one alert out to every reachable contact
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

from safecheck.models import Contact, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    contact: Contact
    success: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class DispatchResult:
    sent: int = 0
    failed: int = 0
    total: int = 0
    results: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"sent": self.sent, "failed": self.failed, "total": self.total}


class AlertDispatcher:
    """
    Sends a message to each contact that has a chat id.

    Every eligible contact gets exactly one attempt; one failure never stops
    the others. Attempts run on a small thread pool and the counts are built
    from the collected ``DeliveryResult`` list.

    Usage
    -----
        dispatcher = AlertDispatcher(TelegramNotifier(token), max_workers=4)
        result = dispatcher.dispatch("help", contacts)
        result.sent, result.failed, result.total
    """

    def __init__(self, notifier, max_workers: int = 4):
        self.notifier = notifier
        self.max_workers = max(1, int(max_workers))

    def dispatch(self, message: str, contacts) -> DispatchResult:
        if not isinstance(message, str) or not message.strip():
            raise ValidationError("Message is required")

        targets = [c for c in contacts if c.reachable]
        if not targets:
            logger.warning("⚠️ No contacts with Telegram chat ids; nothing sent")
            return DispatchResult()

        logger.warning("🚨 SENDING ALERT TO %d CONTACTS", len(targets))
        logger.info("Message: %s", message)

        workers = min(self.max_workers, len(targets))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dispatch") as pool:
            results = list(pool.map(lambda c: self._deliver(c, message), targets))

        sent = sum(1 for r in results if r.success)
        return DispatchResult(sent=sent, failed=len(results) - sent, total=len(results), results=results)

    def _deliver(self, contact: Contact, message: str) -> DeliveryResult:
        try:
            outcome = self.notifier.send(contact.chat_id, message)
        except Exception as exc:
            # notifiers report failures; a raise here is counted as one
            logger.error("❌ Unexpected error sending to %s (%s)", contact.name, contact.chat_id, exc_info=True)
            return DeliveryResult(contact, False, str(exc))

        if outcome.ok:
            logger.info("✅ Sent to %s (%s)", contact.name, contact.chat_id)
            return DeliveryResult(contact, True)
        logger.error("❌ Failed to send to %s (%s): %s", contact.name, contact.chat_id, outcome.error)
        return DeliveryResult(contact, False, outcome.error)
