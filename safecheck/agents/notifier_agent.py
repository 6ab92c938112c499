# safecheck/agents/notifier_agent.py: delivers alert text to one Telegram chat
import logging
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger(__name__)

TELEGRAM_API = "https://api.telegram.org"


@dataclass(frozen=True)
class SendOutcome:
    ok: bool
    error: Optional[str] = None


class TelegramNotifier:
    """
    Thin wrapper over the Bot API ``sendMessage`` method.

    ``send`` never raises for transport problems: timeouts, HTTP errors and
    ``"ok": false`` replies all come back as a failed ``SendOutcome``.
    """

    def __init__(self, token: str, timeout: float = 6, session=None):
        if not token:
            raise ValueError("Telegram bot token is required")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{TELEGRAM_API}/bot{self.token}/sendMessage"

    def send(self, chat_id: str, text: str) -> SendOutcome:
        try:
            r = self.session.post(self.url, json={"chat_id": chat_id, "text": text}, timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug("Telegram request to %s failed: %s", chat_id, e)
            return SendOutcome(False, str(e) or e.__class__.__name__)

        try:
            j = r.json()
        except ValueError:
            j = {}
        if r.ok and j.get("ok"):
            return SendOutcome(True)
        reason = j.get("description") or f"HTTP {r.status_code}"
        return SendOutcome(False, reason)
