"""Telegram-backed notifier for ledger alerts."""

import logging
from dataclasses import dataclass

import httpx

_logger = logging.getLogger(__name__)


@dataclass
class HttpxTelegramNotifier:
    """Sends alerts to a single Telegram chat.

    Permission is granted only when both a bot token and a chat id are
    configured; otherwise every alert is a silent no-op.
    """

    bot_token: str | None
    chat_id: int | None
    http_client: httpx.Client

    @classmethod
    def create(
        cls, bot_token: str | None, chat_id: int | None
    ) -> "HttpxTelegramNotifier":
        """Create a notifier with a managed httpx session."""
        return cls(bot_token=bot_token, chat_id=chat_id, http_client=httpx.Client())

    @property
    def permission_granted(self) -> bool:
        return bool(self.bot_token) and self.chat_id is not None

    def notify(self, message: str) -> None:
        """Send a message using Telegram's sendMessage API."""
        if not self.permission_granted:
            return
        url = f"https://api.telegram.org/bot{self.bot_token}/sendMessage"
        payload: dict[str, object] = {"chat_id": self.chat_id, "text": message}
        try:
            response = self.http_client.post(url, json=payload, timeout=10)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            _logger.warning("Telegram notification failed: %s", exc)

    def close(self) -> None:
        """Close the underlying HTTP client session."""
        self.http_client.close()
