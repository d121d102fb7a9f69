"""
Error Notifiers

Side channel for user-facing cart errors. `notify_error` is called without
awaiting and must never raise into the cart store.
"""
import asyncio
import os
from typing import Optional, Protocol

import httpx

from cartstore.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)

TELEGRAM_TOKEN = os.environ.get("TELEGRAM_TOKEN", "")
TELEGRAM_API_URL = "https://api.telegram.org"
MAX_MESSAGE_LENGTH = 4096


class Notifier(Protocol):
    def notify_error(self, message: str) -> None: ...


class LogNotifier:
    """Writes cart errors to the log."""

    def notify_error(self, message: str) -> None:
        logger.warning(f"Cart error: {sanitize_string_for_logging(message, 200)}")


class TelegramNotifier:
    """
    Sends cart errors to a Telegram chat through the Bot API.

    Each message is sent in a background task; delivery failures are logged
    and dropped. Without a running event loop or a bot token, messages go to
    the log instead.
    """

    def __init__(self, chat_id: int, token: str = TELEGRAM_TOKEN, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.chat_id = chat_id
        self.token = token
        self.timeout = timeout
        self._transport = transport
        self._fallback = LogNotifier()
        self._pending: set[asyncio.Task] = set()

    def notify_error(self, message: str) -> None:
        if not self.token:
            self._fallback.notify_error(message)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._fallback.notify_error(message)
            return

        task = loop.create_task(self._send(message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, message: str) -> bool:
        url = f"{TELEGRAM_API_URL}/bot{self.token}/sendMessage"
        if len(message) > MAX_MESSAGE_LENGTH:
            message = message[:MAX_MESSAGE_LENGTH - 3] + "..."
        payload = {"chat_id": self.chat_id, "text": message}

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(url, json=payload, timeout=self.timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Failed to send cart notification to {self.chat_id}: {e}")
            return False

        if response.status_code != 200:
            error_text = response.text[:200] if response.text else "No response body"
            logger.warning(f"Telegram API error {response.status_code} for {self.chat_id}: {error_text}")
            return False

        logger.debug(f"Cart notification sent to {self.chat_id}")
        return True

    async def aclose(self) -> None:
        """Wait for notifications still in flight."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
