"""Minimal echo bot built on the Courier SDK.

Polls for updates, replies to every text message with the same text, and
answers callback queries.  Run with ``BOT_TOKEN`` set in the environment or
in a ``.env`` file::

    python bot.py
"""

import time

from config import BOT_TOKEN
from core.logger import CourierLogger
from courier import ApiError, BotClient, CourierError
from courier.models import Update

logger = CourierLogger.get_logger()

POLL_TIMEOUT = 30
ERROR_BACKOFF_SECONDS = 5


def handle_update(client: BotClient, update: Update) -> None:
    """Echo text messages and acknowledge button presses."""
    if update.callback_query is not None:
        client.answer_callback_query(update.callback_query.id)
        return

    message = update.message
    if message is None or message.chat is None:
        logger.debug("Skipping update", extra={"update_id": update.update_id, "update_type": update.detect_type()})
        return

    text = message.get_text(emojify=False)
    if text:
        client.send_message(message.chat.id, text, reply_to_message_id=message.message_id)


def backoff_seconds(exc: CourierError) -> float:
    """Seconds to wait after a failed poll; honours the server's ``retry_after``."""
    if isinstance(exc, ApiError) and exc.response_parameters is not None:
        retry_after = exc.response_parameters.retry_after
        if isinstance(retry_after, (int, float)) and retry_after > 0:
            return float(retry_after)
    return ERROR_BACKOFF_SECONDS


def main() -> None:
    if not BOT_TOKEN:
        raise EnvironmentError("BOT_TOKEN environment variable is not set or is empty.")

    with BotClient.from_env() as client:
        client.is_async = False
        me = client.get_me()
        logger.info("Bot is running. Polling for updates...", extra={"username": me.username})
        while True:
            try:
                client.process_updates(lambda update: handle_update(client, update), timeout=POLL_TIMEOUT)
            except CourierError as exc:
                logger.error("Polling failed, retrying", extra={"error": str(exc)})
                time.sleep(backoff_seconds(exc))


if __name__ == "__main__":
    main()
