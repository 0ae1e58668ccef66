# Filename: shopbot/utils.py
# Shared logging setup and the best-effort reply helper.

import logging
from typing import Callable

from telegram.error import TelegramError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def send_safely(send: Callable, *args, **kwargs) -> bool:
    """
    Run one outbound send and swallow delivery failures.

    The state change behind the reply has already happened; delivery errors
    are logged, never raised.
    """
    try:
        send(*args, **kwargs)
        return True
    except TelegramError as e:
        logger.error(f"Failed to send {getattr(send, '__name__', 'message')}: {e}")
        return False


def safe_int(s, default=None):
    try:
        return int(s)
    except (TypeError, ValueError):
        return default
