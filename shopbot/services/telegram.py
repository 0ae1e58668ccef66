# Filename: shopbot/services/telegram.py
# Outbound side of the messaging gateway, on python-telegram-bot.
#  - telegram.Bot is async; the workflows are not. Calls are submitted to one
#    event loop owned by the gateway and waited on from the request thread
#  - Network errors and flood control are retried with backoff; anything else
#    surfaces as telegram.error.TelegramError

import asyncio
import logging
import mimetypes
import threading
import time
from typing import Iterable, List, Optional, Sequence, Tuple

from decouple import config
from telegram import (
    Bot,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    KeyboardButton,
    ReplyKeyboardMarkup,
    WebAppInfo,
)
from telegram.error import BadRequest, NetworkError, RetryAfter
from telegram.request import HTTPXRequest

TELEGRAM_BOT_TOKEN = config("TELEGRAM_BOT_TOKEN")

logger = logging.getLogger(__name__)

# rows of (label, callback tag)
ButtonRows = Sequence[Sequence[Tuple[str, str]]]


def inline_keyboard(rows: ButtonRows) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [[InlineKeyboardButton(label, callback_data=tag) for label, tag in row] for row in rows]
    )


def web_app_keyboard(label: str, url: str) -> ReplyKeyboardMarkup:
    # sendData only works for a mini app opened from a reply keyboard button
    return ReplyKeyboardMarkup([[KeyboardButton(label, web_app=WebAppInfo(url=url))]], resize_keyboard=True)


def button_rows(items: List[Tuple[str, str]]) -> List[List[Tuple[str, str]]]:
    """One button per row, the layout used for product pickers."""
    return [[item] for item in items]


def _seconds(delay) -> float:
    return delay.total_seconds() if hasattr(delay, "total_seconds") else float(delay)


class TelegramGateway:
    """
    Synchronous facade over telegram.Bot:
      - send_text / send_photo / answer_callback for conversations
      - set_webhook / get_me at startup
      - fetch_file to proxy product images to the mini app
    """

    def __init__(self, token: str = TELEGRAM_BOT_TOKEN, *, bot: Optional[Bot] = None,
                 timeout: float = 10, max_retries: int = 3):
        self.bot = bot or Bot(token, request=HTTPXRequest(connect_timeout=timeout, read_timeout=timeout))
        self.timeout = timeout
        self.max_retries = max_retries
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()
        self._ready = False

    def _event_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                self._loop = asyncio.new_event_loop()
                threading.Thread(target=self._loop.run_forever, name="telegram-gateway", daemon=True).start()
            return self._loop

    def _submit(self, coro):
        return asyncio.run_coroutine_threadsafe(coro, self._event_loop()).result()

    async def _initialized(self, method: str, **kwargs):
        if not self._ready:
            await self.bot.initialize()
            self._ready = True
        return await getattr(self.bot, method)(**kwargs)

    def _call(self, method: str, **kwargs):
        for attempt in range(1, self.max_retries + 1):
            try:
                return self._submit(self._initialized(method, **kwargs))
            except BadRequest:
                raise
            except RetryAfter as e:
                logger.error(f"Telegram {method} flood control (attempt {attempt}): retry in {e.retry_after}")
                if attempt == self.max_retries:
                    raise
                time.sleep(_seconds(e.retry_after))
            except NetworkError as e:
                logger.error(f"Telegram {method} failed (attempt {attempt}): {e}")
                if attempt == self.max_retries:
                    raise
                time.sleep(2 ** (attempt - 1))

    def send_text(self, chat_id: int, text: str, buttons: Optional[ButtonRows] = None, *, reply_markup=None):
        if buttons is not None:
            reply_markup = inline_keyboard(buttons)
        return self._call("send_message", chat_id=chat_id, text=text, reply_markup=reply_markup)

    def send_photo(self, chat_id: int, photo: str, caption: str = ""):
        return self._call("send_photo", chat_id=chat_id, photo=photo, caption=caption)

    def answer_callback(self, callback_query_id: str):
        return self._call("answer_callback_query", callback_query_id=callback_query_id)

    def set_webhook(self, url: str, secret_token: str = "", allowed_updates: Iterable[str] = ("message", "callback_query")):
        return self._call(
            "set_webhook",
            url=url,
            secret_token=secret_token or None,
            allowed_updates=list(allowed_updates),
        )

    def get_me(self):
        return self._call("get_me")

    def fetch_file(self, file_id: str) -> Tuple[bytes, str]:
        """Resolve a file reference and download it. Returns (content, content_type)."""
        tg_file = self._call("get_file", file_id=file_id)
        content = self._submit(tg_file.download_as_bytearray())
        content_type, _ = mimetypes.guess_type(tg_file.file_path or "")
        return bytes(content), content_type or "image/jpeg"

    def close(self) -> None:
        if self._loop is None:
            return
        if self._ready:
            self._submit(self.bot.shutdown())
            self._ready = False
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._loop = None
