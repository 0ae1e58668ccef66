# Filename: shopbot/events.py
# Maps a telegram.Update onto the event kinds the bot handles.
#  - Every update yields exactly one event, or None
#  - Precedence inside a message: web app data, photo, command, plain text

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from telegram import MessageEntity, PhotoSize, Update


@dataclass(frozen=True)
class Command:
    user_id: int
    chat_id: int
    name: str
    args: str = ""


@dataclass(frozen=True)
class CallbackQuery:
    user_id: int
    chat_id: int
    query_id: str
    data: str


@dataclass(frozen=True)
class TextMessage:
    user_id: int
    chat_id: int
    text: str


@dataclass(frozen=True)
class PhotoMessage:
    user_id: int
    chat_id: int
    photos: Tuple[PhotoSize, ...]

    def best_file_id(self) -> str:
        """Highest resolution, then largest file; on a full tie the later variant wins."""
        best = self.photos[-1]
        for photo in reversed(self.photos):
            if (photo.width * photo.height, photo.file_size or 0) > (best.width * best.height, best.file_size or 0):
                best = photo
        return best.file_id


@dataclass(frozen=True)
class AppPayload:
    user_id: int
    chat_id: int
    data: str


Event = Union[Command, CallbackQuery, TextMessage, PhotoMessage, AppPayload]


def _command(text: str, entities) -> Optional[Tuple[str, str]]:
    for entity in entities:
        if entity.type == MessageEntity.BOT_COMMAND and entity.offset == 0:
            head = text[1:entity.length]
            name = head.split("@", 1)[0].lower()
            return (name, text[entity.length:].strip()) if name else None
    return None


def classify_update(update: Optional[Update]) -> Optional[Event]:
    """Reduce an update to one event, or None when it is not something we handle."""
    if update is None or update.effective_user is None:
        return None
    user_id = update.effective_user.id
    chat_id = update.effective_chat.id if update.effective_chat else user_id

    query = update.callback_query
    if query is not None:
        return CallbackQuery(user_id=user_id, chat_id=chat_id, query_id=query.id, data=query.data or "")

    message = update.message
    if message is None:
        return None

    if message.web_app_data is not None:
        return AppPayload(user_id=user_id, chat_id=chat_id, data=message.web_app_data.data)

    if message.photo:
        return PhotoMessage(user_id=user_id, chat_id=chat_id, photos=tuple(message.photo))

    if message.text is None:
        return None
    command = _command(message.text, message.entities)
    if command is not None:
        name, args = command
        return Command(user_id=user_id, chat_id=chat_id, name=name, args=args)
    return TextMessage(user_id=user_id, chat_id=chat_id, text=message.text)
