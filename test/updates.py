"""Raw Bot API update bodies, complete enough for telegram.Update.de_json."""

from telegram import Update

_next_id = [0]


def _id():
    _next_id[0] += 1
    return _next_id[0]


def user(user_id):
    return {"id": user_id, "is_bot": False, "first_name": f"user{user_id}"}


def chat(chat_id):
    return {"id": chat_id, "type": "private"}


def message(user_id, chat_id=None, **fields):
    body = {
        "message_id": _id(),
        "date": 1700000000,
        "from": user(user_id),
        "chat": chat(chat_id if chat_id is not None else user_id),
    }
    body.update(fields)
    return {"update_id": _id(), "message": body}


def text(user_id, value, **fields):
    if value.startswith("/") and len(value) > 1:
        command = value.split(" ", 1)[0]
        fields.setdefault("entities", [{"type": "bot_command", "offset": 0, "length": len(command)}])
    return message(user_id, text=value, **fields)


def photo(user_id, *sizes):
    """sizes: (file_id, width, height) or (file_id, width, height, file_size)."""
    variants = []
    for size in sizes:
        file_id, width, height = size[:3]
        variant = {"file_id": file_id, "file_unique_id": f"u-{file_id}", "width": width, "height": height}
        if len(size) > 3:
            variant["file_size"] = size[3]
        variants.append(variant)
    return message(user_id, photo=variants)


def web_app(user_id, data):
    return message(user_id, web_app_data={"data": data, "button_text": "Products"})


def callback(user_id, data, query_id="cb", chat_id=None):
    query = {"id": query_id, "from": user(user_id), "chat_instance": "ci", "data": data}
    if chat_id is not None:
        query["message"] = {"message_id": _id(), "date": 1700000000, "chat": chat(chat_id)}
    return {"update_id": _id(), "callback_query": query}


def parse(body):
    return Update.de_json(body, None)
