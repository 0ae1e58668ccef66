import os

# Config is read at import time; keep tests off the network and off Postgres.
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123:test-token")
os.environ.setdefault("ADMIN_ID", "1000")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["PUBLIC_BASE_URL"] = ""
os.environ["WEBHOOK_SECRET"] = ""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from telegram.error import BadRequest

from shopbot.database import Base
from shopbot.services.stores import CartStore, CatalogStore, OrderStore
from shopbot.sessions import InMemorySessionRegistry

ADMIN = 1000
USER = 2000


class FakeGateway:
    """Records outbound calls instead of talking to Telegram."""

    def __init__(self):
        self.bot = None
        self.texts = []
        self.photos = []
        self.answered = []
        self.files = {}
        self.fail_for = set()

    def send_text(self, chat_id, text, buttons=None, *, reply_markup=None):
        if chat_id in self.fail_for:
            raise BadRequest("Chat not found")
        self.texts.append({"chat_id": chat_id, "text": text, "buttons": buttons, "reply_markup": reply_markup})

    def send_photo(self, chat_id, photo, caption=""):
        self.photos.append({"chat_id": chat_id, "photo": photo, "caption": caption})

    def answer_callback(self, callback_query_id):
        self.answered.append(callback_query_id)

    def fetch_file(self, file_id):
        if file_id not in self.files:
            raise BadRequest("Wrong file_id or the file is temporarily unavailable")
        return self.files[file_id], "image/jpeg"

    def texts_to(self, chat_id):
        return [t["text"] for t in self.texts if t["chat_id"] == chat_id]


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def sessions():
    return InMemorySessionRegistry()


@pytest.fixture
def catalog(db):
    return CatalogStore(db)


@pytest.fixture
def carts(db):
    return CartStore(db)


@pytest.fixture
def orders(db):
    return OrderStore(db)
