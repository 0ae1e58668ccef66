# Filename: shopbot/main.py
# HTTP surface of the bot:
#  - POST /webhook          Telegram updates -> UpdateDispatcher
#  - GET  /api/products     catalog for the mini app
#  - GET  /api/image/{id}   product photo proxied from Telegram

from typing import List, Optional

from decouple import config
from fastapi import Body, Depends, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from sqlalchemy.orm import Session
from telegram import Update
from telegram.error import TelegramError

from shopbot.database import Base, engine, get_db
from shopbot.dispatcher import UpdateDispatcher
from shopbot.ordering import OrderingWorkflow
from shopbot.schemas import ProductOut
from shopbot.services.stores import CartStore, CatalogStore, OrderStore
from shopbot.services.telegram import TelegramGateway
from shopbot.sessions import InMemorySessionRegistry, SessionRegistry
from shopbot.utils import logger
from shopbot.wizard import AdminWizard

ADMIN_ID = config("ADMIN_ID", cast=int)
MINI_APP_URL = config("MINI_APP_URL", default="")
PUBLIC_BASE_URL = config("PUBLIC_BASE_URL", default="")  # e.g., https://xxxx.up.railway.app
WEBHOOK_SECRET = config("WEBHOOK_SECRET", default="")

app = FastAPI(title="shopbot", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

telegram = TelegramGateway()
wizard_sessions = InMemorySessionRegistry()


def get_gateway() -> TelegramGateway:
    return telegram


def get_sessions() -> SessionRegistry:
    return wizard_sessions


def get_dispatcher(
    db: Session = Depends(get_db),
    gateway=Depends(get_gateway),
    sessions: SessionRegistry = Depends(get_sessions),
) -> UpdateDispatcher:
    catalog = CatalogStore(db)
    wizard = AdminWizard(ADMIN_ID, sessions, catalog, gateway)
    ordering = OrderingWorkflow(
        ADMIN_ID, catalog, CartStore(db), OrderStore(db), gateway, mini_app_url=MINI_APP_URL or None
    )
    return UpdateDispatcher(wizard, ordering, gateway)


@app.on_event("startup")
def on_startup():
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ensured on startup.")
    except Exception as e:
        logger.error(f"DB init failed at startup: {e}")

    if not PUBLIC_BASE_URL:
        logger.info("PUBLIC_BASE_URL not set; skipping webhook registration.")
        return
    url = f"{PUBLIC_BASE_URL.rstrip('/')}/webhook"
    try:
        telegram.set_webhook(url, secret_token=WEBHOOK_SECRET)
        me = telegram.get_me()
        logger.info(f"WEBHOOK: {url}")
        logger.info(f"Bot running: @{me.username}")
    except TelegramError as e:
        logger.error(f"Webhook registration failed: {e}")


@app.on_event("shutdown")
def on_shutdown():
    telegram.close()


@app.get("/")
def root():
    return {"status": "ok"}


# -------------------- Telegram webhook -------------------- #
@app.post("/webhook")
def webhook(
    update: dict = Body(...),
    secret: Optional[str] = Header(None, alias="X-Telegram-Bot-Api-Secret-Token"),
    dispatcher: UpdateDispatcher = Depends(get_dispatcher),
    gateway=Depends(get_gateway),
):
    """
    One update per request. A store failure propagates as a 500 so Telegram
    redelivers the update; everything else answers 200.
    """
    if WEBHOOK_SECRET and secret != WEBHOOK_SECRET:
        raise HTTPException(status_code=403, detail="Bad webhook secret")
    dispatcher.dispatch(Update.de_json(update, gateway.bot))
    return {"ok": True}


# -------------------- Mini app API -------------------- #
@app.get("/api/products", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db)):
    out = []
    for product in CatalogStore(db).list_products():
        item = ProductOut.model_validate(product)
        if product.image_id:
            item.image_url = f"/api/image/{product.image_id}"
        out.append(item)
    return out


@app.get("/api/image/{file_id}")
def product_image(file_id: str, gateway=Depends(get_gateway)):
    try:
        content, content_type = gateway.fetch_file(file_id)
    except TelegramError as e:
        logger.error(f"Image {file_id} unavailable: {e}")
        raise HTTPException(status_code=404, detail="Image not found")
    return Response(content=content, media_type=content_type)
