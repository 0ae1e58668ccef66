# Filename: shopbot/wizard.py
# Admin catalog wizard.
#  - /add and the edit_<id> button open a session at the name step
#  - name -> description -> photo, one qualifying message per step
#  - the photo step writes the catalog and always closes the session
#  - anything from a non-admin sender is ignored without a reply

import logging
from dataclasses import replace
from typing import Callable, Dict, Tuple

from shopbot.events import CallbackQuery, Command, PhotoMessage, TextMessage
from shopbot.services.stores import CatalogStore
from shopbot.services.telegram import button_rows
from shopbot.sessions import SessionRegistry, WizardAction, WizardSession, WizardStep
from shopbot.utils import safe_int, send_safely

logger = logging.getLogger(__name__)

ADMIN_COMMANDS = ("add", "edit", "delete")
EDIT_PREFIX = "edit_"
DELETE_PREFIX = "del_"

ASK_NAME = "Send the product name:"
ASK_NEW_NAME = "Send the new name:"
ASK_DESCRIPTION = "Send the description:"
ASK_PHOTO = "Send a photo:"
PICK_FOR_EDIT = "Choose a product to edit:"
PICK_FOR_DELETE = "Choose a product to delete:"
CATALOG_EMPTY = "The catalog is empty."
PRODUCT_ADDED = "Product added."
PRODUCT_UPDATED = "Product updated."
PRODUCT_DELETED = "Product deleted."
PRODUCT_NOT_FOUND = "Product not found."

TEXT = "text"
PHOTO = "photo"


class AdminWizard:
    def __init__(self, admin_id: int, sessions: SessionRegistry, catalog: CatalogStore, gateway):
        self.admin_id = admin_id
        self.sessions = sessions
        self.catalog = catalog
        self.gateway = gateway

    def is_admin(self, user_id: int) -> bool:
        return user_id == self.admin_id

    def _say(self, chat_id: int, text: str, buttons=None) -> None:
        send_safely(self.gateway.send_text, chat_id, text, buttons)

    # ------------------------------------------------------------------ commands

    def handle_command(self, event: Command) -> None:
        if not self.is_admin(event.user_id):
            return
        if event.name == "add":
            self.sessions.set(event.user_id, WizardSession(action=WizardAction.ADD))
            logger.info(f"Wizard add opened for {event.user_id}")
            self._say(event.chat_id, ASK_NAME)
        elif event.name == "edit":
            self._send_picker(event.chat_id, PICK_FOR_EDIT, EDIT_PREFIX)
        elif event.name == "delete":
            self._send_picker(event.chat_id, PICK_FOR_DELETE, DELETE_PREFIX)

    def _send_picker(self, chat_id: int, prompt: str, prefix: str) -> None:
        products = self.catalog.list_products()
        if not products:
            self._say(chat_id, CATALOG_EMPTY)
            return
        rows = button_rows([(p.name, f"{prefix}{p.id}") for p in products])
        self._say(chat_id, prompt, rows)

    # ----------------------------------------------------------------- callbacks

    def handle_callback(self, event: CallbackQuery) -> None:
        """Acknowledging the query is the dispatcher's job; this only acts on the tag."""
        if not self.is_admin(event.user_id):
            return

        if event.data.startswith(EDIT_PREFIX):
            product_id = safe_int(event.data[len(EDIT_PREFIX):])
            if product_id is None:
                logger.warning(f"Bad edit tag {event.data!r}")
                return
            self.sessions.set(event.user_id, WizardSession(action=WizardAction.EDIT, product_id=product_id))
            logger.info(f"Wizard edit opened for {event.user_id} product={product_id}")
            self._say(event.chat_id, ASK_NEW_NAME)

        elif event.data.startswith(DELETE_PREFIX):
            product_id = safe_int(event.data[len(DELETE_PREFIX):])
            if product_id is None:
                logger.warning(f"Bad delete tag {event.data!r}")
                return
            deleted = self.catalog.delete(product_id)
            self._say(event.chat_id, PRODUCT_DELETED if deleted else PRODUCT_NOT_FOUND)

    # --------------------------------------------------------------------- steps

    def handle_text(self, event: TextMessage) -> None:
        self._advance(TEXT, event)

    def handle_photo(self, event: PhotoMessage) -> None:
        self._advance(PHOTO, event)

    def _advance(self, kind: str, event) -> None:
        if not self.is_admin(event.user_id):
            return
        session = self.sessions.get(event.user_id)
        if session is None:
            return
        step = self._TRANSITIONS.get((session.step, kind))
        if step is None:
            logger.info(f"Wizard ignores {kind} at step {session.step.value} for {event.user_id}")
            return
        step(self, event, session)

    def _take_name(self, event: TextMessage, session: WizardSession) -> None:
        self.sessions.set(event.user_id, replace(session, name=event.text, step=WizardStep.DESCRIPTION))
        self._say(event.chat_id, ASK_DESCRIPTION)

    def _take_description(self, event: TextMessage, session: WizardSession) -> None:
        self.sessions.set(event.user_id, replace(session, description=event.text, step=WizardStep.PHOTO))
        self._say(event.chat_id, ASK_PHOTO)

    def _finish(self, event: PhotoMessage, session: WizardSession) -> None:
        image_id = event.best_file_id()
        try:
            if session.action is WizardAction.ADD:
                self.catalog.create(session.name, session.description, image_id)
                done = PRODUCT_ADDED
            else:
                updated = self.catalog.update(session.product_id, session.name, session.description, image_id)
                done = PRODUCT_UPDATED if updated else PRODUCT_NOT_FOUND
        finally:
            self.sessions.clear(event.user_id)
            logger.info(f"Wizard {session.action.value} closed for {event.user_id}")

        self._say(event.chat_id, done)
        if done != PRODUCT_NOT_FOUND:
            send_safely(self.gateway.send_photo, event.chat_id, image_id, f"{session.name}\n\n{session.description}")

    # every pair not listed here is ignored
    _TRANSITIONS: Dict[Tuple[WizardStep, str], Callable] = {
        (WizardStep.NAME, TEXT): _take_name,
        (WizardStep.DESCRIPTION, TEXT): _take_description,
        (WizardStep.PHOTO, PHOTO): _finish,
    }
