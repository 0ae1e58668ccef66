# Filename: shopbot/dispatcher.py
# Routes one classified update to the wizard or the ordering workflow.
# Stateless per call: sessions live in the registry, data in the stores.

import logging
from typing import Optional

from telegram import Update

from shopbot.events import AppPayload, CallbackQuery, Command, PhotoMessage, TextMessage, classify_update
from shopbot.ordering import OrderingWorkflow
from shopbot.utils import send_safely
from shopbot.wizard import ADMIN_COMMANDS, AdminWizard

logger = logging.getLogger(__name__)


class UpdateDispatcher:
    def __init__(self, wizard: AdminWizard, ordering: OrderingWorkflow, gateway):
        self.wizard = wizard
        self.ordering = ordering
        self.gateway = gateway

    def dispatch(self, update: Optional[Update]) -> None:
        event = classify_update(update)
        if event is None:
            logger.debug(f"Dropping update {update.update_id if update else None}")
            return

        if isinstance(event, Command):
            if event.name == "start":
                self.ordering.start(event)
            elif event.name in ADMIN_COMMANDS:
                self.wizard.handle_command(event)
        elif isinstance(event, CallbackQuery):
            try:
                self.wizard.handle_callback(event)
            finally:
                send_safely(self.gateway.answer_callback, event.query_id)
        elif isinstance(event, PhotoMessage):
            self.wizard.handle_photo(event)
        elif isinstance(event, TextMessage):
            self.wizard.handle_text(event)
        elif isinstance(event, AppPayload):
            self.ordering.handle_payload(event)
