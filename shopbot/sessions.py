# Filename: shopbot/sessions.py
# Per-user wizard sessions for the admin catalog flow.

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional


class WizardAction(str, enum.Enum):
    ADD = "add"
    EDIT = "edit"


class WizardStep(str, enum.Enum):
    NAME = "name"
    DESCRIPTION = "description"
    PHOTO = "photo"


@dataclass(frozen=True)
class WizardSession:
    """
    An in-progress add/edit run. Immutable: each step stores a new value in the
    registry instead of mutating the one it read.
    """
    action: WizardAction
    step: WizardStep = WizardStep.NAME
    product_id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None


class SessionRegistry(ABC):
    """At most one wizard session per user id."""

    @abstractmethod
    def get(self, user_id: int) -> Optional[WizardSession]:
        ...

    @abstractmethod
    def set(self, user_id: int, session: WizardSession) -> None:
        ...

    @abstractmethod
    def clear(self, user_id: int) -> None:
        ...


class InMemorySessionRegistry(SessionRegistry):
    """
    Process-local registry. A restart drops every open wizard. Not shared
    between worker processes: run the bot as a single instance.
    """

    def __init__(self):
        self._sessions: Dict[int, WizardSession] = {}

    def get(self, user_id: int) -> Optional[WizardSession]:
        return self._sessions.get(user_id)

    def set(self, user_id: int, session: WizardSession) -> None:
        self._sessions[user_id] = session

    def clear(self, user_id: int) -> None:
        self._sessions.pop(user_id, None)
