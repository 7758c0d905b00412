# dinebot/dialogue/errors.py
from __future__ import annotations

from typing import Optional


class DialogueError(Exception):
    """Recoverable inside a turn: the controller answers with a prompt and resets to main_menu."""


class ItemUnavailable(DialogueError):
    def __init__(self, item_id: Optional[str] = None, stage: str = "select"):
        self.item_id = item_id
        self.stage = stage  # select | quantity
        super().__init__(f"menu item not available: {item_id!r} ({stage})")


class EmptyCart(DialogueError):
    def __init__(self, action: str = "checkout"):
        self.action = action
        super().__init__(f"cart is empty ({action})")


class TranslationServiceFailure(Exception):
    """Raised by the translation service wrapper; always handled inside the pipeline."""


class GeocodeFailure(Exception):
    """Raised by the geocoding client; the geocoder turns it into a placeholder address."""
