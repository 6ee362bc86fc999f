"""Draft state."""

from enum import Enum


class DraftState(Enum):
    """Composer draft lifecycle.

    ``EMPTY -> EDITING -> SENDING -> SENT | FAILED``. A failed draft keeps
    its content and re-enters ``EDITING`` on the next change or retry; a
    sent draft is reset to ``EMPTY``.
    """

    EMPTY = "empty"
    EDITING = "editing"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"

    @property
    def is_mutable(self) -> bool:
        return self in (DraftState.EMPTY, DraftState.EDITING, DraftState.FAILED)
