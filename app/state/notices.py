from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel

from app.logging_config import logger


class NoticeKind(str, Enum):
    DUPLICATE_SELECTION = "duplicate_selection"
    LOOKUP_FAILED = "lookup_failed"
    INVALID_INPUT = "invalid_input"


class Notice(BaseModel):
    """Transient, non-blocking message shown to the user."""

    kind: NoticeKind
    message: str


class NoticeBoard:
    def __init__(self) -> None:
        self._pending: List[Notice] = []

    def post(self, kind: NoticeKind, message: str) -> Notice:
        notice = Notice(kind=kind, message=message)
        self._pending.append(notice)
        logger.info("notice posted", kind=kind.value, message=message)
        return notice

    def drain(self) -> List[Notice]:
        """Return and forget every notice posted so far."""
        pending, self._pending = self._pending, []
        return pending

    def __len__(self) -> int:
        return len(self._pending)
