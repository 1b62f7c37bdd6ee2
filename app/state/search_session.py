"""
Debounced lookup behind a search input.

Keystrokes restart a quiet-period timer; when it expires the lookup is
issued tagged with the sequence number of the keystroke that scheduled
it. A response is applied only while that number is still the latest,
so a slow answer for "Par" can never overwrite the answer for "Pari".
Superseded requests are left to finish and their results dropped.
"""
from __future__ import annotations

import asyncio
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Set

from app.config import settings
from app.errors import SiteBuilderError
from app.logging_config import logger
from app.models.schemas import Location

LookupFn = Callable[[str], Awaitable[List[Location]]]


class LookupPhase(str, Enum):
    IDLE = "idle"
    TYPING = "typing"
    QUERYING = "querying"


class SearchSession:
    def __init__(
        self,
        lookup: LookupFn,
        debounce_seconds: Optional[float] = None,
        min_query_length: Optional[int] = None,
        track_commit: bool = False,
    ) -> None:
        self.lookup = lookup
        self.debounce_seconds = (
            settings.SEARCH_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        self.min_query_length = (
            settings.SEARCH_MIN_QUERY_LENGTH if min_query_length is None else min_query_length
        )
        self.track_commit = track_commit

        self.query = ""
        self.candidates: List[Location] = []
        self.visible = False
        self.committed = False
        self.phase = LookupPhase.IDLE

        self._seq = 0
        self._timer: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def show_candidates(self) -> bool:
        return self.visible and bool(self.candidates)

    def update_query(self, text: str) -> None:
        """Handle a keystroke: the input now reads ``text``."""
        if self.track_commit and self.committed and text == self.query:
            # Echo of the accepted label, not a user edit
            return
        self.committed = False
        self.query = text
        self.visible = True
        self._supersede()

        if len(text) < self.min_query_length:
            self.candidates = []
            self.phase = LookupPhase.IDLE
            return

        self.phase = LookupPhase.TYPING
        self._timer = asyncio.get_running_loop().create_task(self._debounced(self._seq, text))

    def accept(self, candidate: Location) -> Location:
        """The user picked ``candidate`` from the dropdown."""
        self._supersede()
        self.query = candidate.label
        self.candidates = []
        self.visible = False
        self.committed = self.track_commit
        self.phase = LookupPhase.IDLE
        return candidate

    def reset(self) -> None:
        self._supersede()
        self.query = ""
        self.candidates = []
        self.visible = False
        self.committed = False
        self.phase = LookupPhase.IDLE

    def close(self) -> None:
        """Widget unmounted; nothing issued from now on is applied."""
        self._supersede()
        self.phase = LookupPhase.IDLE

    async def settle(self) -> None:
        """Wait until no timer or request of this session is outstanding."""
        while True:
            pending = list(self._inflight)
            if self._timer is not None and not self._timer.done():
                pending.append(self._timer)
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def _supersede(self) -> None:
        self._seq += 1
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _debounced(self, seq: int, text: str) -> None:
        await asyncio.sleep(self.debounce_seconds)

        task = asyncio.current_task()
        self._timer = None
        self._inflight.add(task)
        self.phase = LookupPhase.QUERYING
        try:
            results = await self._run_lookup(text)
        finally:
            self._inflight.discard(task)

        if seq != self._seq:
            logger.debug("discarding superseded lookup", query=text, seq=seq, latest=self._seq)
            return
        self.candidates = results
        self.phase = LookupPhase.IDLE

    async def _run_lookup(self, text: str) -> List[Location]:
        try:
            return await self.lookup(text)
        except SiteBuilderError as exc:
            logger.warning("autocomplete lookup failed", query=text, error=exc.message)
            return []
