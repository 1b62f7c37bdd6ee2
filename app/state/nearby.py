from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Optional, Tuple

from app.errors import SiteBuilderError
from app.logging_config import logger
from app.models.schemas import Location, RadiusQuery
from app.state.notices import NoticeBoard, NoticeKind
from app.utils.filters import exclude_center

RadiusLookupFn = Callable[[float, float, int], Awaitable[List[Location]]]

RADIUS_LOOKUP_FAILED_MESSAGE = "Erreur lors de la recherche des villes dans le rayon."


class NearbyCitiesController:
    """
    Keeps the nearby-cities collection in step with a center and radius.

    A change of ``(center.id, radius)`` to an enabled pair replaces the
    collection with the lookup result, minus the center itself. A disabled
    pair (radius 0 or no center) empties it at once without a lookup.
    Only the most recently triggered refresh may write; a failed refresh
    leaves the collection as it was and posts a notice.
    """

    def __init__(
        self,
        lookup: RadiusLookupFn,
        apply: Callable[[Tuple[Location, ...]], None],
        notices: NoticeBoard,
    ) -> None:
        self._lookup = lookup
        self._apply = apply
        self._notices = notices
        self._seq = 0
        self._last_key: Optional[Tuple[str, int]] = None
        self._task: Optional[asyncio.Task] = None
        self.loading = False

    def sync(self, query: RadiusQuery) -> None:
        center, radius_km = query.center, query.radiusKm
        key = (center.id, radius_km)
        if key == self._last_key:
            return
        self._last_key = key
        self._seq += 1

        if not query.enabled:
            self.loading = False
            self._apply(())
            return

        self.loading = True
        self._task = asyncio.get_running_loop().create_task(
            self._refresh(self._seq, center, radius_km)
        )

    async def settle(self) -> None:
        while self._task is not None and not self._task.done():
            await asyncio.gather(self._task, return_exceptions=True)

    async def _refresh(self, seq: int, center: Location, radius_km: int) -> None:
        try:
            found = await self._lookup(center.lat, center.lng, radius_km)
        except SiteBuilderError as exc:
            if seq == self._seq:
                logger.error(
                    "nearby cities lookup failed",
                    center=center.id,
                    radius_km=radius_km,
                    error=exc.message,
                )
                self._notices.post(NoticeKind.LOOKUP_FAILED, RADIUS_LOOKUP_FAILED_MESSAGE)
            return
        except Exception:
            if seq == self._seq:
                logger.exception("nearby cities lookup crashed", center=center.id, radius_km=radius_km)
                self._notices.post(NoticeKind.LOOKUP_FAILED, RADIUS_LOOKUP_FAILED_MESSAGE)
            return
        finally:
            if seq == self._seq:
                self.loading = False

        if seq != self._seq:
            logger.debug("discarding superseded nearby lookup", center=center.id, radius_km=radius_km)
            return
        self._apply(tuple(exclude_center(found, center)))
