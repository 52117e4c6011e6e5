"""
Per-day cache of the raw dining hall menu pages.
All four pages are refreshed together, at most once per calendar date, under a
single lock so a reader never sees a half-finished refresh.
"""

import asyncio
import logging
import time
from datetime import date
from typing import Optional

from dining_bot.clock import ScheduleClock
from dining_bot.errors import FetchError
from dining_bot.models import DiningHall, MenuSnapshot
from dining_bot.page_client import DEFAULT_MENU_BASE_URL, PageClient, menu_url

logger = logging.getLogger(__name__)


class MenuCache:
    """
    Holds today's MenuSnapshot.

    `ensure_fresh` is the only path to the snapshot. When a refresh fails the
    previous snapshot stays in place untouched; `get` then either serves it
    with a warning (serve_stale=True) or raises the FetchError.
    """

    def __init__(
        self,
        page_client: PageClient,
        clock: ScheduleClock,
        base_url: str = DEFAULT_MENU_BASE_URL,
        serve_stale: bool = True,
        retry_seconds: float = 300,
    ):
        self.page_client = page_client
        self.clock = clock
        self.base_url = base_url
        self.serve_stale = serve_stale
        self.retry_seconds = retry_seconds

        self._lock = asyncio.Lock()
        self._snapshot: Optional[MenuSnapshot] = None
        self._last_error: Optional[FetchError] = None
        self._failed_on: Optional[date] = None
        self._retry_at = 0.0
        self.refresh_count = 0

    @classmethod
    async def create(cls, page_client: PageClient, clock: ScheduleClock, **kwargs) -> "MenuCache":
        """Build a cache and populate it immediately"""
        cache = cls(page_client, clock, **kwargs)
        await cache.ensure_fresh()
        return cache

    @property
    def date(self) -> Optional[date]:
        """Date of the held snapshot, None before the first successful refresh"""
        return self._snapshot.fetched_on if self._snapshot else None

    async def ensure_fresh(self) -> MenuSnapshot:
        """
        Refresh all pages if the snapshot isn't from today.

        Raises:
            FetchError: If any hall's page failed; the prior snapshot is kept
        """
        async with self._lock:
            return await self._ensure_fresh_locked()

    async def get(self, hall: DiningHall) -> str:
        """Today's raw menu page for a hall"""
        async with self._lock:
            try:
                snapshot = await self._ensure_fresh_locked()
            except FetchError:
                if self.serve_stale and self._snapshot is not None:
                    logger.warning(
                        f"Serving {hall.label} menu from {self._snapshot.fetched_on} "
                        f"because today's refresh failed"
                    )
                    return self._snapshot.document(hall)
                raise
            return snapshot.document(hall)

    async def _ensure_fresh_locked(self) -> MenuSnapshot:
        today = self.clock.today()
        if self._snapshot is not None and self._snapshot.fetched_on == today:
            return self._snapshot

        if self._failed_on == today and time.monotonic() < self._retry_at:
            # Today's refresh failed recently; don't hit the site again for every lookup
            raise self._last_error

        try:
            snapshot = await self._fetch_all(today)
        except FetchError as e:
            self._last_error = e
            self._failed_on = today
            self._retry_at = time.monotonic() + self.retry_seconds
            logger.error(f"Menu refresh for {today} failed: {e}")
            raise

        self._snapshot = snapshot
        self._last_error = None
        self._failed_on = None
        self.refresh_count += 1
        logger.info(f"✅ Menus refreshed for {today}")
        return snapshot

    async def _fetch_all(self, today: date) -> MenuSnapshot:
        halls = list(DiningHall)
        results = await asyncio.gather(
            *(self.page_client.fetch_document(menu_url(hall, self.base_url)) for hall in halls),
            return_exceptions=True,
        )

        documents = {}
        for hall, result in zip(halls, results):
            if isinstance(result, BaseException):
                raise result
            documents[hall] = result

        return MenuSnapshot(fetched_on=today, documents=documents)
