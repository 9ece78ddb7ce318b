"""Client for the relation table served by the web application"""

import logging
import time
from typing import Any, cast

import httpx
import pydantic

from subshelf.config import settings
from subshelf.relations.models import RelationTable
from subshelf.schemas import RelationDatesResponse, RelationsResponse

log = logging.getLogger(f'{settings.log_prefix}.clients.relations')


class RelationsClient:
    """Fetches the relation table and keeps it cached until the server reports a new last_modified"""

    def __init__(self, base_url: str | None = None, check_interval: float | None = None) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip('/')
        self.check_interval = settings.relations_check_interval if check_interval is None else check_interval
        self._table: RelationTable | None = None
        self._generation = 0
        self._checked_at: float | None = None

    @property
    def table(self) -> RelationTable:
        """Cached table, empty until the first successful fetch"""
        return self._table if self._table is not None else RelationTable()

    async def _get(self, endpoint: str) -> dict[str, Any]:
        async with httpx.AsyncClient(proxy=settings.proxy, timeout=httpx.Timeout(settings.timeout)) as client:
            try:
                response = await client.get(f'{self.base_url}{endpoint}')
                response.raise_for_status()
                return cast(dict[str, Any], response.json())
            except httpx.HTTPError as e:
                log.warning('Failed to fetch %s: %s', endpoint, e)
                return {}

    async def get_dates(self) -> RelationDatesResponse | None:
        """Only the cache validation dates of the server's table"""
        data = await self._get('/anime-relations/date')
        if not data:
            return None
        try:
            return RelationDatesResponse.model_validate(data)
        except pydantic.ValidationError as e:
            log.warning('Malformed relation dates: %s', e)
            return None

    async def fetch_table(self) -> RelationTable | None:
        """Download the full table, None on failure"""
        data = await self._get('/anime-relations')
        if not data:
            return None
        try:
            return RelationsResponse.model_validate(data).to_table()
        except pydantic.ValidationError as e:
            log.warning('Malformed relation table: %s', e)
            return None

    async def get_table(self) -> RelationTable:
        """Return the table, re-downloading it only when last_modified changed

        The server is asked at most once every check_interval seconds. Failures
        fall back to the cached (or an empty) table. A result from a refresh that
        a newer call superseded is discarded.
        """
        now = time.monotonic()
        if self._table is not None and self._checked_at is not None and now - self._checked_at < self.check_interval:
            return self._table

        self._generation += 1
        generation = self._generation

        dates = await self.get_dates()
        if dates is not None:
            self._checked_at = now
        cached = self._table
        if cached is not None and (dates is None or dates.last_modified == cached.last_modified):
            return cached

        table = await self.fetch_table()
        if generation != self._generation:
            log.debug('Discarding superseded relation table fetch')
            return self.table
        if table is not None:
            self._table = table
            log.info('Relation table updated (last modified %s)', table.last_modified)
        return self.table

    def invalidate(self) -> None:
        self._table = None
        self._checked_at = None
