"""Client for the entry file operations of the storage backend"""

import logging
from collections.abc import Iterable

import httpx
import pydantic

from subshelf.config import settings
from subshelf.rename import RenamePlanEntry
from subshelf.schemas import RenameResult

log = logging.getLogger(f'{settings.log_prefix}.clients.entries')


class EntriesClient:
    """Submits rename plans produced by the rename engine"""

    def __init__(self, base_url: str | None = None) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip('/')

    async def submit_rename(self, entry_id: int, plan: Iterable[RenamePlanEntry]) -> RenameResult | None:
        """POST the {from, to} pairs of a plan; None if nothing was sent or the request failed"""
        payload = [entry.to_dict() for entry in plan]
        if not payload:
            return None

        async with httpx.AsyncClient(proxy=settings.proxy, timeout=httpx.Timeout(settings.timeout)) as client:
            try:
                response = await client.post(f'{self.base_url}/entry/{entry_id}/rename', json=payload)
                response.raise_for_status()
                result = RenameResult.model_validate(response.json())
            except (httpx.HTTPError, pydantic.ValidationError) as e:
                log.error('Failed to rename files of entry %d: %s', entry_id, e)
                return None

        log.info('Renamed %d/%d files of entry %d', result.success, result.total, entry_id)
        return result
