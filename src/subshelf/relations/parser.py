"""Parser and downloader for the anime-relations rule file.

The upstream file documents its rule syntax as::

    10001|10002|10003:14-26 -> 20001|20002|20003:1-13!

The three ids are MyAnimeList, Kitsu and AniList ids; only the AniList id (the
third one) is used here. ``?`` marks an unknown id, ``~`` repeats the source id
and a trailing ``!`` also registers the rule under the destination id.
"""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime
from typing import NamedTuple

import httpx

from subshelf.config import settings
from subshelf.errors import RelationParseError

from .models import EPOCH, EpisodeBound, From, Inclusive, Number, RelationRule, RelationTable
from .resolver import check_table

log = logging.getLogger(f'{settings.log_prefix}.relations')

__all__ = (
    'fetch_relations',
    'parse_bound',
    'parse_relations',
)

UNKNOWN_ID = '?'
REPEATED_ID = '~'


class _Component(NamedTuple):
    series_id: int | None
    bound: EpisodeBound


def parse_bound(text: str) -> EpisodeBound:
    """Parse ``N``, ``N-?`` or ``N-M`` into an episode bound"""
    left, sep, right = text.partition('-')
    value = int(left)
    if not sep:
        return Number(value)
    if right == '?':
        return From(value)
    return Inclusive(value, int(right))


def _parse_component(text: str) -> _Component:
    _, sep, tail = text.rpartition('|')
    if not sep:
        raise ValueError('missing id separator')
    series, sep, episodes = tail.partition(':')
    if not sep:
        raise ValueError('missing episode separator')

    series_id = None if series in (UNKNOWN_ID, REPEATED_ID) else int(series)
    return _Component(series_id, parse_bound(episodes))


def parse_relations(text: str, created_at: datetime | None = None) -> RelationTable:
    """Build a relation table from the contents of the rule file"""
    table = RelationTable(last_modified=EPOCH.date(), created_at=created_at or datetime.now(UTC))

    for line_number, raw in enumerate(text.splitlines(), start=1):
        if not raw.startswith('- '):
            continue
        line = raw[2:]

        key, sep, value = line.partition(': ')
        if sep and key == 'last_modified':
            try:
                table.last_modified = date.fromisoformat(value.strip())
            except ValueError as e:
                raise RelationParseError(line_number, raw, 'invalid last_modified date') from e
            continue

        left, sep, right = line.partition(' -> ')
        if not sep:
            continue

        redirected = right.endswith('!')
        if redirected:
            right = right[:-1]

        try:
            source = _parse_component(left)
            destination = _parse_component(right)
        except ValueError as e:
            raise RelationParseError(line_number, raw) from e

        if source.series_id is None:
            continue
        destination_id = destination.series_id if destination.series_id is not None else source.series_id

        rule = RelationRule(series_id=destination_id, source=source.bound, destination=destination.bound)
        table.add(source.series_id, rule)
        if redirected:
            table.add(destination_id, rule)

    return table


async def fetch_relations(url: str | None = None) -> RelationTable:
    """Download and parse the upstream rule file"""
    url = url or settings.relations_url
    async with httpx.AsyncClient(proxy=settings.proxy, timeout=httpx.Timeout(settings.timeout)) as client:
        response = await client.get(url)
        response.raise_for_status()

    table = parse_relations(response.text)
    check_table(table)
    log.info('Loaded relations for %d series (last modified %s)', len(table), table.last_modified)
    return table
