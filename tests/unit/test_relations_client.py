"""Tests for the cached relation table client."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from subshelf.clients.relations import RelationsClient
from subshelf.schemas import RelationsResponse


@pytest.fixture
def relations_client() -> RelationsClient:
    return RelationsClient('http://api.test/', check_interval=0)


@pytest.fixture
def table_payload(relation_table) -> dict:
    return RelationsResponse.from_table(relation_table).model_dump(mode='json')


@pytest.mark.asyncio
async def test_relations_get_base_logic(mocker, relations_client) -> None:
    mock_resp = MagicMock(spec=httpx.Response)
    mock_resp.json.return_value = {'last_modified': '2024-01-31'}

    mock_http = AsyncMock(spec=httpx.AsyncClient)
    mock_http.get.return_value = mock_resp
    mock_http.__aenter__.return_value = mock_http
    mocker.patch('httpx.AsyncClient', return_value=mock_http)

    assert await relations_client._get('/anime-relations/date') == {'last_modified': '2024-01-31'}
    mock_http.get.assert_awaited_with('http://api.test/anime-relations/date')

    mock_http.get.side_effect = httpx.HTTPError('Fail')
    assert await relations_client._get('/anime-relations/date') == {}


@pytest.mark.asyncio
async def test_fetch_table(relations_client, table_payload, relation_table) -> None:
    relations_client._get = AsyncMock(return_value=table_payload)

    table = await relations_client.fetch_table()

    assert table == relation_table
    relations_client._get.assert_awaited_once_with('/anime-relations')


@pytest.mark.asyncio
async def test_fetch_table_failures(relations_client) -> None:
    relations_client._get = AsyncMock(return_value={})
    assert await relations_client.fetch_table() is None

    relations_client._get = AsyncMock(return_value={'relations': 'nope'})
    assert await relations_client.fetch_table() is None


@pytest.mark.asyncio
async def test_get_dates(relations_client) -> None:
    relations_client._get = AsyncMock(
        return_value={'last_modified': '2024-01-31', 'created_at': '2024-02-01T00:00:00Z'}
    )
    dates = await relations_client.get_dates()
    assert dates.last_modified == date(2024, 1, 31)
    relations_client._get.assert_awaited_once_with('/anime-relations/date')

    relations_client._get = AsyncMock(return_value={'last_modified': 'never'})
    assert await relations_client.get_dates() is None


@pytest.mark.asyncio
async def test_get_table_uses_cache_until_modified(relations_client, relation_table, table_payload) -> None:
    dates = {'last_modified': '2024-01-31', 'created_at': '2024-02-01T00:00:00Z'}

    async def _get(endpoint: str) -> dict:
        return dates if endpoint.endswith('/date') else table_payload

    relations_client._get = AsyncMock(side_effect=_get)

    assert relations_client.table.is_empty
    assert await relations_client.get_table() == relation_table
    assert relations_client._get.await_count == 2

    # unchanged last_modified: only the dates are requested
    await relations_client.get_table()
    assert relations_client._get.await_count == 3

    dates = {'last_modified': '2024-03-01', 'created_at': '2024-03-02T00:00:00Z'}
    await relations_client.get_table()
    assert relations_client._get.await_count == 5


@pytest.mark.asyncio
async def test_get_table_keeps_cache_on_failure(relations_client, relation_table) -> None:
    relations_client._table = relation_table
    relations_client.get_dates = AsyncMock(return_value=None)
    relations_client.fetch_table = AsyncMock(return_value=None)

    assert await relations_client.get_table() is relation_table
    relations_client.fetch_table.assert_not_awaited()

    relations_client.invalidate()
    assert (await relations_client.get_table()).is_empty


@pytest.mark.asyncio
async def test_get_table_discards_superseded_fetch(relations_client, relation_table) -> None:
    relations_client.get_dates = AsyncMock(return_value=None)

    async def _slow_fetch():
        # a newer refresh starts while this one is in flight
        relations_client._generation += 1
        return relation_table

    relations_client.fetch_table = AsyncMock(side_effect=_slow_fetch)

    table = await relations_client.get_table()

    assert table.is_empty
    assert relations_client._table is None


@pytest.mark.asyncio
async def test_get_table_throttles_date_checks(relation_table) -> None:
    client = RelationsClient('http://api.test', check_interval=300)
    client._table = relation_table
    client.get_dates = AsyncMock(return_value=None)

    await client.get_table()
    client.get_dates.assert_awaited_once()

    client.get_dates.return_value = MagicMock(last_modified=relation_table.last_modified)
    await client.get_table()
    await client.get_table()
    assert client.get_dates.await_count == 2
