"""Tests for the anime-relations rule file parser."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from subshelf.errors import RelationParseError
from subshelf.relations import From, Inclusive, Number, RelationRule, fetch_relations, parse_relations
from subshelf.relations.parser import parse_bound


class TestParseBound:
    def test_number(self) -> None:
        assert parse_bound('13') == Number(13)

    def test_open_ended(self) -> None:
        assert parse_bound('25-?') == From(25)

    def test_inclusive(self) -> None:
        assert parse_bound('14-26') == Inclusive(14, 26)

    def test_garbage(self) -> None:
        with pytest.raises(ValueError):
            parse_bound('x-1')


class TestParseRelations:
    def test_last_modified(self, relation_table) -> None:
        assert relation_table.last_modified == date(2024, 1, 31)

    def test_redirected_rule_is_registered_twice(self, relation_table) -> None:
        rule = RelationRule(series_id=20001, source=Inclusive(14, 26), destination=Inclusive(1, 13))
        assert relation_table.rules_for(10001) == [rule]
        assert relation_table.rules_for(20001) == [rule]

    def test_open_ended_rule(self, relation_table) -> None:
        assert relation_table.rules_for(30001) == [RelationRule(series_id=40001, source=From(25), destination=From(1))]
        assert relation_table.rules_for(40001) == []

    def test_unknown_source_is_skipped(self, relation_table) -> None:
        assert relation_table.rules_for(50001) == []

    def test_repeated_destination_uses_source_id(self, relation_table) -> None:
        assert relation_table.rules_for(60001) == [
            RelationRule(series_id=60001, source=Number(13), destination=Number(12))
        ]

    def test_series_count(self, relation_table) -> None:
        assert sorted(relation_table.relations) == [10001, 20001, 30001, 60001]

    def test_empty_text(self) -> None:
        table = parse_relations('')
        assert table.is_empty
        assert len(table) == 0

    def test_malformed_rule(self) -> None:
        with pytest.raises(RelationParseError) as exc_info:
            parse_relations('- last_modified: 2024-01-01\n- 1|2|3:a -> 4|5|6:1\n')
        assert exc_info.value.line_number == 2

    def test_malformed_rule_without_ids(self) -> None:
        with pytest.raises(RelationParseError):
            parse_relations('- 3:1 -> 4|5|6:1\n')

    def test_malformed_date(self) -> None:
        with pytest.raises(RelationParseError):
            parse_relations('- last_modified: yesterday\n')


@pytest.mark.asyncio
async def test_fetch_relations(mocker, relations_text) -> None:
    mock_resp = MagicMock(spec=httpx.Response)
    mock_resp.text = relations_text

    mock_http = AsyncMock(spec=httpx.AsyncClient)
    mock_http.get.return_value = mock_resp
    mock_http.__aenter__.return_value = mock_http
    mocker.patch('httpx.AsyncClient', return_value=mock_http)

    table = await fetch_relations('https://example.org/anime-relations.txt')

    mock_http.get.assert_awaited_once_with('https://example.org/anime-relations.txt')
    assert table.last_modified == date(2024, 1, 31)
    assert 10001 in table.relations


@pytest.mark.asyncio
async def test_fetch_relations_http_error(mocker) -> None:
    mock_http = AsyncMock(spec=httpx.AsyncClient)
    mock_http.get.side_effect = httpx.ConnectError('down')
    mock_http.__aenter__.return_value = mock_http
    mocker.patch('httpx.AsyncClient', return_value=mock_http)

    with pytest.raises(httpx.HTTPError):
        await fetch_relations('https://example.org/anime-relations.txt')
