"""Pytest configuration and shared fixtures"""

from datetime import UTC, datetime

import pytest

from subshelf.relations import From, Number, RelationRule, RelationTable, parse_relations

RELATIONS_TEXT = """\
# Anime relations

::meta
- version: 1.3.0
- last_modified: 2024-01-31

::rules

# Split cour: the second cour continues the numbering of the first
- 10001|10002|10003:14-26 -> 20001|20002|20003:1-13!
# Open-ended continuation
- 30001|30002|30003:25-? -> 40001|40002|40003:1-?
# Unknown source ids are skipped
- ?|?|?:1 -> 50001|50002|50003:1
# Repeated destination id
- 60001|60002|60003:13 -> ~|~|~:12
"""


@pytest.fixture
def relations_text() -> str:
    return RELATIONS_TEXT


@pytest.fixture
def relation_table() -> RelationTable:
    """Table parsed from the sample rule file"""
    return parse_relations(RELATIONS_TEXT, created_at=datetime(2024, 2, 1, tzinfo=UTC))


@pytest.fixture
def split_rules() -> list[RelationRule]:
    """Exact rule listed before the open-ended catch-all"""
    return [
        RelationRule(series_id=42, source=Number(1), destination=Number(100)),
        RelationRule(series_id=42, source=From(2), destination=From(101)),
    ]


@pytest.fixture
def sample_files() -> list[str]:
    return [
        '[Group] Show - 01 [1080p].srt',
        '[Group] Show - 02 [1080p].srt',
        '[Group] Show - 03 [1080p].srt',
    ]
