"""Data models for episode relation rules."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime


@dataclass(frozen=True, slots=True)
class Number:
    """Exactly one episode"""

    value: int

    @property
    def begin(self) -> int:
        return self.value

    @property
    def end(self) -> int | None:
        return self.value

    def contains(self, episode: int) -> bool:
        return episode == self.value


@dataclass(frozen=True, slots=True)
class From:
    """Every episode from value onwards (end is unbounded)"""

    value: int

    @property
    def begin(self) -> int:
        return self.value

    @property
    def end(self) -> int | None:
        return None

    def contains(self, episode: int) -> bool:
        return episode >= self.value


@dataclass(frozen=True, slots=True)
class Inclusive:
    """Episodes begin..end, both ends included"""

    begin: int
    end: int

    def contains(self, episode: int) -> bool:
        return self.begin <= episode <= self.end


EpisodeBound = Number | From | Inclusive


def bound_covers(outer: EpisodeBound, inner: EpisodeBound) -> bool:
    """Whether every episode of inner is also inside outer"""
    if inner.begin < outer.begin:
        return False
    if outer.end is None:
        return True
    return inner.end is not None and inner.end <= outer.end


@dataclass(frozen=True, slots=True)
class RelationRule:
    """Maps a source episode range onto the numbering of series_id"""

    series_id: int
    source: EpisodeBound
    destination: EpisodeBound


EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


@dataclass
class RelationTable:
    """Rules grouped by the series they apply to, in authoring order"""

    last_modified: date = EPOCH.date()
    created_at: datetime = EPOCH
    relations: dict[int, list[RelationRule]] = field(default_factory=dict)

    def rules_for(self, series_id: int) -> list[RelationRule]:
        return self.relations.get(series_id, [])

    def add(self, source_id: int, rule: RelationRule) -> None:
        self.relations.setdefault(source_id, []).append(rule)

    def __len__(self) -> int:
        return len(self.relations)

    @property
    def is_empty(self) -> bool:
        return not self.relations


RuleSource = RelationTable | Mapping[int, Sequence[RelationRule]] | Sequence[RelationRule] | None


def rules_for(rules: RuleSource, series_id: int) -> list[RelationRule]:
    """Rules of a series from a table, a mapping, a flat list tagged by series_id or nothing at all"""
    if rules is None:
        return []
    if isinstance(rules, RelationTable):
        return rules.rules_for(series_id)
    if isinstance(rules, Mapping):
        return list(rules.get(series_id, []))
    return [r for r in rules if r.series_id == series_id]
