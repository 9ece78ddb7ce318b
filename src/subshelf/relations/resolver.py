"""Episode number resolution across alternate numbering schemes."""

import logging
from collections.abc import Iterable
from typing import NamedTuple

from subshelf.config import settings
from subshelf.utils.episode_parser import ABSENT, EpisodeSpec, Range, Single

from .models import Number, RelationRule, RelationTable, RuleSource, bound_covers, rules_for

log = logging.getLogger(f'{settings.log_prefix}.relations')

__all__ = (
    'RuleOrderWarning',
    'check_rule_order',
    'check_table',
    'find',
    'find_destination',
    'resolve',
    'resolve_spec',
)


def find_destination(rules: Iterable[RelationRule], episode: int) -> tuple[int, int] | None:
    """Apply the first matching rule.

    Returns (destination series id, episode) or None when no rule matches.
    """
    for rule in rules:
        if not rule.source.contains(episode):
            continue
        distance = episode - rule.source.begin
        found = rule.destination.begin
        if not isinstance(rule.destination, Number):
            found += distance
        end = rule.destination.end
        if end is None or found <= end:
            return rule.series_id, found
    return None


def find(series_id: int, episode: int, rules: RuleSource) -> tuple[int, int] | None:
    """Look up the destination series and episode for an episode of series_id"""
    return find_destination(rules_for(rules, series_id), episode)


def resolve(series_id: int, episode: int, rules: RuleSource) -> int | None:
    """Equivalent episode number under the alternate numbering, or None if already canonical"""
    found = find(series_id, episode, rules)
    return None if found is None else found[1]


def resolve_spec(series_id: int, spec: EpisodeSpec, rules: RuleSource) -> EpisodeSpec:
    """Resolve a normalized episode; a range resolves only if both bounds do"""
    match spec:
        case Single(number):
            resolved = resolve(series_id, number, rules)
            return ABSENT if resolved is None else Single(resolved)
        case Range(start, end):
            first = resolve(series_id, start, rules)
            last = resolve(series_id, end, rules)
            if first is None or last is None:
                return ABSENT
            return Range(min(first, last), max(first, last))
        case _:
            return ABSENT


class RuleOrderWarning(NamedTuple):
    """A rule that can never match because an earlier rule covers its whole source range"""

    series_id: int
    index: int
    shadowed_by: int
    rule: RelationRule


def check_rule_order(rules: Iterable[RelationRule], series_id: int = 0) -> list[RuleOrderWarning]:
    """Report rules shadowed by an earlier, wider rule of the same list"""
    seen: list[RelationRule] = []
    warnings: list[RuleOrderWarning] = []
    for index, rule in enumerate(rules):
        for earlier_index, earlier in enumerate(seen):
            if bound_covers(earlier.source, rule.source):
                warnings.append(RuleOrderWarning(series_id, index, earlier_index, rule))
                break
        seen.append(rule)
    return warnings


def check_table(table: RelationTable) -> list[RuleOrderWarning]:
    """Run the ordering check over every series of a table and log what it finds"""
    warnings: list[RuleOrderWarning] = []
    for series_id, rules in table.relations.items():
        warnings.extend(check_rule_order(rules, series_id))
    for w in warnings:
        log.warning(
            'Relation rule %d of series %d is shadowed by rule %d and will never match',
            w.index,
            w.series_id,
            w.shadowed_by,
        )
    return warnings
