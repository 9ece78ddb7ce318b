"""Episode relation rules: models, rule-file parser and resolver."""

from .models import EpisodeBound, From, Inclusive, Number, RelationRule, RelationTable
from .parser import fetch_relations, parse_relations
from .resolver import RuleOrderWarning, check_rule_order, check_table, find, resolve, resolve_spec

__all__ = [
    'EpisodeBound',
    'From',
    'Inclusive',
    'Number',
    'RelationRule',
    'RelationTable',
    'RuleOrderWarning',
    'check_rule_order',
    'check_table',
    'fetch_relations',
    'find',
    'parse_relations',
    'resolve',
    'resolve_spec',
]
