"""Batch rename engine: compiles search/replace options into a rename plan."""

import json
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import NamedTuple

from subshelf.config import settings
from subshelf.errors import ValidationError

from .counters import CounterSpec, compile_counters, resolve_counters

log = logging.getLogger(f'{settings.log_prefix}.rename')

__all__ = (
    'CaseTransform',
    'CompiledRule',
    'PreviewRow',
    'RenamePlanEntry',
    'RenameScope',
    'apply',
    'compile_rule',
    'plan_from_preview',
    'plan_to_json',
    'preview',
)


class RenameScope(StrEnum):
    """Which part of a filename a rename is applied to"""

    FULL = 'full'
    STEM = 'stem'
    EXTENSION = 'extension'


class CaseTransform(StrEnum):
    NONE = 'none'
    LOWER = 'lower'
    UPPER = 'upper'

    def __call__(self, text: str) -> str:
        match self:
            case CaseTransform.LOWER:
                return text.lower()
            case CaseTransform.UPPER:
                return text.upper()
            case _:
                return text


@dataclass(frozen=True)
class CompiledRule:
    """Search pattern and replacement template ready to be applied to filenames

    pattern is None for an empty search, which leaves every name untouched.
    """

    pattern: re.Pattern[str] | None
    template: str
    counters: Mapping[int, CounterSpec] = field(default_factory=dict)
    is_regex: bool = False
    match_all: bool = False

    @property
    def is_identity(self) -> bool:
        return self.pattern is None

    def substitute(self, text: str) -> str:
        """Run the pattern over text; placeholders are left for the caller to resolve"""
        if self.pattern is None:
            return text
        count = 0 if self.match_all else 1
        if self.is_regex:
            result = self.pattern.sub(self.template, text, count=count)
        else:
            template = self.template
            result = self.pattern.sub(lambda _: template, text, count=count)
        return result.strip()


class PreviewRow(NamedTuple):
    """One selected file next to what it would be renamed to"""

    original: str
    renamed: str

    @property
    def changed(self) -> bool:
        return self.original != self.renamed


class RenamePlanEntry(NamedTuple):
    from_: str
    to: str

    def to_dict(self) -> dict[str, str]:
        return {'from': self.from_, 'to': self.to}


def compile_rule(
    search: str,
    is_regex: bool = False,
    case_sensitive: bool = False,
    match_all: bool = False,
    replacement: str = '',
) -> CompiledRule:
    """Compile rename options.

    Raises:
        ValidationError: the search is not a valid regular expression, or the
            replacement references a group the search does not define.
    """
    counter_template = compile_counters(replacement)
    if not search:
        return CompiledRule(
            pattern=None,
            template=counter_template.template,
            counters=counter_template.counters,
            is_regex=is_regex,
            match_all=match_all,
        )

    flags = 0 if case_sensitive else re.IGNORECASE
    source = search if is_regex else re.escape(search)
    try:
        pattern = re.compile(source, flags)
    except re.error as e:
        raise ValidationError('search', f'Invalid regex provided: {e}') from e

    if is_regex:
        # re parses a template before searching, so an empty subject validates it
        try:
            pattern.sub(counter_template.template, '')
        except re.error as e:
            raise ValidationError('replacement', f'Invalid replacement: {e}') from e

    return CompiledRule(
        pattern=pattern,
        template=counter_template.template,
        counters=counter_template.counters,
        is_regex=is_regex,
        match_all=match_all,
    )


class _Renamer:
    """Applies a rule file by file, advancing counters only for changed files"""

    def __init__(self, rule: CompiledRule, scope: RenameScope, case: CaseTransform) -> None:
        self.rule = rule
        self.scope = RenameScope(scope)
        self.case = CaseTransform(case)
        self.index = 0

    def _replace(self, text: str) -> str:
        substituted = self.rule.substitute(text)
        if substituted == text:
            return text
        result = resolve_counters(substituted, self.rule.counters, self.index)
        self.index += 1
        return result

    def rename(self, filename: str) -> str:
        match self.scope:
            case RenameScope.STEM:
                idx = filename.rfind('.')
                if idx == -1:
                    return filename
                return self.case(self._replace(filename[:idx])) + filename[idx:]
            case RenameScope.EXTENSION:
                idx = filename.rfind('.')
                if idx == -1:
                    return filename
                changed = self.case(self._replace(filename[idx + 1 :]))
                if changed:
                    return f'{filename[:idx]}.{changed}'
                return filename[:idx]
            case _:
                return self.case(self._replace(filename))


def preview(
    rule: CompiledRule,
    files: Iterable[str],
    scope: RenameScope = RenameScope.FULL,
    case: CaseTransform = CaseTransform.NONE,
) -> list[PreviewRow]:
    """Original and renamed name for every file, including unaffected ones"""
    renamer = _Renamer(rule, scope, case)
    return [PreviewRow(f, renamer.rename(f)) for f in files]


def plan_from_preview(rows: Iterable[PreviewRow]) -> list[RenamePlanEntry]:
    return [RenamePlanEntry(row.original, row.renamed) for row in rows if row.changed]


def apply(
    rule: CompiledRule,
    files: Iterable[str],
    scope: RenameScope = RenameScope.FULL,
    case: CaseTransform = CaseTransform.NONE,
) -> list[RenamePlanEntry]:
    """Rename plan containing only the files whose name actually changes"""
    plan = plan_from_preview(preview(rule, files, scope, case))
    log.debug('Rename plan has %d entries', len(plan))
    return plan


def plan_to_json(plan: Iterable[RenamePlanEntry]) -> str:
    """Serialize a plan into the JSON array the rename endpoint accepts"""
    return json.dumps([entry.to_dict() for entry in plan], ensure_ascii=False)
