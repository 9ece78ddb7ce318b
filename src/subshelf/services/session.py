"""Per-entry session context: file selection and the current rename rule"""

import logging
from collections.abc import Iterable
from typing import NamedTuple

from subshelf.config import settings
from subshelf.errors import ValidationError
from subshelf.rename import (
    CaseTransform,
    CompiledRule,
    PreviewRow,
    RenamePlanEntry,
    RenameScope,
    compile_rule,
    plan_from_preview,
    preview,
)

from .progress import ProgressReport

log = logging.getLogger(f'{settings.log_prefix}.session')

__all__ = (
    'EntrySession',
    'RenameOptions',
    'RenameState',
)


class RenameOptions(NamedTuple):
    """Values of the rename form"""

    search: str = ''
    replacement: str = ''
    is_regex: bool = False
    case_sensitive: bool = False
    match_all: bool = False
    scope: RenameScope = RenameScope.FULL
    case_transform: CaseTransform = CaseTransform.NONE


class RenameState(NamedTuple):
    """Outcome of the last rename options update"""

    rows: list[PreviewRow]
    plan: list[RenamePlanEntry]
    error: ValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class EntrySession:
    """Explicit state of one entry page, passed to the pure compute functions"""

    def __init__(self, entry_id: int, files: Iterable[str]) -> None:
        self.entry_id = entry_id
        self.files: list[str] = list(files)
        self.hidden: set[str] = set()
        self.show_hidden = False
        self.rule: CompiledRule | None = None
        self.rename_state: RenameState | None = None
        self._selected: set[str] = set()
        self._anchor: str | None = None

    # Selection

    def _active(self) -> list[str]:
        if self.show_hidden:
            return list(self.files)
        return [f for f in self.files if f not in self.hidden]

    def apply_progress(self, report: ProgressReport) -> None:
        """Hide files the user already watched"""
        self.hidden = {v.file.name for v in report.files if v.hidden}

    def visible_files(self, report: ProgressReport | None = None) -> list[str]:
        """Files currently listed, after hiding the watched ones of report if given"""
        if report is not None:
            self.apply_progress(report)
        return self._active()

    def toggle_hidden(self) -> bool:
        self.show_hidden = not self.show_hidden
        return self.show_hidden

    def select(self, name: str) -> None:
        if name in self.files:
            self._selected.add(name)
            self._anchor = name

    def deselect(self, name: str) -> None:
        self._selected.discard(name)

    def select_range(self, name: str) -> None:
        """Select every active file between the anchor and name (shift-click)"""
        active = self._active()
        if self._anchor not in active or name not in active:
            self.select(name)
            return
        start, end = sorted((active.index(self._anchor), active.index(name)))
        self._selected.update(active[start : end + 1])

    def select_all(self) -> None:
        self._selected.update(self._active())

    def clear_selection(self) -> None:
        self._selected.clear()
        self._anchor = None

    @property
    def selected_files(self) -> list[str]:
        active = self._active()
        return [f for f in active if f in self._selected]

    def remove_files(self, names: Iterable[str]) -> None:
        removed = set(names)
        self.files = [f for f in self.files if f not in removed]
        self._selected -= removed
        self.hidden -= removed

    # Rename

    def update_rename(self, options: RenameOptions) -> RenameState:
        """Recompile the rename rule and preview it against the selection

        An invalid pattern keeps the previous rule and reports the error.
        """
        try:
            rule = compile_rule(
                options.search,
                is_regex=options.is_regex,
                case_sensitive=options.case_sensitive,
                match_all=options.match_all,
                replacement=options.replacement,
            )
        except ValidationError as e:
            log.debug('Rename options rejected for entry %d: %s', self.entry_id, e)
            self.rename_state = RenameState(rows=[], plan=[], error=e)
            return self.rename_state

        rows = preview(rule, self.selected_files, options.scope, options.case_transform)
        self.rule = rule
        self.rename_state = RenameState(rows=rows, plan=plan_from_preview(rows))
        return self.rename_state

    def rename_payload(self) -> list[dict[str, str]]:
        """JSON body for the rename submission, empty when nothing would change"""
        if self.rename_state is None or not self.rename_state.ok:
            return []
        return [entry.to_dict() for entry in self.rename_state.plan]
