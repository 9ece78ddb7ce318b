"""Tests for the entry session state."""

from subshelf.rename import RenamePlanEntry, RenameScope
from subshelf.services.progress import FileRef, FileVisibility, ProgressReport, ProgressState
from subshelf.services.session import EntrySession, RenameOptions
from subshelf.utils.episode_parser import ABSENT, Single

FILES = ['ep01.srt', 'ep02.srt', 'ep03.srt', 'ep04.srt']


def _report(hidden: list[str]) -> ProgressReport:
    files = [FileVisibility(FileRef(name), Single(1), ABSENT, name in hidden) for name in FILES]
    return ProgressReport(ProgressState(watched_count=2), files)


class TestSelection:
    def test_select_and_deselect(self) -> None:
        session = EntrySession(1, FILES)
        session.select('ep02.srt')
        session.select('missing.srt')
        assert session.selected_files == ['ep02.srt']

        session.deselect('ep02.srt')
        assert session.selected_files == []

    def test_select_range(self) -> None:
        session = EntrySession(1, FILES)
        session.select('ep04.srt')
        session.select_range('ep02.srt')
        assert session.selected_files == ['ep02.srt', 'ep03.srt', 'ep04.srt']

    def test_select_range_without_anchor(self) -> None:
        session = EntrySession(1, FILES)
        session.select_range('ep03.srt')
        assert session.selected_files == ['ep03.srt']

    def test_hidden_files_are_not_selectable(self) -> None:
        session = EntrySession(1, FILES)
        session.apply_progress(_report(['ep01.srt', 'ep02.srt']))
        session.select_all()
        assert session.selected_files == ['ep03.srt', 'ep04.srt']

        assert session.toggle_hidden() is True
        session.select_all()
        assert session.selected_files == FILES

        session.toggle_hidden()
        assert session.selected_files == ['ep03.srt', 'ep04.srt']

    def test_visible_files(self) -> None:
        session = EntrySession(1, FILES)
        assert session.visible_files() == FILES
        assert session.visible_files(_report(['ep01.srt'])) == FILES[1:]
        assert session.hidden == {'ep01.srt'}

    def test_clear_and_remove(self) -> None:
        session = EntrySession(1, FILES)
        session.select_all()
        session.remove_files(['ep01.srt'])
        assert session.files == FILES[1:]
        assert session.selected_files == FILES[1:]

        session.clear_selection()
        assert session.selected_files == []


class TestRename:
    def test_update_rename(self) -> None:
        session = EntrySession(1, FILES)
        session.select('ep01.srt')
        session.select('ep02.srt')

        state = session.update_rename(RenameOptions(search='srt', replacement='ass', scope=RenameScope.EXTENSION))

        assert state.ok
        assert [row.renamed for row in state.rows] == ['ep01.ass', 'ep02.ass']
        assert state.plan == [RenamePlanEntry('ep01.srt', 'ep01.ass'), RenamePlanEntry('ep02.srt', 'ep02.ass')]
        assert session.rename_payload() == [
            {'from': 'ep01.srt', 'to': 'ep01.ass'},
            {'from': 'ep02.srt', 'to': 'ep02.ass'},
        ]

    def test_invalid_regex_keeps_previous_rule(self) -> None:
        session = EntrySession(1, FILES)
        session.select_all()
        session.update_rename(RenameOptions(search='ep', replacement='Episode '))
        previous = session.rule

        state = session.update_rename(RenameOptions(search='(', is_regex=True))

        assert not state.ok
        assert state.error.field == 'search'
        assert session.rule is previous
        assert session.rename_payload() == []

    def test_payload_before_any_update(self) -> None:
        assert EntrySession(1, FILES).rename_payload() == []
