"""Service for watch progress: per-file visibility and completeness diagnostics"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, NamedTuple

from subshelf.config import settings
from subshelf.relations.models import RuleSource
from subshelf.relations.resolver import resolve_spec
from subshelf.utils.episode_parser import ABSENT, EpisodeSpec, Range, Single, highest_episode, parse_episode
from subshelf.utils.filename_parser import ParserOptions

log = logging.getLogger(f'{settings.log_prefix}.progress')

__all__ = (
    'CompletionStatus',
    'FileRef',
    'FileVisibility',
    'ProgressReport',
    'ProgressState',
    'classify',
    'is_hidden',
)


class CompletionStatus(StrEnum):
    RELEASING = 'releasing'
    FINISHED = 'finished'
    UNRELEASED = 'unreleased'


_ANILIST_STATUS = {
    'FINISHED': CompletionStatus.FINISHED,
    'NOT_YET_RELEASED': CompletionStatus.UNRELEASED,
}


class ProgressState(NamedTuple):
    """A user's recorded progress for one series"""

    watched_count: int
    total_episodes: int | None = None
    completion_status: CompletionStatus = CompletionStatus.RELEASING
    next_airing_episode: int | None = None

    @classmethod
    def from_anilist(cls, entry: Mapping[str, Any]) -> 'ProgressState':
        """Build from an AniList MediaListCollection entry"""
        media = entry.get('media') or {}
        next_airing = media.get('nextAiringEpisode') or {}
        return cls(
            watched_count=entry.get('progress') or 0,
            total_episodes=media.get('episodes'),
            completion_status=_ANILIST_STATUS.get(media.get('status', ''), CompletionStatus.RELEASING),
            next_airing_episode=next_airing.get('episode'),
        )


class FileRef(NamedTuple):
    """A file of an entry as listed by the storage layer"""

    name: str
    size: int = 0
    last_modified: datetime | None = None
    url: str | None = None


class FileVisibility(NamedTuple):
    file: FileRef
    episode: EpisodeSpec
    resolved: EpisodeSpec
    hidden: bool


@dataclass
class ProgressReport:
    """Visibility of every file of a series plus series level aggregates"""

    progress: ProgressState
    files: list[FileVisibility] = field(default_factory=list)
    furthest_episode_seen: int = 0
    missing_episodes: frozenset[int] = frozenset()
    is_behind_latest: bool = False

    @property
    def is_caught_up(self) -> bool:
        next_airing = self.progress.next_airing_episode
        return next_airing is not None and self.progress.watched_count == next_airing - 1

    @property
    def is_incomplete(self) -> bool:
        return (
            self.progress.completion_status == CompletionStatus.FINISHED
            and self.progress.total_episodes is not None
            and bool(self.missing_episodes)
        )

    @property
    def visible_count(self) -> int:
        return sum(1 for f in self.files if not f.hidden)

    @property
    def has_hidden(self) -> bool:
        return any(f.hidden for f in self.files)

    @property
    def progress_label(self) -> str:
        total = self.progress.total_episodes
        label = f'{self.progress.watched_count}/{total if total is not None else "?"}'
        next_airing = self.progress.next_airing_episode
        if next_airing is not None and total is None:
            label += f' ({next_airing - 1})'
        return label


def is_hidden(spec: EpisodeSpec, watched_count: int) -> bool:
    """Whether a file holding spec counts as already watched

    Nothing is hidden while progress is zero. A range is only shown when it holds
    the next episode to watch.
    """
    if watched_count == 0:
        return False
    match spec:
        case Single(number):
            return number <= watched_count
        case Range(start, end):
            return not start <= watched_count + 1 <= end
        case _:
            return False


def _present_episodes(specs: Iterable[EpisodeSpec], total: int) -> set[int]:
    present: set[int] = set()
    for spec in specs:
        match spec:
            case Single(number):
                present.add(number)
            case Range(start, end):
                present.update(range(max(start, 1), min(end, total) + 1))
    return present


def _missing_episodes(progress: ProgressState, file_count: int, specs: list[EpisodeSpec]) -> frozenset[int]:
    total = progress.total_episodes
    if total == 1:
        return frozenset() if file_count else frozenset({1})
    if progress.completion_status != CompletionStatus.FINISHED or total is None:
        return frozenset()
    return frozenset(set(range(1, total + 1)) - _present_episodes(specs, total))


def classify(
    files: Iterable[FileRef | str],
    progress: ProgressState,
    series_id: int,
    rules: RuleSource = None,
    options: ParserOptions | None = None,
) -> ProgressReport:
    """Decide which files are new for the user and compute series diagnostics"""
    refs = [FileRef(f) if isinstance(f, str) else f for f in files]
    watched = progress.watched_count

    visibility: list[FileVisibility] = []
    seen: list[EpisodeSpec] = []
    for ref in refs:
        episode = parse_episode(ref.name, options)
        resolved = resolve_spec(series_id, episode, rules) if episode != ABSENT else ABSENT

        raw_hidden = is_hidden(episode, watched)
        resolved_hidden = is_hidden(resolved, watched) if resolved != ABSENT else raw_hidden
        visibility.append(FileVisibility(ref, episode, resolved, raw_hidden and resolved_hidden))
        seen.extend((episode, resolved))

    furthest = max((n for n in map(highest_episode, seen) if n is not None), default=0)
    next_airing = progress.next_airing_episode
    behind = (
        progress.completion_status == CompletionStatus.RELEASING
        and next_airing is not None
        and furthest < next_airing - 1
    )

    report = ProgressReport(
        progress=progress,
        files=visibility,
        furthest_episode_seen=furthest,
        missing_episodes=_missing_episodes(progress, len(refs), seen),
        is_behind_latest=behind,
    )
    log.debug(
        'Series %d: %d/%d files visible, furthest episode %d', series_id, report.visible_count, len(refs), furthest
    )
    return report
