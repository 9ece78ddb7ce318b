"""Main entry point for subshelf"""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from contextlib import suppress

import httpx

from subshelf.config import settings
from subshelf.errors import RelationParseError, ValidationError
from subshelf.relations import fetch_relations, find
from subshelf.rename import CaseTransform, RenameScope, compile_rule, plan_from_preview, plan_to_json, preview
from subshelf.services.progress import CompletionStatus, ProgressState, classify
from subshelf.utils.episode_parser import format_episode_label

logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger(__name__)


def _read_files(files: Sequence[str]) -> list[str]:
    if files:
        return list(files)
    return [line.strip() for line in sys.stdin if line.strip()]


def run_rename(args: argparse.Namespace) -> int:
    """Print the rename preview (or the JSON plan) for the given files"""
    try:
        rule = compile_rule(
            args.search,
            is_regex=args.regex,
            case_sensitive=args.case_sensitive,
            match_all=args.match_all,
            replacement=args.replace,
        )
    except ValidationError as e:
        log.error('%s', e)
        return 2

    rows = preview(rule, _read_files(args.files), RenameScope(args.scope), CaseTransform(args.case))
    if args.json:
        print(plan_to_json(plan_from_preview(rows)))
        return 0

    for row in rows:
        print(f'{row.original} -> {row.renamed}' if row.changed else f'{row.original} (unchanged)')
    return 0


async def run_relations(args: argparse.Namespace) -> int:
    """Resolve an episode with the upstream relation rules"""
    try:
        table = await fetch_relations(args.url)
    except (httpx.HTTPError, RelationParseError) as e:
        log.error('Failed to load relations: %s', e)
        return 1

    found = find(args.series_id, args.episode, table)
    if found is None:
        print(f'{args.series_id}:{args.episode} has no relation')
    else:
        print(f'{args.series_id}:{args.episode} -> {found[0]}:{found[1]}')
    return 0


async def run_progress(args: argparse.Namespace) -> int:
    """Show which files are new for the given progress"""
    table = None
    if args.relations:
        try:
            table = await fetch_relations(args.url)
        except (httpx.HTTPError, RelationParseError) as e:
            log.warning('Ignoring relations that failed to load: %s', e)

    state = ProgressState(
        watched_count=args.watched,
        total_episodes=args.total,
        completion_status=CompletionStatus(args.status),
        next_airing_episode=args.next_airing,
    )
    report = classify(_read_files(args.files), state, args.series_id, table)
    if args.json:
        print(
            json.dumps(
                {
                    'files': [{'name': v.file.name, 'hidden': v.hidden} for v in report.files],
                    'furthest_episode_seen': report.furthest_episode_seen,
                    'missing_episodes': sorted(report.missing_episodes),
                    'is_behind_latest': report.is_behind_latest,
                },
                ensure_ascii=False,
            )
        )
        return 0

    for v in report.files:
        marker = 'watched' if v.hidden else 'new'
        print(f'[{marker:>7}] {format_episode_label(v.episode):>9}  {v.file.name}')
    print(f'progress {report.progress_label}, furthest episode {report.furthest_episode_seen}')
    if report.missing_episodes:
        print('missing episodes: ' + ', '.join(map(str, sorted(report.missing_episodes))))
    if report.is_behind_latest:
        print('behind the latest aired episode')
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Subshelf episode tools')
    sub = parser.add_subparsers(dest='mode', required=True)

    rename = sub.add_parser('rename', help='Preview a batch rename')
    rename.add_argument('files', nargs='*', help='File names (read from stdin when omitted)')
    rename.add_argument('-s', '--search', default='', help='Text or regex to search for')
    rename.add_argument('-r', '--replace', default='', help='Replacement text, may embed counters')
    rename.add_argument('--regex', action='store_true', help='Treat the search as a regular expression')
    rename.add_argument('--case-sensitive', action='store_true')
    rename.add_argument('--match-all', action='store_true', help='Replace every occurrence')
    rename.add_argument('--scope', choices=[s.value for s in RenameScope], default=RenameScope.FULL.value)
    rename.add_argument('--case', choices=[c.value for c in CaseTransform], default=CaseTransform.NONE.value)
    rename.add_argument('--json', action='store_true', help='Print the rename plan as JSON')

    relations = sub.add_parser('relations', help='Resolve an episode through the relation rules')
    relations.add_argument('series_id', type=int)
    relations.add_argument('episode', type=int)
    relations.add_argument('--url', default=None, help='Rule file URL')

    progress = sub.add_parser('progress', help='Classify files against watch progress')
    progress.add_argument('files', nargs='*', help='File names (read from stdin when omitted)')
    progress.add_argument('--series-id', type=int, default=0)
    progress.add_argument('--watched', type=int, default=0)
    progress.add_argument('--total', type=int, default=None)
    progress.add_argument(
        '--status', choices=[s.value for s in CompletionStatus], default=CompletionStatus.RELEASING.value
    )
    progress.add_argument('--next-airing', type=int, default=None)
    progress.add_argument('--relations', action='store_true', help='Resolve episodes with the upstream rules')
    progress.add_argument('--url', default=None, help='Rule file URL')
    progress.add_argument('--json', action='store_true')
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the application"""
    args = build_parser().parse_args(argv)

    if args.mode == 'rename':
        return run_rename(args)
    with suppress(KeyboardInterrupt):
        if args.mode == 'relations':
            return asyncio.run(run_relations(args))
        if args.mode == 'progress':
            return asyncio.run(run_progress(args))
    return 1


if __name__ == '__main__':
    sys.exit(main())
