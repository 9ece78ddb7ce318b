"""Episode normalizer turning parsed filename elements into an EpisodeSpec."""

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .filename_parser import ElementKind, ParsedElement, ParserOptions, parse_elements


@dataclass(frozen=True, slots=True)
class Absent:
    """No usable episode number"""


@dataclass(frozen=True, slots=True)
class Single:
    """A single episode"""

    number: int


@dataclass(frozen=True, slots=True)
class Range:
    """An inclusive batch of episodes, start <= end"""

    start: int
    end: int


EpisodeSpec = Absent | Single | Range

ABSENT = Absent()

_RANGE_VALUE = re.compile(r'^\s*(\d+)\s*[-~]\s*(\d+)\s*$')


def _to_int(value: str) -> int | None:
    value = value.strip()
    if not value.isdecimal():
        return None
    return int(value)


def _make_range(first: str, second: str) -> EpisodeSpec:
    start, end = _to_int(first), _to_int(second)
    if start is None or end is None:
        return ABSENT
    if start > end:
        start, end = end, start
    return Range(start, end)


def normalize(elements: Iterable[ParsedElement]) -> EpisodeSpec:
    """Extract the canonical episode spec from parser output.

    Never raises: unexpected shapes collapse to Absent.
    """
    episodes: list[str] = []
    alternates: list[str] = []
    for element in elements:
        if not isinstance(element, ParsedElement):
            continue
        if element.kind == ElementKind.EPISODE:
            episodes.append(element.value)
        elif element.kind == ElementKind.EPISODE_ALT:
            alternates.append(element.value)

    values = episodes or alternates
    match values:
        case [value]:
            if isinstance(value, str) and (m := _RANGE_VALUE.match(value)):
                return _make_range(m.group(1), m.group(2))
            number = _to_int(value) if isinstance(value, str) else None
            return ABSENT if number is None else Single(number)
        case [first, second] if isinstance(first, str) and isinstance(second, str):
            return _make_range(first, second)
        case _:
            return ABSENT


def parse_episode(filename: str, options: ParserOptions | None = None) -> EpisodeSpec:
    """Parse a filename and normalize its episode"""
    return normalize(parse_elements(filename, options))


def episode_numbers(spec: EpisodeSpec) -> Iterator[int]:
    """Yield every episode number covered by the spec"""
    match spec:
        case Single(number):
            yield number
        case Range(start, end):
            yield from range(start, end + 1)
        case _:
            return


def highest_episode(spec: EpisodeSpec) -> int | None:
    match spec:
        case Single(number):
            return number
        case Range(start, end):
            return max(start, end)
        case _:
            return None


def format_episode_label(spec: EpisodeSpec) -> str:
    """Format an episode spec into a human-readable label."""
    match spec:
        case Single(number):
            return f'E{number:02d}'
        case Range(start, end):
            return f'E{start:02d}-E{end:02d}'
        case _:
            return '-'
