"""Adapter over the anitopy tokenizer producing typed filename elements."""

import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any, NamedTuple

import anitopy

from subshelf.config import settings

log = logging.getLogger(f'{settings.log_prefix}.filename_parser')

__all__ = (
    'ElementKind',
    'ParsedElement',
    'ParserOptions',
    'parse_elements',
)

SUBTITLE_EXTENSIONS = frozenset({'srt', 'ssa', 'ass', 'sub', 'sup', 'idx', 'vtt', 'zip', '7z', 'rar'})


class ElementKind(StrEnum):
    """Categories of elements a release filename is split into"""

    TITLE = 'title'
    EPISODE = 'episode'
    EPISODE_ALT = 'episode_alt'
    EPISODE_TITLE = 'episode_title'
    SEASON = 'season'
    RELEASE_GROUP = 'release_group'
    RELEASE_INFORMATION = 'release_information'
    RELEASE_VERSION = 'release_version'
    VIDEO_TERM = 'video_term'
    AUDIO_TERM = 'audio_term'
    FILE_CHECKSUM = 'file_checksum'
    FILE_EXTENSION = 'file_extension'
    LANGUAGE = 'language'
    SUBTITLES = 'subtitles'
    SOURCE = 'source'
    VIDEO_RESOLUTION = 'video_resolution'
    VOLUME = 'volume'
    YEAR = 'year'
    DATE = 'date'
    TYPE = 'type'
    DEVICE_COMPATIBILITY = 'device_compatibility'
    OTHER = 'other'


class ParsedElement(NamedTuple):
    """A single typed element of a filename"""

    kind: ElementKind
    value: str


class ParserOptions(NamedTuple):
    """Feature toggles enabling or disabling element categories"""

    title: bool = True
    episode: bool = True
    episode_title: bool = True
    season: bool = True
    file_extension: bool = True
    release_group: bool = True
    other: bool = True

    def allows(self, kind: ElementKind) -> bool:
        match kind:
            case ElementKind.TITLE:
                return self.title
            case ElementKind.EPISODE | ElementKind.EPISODE_ALT:
                return self.episode
            case ElementKind.EPISODE_TITLE:
                return self.episode_title
            case ElementKind.SEASON:
                return self.season
            case ElementKind.FILE_EXTENSION:
                return self.file_extension
            case ElementKind.RELEASE_GROUP:
                return self.release_group
            case _:
                return self.other

    def to_anitopy(self) -> dict[str, Any]:
        return {
            'allowed_delimiters': ' _.&+,|',
            'ignored_strings': [],
            'parse_episode_number': self.episode,
            'parse_episode_title': self.episode_title,
            'parse_file_extension': self.file_extension,
            'parse_release_group': self.release_group,
        }


# anitopy dictionary keys mapped to element kinds; prefixes and file_name are bookkeeping
_ANITOPY_KINDS: dict[str, ElementKind] = {
    'anime_title': ElementKind.TITLE,
    'anime_season': ElementKind.SEASON,
    'anime_type': ElementKind.TYPE,
    'anime_year': ElementKind.YEAR,
    'audio_term': ElementKind.AUDIO_TERM,
    'device_compatibility': ElementKind.DEVICE_COMPATIBILITY,
    'episode_number': ElementKind.EPISODE,
    'episode_number_alt': ElementKind.EPISODE_ALT,
    'episode_title': ElementKind.EPISODE_TITLE,
    'file_checksum': ElementKind.FILE_CHECKSUM,
    'file_extension': ElementKind.FILE_EXTENSION,
    'language': ElementKind.LANGUAGE,
    'other': ElementKind.OTHER,
    'release_group': ElementKind.RELEASE_GROUP,
    'release_information': ElementKind.RELEASE_INFORMATION,
    'release_version': ElementKind.RELEASE_VERSION,
    'source': ElementKind.SOURCE,
    'subtitles': ElementKind.SUBTITLES,
    'video_resolution': ElementKind.VIDEO_RESOLUTION,
    'video_term': ElementKind.VIDEO_TERM,
    'volume_number': ElementKind.VOLUME,
}


def _tokenize(filename: str, options: ParserOptions) -> dict[str, Any]:
    try:
        result = anitopy.parse(filename, options=options.to_anitopy())
    except (ValueError, IndexError, KeyError, TypeError) as e:
        log.debug('anitopy failed on %r: %s', filename, e)
        return {}
    return result or {}


def _position_in(filename: str) -> Callable[[ParsedElement], int]:
    haystack = filename.lower()

    def _position(element: ParsedElement) -> int:
        index = haystack.find(element.value.lower()) if element.value else -1
        return len(haystack) if index == -1 else index

    return _position


def parse_elements(filename: str, options: ParserOptions | None = None) -> list[ParsedElement]:
    """Split a filename into typed elements ordered by where they occur in it.

    List values reported by the tokenizer (an episode range, several audio terms)
    become repeated elements. A subtitle extension is always last.
    """
    if not filename:
        return []
    options = options or ParserOptions()

    # anitopy only knows video extensions
    extension = None
    stem, dot, suffix = filename.rpartition('.')
    if dot and stem and suffix.lower() in SUBTITLE_EXTENSIONS:
        filename, extension = stem, suffix

    elements: list[ParsedElement] = []
    for key, value in _tokenize(filename, options).items():
        kind = _ANITOPY_KINDS.get(key)
        if kind is None or not options.allows(kind):
            continue
        values = value if isinstance(value, list) else [value]
        elements.extend(ParsedElement(kind, str(v)) for v in values if v is not None)

    # anitopy reports by category; values it rewrote and cannot be located keep that order at the end
    elements.sort(key=_position_in(filename))

    if extension is not None and options.file_extension:
        elements.append(ParsedElement(ElementKind.FILE_EXTENSION, extension))
    return elements
