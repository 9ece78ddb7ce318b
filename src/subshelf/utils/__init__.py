"""Utilities package"""

from .episode_parser import (
    ABSENT,
    Absent,
    EpisodeSpec,
    Range,
    Single,
    episode_numbers,
    format_episode_label,
    normalize,
    parse_episode,
)
from .filename_parser import ElementKind, ParsedElement, ParserOptions, parse_elements

__all__ = (
    'ABSENT',
    'Absent',
    'ElementKind',
    'EpisodeSpec',
    'ParsedElement',
    'ParserOptions',
    'Range',
    'Single',
    'episode_numbers',
    'format_episode_label',
    'normalize',
    'parse_elements',
    'parse_episode',
)
