"""Counter directives embedded in rename replacement templates.

A directive looks like ``{start=5, increment=2, padding=2}``. Any subset of the
three keys may be given in any order, an optional ``$`` may precede the brace
and ``{}`` is a counter with every default. Compilation happens in two passes:
``compile_counters`` swaps each directive for a placeholder keyed by the offset
the directive had in the template, and ``resolve_counters`` later swaps the
placeholders for numbers once the pattern engine is done with the text.
"""

import re
from collections.abc import Mapping
from typing import NamedTuple

__all__ = (
    'CounterSpec',
    'CounterTemplate',
    'compile_counters',
    'parse_directive',
    'placeholder',
    'resolve_counters',
)

_DIRECTIVE = re.compile(r'\$?\{([^{}]*)\}')
_KEY_VALUE = re.compile(r'^\s*(start|increment|padding)\s*=\s*(.*?)\s*$', re.IGNORECASE)
_PLACEHOLDER = re.compile('\x00counter:(\\d+)\x00')

_DEFAULTS = {'start': 1, 'increment': 1, 'padding': 0}


class CounterSpec(NamedTuple):
    """Auto-incrementing number inserted into every renamed file"""

    start: int = 1
    increment: int = 1
    padding: int = 0

    def render(self, index: int) -> str:
        value = self.start + index * self.increment
        if self.padding:
            return str(value).zfill(self.padding)
        return str(value)


class CounterTemplate(NamedTuple):
    """Replacement template with directives swapped for placeholders"""

    template: str
    counters: dict[int, CounterSpec]


def placeholder(offset: int) -> str:
    # NUL never occurs in filenames, so user text cannot collide with it
    return f'\x00counter:{offset}\x00'


def _to_int(value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        return default


def parse_directive(body: str) -> CounterSpec | None:
    """Parse the text between the braces, None if it is not a counter directive"""
    values = dict(_DEFAULTS)
    for part in body.split(','):
        if not part.strip():
            continue
        m = _KEY_VALUE.match(part)
        if m is None:
            return None
        key = m.group(1).lower()
        values[key] = _to_int(m.group(2), _DEFAULTS[key])

    return CounterSpec(
        start=values['start'],
        increment=values['increment'],
        padding=max(values['padding'], 0),
    )


def compile_counters(replacement: str) -> CounterTemplate:
    """Swap every counter directive in a replacement template for a placeholder"""
    counters: dict[int, CounterSpec] = {}

    def _swap(m: re.Match[str]) -> str:
        spec = parse_directive(m.group(1))
        if spec is None:
            return m.group(0)
        counters[m.start()] = spec
        return placeholder(m.start())

    template = _DIRECTIVE.sub(_swap, replacement)
    return CounterTemplate(template, counters)


def resolve_counters(text: str, counters: Mapping[int, CounterSpec], index: int) -> str:
    """Replace placeholders in substituted text with the value for the index-th changed file"""
    if not counters:
        return text

    def _value(m: re.Match[str]) -> str:
        spec = counters.get(int(m.group(1)))
        if spec is None:
            return ''
        return spec.render(index)

    return _PLACEHOLDER.sub(_value, text)
