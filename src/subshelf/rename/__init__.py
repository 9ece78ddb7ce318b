"""Batch rename grammar compiler and engine."""

from .counters import CounterSpec, compile_counters, resolve_counters
from .engine import (
    CaseTransform,
    CompiledRule,
    PreviewRow,
    RenamePlanEntry,
    RenameScope,
    apply,
    compile_rule,
    plan_from_preview,
    plan_to_json,
    preview,
)

__all__ = [
    'CaseTransform',
    'CompiledRule',
    'CounterSpec',
    'PreviewRow',
    'RenamePlanEntry',
    'RenameScope',
    'apply',
    'compile_counters',
    'compile_rule',
    'plan_from_preview',
    'plan_to_json',
    'preview',
    'resolve_counters',
]
