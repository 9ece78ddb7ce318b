"""Services built on the episode and rename cores"""

from .progress import CompletionStatus, FileRef, FileVisibility, ProgressReport, ProgressState, classify, is_hidden
from .session import EntrySession, RenameOptions, RenameState

__all__ = [
    'CompletionStatus',
    'EntrySession',
    'FileRef',
    'FileVisibility',
    'ProgressReport',
    'ProgressState',
    'RenameOptions',
    'RenameState',
    'classify',
    'is_hidden',
]
