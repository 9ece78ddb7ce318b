"""HTTP clients for the subshelf web application"""

from .entries import EntriesClient
from .relations import RelationsClient

__all__ = [
    'EntriesClient',
    'RelationsClient',
]
