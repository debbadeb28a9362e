"""Version-control text providers."""

from .base import NoRepositoryError, RevisionNotFoundError, SourceTextProvider
from .git import GitTextProvider
from .memory import MappingTextProvider

__all__ = [
    "GitTextProvider",
    "MappingTextProvider",
    "NoRepositoryError",
    "RevisionNotFoundError",
    "SourceTextProvider",
]
