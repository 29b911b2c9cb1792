"""Structured editing of markdown changelogs."""

from ._version import __version__
from .changelog import (
    UNPUBLISHED_VERSION_NAME,
    ChangeType,
    ChangeTypeSectionNotFoundError,
    Changelog,
    ChangelogChanges,
    ChangelogEntry,
    ChangelogError,
    Entry,
    LoadState,
    TokensNotLoadedError,
    VersionNotFoundError,
    load_from,
)
from .merge import MergeResult, find_package_changelogs, merge_changelogs

__all__ = [
    "UNPUBLISHED_VERSION_NAME",
    "ChangeType",
    "ChangeTypeSectionNotFoundError",
    "Changelog",
    "ChangelogChanges",
    "ChangelogEntry",
    "ChangelogError",
    "Entry",
    "LoadState",
    "MergeResult",
    "TokensNotLoadedError",
    "VersionNotFoundError",
    "__version__",
    "find_package_changelogs",
    "load_from",
    "merge_changelogs",
]
