"""Merging per-package changelogs into the main changelog."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .changelog import (
    UNPUBLISHED_VERSION_NAME,
    Changelog,
    ChangelogChanges,
    Entry,
    is_unpublished_version,
)
from .config import DEFAULT_PACKAGES_PATTERN, RepositoryConfig

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """Result of merging package changelogs."""

    packages: list[str] = field(default_factory=list)
    entries_count: int = 0

    @property
    def has_changes(self) -> bool:
        return self.entries_count > 0


def find_package_changelogs(
    workspace: Path,
    pattern: str = DEFAULT_PACKAGES_PATTERN,
    repository: RepositoryConfig | None = None,
) -> dict[str, Changelog]:
    """Find package changelogs matching `pattern`, keyed by package directory name."""
    return {
        path.parent.name: Changelog(path, repository)
        for path in sorted(workspace.glob(pattern))
        if path.is_file()
    }


def get_unpublished_heading(changelog: Changelog) -> str:
    """Return the heading text the changelog uses for unpublished changes."""
    return next(
        (v for v in changelog.get_versions() if is_unpublished_version(v)),
        UNPUBLISHED_VERSION_NAME,
    )


def merge_changelogs(
    package_changelogs: Mapping[str, Changelog], main_changelog: Changelog
) -> MergeResult:
    """Insert unpublished changes of every package into the main changelog.

    Changes are grouped by package name under the main changelog's unpublished
    section. The main changelog is saved once at the end.

    Args:
        package_changelogs: Package changelogs keyed by package name.
        main_changelog: The changelog receiving the changes.

    Returns:
        MergeResult with the merged package names and number of entries.
    """
    changelog_changes: dict[str, ChangelogChanges] = {}

    for package_name, changelog in package_changelogs.items():
        if not changelog.file_exists():
            continue
        changes = changelog.get_changes()
        if changes.total_count > 0:
            changelog_changes[package_name] = changes
        else:
            logger.debug("No unpublished changes in %s", package_name)

    result = MergeResult()
    unpublished_heading = get_unpublished_heading(main_changelog)

    for package_name in sorted(changelog_changes):
        inserted_count = 0
        for changes in changelog_changes[package_name].versions.values():
            for change_type, messages in changes.items():
                entries = [Entry(message=message) for message in messages]
                inserted_count += main_changelog.insert_entries(
                    unpublished_heading, change_type, package_name, entries
                )
        if inserted_count:
            result.packages.append(package_name)
            result.entries_count += inserted_count

    main_changelog.save()

    logger.info(
        "Merged %d entries from %d packages into %s",
        result.entries_count,
        len(result.packages),
        main_changelog.file_path,
    )
    return result
