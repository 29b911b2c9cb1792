"""Structured reading and editing of changelog files.

A changelog is a markdown document where `##` headings name versions and
`###` headings name the type of changes listed beneath them:

    ## master

    ### 🐛 Bug fixes

    - **`expo-foo`**
      - Fixed something. ([#123](https://github.com/expo/expo/pull/123) by [@alice](https://github.com/alice))

The document is lexed once into tokens, mutated in place and rendered back
on save.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import semver

from .config import RepositoryConfig
from .errors import ChangelogError
from .markdown import (
    HeadingToken,
    ListItemToken,
    ListToken,
    ParagraphToken,
    SpaceToken,
    Token,
    Tokens,
    TokenType,
    create_list_item_token,
    create_list_token,
    lexify,
    render,
)

logger = logging.getLogger(__name__)


class ChangeType(Enum):
    """Change type sections that are commonly used."""

    BREAKING_CHANGES = "🛠 Breaking changes"
    NEW_FEATURES = "🎉 New features"
    BUG_FIXES = "🐛 Bug fixes"


# Heading name for unpublished changes
UNPUBLISHED_VERSION_NAME = "master"

# Key under which unpublished changes are reported by `get_changes`
UNPUBLISHED_VERSION_KEY = "unpublished"

# Headings treated as unpublished. `master` was used first, but it reads oddly
# on other branches, so newer changelogs use `unpublished`.
UNPUBLISHED_VERSION_NAMES = ("master", "unpublished")

VERSION_EMPTY_PARAGRAPH_TEXT = "*This version does not introduce any user-facing changes.*"

VERSION_HEADING_DEPTH = 2
CHANGE_TYPE_HEADING_DEPTH = 3

# Depth of the list whose items can be groups
GROUP_LIST_ITEM_DEPTH = 0
GROUPED_ENTRY_DEPTH = 1


class VersionNotFoundError(ChangelogError):
    """Raised when there is no heading for the requested version."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Version {version} not found.")


class ChangeTypeSectionNotFoundError(ChangelogError):
    """Raised when there is no heading for the requested change type."""

    def __init__(self, change_type: str):
        self.change_type = change_type
        super().__init__(f"Couldn't find '{change_type}' section.")


class TokensNotLoadedError(ChangelogError):
    """Raised when rendering a changelog whose tokens were never loaded."""

    def __init__(self):
        super().__init__("Tokens have not been loaded yet!")


class LoadState(Enum):
    """Whether the changelog tokens are cached in memory."""

    UNLOADED = "unloaded"
    LOADED = "loaded"


@dataclass
class Entry:
    """A single change note."""

    message: str
    pull_requests: list[int] = field(default_factory=list)
    authors: list[str] = field(default_factory=list)  # GitHub user names


@dataclass(kw_only=True)
class ChangelogEntry(Entry):
    """A change note together with where it belongs in the changelog."""

    type: ChangeType | str
    version: str = UNPUBLISHED_VERSION_NAME
    group_name: str | None = None  # usually the package where the change occurred


@dataclass
class ChangelogChanges:
    """Changes read from a changelog, keyed by version and change type."""

    total_count: int = 0
    versions: dict[str, dict[str, list[str]]] = field(default_factory=dict)


class Changelog:
    """A changelog file with lazily loaded tokens."""

    def __init__(self, file_path: str | Path, repository: RepositoryConfig | None = None):
        self.file_path = Path(file_path)
        self.repository = repository or RepositoryConfig()
        self.tokens: Tokens | None = None

    def __repr__(self) -> str:
        return f"Changelog({str(self.file_path)!r}, state={self.state.value})"

    @property
    def state(self) -> LoadState:
        return LoadState.UNLOADED if self.tokens is None else LoadState.LOADED

    def file_exists(self) -> bool:
        """Return True if the changelog file exists."""
        return self.file_path.exists()

    def get_tokens(self) -> Tokens:
        """Lex the changelog content and return the resulting tokens.

        A file that is missing or can't be read is treated as an empty changelog.
        """
        if self.tokens is None:
            try:
                markdown = self.file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Treating %s as empty changelog: %s", self.file_path, e)
                self.tokens = []
            else:
                self.tokens = lexify(markdown)
                logger.debug("Loaded %d tokens from %s", len(self.tokens), self.file_path)
        return self.tokens

    def get_versions(self) -> list[str]:
        """Return the texts of all version headings in document order."""
        return [token.text for token in self.get_tokens() if is_version_token(token)]

    def get_last_published_version(self) -> str | None:
        """Return the first version that is a valid semantic version."""
        return next((v for v in self.get_versions() if is_semver(v)), None)

    def get_changes(
        self,
        from_version: str | None = None,
        to_version: str = UNPUBLISHED_VERSION_NAME,
    ) -> ChangelogChanges:
        """Read changes between two versions.

        Versions are read from `to_version` down to, but excluding, `from_version`.
        If called without arguments, only unpublished changes are returned.
        """
        changes = ChangelogChanges()
        versions = changes.versions

        current_version: str | None = None
        current_section: str | None = None

        for token in self.get_tokens():
            if token.type is TokenType.HEADING:
                if token.depth == VERSION_HEADING_DEPTH:
                    if not _same_version(token.text, to_version) and (
                        not from_version or token.text == from_version
                    ):
                        # Everything we needed has been read
                        break

                    current_version = normalize_version_name(token.text)
                    current_section = None
                    versions.setdefault(current_version, {})
                elif current_version and token.depth == CHANGE_TYPE_HEADING_DEPTH:
                    current_section = token.text
                    versions[current_version].setdefault(current_section, [])
                continue

            if current_version and current_section and token.type is TokenType.LIST:
                for item in token.items:
                    changes.total_count += 1
                    versions[current_version][current_section].append(item.text)

        return changes

    def save(self) -> None:
        """Render the cached tokens and write them to the file."""
        # Nothing to save if tokens were never loaded
        if self.tokens is None:
            return

        self._write(render(self.tokens))

        # The file has just changed, so tokens are reloaded on next access
        self.tokens = None

    def add_change(self, entry: ChangelogEntry) -> None:
        """Insert the given entry into the changelog."""
        self.insert_entries(entry.version, entry.type, entry.group_name, [entry])

    def insert_entries(
        self,
        version: str,
        change_type: ChangeType | str,
        group: str | None,
        entries: Sequence[Entry],
    ) -> int:
        """Append entries to the list under `version` > `change_type` (> `group`).

        Returns the number of inserted entries, which is 0 when the version has no
        `change_type` section before the next version heading.

        Raises:
            VersionNotFoundError: If there is no heading for `version`.
            ChangeTypeSectionNotFoundError: If no `change_type` heading follows it.
        """
        if not entries:
            return 0

        change_type_text = _change_type_text(change_type)
        tokens = self.get_tokens()
        section_index = next(
            (i for i, token in enumerate(tokens) if is_version_token(token, version)), -1
        )

        if section_index == -1:
            raise VersionNotFoundError(version)

        for i in range(section_index + 1, len(tokens)):
            if is_version_token(tokens[i]):
                # TODO: create the missing change type section within the version
                logger.warning(
                    "Version %s in %s has no '%s' section; %d entries were not inserted",
                    version,
                    self.file_path,
                    change_type_text,
                    len(entries),
                )
                return 0

            if not is_change_type_token(tokens[i], change_type_text):
                continue

            target = self._find_or_create_section_list(tokens, i)
            if group:
                target = self._find_or_create_group_list(target, group)

            entry_depth = GROUPED_ENTRY_DEPTH if group else GROUP_LIST_ITEM_DEPTH
            target.depth = entry_depth
            for entry in entries:
                target.items.append(
                    create_list_item_token(self.format_entry_label(entry), entry_depth)
                )

            logger.debug(
                "Inserted %d entries into %s > %s%s",
                len(entries),
                version,
                change_type_text,
                f" > {group}" if group else "",
            )
            return len(entries)

        raise ChangeTypeSectionNotFoundError(change_type_text)

    def cut_off(self, version: str) -> None:
        """Rename the unpublished section to `version` and add a new unpublished section on top.

        The result is written to the file right away.
        """
        tokens = copy.deepcopy(self.get_tokens())
        first_version_index = next(
            (i for i, token in enumerate(tokens) if is_version_token(token)), -1
        )
        new_section_tokens: Tokens = [
            HeadingToken(depth=VERSION_HEADING_DEPTH, text=UNPUBLISHED_VERSION_NAME),
            HeadingToken(depth=CHANGE_TYPE_HEADING_DEPTH, text=ChangeType.BREAKING_CHANGES.value),
            HeadingToken(depth=CHANGE_TYPE_HEADING_DEPTH, text=ChangeType.NEW_FEATURES.value),
            HeadingToken(depth=CHANGE_TYPE_HEADING_DEPTH, text=ChangeType.BUG_FIXES.value),
        ]

        if first_version_index != -1:
            previous_name = tokens[first_version_index].text
            tokens[first_version_index].text = version

            # Remove change type headings whose section is empty
            i = first_version_index + 1
            while i < len(tokens) and not is_version_token(tokens[i]):
                if is_change_type_token(tokens[i]):
                    next_token = tokens[i + 1] if i + 1 < len(tokens) else None
                    if (
                        next_token is None
                        or is_change_type_token(next_token)
                        or is_version_token(next_token)
                    ):
                        del tokens[i]
                        continue
                i += 1

            # Nothing left between the headings, so the version has no changes
            if i == first_version_index + 1:
                if i < len(tokens):
                    tokens.insert(i, SpaceToken())
                tokens.insert(i, ParagraphToken(text=VERSION_EMPTY_PARAGRAPH_TEXT))

            logger.info("Cut off '%s' as %s in %s", previous_name, version, self.file_path)
        else:
            first_version_index = 0

        tokens[first_version_index:first_version_index] = new_section_tokens

        self._write(render(tokens))
        self.tokens = None

    def render(self) -> str:
        """Render the cached tokens to markdown."""
        if self.tokens is None:
            raise TokensNotLoadedError()
        return render(self.tokens)

    def format_entry_label(self, entry: Entry) -> str:
        """Stringify an entry, appending pull request and author links if any."""
        pull_requests = ", ".join(
            f"[#{number}]({self.repository.pull_request_url(number)})"
            for number in entry.pull_requests
        )
        authors = ", ".join(
            f"[@{author}]({self.repository.author_url(author)})" for author in entry.authors
        )

        if pull_requests and authors:
            return f"{entry.message} ({pull_requests} by {authors})"
        if pull_requests:
            return f"{entry.message} ({pull_requests})"
        if authors:
            return f"{entry.message} (by {authors})"
        return entry.message

    def _find_or_create_section_list(self, tokens: Tokens, heading_index: int) -> ListToken:
        heading = tokens[heading_index]
        j = heading_index + 1
        while j < len(tokens):
            token = tokens[j]
            if token.type is TokenType.LIST:
                return token
            if token.type is TokenType.HEADING and token.depth <= heading.depth:
                break
            j += 1

        section_list = create_list_token(GROUP_LIST_ITEM_DEPTH)
        tokens.insert(j, section_list)
        return section_list

    def _find_or_create_group_list(self, section_list: ListToken, group: str) -> ListToken:
        group_item = find_group(section_list, group)
        if group_item is None:
            group_item = create_list_item_token(get_group_label(group), GROUP_LIST_ITEM_DEPTH)
            section_list.items.append(group_item)

        group_list = next((t for t in group_item.tokens if t.type is TokenType.LIST), None)
        if group_list is None:
            group_list = create_list_token(GROUPED_ENTRY_DEPTH)
            group_item.tokens.append(group_list)
        return group_list

    def _write(self, content: str) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        self.file_path.write_text(content, encoding="utf-8")
        logger.debug("Wrote %d characters to %s", len(content), self.file_path)


def load_from(path: str | Path) -> Changelog:
    """Convenience function creating a `Changelog` instance."""
    return Changelog(path)


def is_version_token(token: Token, version: str | None = None) -> bool:
    """Check whether the token is a version heading (optionally of the given version)."""
    return (
        token.type is TokenType.HEADING
        and token.depth == VERSION_HEADING_DEPTH
        and (version is None or token.text == version)
    )


def is_change_type_token(token: Token, change_type: ChangeType | str | None = None) -> bool:
    """Check whether the token is a change type heading (optionally of the given type)."""
    return (
        token.type is TokenType.HEADING
        and token.depth == CHANGE_TYPE_HEADING_DEPTH
        and (change_type is None or token.text == _change_type_text(change_type))
    )


def is_group_token(token: Token, group_name: str) -> bool:
    """Check whether the token is the list item of the given group."""
    if token.type is not TokenType.LIST_ITEM or token.depth != GROUP_LIST_ITEM_DEPTH:
        return False
    if not token.tokens:
        return False
    first_token = token.tokens[0]
    return (
        first_token.type in (TokenType.TEXT, TokenType.PARAGRAPH)
        and first_token.text == get_group_label(group_name)
    )


def find_group(token: ListToken, group_name: str) -> ListItemToken | None:
    """Find the list item that makes a group with the given name."""
    return next((item for item in token.items if is_group_token(item, group_name)), None)


def get_group_label(group_name: str) -> str:
    """Convert a plain group name to its markdown representation."""
    return f"**`{group_name}`**"


def is_unpublished_version(name: str) -> bool:
    return name.strip().lower() in UNPUBLISHED_VERSION_NAMES


def normalize_version_name(name: str) -> str:
    """Map every unpublished heading alias to a single key."""
    return UNPUBLISHED_VERSION_KEY if is_unpublished_version(name) else name


def is_semver(version: str) -> bool:
    """Check whether the string is a semantic version, optionally prefixed with `v`."""
    return semver.Version.is_valid(version.removeprefix("v"))


def _same_version(heading_text: str, version: str) -> bool:
    return heading_text == version or (
        is_unpublished_version(heading_text) and is_unpublished_version(version)
    )


def _change_type_text(change_type: ChangeType | str) -> str:
    return change_type.value if isinstance(change_type, ChangeType) else change_type
