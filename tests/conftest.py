"""Pytest configuration and fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest

SAMPLE_CHANGELOG = """# Changelog

## master

### 🛠 Breaking changes

### 🎉 New features

- Added `foo` option. ([#10](https://github.com/expo/expo/pull/10) by [@alice](https://github.com/alice))

### 🐛 Bug fixes

- Fixed crash on launch.
- Fixed typo.

## 1.2.0

### 🐛 Bug fixes

- Fixed memory leak.

## 1.1.0

### 🎉 New features

- Initial release.
"""


@pytest.fixture
def sample_changelog() -> str:
    """A changelog with unpublished changes and two released versions."""
    return SAMPLE_CHANGELOG


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper writing content to a file relative to tmp_path."""

    def _write(relative_path: str, content: str) -> Path:
        path = tmp_path / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_changelog_path(write_file: Callable[[str, str], Path]) -> Path:
    """Path to a CHANGELOG.md holding the sample changelog."""
    return write_file("CHANGELOG.md", SAMPLE_CHANGELOG)
