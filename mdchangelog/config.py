"""mdchangelog configuration management.

Loads configuration from .mdchangelog/config.toml if present, with sensible defaults.
Configuration hierarchy (highest priority first):
1. Command-line flags
2. Repo-level config (.mdchangelog/config.toml)
3. Defaults
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_DIR = ".mdchangelog"
CONFIG_FILE = "config.toml"

DEFAULT_CHANGELOG_PATH = "CHANGELOG.md"
DEFAULT_PACKAGES_PATTERN = "packages/*/CHANGELOG.md"


@dataclass
class PathsConfig:
    """Locations of the changelogs inside the workspace."""

    changelog: str = DEFAULT_CHANGELOG_PATH
    packages: str = DEFAULT_PACKAGES_PATTERN


@dataclass
class RepositoryConfig:
    """Repository that pull request and author links point to."""

    host: str = "github.com"
    owner: str = "expo"
    name: str = "expo"

    def pull_request_url(self, number: int) -> str:
        return f"https://{self.host}/{self.owner}/{self.name}/pull/{number}"

    def author_url(self, author: str) -> str:
        return f"https://{self.host}/{author}"


@dataclass
class MdChangelogConfig:
    """mdchangelog configuration."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)

    def get_changelog_path(self, workspace: Path, *, changelog_path: Path | None = None) -> Path:
        """Determine the main changelog path.

        Args:
            workspace: Path to the workspace/repository root.
            changelog_path: Explicit path override.

        Returns:
            Path to the changelog file.
        """
        if changelog_path:
            return changelog_path
        return workspace / self.paths.changelog


def load_config(workspace: Path) -> MdChangelogConfig:
    """Load configuration from .mdchangelog/config.toml if it exists.

    Args:
        workspace: Path to the workspace/repository root.

    Returns:
        MdChangelogConfig with values from config file or defaults.
    """
    config_path = workspace / CONFIG_DIR / CONFIG_FILE

    if not config_path.exists():
        return MdChangelogConfig()

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    paths_data = data.get("paths", {})
    repository_data = data.get("repository", {})

    paths = PathsConfig(
        changelog=paths_data.get("changelog", DEFAULT_CHANGELOG_PATH),
        packages=paths_data.get("packages", DEFAULT_PACKAGES_PATTERN),
    )

    defaults = RepositoryConfig()
    repository = RepositoryConfig(
        host=repository_data.get("host", defaults.host),
        owner=repository_data.get("owner", defaults.owner),
        name=repository_data.get("name", defaults.name),
    )

    return MdChangelogConfig(paths=paths, repository=repository)
