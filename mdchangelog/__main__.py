"""CLI entry point for mdchangelog.

Usage:
    python -m mdchangelog versions                       # List versions of CHANGELOG.md
    python -m mdchangelog changes                        # Show unpublished changes
    python -m mdchangelog add "Fixed X" -t fix --pr 123  # Add an entry
    python -m mdchangelog cut-off 1.2.0                  # Release unpublished changes
    python -m mdchangelog merge                          # Merge package changelogs

Or via the installed command:
    mdchangelog changes --from 1.0.0                     # Changes published after 1.0.0
    mdchangelog add "New API" -t feature -g expo-foo     # Add an entry to a group
    mdchangelog merge -w ~/expo                          # Merge in another workspace
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from mdchangelog._version import get_full_version_string
from mdchangelog.changelog import (
    UNPUBLISHED_VERSION_NAME,
    ChangeType,
    Changelog,
    ChangelogEntry,
    ChangelogError,
)
from mdchangelog.config import MdChangelogConfig, load_config
from mdchangelog.merge import find_package_changelogs, merge_changelogs

console = Console()
error_console = Console(stderr=True)

CHANGE_TYPE_ALIASES: dict[str, ChangeType] = {
    "breaking": ChangeType.BREAKING_CHANGES,
    "feature": ChangeType.NEW_FEATURES,
    "fix": ChangeType.BUG_FIXES,
}


def configure_logging() -> None:
    """Route log records through rich, at the level given by LOG_LEVEL (default WARNING)."""
    level = os.getenv("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def resolve_change_type(value: str) -> ChangeType | str:
    """Map a short alias (breaking, feature, fix) to its change type; keep other text as is."""
    return CHANGE_TYPE_ALIASES.get(value.lower(), value)


def run_versions(changelog: Changelog) -> int:
    """Print versions of the changelog, marking the last published one.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    if not changelog.file_exists():
        console.print(f"[red]Error:[/] Changelog not found: {changelog.file_path}")
        return 1

    versions = changelog.get_versions()
    last_published = changelog.get_last_published_version()

    if not versions:
        console.print("[dim]No versions found.[/]")
        return 0

    for version in versions:
        if version == last_published:
            console.print(f"  • {version} [green](last published)[/]")
        else:
            console.print(f"  • {version}")
    return 0


def run_changes(changelog: Changelog, from_version: str | None, to_version: str) -> int:
    """Print changes between two versions.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    if not changelog.file_exists():
        console.print(f"[red]Error:[/] Changelog not found: {changelog.file_path}")
        return 1

    changes = changelog.get_changes(from_version, to_version)

    if changes.total_count == 0:
        console.print("[dim]No changes found.[/]")
        return 0

    for version, sections in changes.versions.items():
        console.print(f"[bold blue]{version}[/]")
        for change_type, entries in sections.items():
            if not entries:
                continue
            console.print(f"  [bold]{change_type}[/]")
            for entry in entries:
                console.print(f"    • {entry}", markup=False)
        console.print()

    console.print(f"[bold]Total:[/] {changes.total_count}")
    return 0


def run_add(changelog: Changelog, entry: ChangelogEntry) -> int:
    """Add an entry to the changelog and save it.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    changelog.add_change(entry)
    changelog.save()

    console.print(f"[green]✓[/] Added entry to {changelog.file_path}")
    return 0


def run_cut_off(changelog: Changelog, version: str) -> int:
    """Release unpublished changes as `version`.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    if not changelog.file_exists():
        console.print(f"[red]Error:[/] Changelog not found: {changelog.file_path}")
        return 1

    changelog.cut_off(version)

    console.print(f"[green]✓[/] Cut off version {version} in {changelog.file_path}")
    return 0


def run_merge(workspace: Path, config: MdChangelogConfig) -> int:
    """Merge package changelogs into the main changelog.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    console.print(Panel("[bold blue]mdchangelog - Merge[/]", expand=False))
    console.print()

    main_changelog = Changelog(config.get_changelog_path(workspace), config.repository)
    if not main_changelog.file_exists():
        console.print(f"[red]Error:[/] Changelog not found: {main_changelog.file_path}")
        return 1

    package_changelogs = find_package_changelogs(
        workspace, config.paths.packages, config.repository
    )
    console.print(f"[dim]Workspace: {workspace}[/]")
    console.print(f"[dim]Package changelogs found: {len(package_changelogs)}[/]")
    console.print()

    result = merge_changelogs(package_changelogs, main_changelog)

    if not result.has_changes:
        console.print("[dim]No unpublished changes to merge.[/]")
        return 0

    for package_name in result.packages:
        console.print(f"  • {package_name}")
    console.print()
    console.print(
        f"[green]✓[/] Merged {result.entries_count} entries from "
        f"{len(result.packages)} packages into {main_changelog.file_path}"
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="mdchangelog",
        description="mdchangelog - Structured editing of markdown changelogs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  mdchangelog versions                       List versions in CHANGELOG.md
  mdchangelog changes --from 1.0.0           Show changes published after 1.0.0
  mdchangelog add "Fixed X" -t fix --pr 12   Add an entry to unpublished bug fixes
  mdchangelog cut-off 1.2.0                  Release unpublished changes as 1.2.0
  mdchangelog merge                          Merge package changelogs

Configuration:
  Create .mdchangelog/config.toml in your repo to customize paths:
    [paths]
    changelog = "CHANGELOG.md"
    packages = "packages/*/CHANGELOG.md"

    [repository]
    host = "github.com"
    owner = "expo"
    name = "expo"
""",
    )
    parser.add_argument("--version", action="version", version=get_full_version_string())

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Arguments shared by commands working on a single changelog
    file_parser = argparse.ArgumentParser(add_help=False)
    file_parser.add_argument(
        "--file",
        "-f",
        type=Path,
        default=None,
        help="Path to the changelog (defaults to the configured changelog in the git root)",
    )

    subparsers.add_parser(
        "versions",
        parents=[file_parser],
        help="List versions found in the changelog",
    )

    changes_parser = subparsers.add_parser(
        "changes",
        parents=[file_parser],
        help="Show changes between two versions (unpublished changes by default)",
    )
    changes_parser.add_argument(
        "--from",
        dest="from_version",
        default=None,
        help="Version to stop at (exclusive)",
    )
    changes_parser.add_argument(
        "--to",
        dest="to_version",
        default=UNPUBLISHED_VERSION_NAME,
        help=f"Version to start from (default: {UNPUBLISHED_VERSION_NAME})",
    )

    add_parser = subparsers.add_parser(
        "add",
        parents=[file_parser],
        help="Add an entry to the changelog",
    )
    add_parser.add_argument("message", help="The change note")
    add_parser.add_argument(
        "--type",
        "-t",
        dest="change_type",
        required=True,
        help="Change type: breaking, feature, fix or the exact section heading",
    )
    add_parser.add_argument(
        "--version",
        dest="version",
        default=UNPUBLISHED_VERSION_NAME,
        help=f"Version section to add the entry to (default: {UNPUBLISHED_VERSION_NAME})",
    )
    add_parser.add_argument(
        "--group",
        "-g",
        default=None,
        help="Group (usually package name) to nest the entry under",
    )
    add_parser.add_argument(
        "--pr",
        dest="pull_requests",
        type=int,
        action="append",
        default=[],
        help="Pull request number (repeatable)",
    )
    add_parser.add_argument(
        "--author",
        dest="authors",
        action="append",
        default=[],
        help="GitHub user name of the author (repeatable)",
    )

    cut_off_parser = subparsers.add_parser(
        "cut-off",
        parents=[file_parser],
        help="Rename the unpublished section to a version and start a new one",
    )
    cut_off_parser.add_argument("version", help="Version being released")

    merge_parser = subparsers.add_parser(
        "merge",
        help="Merge unpublished changes of package changelogs into the main changelog",
    )
    merge_parser.add_argument(
        "--workspace",
        "-w",
        type=Path,
        default=None,
        help="Workspace directory (defaults to git root)",
    )

    args = parser.parse_args(argv)

    load_dotenv()
    configure_logging()

    if args.command == "merge":
        workspace = args.workspace.resolve() if args.workspace else find_git_root(Path.cwd())
        config = load_config(workspace)
        return _run_guarded(lambda: run_merge(workspace, config))

    workspace = find_git_root(Path.cwd())
    config = load_config(workspace)
    changelog = Changelog(
        config.get_changelog_path(workspace, changelog_path=args.file), config.repository
    )

    if args.command == "versions":
        return _run_guarded(lambda: run_versions(changelog))

    if args.command == "changes":
        return _run_guarded(lambda: run_changes(changelog, args.from_version, args.to_version))

    if args.command == "add":
        entry = ChangelogEntry(
            message=args.message,
            pull_requests=args.pull_requests,
            authors=args.authors,
            type=resolve_change_type(args.change_type),
            version=args.version,
            group_name=args.group,
        )
        return _run_guarded(lambda: run_add(changelog, entry))

    return _run_guarded(lambda: run_cut_off(changelog, args.version))


def _run_guarded(command) -> int:
    """Run a command, reporting changelog errors instead of raising them."""
    try:
        return command()
    except ChangelogError as e:
        console.print(f"[red]Error:[/] {e}")
        return 1


def find_git_root(start_path: Path) -> Path:
    """Find the git repository root from a starting path.

    Args:
        start_path: Directory to start searching from

    Returns:
        Path to the git root, or start_path if not found
    """
    current = start_path.resolve()
    while current != current.parent:
        if (current / ".git").exists():
            return current
        current = current.parent
    return start_path


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
