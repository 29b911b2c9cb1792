"""Base error shared by the changelog and markdown layers."""


class ChangelogError(Exception):
    """Base class for changelog errors."""
