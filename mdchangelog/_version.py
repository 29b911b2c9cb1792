"""Version information for mdchangelog.

The version is statically defined here and should match pyproject.toml.
"""

__version__ = "0.1.0"


def get_version() -> str:
    """Get the version string, e.g. "0.1.0"."""
    return __version__


def get_full_version_string() -> str:
    """Get a human-readable version string like "mdchangelog 0.1.0"."""
    return f"mdchangelog {__version__}"
