"""Configuration management for logseq-mcp.

This module contains all configurable constants for the graph service.
Magic numbers are documented here rather than scattered throughout the codebase.

Environment lookups live only in the small helpers below; the graph service
itself receives its root directory explicitly.
"""

import os
from pathlib import Path


class ConfigurationError(Exception):
    """Raised when required configuration is missing."""

    pass


GRAPH_PATH_ENV = "LOGSEQ_GRAPH_PATH"
BACKLINK_CACHE_ENV = "LOGSEQ_BACKLINK_CACHE"
ALLOW_HARDLINKS_ENV = "LOGSEQ_ALLOW_HARDLINKS"

_TRUTHY = ("1", "true", "yes", "on")


def get_graph_root(override: str | os.PathLike | None = None) -> Path:
    """Get the Logseq graph root directory.

    Discovery order:
    1. Explicit override (e.g. the CLI --graph option)
    2. LOGSEQ_GRAPH_PATH environment variable

    Raises:
        ConfigurationError: If no root is configured or it is not a directory.
    """
    root = override or os.environ.get(GRAPH_PATH_ENV)
    if not root:
        raise ConfigurationError(
            f"{GRAPH_PATH_ENV} environment variable is required. "
            "Set it to the directory of your Logseq graph."
        )

    path = Path(root).expanduser()
    if not path.is_dir():
        raise ConfigurationError(f"Graph root is not a directory: {path}")
    return path


def backlink_cache_enabled() -> bool:
    """Whether the opt-in backlink cache should be used."""
    return os.environ.get(BACKLINK_CACHE_ENV, "").lower() in _TRUTHY


def hardlinks_allowed() -> bool:
    """Whether search may read files with more than one hard link."""
    return os.environ.get(ALLOW_HARDLINKS_ENV, "").lower() in _TRUTHY


# =============================================================================
# Graph Layout
# =============================================================================

# Regular pages live in <root>/pages/<name>.md
PAGES_DIR = "pages"

# Journal pages live in <root>/journals/<YYYY_MM_DD>.md
JOURNALS_DIR = "journals"

PAGE_SUFFIX = ".md"

# Logseq stores journal dates with underscores instead of dashes
JOURNAL_DATE_SEPARATOR = "_"

# Content written to a journal page that is created without a template.
# A single empty bullet is what Logseq itself writes for a new day.
DEFAULT_JOURNAL_STUB = "- "


# =============================================================================
# Input Limits
# =============================================================================

# Maximum page name length (filesystem compatibility; most allow 255 bytes)
MAX_NAME_LENGTH = 200

# Maximum length of a page path argument ("pages/note.md")
MAX_PATH_LENGTH = 500

# Maximum size of page content in UTF-8 bytes.
# Applies to created content, replacement content, appended chunks and the
# combined result of an append.
MAX_CONTENT_SIZE = 10 * 1024 * 1024

# Maximum search query length in characters
MAX_QUERY_LENGTH = 1000

# Tag filter bounds for search requests
MAX_TAG_LENGTH = 100
MAX_TAGS_COUNT = 50

# Maximum length of a single property value passed through the MCP layer
MAX_PROPERTY_VALUE_LENGTH = 10000


# =============================================================================
# Graph Traversal
# =============================================================================

# Depth used when a centered graph is requested without an explicit depth
DEFAULT_GRAPH_DEPTH = 1

# Requested depths are clamped to [0, MAX_GRAPH_DEPTH].
# Each level can multiply the node count, so this bounds the work per request.
MAX_GRAPH_DEPTH = 10
