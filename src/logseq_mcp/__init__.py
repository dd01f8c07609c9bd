"""logseq-mcp: a Logseq graph exposed as read/write/search/traverse operations."""

__version__ = "0.1.0"

from .core import GraphService  # noqa: E402

__all__ = ["GraphService", "__version__"]
