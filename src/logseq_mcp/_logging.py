"""Stderr logging for the logseq_mcp package.

Modules log through logging.getLogger(__name__); configure_logging() attaches
the single handler once, from server.main() or the lsq group callback.

LOGSEQ_MCP_LOG_LEVEL picks the level (default INFO). What each level shows:
    - DEBUG: symlinks and unreadable files skipped by the index or search,
      backlink cache hits, the graph root at startup
    - INFO: pages created or deleted, journals created, requests rejected
      with a GraphError, server start
    - WARNING: paths resolving outside the graph root, refused symlinks,
      symlinked pages/ or journals/ folders
    - ERROR: missing LOGSEQ_GRAPH_PATH, unhandled failures in tool calls

stdout carries the MCP stdio transport, so nothing is ever logged there.
"""

import logging
import os
import sys


def configure_logging() -> None:
    """Configure logging for the logseq_mcp package.

    Call this once at application startup (e.g., in cli.py or server.py).
    Subsequent calls are no-ops.
    """
    root_logger = logging.getLogger("logseq_mcp")

    # Skip if already configured (has handlers)
    if root_logger.handlers:
        return

    level_name = os.environ.get("LOGSEQ_MCP_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    # Use a clean format: [level] logger: message
    formatter = logging.Formatter(
        fmt="[%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    # Prevent propagation to root logger (avoids duplicate messages)
    root_logger.propagate = False
