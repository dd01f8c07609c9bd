"""Error taxonomy for the graph service.

Every error raised on purpose by the core derives from GraphError and carries a
message that starts with one of SAFE_MESSAGE_PREFIXES. Those messages never
contain absolute filesystem paths, so they may be shown to callers verbatim.
Anything else is reduced to a generic description by sanitize_error_message().
"""

from __future__ import annotations

import errno
from contextlib import contextmanager
from typing import Iterator


class GraphError(Exception):
    """Base class for all graph service errors."""


class InvalidName(GraphError, ValueError):
    """Page name failed the allow-list or deny-list checks."""


class InvalidDate(GraphError, ValueError):
    """Journal date is not in YYYY-MM-DD form."""


class InvalidProperty(GraphError, ValueError):
    """Property key or value would corrupt the property block."""


class PathEscape(GraphError):
    """Resolved path lies outside the graph root."""


class LinkAttack(GraphError):
    """Path is a symbolic link, a non-regular file, or a multiply hard-linked file."""


class ContentTooLarge(GraphError, ValueError):
    """Content exceeds MAX_CONTENT_SIZE."""


class QueryTooLong(GraphError, ValueError):
    """Search query exceeds MAX_QUERY_LENGTH."""


class AlreadyExists(GraphError):
    """A page with this name already exists."""


class NotFound(GraphError):
    """No page matches the given path or name."""


class UnexpectedError(GraphError):
    """Filesystem failure that does not fit any other category."""


SAFE_MESSAGE_PREFIXES = (
    "Invalid page name",
    "Invalid date format",
    "Invalid property",
    "Access denied",
    "Content too large",
    "Search query too long",
    "Page already exists",
    "Page not found",
    "Unexpected error",
)

# errno -> description that reveals nothing about the filesystem layout
ERRNO_DESCRIPTIONS = {
    errno.ENOENT: "File or directory not found",
    errno.EACCES: "Permission denied",
    errno.EEXIST: "File already exists",
    errno.EISDIR: "Expected file but found directory",
    errno.ENOTDIR: "Expected directory but found file",
    errno.ENOTEMPTY: "Directory not empty",
    errno.EPERM: "Operation not permitted",
}

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


def sanitize_error_message(error: BaseException) -> str:
    """Turn any exception into a message that is safe to return to a caller.

    Known safe messages pass through unchanged, filesystem errors are reduced
    to their errno category, and everything else collapses to a generic string.
    """
    message = str(error)
    if isinstance(error, GraphError) and message.startswith(SAFE_MESSAGE_PREFIXES):
        return message

    if isinstance(error, OSError) and error.errno in ERRNO_DESCRIPTIONS:
        return ERRNO_DESCRIPTIONS[error.errno]

    return GENERIC_ERROR_MESSAGE


@contextmanager
def classify_os_errors(target: str | None = None) -> Iterator[None]:
    """Re-raise stray OSErrors (and undecodable page text) as GraphError subclasses.

    Args:
        target: Page name or path used in the not-found / exists messages.
    """
    label = f": {target}" if target else ""
    try:
        yield
    except GraphError:
        raise
    except UnicodeDecodeError as e:
        raise UnexpectedError("Unexpected error: file is not valid UTF-8") from e
    except FileNotFoundError as e:
        raise NotFound(f"Page not found{label}") from e
    except FileExistsError as e:
        raise AlreadyExists(f"Page already exists{label}") from e
    except OSError as e:
        if e.errno == errno.ELOOP:
            raise LinkAttack("Access denied: symbolic links not allowed") from e
        description = ERRNO_DESCRIPTIONS.get(e.errno, "filesystem operation failed")
        raise UnexpectedError(f"Unexpected error: {description}") from e
