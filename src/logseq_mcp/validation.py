"""Input validators for page names, journal dates, content and queries.

All functions are pure: they raise on invalid input and return nothing
(or the normalized value) otherwise.
"""

import re

from .config import (
    JOURNAL_DATE_SEPARATOR,
    MAX_CONTENT_SIZE,
    MAX_NAME_LENGTH,
    MAX_QUERY_LENGTH,
    PAGE_SUFFIX,
)
from .errors import ContentTooLarge, InvalidDate, InvalidName, QueryTooLong

# Letters, digits, Hangul syllables and jamo, spaces and a few safe symbols.
# Excludes / \ : * ? " < > | and every control character.
SAFE_NAME_PATTERN = re.compile(
    r"[a-zA-Z0-9가-힣ㄱ-ㅎㅏ-ㅣ _\-().,'!@#$%&+=\[\]{}]+"
)

# Checked even though the allow-list already excludes them
DANGEROUS_SEQUENCES = ("..", "/", "\\", "\x00", ":", "*", "?", '"', "<", ">", "|")

JOURNAL_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def validate_page_name(name: str) -> None:
    """Validate a user-supplied page name.

    Raises:
        InvalidName: If the name is too long, blank, or contains anything
            outside the allow-list.
    """
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidName(
            f"Invalid page name: too long (max {MAX_NAME_LENGTH} characters)"
        )

    if not name.strip():
        raise InvalidName("Invalid page name: cannot be empty")

    if not SAFE_NAME_PATTERN.fullmatch(name):
        raise InvalidName("Invalid page name: contains forbidden characters")

    for sequence in DANGEROUS_SEQUENCES:
        if sequence in name:
            raise InvalidName("Invalid page name: contains forbidden characters")


def validate_journal_date(date: str) -> None:
    """Require a strict YYYY-MM-DD shape."""
    if not JOURNAL_DATE_PATTERN.fullmatch(date):
        raise InvalidDate("Invalid date format: use YYYY-MM-DD")


def journal_filename(date: str) -> str:
    """Map "2024-01-15" to the on-disk name "2024_01_15.md"."""
    return date.replace("-", JOURNAL_DATE_SEPARATOR) + PAGE_SUFFIX


def validate_content_size(content: str) -> None:
    """Reject content larger than MAX_CONTENT_SIZE bytes of UTF-8."""
    byte_size = len(content.encode("utf-8"))
    if byte_size > MAX_CONTENT_SIZE:
        limit_mb = MAX_CONTENT_SIZE // (1024 * 1024)
        raise ContentTooLarge(
            f"Content too large: {round(byte_size / 1024 / 1024)}MB "
            f"exceeds limit of {limit_mb}MB"
        )


def validate_query(query: str) -> None:
    if len(query) > MAX_QUERY_LENGTH:
        raise QueryTooLong(
            f"Search query too long (max {MAX_QUERY_LENGTH} characters)"
        )
