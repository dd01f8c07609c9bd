"""Link and tag extraction."""

import re

# [[target]] or [[target|display text]] - captures the target only
LINK_PATTERN = re.compile(r"\[\[([^\]|]+)(?:\|[^\]]+)?\]\]")

# #tag - ASCII word characters, hyphen, slash (namespaces), Hangul syllables and jamo
TAG_PATTERN = re.compile(r"#([a-zA-Z0-9_\-/가-힣ㄱ-ㅎㅏ-ㅣ]+)")


def _unique(matches: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for match in matches:
        if match not in seen:
            seen.add(match)
            result.append(match)
    return result


def extract_links(content: str) -> list[str]:
    """Extract page links from content.

    Args:
        content: Raw page text.

    Returns:
        Unique link targets in first-seen order. Display text after "|" is
        discarded.
    """
    return _unique(LINK_PATTERN.findall(content))


def extract_tags(content: str) -> list[str]:
    """Extract #tags from content, unique, in first-seen order."""
    return _unique(TAG_PATTERN.findall(content))
