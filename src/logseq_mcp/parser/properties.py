"""Logseq page properties (``key:: value`` lines at the top of a page)."""

from __future__ import annotations

import re
from typing import Mapping

from ..errors import InvalidProperty

PROPERTY_DELIMITER = "::"

PROPERTY_LINE = re.compile(r"([A-Za-z0-9_-]+)::\s*(.*)")

# Keys written back to disk must start with a letter
PROPERTY_KEY = re.compile(r"[a-zA-Z][a-zA-Z0-9_-]*")


def split_properties(content: str) -> tuple[dict[str, str], str]:
    """Split leading property lines from the body.

    Blank lines inside the property block are skipped. The first line that is
    neither blank nor a property ends the block and starts the body.

    Returns:
        Tuple of (properties, body). Without properties the body is the
        unchanged content.
    """
    lines = content.split("\n")
    properties: dict[str, str] = {}
    body_start = len(lines)

    for i, line in enumerate(lines):
        match = PROPERTY_LINE.fullmatch(line)
        if match:
            properties[match.group(1)] = match.group(2)
        elif line.strip() == "":
            continue
        else:
            body_start = i
            break

    if not properties:
        return properties, content

    return properties, "\n".join(lines[body_start:])


def validate_properties(properties: Mapping[str, object]) -> None:
    """Reject properties that would corrupt the property block.

    Raises:
        InvalidProperty: If a key contains a newline or "::", a value contains
            a newline, or a key is not a letter followed by letters, digits,
            hyphens or underscores.
    """
    for key, value in properties.items():
        key_str = str(key)
        value_str = str(value)

        if "\n" in key_str or "\r" in key_str or PROPERTY_DELIMITER in key_str:
            raise InvalidProperty("Invalid property key: contains forbidden characters")

        if "\n" in value_str or "\r" in value_str:
            raise InvalidProperty("Invalid property value: contains newline characters")

        if not PROPERTY_KEY.fullmatch(key_str):
            raise InvalidProperty(
                "Invalid property key: must start with letter and contain only "
                "alphanumeric, dash, underscore"
            )


def build_content(content: str, properties: Mapping[str, object] | None = None) -> str:
    """Prefix content with a validated property block."""
    if not properties:
        return content

    validate_properties(properties)

    prop_lines = "\n".join(
        f"{key}{PROPERTY_DELIMITER} {value}" for key, value in properties.items()
    )
    return prop_lines + "\n\n" + content
