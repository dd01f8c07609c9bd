"""Logseq page parsing: properties, links and tags."""

from .links import extract_links, extract_tags
from .properties import build_content, split_properties, validate_properties

__all__ = [
    "extract_links",
    "extract_tags",
    "split_properties",
    "validate_properties",
    "build_content",
]
