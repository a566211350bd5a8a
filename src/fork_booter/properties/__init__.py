"""Property store exports."""

from .property_store import PRESENT_SUFFIX, SIZE_SUFFIX, PropertyStore, child_key
from .text_format import is_valid_key, parse_lines, render_lines

__all__ = [
    "PropertyStore",
    "child_key",
    "PRESENT_SUFFIX",
    "SIZE_SUFFIX",
    "is_valid_key",
    "parse_lines",
    "render_lines",
]
