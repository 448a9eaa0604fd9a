"""Classification and reading of tagged-tuple syntax trees."""

from exfacts.syntax.classify import (
    EXCLUDED_CALL_NAMES,
    OPERATORS,
    SPECIAL_FORMS,
    NodeKind,
    classify,
)
from exfacts.syntax.helpers import format_error, is_node, normalize_body
from exfacts.syntax.location import extract_location

__all__ = [
    "EXCLUDED_CALL_NAMES",
    "OPERATORS",
    "SPECIAL_FORMS",
    "NodeKind",
    "classify",
    "extract_location",
    "format_error",
    "is_node",
    "normalize_body",
]
