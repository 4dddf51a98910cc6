"""Decide whether a card line should disappear for a record.

Card templates usually carry one line per optional contact field
("M. {mobile}", "Fax {fax}", ...). When the record has no value for that
field the whole line is dropped instead of printing a bare label.
"""

from __future__ import annotations

from .models import Record
from .placeholder_resolver import DEFAULT_POLICY, FormattingPolicy, format_extension, format_mobile


def _mentions(text: str, field_name: str, policy: FormattingPolicy) -> bool:
    if f"{{{field_name}}}" in text:
        return True
    return any(label in text for label in policy.removal_labels.get(field_name, ()))


def should_remove(text: str, record: Record, policy: FormattingPolicy = DEFAULT_POLICY) -> bool:
    """Check whether a paragraph belongs to an optional field that is empty.

    Args:
        text: The paragraph's full text (all runs concatenated).
        record: Record being merged.
        policy: Formatting rules and label fragments.

    Returns:
        True when the paragraph references the extension, mobile or fax
        field (by token or label) and that field formats to an empty value.
    """
    if not format_extension(record.extension, policy) and _mentions(text, "extension", policy):
        return True

    if not format_mobile(record.mobile, policy) and _mentions(text, "mobile", policy):
        return True

    if not record.fax and _mentions(text, "fax", policy):
        return True

    return False
