"""Placeholder token resolution for card templates.

This module decides what text replaces a ``{token}`` for a given record.
Fixed tokens map onto record attributes, two of them through presentation
rules (mobile and extension formatting), ``{position_en}`` through a role
lookup table, and every other token through the record's custom fields.

Typical usage:
    >>> from bizcard_pptx.models import Record
    >>> from bizcard_pptx.placeholder_resolver import resolve, substitute_text
    >>>
    >>> record = Record(name="Kim", mobile="010-1234-5678", position="팀장")
    >>> resolve("{mobile}", record)
    '10. 1234. 5678'
    >>> substitute_text("{name} / {position_en}", record)
    'Kim / Team Leader'
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources

import yaml

from .models import Record

logger = logging.getLogger(__name__)

IMAGE_TOKEN = "{qrcode}"
NAME_TOKEN = "{name}"
NAME_EN_TOKEN = "{name_en}"

# Fixed tokens, in substitution order
STANDARD_TOKENS: tuple[str, ...] = (
    "{name}",
    "{name_en}",
    "{company}",
    "{position}",
    "{position_en}",
    "{department}",
    "{email}",
    "{mobile}",
    "{extension}",
    "{phone}",
    "{fax}",
)

_TOKEN_RE = re.compile(r"\{([^{}]+)\}")


@lru_cache(maxsize=1)
def load_default_position_mapping() -> dict[str, str]:
    """Load the packaged role-title table (``data/position_mapping.yaml``)."""
    text = resources.files("bizcard_pptx").joinpath("data/position_mapping.yaml").read_text(encoding="utf-8")
    mapping = yaml.safe_load(text) or {}
    return {str(k): str(v) for k, v in mapping.items()}


@dataclass
class FormattingPolicy:
    """Organization-specific presentation rules for contact fields.

    Attributes:
        mobile_prefix: National mobile prefix. An 11-digit number starting
            with it is regrouped as ``"10. 1234. 5678"`` (leading digit dropped).
        extension_prefix: Internal line prefix (``"3210"``); ``"3210-NNNN"``
            and bare 4-digit extensions expand to ``extension_expansion``.
        extension_expansion: Dotted form the prefix expands into.
        empty_values: Raw values treated as "no number".
        position_mapping: Role title -> English role title.
        removal_labels: Literal label fragments per optional field, used by
            the line-removal policy.
    """
    mobile_prefix: str = "010"
    extension_prefix: str = "3210"
    extension_expansion: str = "2. 3210. "
    empty_values: tuple[str, ...] = ("", "-", "0")
    position_mapping: dict[str, str] = field(default_factory=lambda: dict(load_default_position_mapping()))
    removal_labels: dict[str, tuple[str, ...]] = field(default_factory=lambda: {
        "extension": ("T. +82", "Ext."),
        "mobile": ("M.", "Mobile"),
        "fax": ("F.", "Fax"),
    })


DEFAULT_POLICY = FormattingPolicy()


def format_mobile(value: str, policy: FormattingPolicy = DEFAULT_POLICY) -> str:
    """Format a mobile number for printing.

    Args:
        value: Raw mobile number.
        policy: Formatting rules.

    Returns:
        Empty string for empty/placeholder values, the regrouped national
        form for 11-digit national numbers, or a lightly normalized value.
    """
    if value is None or value.strip() in policy.empty_values:
        return ""

    digits = "".join(ch for ch in value if ch.isdigit())
    prefix = policy.mobile_prefix
    if len(digits) == 11 and digits.startswith(prefix):
        return f"{digits[1:3]}. {digits[3:7]}. {digits[7:11]}"

    return value.replace(f"{prefix}-", f"{prefix[1:]}. ").replace("-", ". ")


def format_extension(value: str, policy: FormattingPolicy = DEFAULT_POLICY) -> str:
    """Format an internal extension, expanding the short in-house form."""
    if value is None or value.strip() in policy.empty_values:
        return ""

    prefix = f"{policy.extension_prefix}-"
    if value.startswith(prefix):
        return value.replace(prefix, policy.extension_expansion)

    if len(value) == 4 and value.isdigit():
        return f"{policy.extension_expansion}{value}"

    return value


def position_english(record: Record, policy: FormattingPolicy = DEFAULT_POLICY) -> str:
    """Get the English role title, memoizing a looked-up value on the record."""
    if record.position_en:
        return record.position_en
    if not record.position:
        return ""

    english = policy.position_mapping.get(record.position)
    if english is not None:
        record.position_en = english
        return english

    logger.debug(f"No English title for role '{record.position}', keeping it as is")
    return record.position


def _standard_value(key: str, record: Record, policy: FormattingPolicy) -> str:
    if key == "position_en":
        return position_english(record, policy)
    if key == "mobile":
        return format_mobile(record.mobile, policy)
    if key == "extension":
        return format_extension(record.extension, policy)
    return getattr(record, key) or ""


def _strip_braces(token: str) -> str:
    token = token.strip()
    if token.startswith("{") and token.endswith("}"):
        return token[1:-1]
    return token


def resolve(token: str, record: Record, policy: FormattingPolicy = DEFAULT_POLICY) -> str:
    """Resolve a single token for a record.

    Args:
        token: Token with or without braces (``"{email}"`` or ``"email"``).
        record: Record to read values from.
        policy: Formatting rules.

    Returns:
        The replacement text. Known fields with no value give ``""``; a
        token that names no field at all is returned unchanged.
    """
    key = _strip_braces(token)
    bracketed = f"{{{key}}}"

    if bracketed in STANDARD_TOKENS:
        return _standard_value(key, record, policy)

    custom = record.get_custom_field(key)
    if custom is not None:
        return custom

    return token


def substitute_text(text: str, record: Record, policy: FormattingPolicy = DEFAULT_POLICY) -> str:
    """Replace every known token in ``text``.

    Standard tokens are replaced first (exact case), then one pass per
    custom field, matched case-insensitively. Unknown tokens are left as-is.
    """
    if not text:
        return text

    for token in STANDARD_TOKENS:
        if token in text:
            text = text.replace(token, _standard_value(token[1:-1], record, policy))

    for field_name, value in record.custom_fields.items():
        pattern = re.compile(re.escape(f"{{{field_name}}}"), re.IGNORECASE)
        text = pattern.sub(lambda _m, v=value: v, text)

    return text


def find_tokens(text: str) -> list[str]:
    """List the ``{token}`` occurrences in ``text``, in order."""
    return [f"{{{m}}}" for m in _TOKEN_RE.findall(text or "")]


def contains_image_token(text: str) -> bool:
    """Check for the image-insertion token, ignoring case."""
    return IMAGE_TOKEN in (text or "").lower()
