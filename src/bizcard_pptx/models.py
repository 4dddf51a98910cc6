"""Data structures shared by the merge engine.

Records are produced by the ingestion side (spreadsheet import, YAML, or
hand-built in code) and consumed by the generator. Outcomes flow the other
way: one ``RecordOutcome`` per record, folded into a ``BatchResult``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ErrorCode, RecordValidationError

# Record attributes that back the fixed placeholder tokens
STANDARD_FIELDS: tuple[str, ...] = (
    "name",
    "name_en",
    "company",
    "department",
    "position",
    "position_en",
    "email",
    "mobile",
    "phone",
    "extension",
    "fax",
)


@dataclass
class Record:
    """A single employee to generate a card for.

    Attributes:
        name: Display name (required).
        name_en: Name in English, for bilingual cards.
        company: Organization name.
        department: Department or team.
        position: Role title as written in the source data.
        position_en: English role title; derived from ``position`` when empty.
        email: Email address.
        mobile: Mobile number, raw as imported.
        phone: Office phone number.
        extension: Internal line extension, raw as imported.
        fax: Fax number.
        custom_fields: Additional named fields, keyed case-insensitively.
    """
    name: str = ""
    name_en: str = ""
    company: str = ""
    department: str = ""
    position: str = ""
    position_en: str = ""
    email: str = ""
    mobile: str = ""
    phone: str = ""
    extension: str = ""
    fax: str = ""
    custom_fields: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.custom_fields = {
            str(key).strip().lower(): "" if value is None else str(value)
            for key, value in self.custom_fields.items()
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Record":
        """Build a record from a flat mapping.

        Keys matching a standard field (case-insensitive) populate that field;
        an explicit ``custom_fields`` mapping is merged; every other key
        becomes a custom field.
        """
        values: dict[str, str] = {}
        custom: dict[str, str] = {}
        for key, value in data.items():
            norm = str(key).strip().lower()
            if norm == "custom_fields" and isinstance(value, dict):
                custom.update(value)
            elif norm in STANDARD_FIELDS:
                values[norm] = "" if value is None else str(value).strip()
            elif value is not None and str(value).strip():
                custom[norm] = str(value).strip()
        return cls(**values, custom_fields=custom)

    def get_custom_field(self, key: str) -> str | None:
        """Look up a custom field by name, ignoring case."""
        return self.custom_fields.get(key.strip().lower())

    def validate(self) -> None:
        """Check record invariants.

        Raises:
            RecordValidationError: If the name is blank.
        """
        if not self.name or not self.name.strip():
            raise RecordValidationError("Record has no name.")


@dataclass
class RecordOutcome:
    """Result of generating the card for one record."""
    record_name: str
    filename: str
    success: bool
    output_path: Path | None = None
    error: str | None = None
    replacements: int = 0


@dataclass
class BatchResult:
    """Result of a batch generation attempt."""
    success: bool
    error_message: str | None = None
    error_code: ErrorCode | None = None
    generated_count: int = 0
    failed_count: int = 0
    archive_path: Path | None = None
    generated_files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, message: str, code: ErrorCode) -> "BatchResult":
        return cls(success=False, error_message=message, error_code=code)


@dataclass
class ImportResult:
    """Result of importing records from a spreadsheet."""
    success: bool
    records: list[Record] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error_message: str | None = None
    error_code: ErrorCode | None = None

    @property
    def total_count(self) -> int:
        return len(self.records)

    @classmethod
    def failure(cls, message: str, code: ErrorCode) -> "ImportResult":
        return cls(success=False, error_message=message, error_code=code)
