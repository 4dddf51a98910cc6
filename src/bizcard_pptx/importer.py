"""Employee record ingestion from spreadsheets and YAML.

The first worksheet of an .xlsx workbook is scanned for a header row (the
first row, within ``max_header_search_rows``, that has both a Name and an
Email column). Each following row becomes a Record; columns that do not
match a known field are kept as lower-cased custom fields so templates can
reference them as ``{column}``.
"""

import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from openpyxl import Workbook, load_workbook

from .config import ProcessingOptions
from .document import TemplateSource, read_head, read_source, source_size
from .errors import ErrorCode, RecordImportError, format_error
from .models import ImportResult, Record
from .placeholder_resolver import DEFAULT_POLICY, FormattingPolicy, position_english

logger = logging.getLogger(__name__)

XLSX_SIGNATURE = b"PK\x03\x04"
XLS_SIGNATURE = b"\xD0\xCF\x11\xE0\xA1\xB1\x1A\xE1"

DEFAULT_COMPANY = "Default Company"

# Header aliases per record field, matched case-insensitively as substrings.
# More specific fields come first so "Name (English)" is not taken for
# "Name" and "Cell phone" is not taken for "Phone".
HEADER_ALIASES: List[Tuple[str, Tuple[str, ...]]] = [
    ("name_en", ("name (english)", "name english", "english name")),
    ("position_en", ("position (english)", "position english")),
    ("company", ("company",)),
    ("department", ("department",)),
    ("email", ("email",)),
    ("mobile", ("mobile", "cell phone")),
    ("extension", ("extension", "ext")),
    ("fax", ("fax",)),
    ("phone", ("phone",)),
    ("position", ("position", "title")),
    ("name", ("name",)),
]

# Header and sample row written by create_import_template()
TEMPLATE_HEADERS = [
    "Name",
    "Name (English)",
    "Position",
    "Position (English)",
    "Email",
    "Mobile",
    "Extension",
    "Company (optional)",
    "Department (optional)",
]
TEMPLATE_SAMPLE = [
    "John Doe",
    "John Doe",
    "Team Leader",
    "Team Leader",
    "john@company.com",
    "010-1234-5678",
    "1234",
    "CardMaker Inc.",
    "Development",
]


def match_header(header: str) -> Optional[str]:
    """Map a header cell to a record field name, or None for a custom column."""
    lowered = header.strip().lower()
    for field_name, aliases in HEADER_ALIASES:
        if lowered in aliases:
            return field_name
    for field_name, aliases in HEADER_ALIASES:
        if any(alias in lowered for alias in aliases):
            return field_name
    return None


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def validate_workbook(source: TemplateSource, max_size_bytes: int) -> bytes:
    """Check a spreadsheet's size and signature, then read it.

    Raises:
        RecordImportError: With E002, E003, E004 or E001 as appropriate.
    """
    size = source_size(source)

    if size > max_size_bytes:
        size_mb = size / (1024 * 1024)
        max_mb = max_size_bytes / (1024 * 1024)
        logger.warning(f"Excel file exceeds maximum size: {size_mb:.2f}MB > {max_mb:.2f}MB")
        raise RecordImportError(f"Excel file: {size_mb:.1f}MB > {max_mb:g}MB", code=ErrorCode.FILE_TOO_LARGE)

    if size == 0:
        logger.warning("Excel file is empty")
        raise RecordImportError("Excel file", code=ErrorCode.FILE_EMPTY)

    head = read_head(source, len(XLS_SIGNATURE))
    if len(head) < len(XLSX_SIGNATURE):
        logger.warning("Excel file is too small to be valid")
        raise RecordImportError("Excel file", code=ErrorCode.FILE_CORRUPTED)

    is_xlsx = head.startswith(XLSX_SIGNATURE)
    is_xls = head == XLS_SIGNATURE
    if not is_xlsx and not is_xls:
        logger.warning(f"Excel file has invalid signature. Bytes: {head[:4].hex(' ').upper()}")
        raise RecordImportError("Expected .xlsx or .xls file", code=ErrorCode.INVALID_FILE_FORMAT)

    logger.info(f"Excel file validated successfully ({size} bytes, {'XLSX' if is_xlsx else 'XLS'})")
    return read_source(source)


def find_header(rows: List[Tuple[Any, ...]], max_rows: int) -> Tuple[int, Dict[str, int]]:
    """Locate the header row and map fields to column indexes.

    Known fields map under their record field name; unknown headers map
    under their own text.

    Returns:
        Tuple of (header row index, mapping). The mapping is empty when no
        row within ``max_rows`` has both a Name and an Email column.
    """
    for row_idx, row in enumerate(rows[:max_rows]):
        mapping: Dict[str, int] = {}
        for col_idx, value in enumerate(row):
            header = _cell_text(value)
            if not header:
                continue
            field_name = match_header(header)
            mapping.setdefault(field_name or header, col_idx)

        if "name" in mapping and "email" in mapping:
            return row_idx, mapping

    return -1, {}


def parse_row(
    row: Tuple[Any, ...], mapping: Dict[str, int], policy: FormattingPolicy = DEFAULT_POLICY
) -> Optional[Record]:
    """Build a Record from one data row, or None when the row has no name."""
    def value_of(key: str) -> str:
        idx = mapping.get(key)
        if idx is None or idx >= len(row):
            return ""
        return _cell_text(row[idx])

    name = value_of("name")
    if not name:
        return None

    values = {field_name: value_of(field_name) for field_name, _ in HEADER_ALIASES}
    values["company"] = values["company"] or DEFAULT_COMPANY

    known = {field_name for field_name, _ in HEADER_ALIASES}
    custom = {}
    for header, idx in mapping.items():
        if header in known:
            continue
        value = value_of(header)
        if value:
            custom[header.lower()] = value

    record = Record(**values, custom_fields=custom)
    if not record.position_en and record.position:
        position_english(record, policy)
    return record


def import_records(
    source: TemplateSource,
    options: Optional[ProcessingOptions] = None,
    policy: FormattingPolicy = DEFAULT_POLICY,
) -> ImportResult:
    """Import records from the first worksheet of an Excel workbook.

    Args:
        source: Workbook bytes, path, or seekable binary stream.
        options: Processing limits (size ceiling, header search depth).
        policy: Formatting policy whose role table fills in English titles.

    Returns:
        ImportResult. Rows that fail to parse are reported as warnings and
        do not fail the import.
    """
    options = options or ProcessingOptions()

    try:
        logger.info("Starting Excel import")
        data = validate_workbook(source, options.max_excel_file_size_bytes)

        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        try:
            sheet = workbook.worksheets[0]
            rows = list(sheet.iter_rows(values_only=True))
        finally:
            workbook.close()

        header_idx, mapping = find_header(rows, options.max_header_search_rows)
        if not mapping:
            return ImportResult.failure(
                format_error(ErrorCode.INVALID_HEADER_FORMAT, "Could not find Name and Email columns."),
                ErrorCode.INVALID_HEADER_FORMAT,
            )

        records: List[Record] = []
        warnings: List[str] = []
        for offset, row in enumerate(rows[header_idx + 1:]):
            row_number = header_idx + offset + 2
            try:
                record = parse_row(row, mapping, policy)
                if record is not None:
                    records.append(record)
            except Exception as e:
                logger.warning(f"Failed to parse row {row_number}: {e}")
                warnings.append(f"Row {row_number}: Parse failed - {e}")

        logger.info(f"Excel import completed. Total employees: {len(records)}")
        return ImportResult(success=True, records=records, warnings=warnings)

    except MemoryError:
        logger.error("Out of memory while importing Excel file")
        return ImportResult.failure(format_error(ErrorCode.OUT_OF_MEMORY), ErrorCode.OUT_OF_MEMORY)
    except PermissionError as e:
        logger.error(f"Permission denied during Excel import: {e}")
        return ImportResult.failure(format_error(ErrorCode.PERMISSION_DENIED, str(e)), ErrorCode.PERMISSION_DENIED)
    except OSError as e:
        logger.error(f"IO error during Excel import: {e}")
        return ImportResult.failure(format_error(ErrorCode.IO_ERROR, str(e)), ErrorCode.IO_ERROR)
    except RecordImportError as e:
        logger.error(f"Excel validation error: {e.code.value}")
        return ImportResult.failure(str(e), e.code)
    except Exception as e:
        logger.error(f"Unexpected error during Excel import: {e}")
        return ImportResult.failure(
            format_error(ErrorCode.EXCEL_PROCESSING_FAILED, str(e)), ErrorCode.EXCEL_PROCESSING_FAILED
        )


def create_import_template() -> bytes:
    """Build a sample workbook with the expected header row and one example.

    Returns:
        .xlsx bytes.
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Employees"
    sheet.append(TEMPLATE_HEADERS)
    sheet.append(TEMPLATE_SAMPLE)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def load_records_yaml(path: Path) -> List[Record]:
    """Load records from a YAML file.

    The file holds either a list of mappings or a mapping with a
    ``records`` list. Entries without a name are skipped with a warning.
    """
    with open(path, 'r', encoding='utf-8') as f:
        content = yaml.safe_load(f) or []

    if isinstance(content, dict):
        content = content.get('records', []) or []
    if not isinstance(content, list):
        raise RecordImportError(f"{path}: expected a list of records", code=ErrorCode.INVALID_DATA_FORMAT)

    records = []
    for idx, entry in enumerate(content):
        if not isinstance(entry, dict):
            logger.warning(f"Skipping record {idx + 1} in {path}: not a mapping")
            continue
        record = Record.from_dict(entry)
        if not record.name:
            logger.warning(f"Skipping record {idx + 1} in {path}: no name")
            continue
        records.append(record)

    logger.info(f"Loaded {len(records)} records from {path}")
    return records
