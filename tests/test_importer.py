from __future__ import annotations

import io

from openpyxl import Workbook

from bizcard_pptx.config import Config, ProcessingOptions
from bizcard_pptx.errors import ErrorCode
from bizcard_pptx.importer import (
    create_import_template,
    import_records,
    load_records_yaml,
    match_header,
)
from bizcard_pptx.placeholder_resolver import substitute_text


def workbook_bytes(rows) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def test_match_header_prefers_specific_fields() -> None:
    assert match_header("Name") == "name"
    assert match_header("Name (English)") == "name_en"
    assert match_header("Position (English)") == "position_en"
    assert match_header("Cell Phone") == "mobile"
    assert match_header("Company (optional)") == "company"
    assert match_header("LinkedIn") is None


def test_header_found_below_title_row() -> None:
    data = workbook_bytes([
        ["Employee List"],
        ["Name", "Name (English)", "Position", "Email", "Mobile", "Extension", "LinkedIn"],
        ["홍길동", "Gildong Hong", "대표", "hong@example.com", "010-1234-5678", "1234", "in/hong"],
        [None, None, None, "nobody@example.com", None, None, None],
        ["Jane", None, "Engineer", "jane@example.com", None, None, None],
    ])

    result = import_records(data)

    assert result.success
    assert result.total_count == 2
    hong, jane = result.records
    assert hong.name == "홍길동"
    assert hong.name_en == "Gildong Hong"
    assert hong.position_en == "CEO"
    assert hong.company == "Default Company"
    assert hong.extension == "1234"
    assert hong.custom_fields == {"linkedin": "in/hong"}
    assert jane.position_en == ""
    assert jane.custom_fields == {}


def test_header_search_is_bounded() -> None:
    rows = [["filler"]] * 3 + [["Name", "Email"], ["Ann", "ann@example.com"]]
    options = ProcessingOptions(max_header_search_rows=2)

    result = import_records(workbook_bytes(rows), options)

    assert not result.success
    assert result.error_code == ErrorCode.INVALID_HEADER_FORMAT


def test_sample_workbook_round_trips() -> None:
    result = import_records(create_import_template())

    assert result.success
    (record,) = result.records
    assert record.name == "John Doe"
    assert record.company == "CardMaker Inc."
    assert record.department == "Development"
    assert record.mobile == "010-1234-5678"


def test_wrong_signature_rejected() -> None:
    result = import_records(b"name,email\nAnn,ann@example.com\n")
    assert result.error_code == ErrorCode.INVALID_FILE_FORMAT
    assert result.error_message.startswith("E001:")


def test_empty_and_oversized_files_rejected() -> None:
    assert import_records(b"").error_code == ErrorCode.FILE_EMPTY

    options = ProcessingOptions(max_excel_file_size_mb=1)
    assert import_records(b"PK\x03\x04" + b"\0" * (1024 * 1024), options).error_code == ErrorCode.FILE_TOO_LARGE


def test_unreadable_workbook_is_processing_failure() -> None:
    result = import_records(b"PK\x03\x04 not really a workbook")
    assert result.error_code == ErrorCode.EXCEL_PROCESSING_FAILED


def test_load_records_yaml(tmp_path) -> None:
    path = tmp_path / "records.yaml"
    path.write_text(
        "records:\n"
        "  - name: Ann\n"
        "    email: ann@example.com\n"
        "    mobile: '010-1111-2222'\n"
        "    twitter: '@ann'\n"
        "  - email: nameless@example.com\n",
        encoding="utf-8",
    )

    records = load_records_yaml(path)

    assert [r.name for r in records] == ["Ann"]
    assert records[0].mobile == "010-1111-2222"
    assert records[0].get_custom_field("Twitter") == "@ann"


def test_configured_role_table_reaches_imported_records() -> None:
    config = Config.from_dict({"paths": {}, "position_mapping": {"팀장": "Head of Team"}})
    data = workbook_bytes([
        ["Name", "Position", "Email"],
        ["Kim", "팀장", "kim@example.com"],
    ])

    result = import_records(data, config.processing_options, config.formatting_policy)

    (kim,) = result.records
    assert kim.position_en == "Head of Team"
    assert substitute_text("{position_en}", kim, config.formatting_policy) == "Head of Team"


def test_packaged_role_table_is_the_import_default() -> None:
    data = workbook_bytes([
        ["Name", "Position", "Email"],
        ["Kim", "팀장", "kim@example.com"],
    ])

    (kim,) = import_records(data).records
    assert kim.position_en == "Team Leader"
