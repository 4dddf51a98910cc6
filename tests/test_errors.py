from __future__ import annotations

from bizcard_pptx.errors import (
    BizCardError,
    ErrorCode,
    RecordImportError,
    TemplateTooLargeError,
    format_error,
    get_error_message,
    get_recovery_suggestion,
)


def test_message_includes_code_and_details() -> None:
    assert get_error_message(ErrorCode.INVALID_FILE_FORMAT, "Expected .pptx file") == (
        "E001: File is not a valid format. Expected .pptx file"
    )
    assert get_error_message(ErrorCode.NO_RECORDS_PROVIDED) == "E010: No employee data provided."


def test_formatted_error_appends_tip() -> None:
    text = format_error(ErrorCode.BATCH_SIZE_EXCEEDED, "Provided 3 records, maximum is 2.")
    message, tip = text.split("\n\nTip: ")
    assert message == "E014: Batch size exceeds maximum allowed. Provided 3 records, maximum is 2."
    assert tip == get_recovery_suggestion(ErrorCode.BATCH_SIZE_EXCEEDED)


def test_unexpected_error_has_no_tip() -> None:
    assert "Tip:" not in format_error(ErrorCode.UNEXPECTED_ERROR)


def test_exception_carries_code_and_details() -> None:
    err = TemplateTooLargeError("Template file: 60.0MB > 50MB")
    assert err.code == ErrorCode.FILE_TOO_LARGE
    assert err.details == "Template file: 60.0MB > 50MB"
    assert str(err).startswith("E002: File size exceeds maximum allowed.")


def test_code_can_be_overridden_per_instance() -> None:
    err = RecordImportError("Excel file", code=ErrorCode.FILE_EMPTY)
    assert err.code == ErrorCode.FILE_EMPTY
    assert RecordImportError.code == ErrorCode.EXCEL_PROCESSING_FAILED
    assert isinstance(err, BizCardError)
