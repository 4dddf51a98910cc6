"""Structured error codes and exceptions for business card processing."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes surfaced to callers of the batch and import APIs."""

    # File validation (E001-E009)
    INVALID_FILE_FORMAT = "E001"
    FILE_TOO_LARGE = "E002"
    FILE_EMPTY = "E003"
    FILE_CORRUPTED = "E004"
    INVALID_TEMPLATE_STRUCTURE = "E005"

    # Data validation (E010-E019)
    NO_RECORDS_PROVIDED = "E010"
    INVALID_HEADER_FORMAT = "E011"
    MISSING_REQUIRED_COLUMN = "E012"
    INVALID_DATA_FORMAT = "E013"
    BATCH_SIZE_EXCEEDED = "E014"

    # System resources (E020-E029)
    OUT_OF_MEMORY = "E020"
    IO_ERROR = "E021"
    PERMISSION_DENIED = "E022"
    DISK_SPACE_EXHAUSTED = "E023"

    # Processing (E030-E039)
    POWERPOINT_PROCESSING_FAILED = "E030"
    EXCEL_PROCESSING_FAILED = "E031"
    QRCODE_GENERATION_FAILED = "E032"
    TEMPLATE_GENERATION_FAILED = "E033"
    ZIP_CREATION_FAILED = "E034"

    UNEXPECTED_ERROR = "E999"


_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_FILE_FORMAT: "File is not a valid format.",
    ErrorCode.FILE_TOO_LARGE: "File size exceeds maximum allowed.",
    ErrorCode.FILE_EMPTY: "File is empty or has no content.",
    ErrorCode.FILE_CORRUPTED: "File appears to be corrupted.",
    ErrorCode.INVALID_TEMPLATE_STRUCTURE: "Template file has invalid structure.",
    ErrorCode.NO_RECORDS_PROVIDED: "No employee data provided.",
    ErrorCode.INVALID_HEADER_FORMAT: "Excel header format is invalid.",
    ErrorCode.MISSING_REQUIRED_COLUMN: "Required column is missing.",
    ErrorCode.INVALID_DATA_FORMAT: "Data format is invalid.",
    ErrorCode.BATCH_SIZE_EXCEEDED: "Batch size exceeds maximum allowed.",
    ErrorCode.OUT_OF_MEMORY: "File is too large to process in memory.",
    ErrorCode.IO_ERROR: "Could not read or write file.",
    ErrorCode.PERMISSION_DENIED: "Permission denied to access file.",
    ErrorCode.DISK_SPACE_EXHAUSTED: "Insufficient disk space.",
    ErrorCode.POWERPOINT_PROCESSING_FAILED: "PowerPoint processing failed.",
    ErrorCode.EXCEL_PROCESSING_FAILED: "Excel processing failed.",
    ErrorCode.QRCODE_GENERATION_FAILED: "QR code generation failed.",
    ErrorCode.TEMPLATE_GENERATION_FAILED: "Template generation failed.",
    ErrorCode.ZIP_CREATION_FAILED: "ZIP file creation failed.",
    ErrorCode.UNEXPECTED_ERROR: "An unexpected error occurred.",
}

_SUGGESTIONS: dict[ErrorCode, str] = {
    ErrorCode.INVALID_FILE_FORMAT: "Ensure the file is in .xlsx (Excel) or .pptx (PowerPoint) format.",
    ErrorCode.FILE_TOO_LARGE: "Try reducing file size by removing unnecessary data or splitting into smaller files.",
    ErrorCode.FILE_EMPTY: "Check that the file uploaded correctly and contains data.",
    ErrorCode.FILE_CORRUPTED: "Try opening the file in Excel/PowerPoint and re-saving it.",
    ErrorCode.INVALID_TEMPLATE_STRUCTURE: "Use the provided template or ensure all required elements are present.",
    ErrorCode.NO_RECORDS_PROVIDED: "Add at least one employee to the Excel file.",
    ErrorCode.INVALID_HEADER_FORMAT: "Use the provided Excel template for correct header format.",
    ErrorCode.MISSING_REQUIRED_COLUMN: "Ensure 'Name' and 'Email' columns are present in the Excel file.",
    ErrorCode.INVALID_DATA_FORMAT: "Check that data matches expected format (e.g., email addresses, phone numbers).",
    ErrorCode.BATCH_SIZE_EXCEEDED: "Split your employee data into smaller batches.",
    ErrorCode.OUT_OF_MEMORY: "Reduce file size or split data into smaller batches.",
    ErrorCode.IO_ERROR: "Check if the file is locked, corrupted, or on a network drive with connectivity issues.",
    ErrorCode.PERMISSION_DENIED: "Check file and folder permissions.",
    ErrorCode.DISK_SPACE_EXHAUSTED: "Free up disk space and try again.",
    ErrorCode.POWERPOINT_PROCESSING_FAILED: "Verify the PowerPoint template is not password-protected or corrupted.",
    ErrorCode.EXCEL_PROCESSING_FAILED: "Verify the Excel file is not password-protected or corrupted.",
    ErrorCode.QRCODE_GENERATION_FAILED: "Ensure employee data includes valid contact information.",
    ErrorCode.TEMPLATE_GENERATION_FAILED: "Try restarting the application.",
    ErrorCode.ZIP_CREATION_FAILED: "Ensure sufficient disk space and write permissions.",
}


def get_error_message(code: ErrorCode, details: str | None = None) -> str:
    """Get the user-facing message for an error code.

    Args:
        code: Error code.
        details: Optional detail appended after the base message.

    Returns:
        Message of the form ``"E001: File is not a valid format. details"``.
    """
    base = _MESSAGES.get(code, "Unknown error.")
    if details is not None:
        return f"{code.value}: {base} {details}"
    return f"{code.value}: {base}"


def get_recovery_suggestion(code: ErrorCode) -> str | None:
    """Get a recovery hint for an error code, if one exists."""
    return _SUGGESTIONS.get(code)


def format_error(code: ErrorCode, details: str | None = None) -> str:
    """Format the complete message: code, message and recovery suggestion."""
    message = get_error_message(code, details)
    suggestion = get_recovery_suggestion(code)
    if suggestion:
        return f"{message}\n\nTip: {suggestion}"
    return message


class BizCardError(Exception):
    """Base class for classified business card errors."""

    code: ErrorCode = ErrorCode.UNEXPECTED_ERROR

    def __init__(self, details: str | None = None, code: ErrorCode | None = None):
        if code is not None:
            self.code = code
        self.details = details
        super().__init__(format_error(self.code, details))


class TemplateValidationError(BizCardError):
    """Raised when a template fails size or signature validation."""


class InvalidTemplateFormatError(TemplateValidationError):
    code = ErrorCode.INVALID_FILE_FORMAT


class TemplateEmptyError(TemplateValidationError):
    code = ErrorCode.FILE_EMPTY


class TemplateTooLargeError(TemplateValidationError):
    code = ErrorCode.FILE_TOO_LARGE


class TemplateCorruptedError(TemplateValidationError):
    code = ErrorCode.FILE_CORRUPTED


class RecordImportError(BizCardError):
    """Raised when spreadsheet ingestion cannot proceed."""

    code = ErrorCode.EXCEL_PROCESSING_FAILED


class RecordValidationError(BizCardError):
    """Raised when a record violates its invariants (e.g. missing name)."""

    code = ErrorCode.INVALID_DATA_FORMAT


class CardGenerationError(BizCardError):
    """Raised when a single card cannot be generated."""

    code = ErrorCode.POWERPOINT_PROCESSING_FAILED
