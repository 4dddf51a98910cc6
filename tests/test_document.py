from __future__ import annotations

import io

import pytest

from bizcard_pptx.document import get_geometry, load_document, save_document, validate_template
from bizcard_pptx.errors import (
    ErrorCode,
    InvalidTemplateFormatError,
    TemplateCorruptedError,
    TemplateEmptyError,
    TemplateTooLargeError,
)

MB = 1024 * 1024


def test_valid_template_bytes_are_returned(basic_template: bytes) -> None:
    assert validate_template(basic_template, 50 * MB) == basic_template


def test_template_accepted_from_path_and_stream(tmp_path, basic_template: bytes) -> None:
    path = tmp_path / "card.pptx"
    path.write_bytes(basic_template)

    assert validate_template(path, 50 * MB) == basic_template
    assert validate_template(str(path), 50 * MB) == basic_template
    assert validate_template(io.BytesIO(basic_template), 50 * MB) == basic_template


def test_oversized_template_rejected_before_signature() -> None:
    with pytest.raises(TemplateTooLargeError) as exc:
        validate_template(b"x" * 2048, 1024)
    assert exc.value.code == ErrorCode.FILE_TOO_LARGE


def test_empty_template_rejected() -> None:
    with pytest.raises(TemplateEmptyError) as exc:
        validate_template(b"", MB)
    assert str(exc.value).startswith("E003:")


def test_truncated_template_is_corrupted() -> None:
    with pytest.raises(TemplateCorruptedError):
        validate_template(b"PK", MB)


def test_wrong_signature_is_invalid_format() -> None:
    with pytest.raises(InvalidTemplateFormatError) as exc:
        validate_template(b"%PDF-1.7 not a deck", MB)
    assert exc.value.code == ErrorCode.INVALID_FILE_FORMAT


def test_undecodable_package_is_corrupted() -> None:
    with pytest.raises(TemplateCorruptedError):
        load_document(b"PK\x03\x04 this is not a zip")


def test_documents_are_independent(basic_template: bytes) -> None:
    first = load_document(basic_template)
    second = load_document(basic_template)

    first.slides[0].shapes[0].text_frame.text = "changed"

    assert second.slides[0].shapes[0].text_frame.text == "{name}"
    assert load_document(save_document(first)).slides[0].shapes[0].text_frame.text == "changed"


def test_geometry_read_from_shape(basic_template: bytes) -> None:
    shape = load_document(basic_template).slides[0].shapes[0]
    geometry = get_geometry(shape)

    assert geometry.has_offset and geometry.has_extents
    assert (geometry.x, geometry.y) == (457200, 457200)
    assert geometry.cx == 3 * 914400
