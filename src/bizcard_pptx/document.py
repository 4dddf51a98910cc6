"""Loading, validating and saving .pptx card templates.

Templates are validated from their size and leading bytes before anything
is decoded, then decoded afresh for every record so that no two records
ever share a mutable document tree.
"""

from __future__ import annotations

import io
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Union

from pptx import Presentation
from pptx.oxml.ns import qn

from .errors import (
    InvalidTemplateFormatError,
    TemplateCorruptedError,
    TemplateEmptyError,
    TemplateTooLargeError,
)

if TYPE_CHECKING:
    from pptx.presentation import Presentation as PresentationType
    from pptx.shapes.base import BaseShape
    from pptx.slide import Slide
    from pptx.text.text import _Paragraph

logger = logging.getLogger(__name__)

# ZIP local file header: every .pptx starts with "PK\x03\x04"
PPTX_SIGNATURE = b"PK\x03\x04"

# English Metric Units per inch
EMU_PER_INCH = 914400

TemplateSource = Union[bytes, bytearray, memoryview, str, os.PathLike, BinaryIO]


@dataclass
class ShapeGeometry:
    """Position and size of a shape in EMU, read from its ``a:xfrm``.

    Any of the values may be None when the template omits the element.
    """
    x: int | None
    y: int | None
    cx: int | None
    cy: int | None

    @property
    def has_offset(self) -> bool:
        return self.x is not None and self.y is not None

    @property
    def has_extents(self) -> bool:
        return self.cx is not None and self.cy is not None


def source_size(source: TemplateSource) -> int:
    """Determine the byte length of a template source without reading it."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return len(source)
    if isinstance(source, (str, os.PathLike)):
        return Path(source).stat().st_size

    position = source.tell()
    size = source.seek(0, io.SEEK_END)
    source.seek(position)
    return size


def read_source(source: TemplateSource) -> bytes:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if isinstance(source, (str, os.PathLike)):
        return Path(source).read_bytes()

    source.seek(0)
    return source.read()


def read_head(source: TemplateSource, count: int) -> bytes:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source[:count])
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as f:
            return f.read(count)

    position = source.tell()
    source.seek(0)
    head = source.read(count)
    source.seek(position)
    return head


def validate_template(source: TemplateSource, max_size_bytes: int) -> bytes:
    """Validate a .pptx template by size and signature, then read it.

    The size check runs before any content is read, so oversized uploads
    are rejected without being loaded.

    Args:
        source: Template bytes, a path, or a seekable binary stream.
        max_size_bytes: Size ceiling in bytes.

    Returns:
        The template bytes.

    Raises:
        TemplateTooLargeError: If the template exceeds ``max_size_bytes``.
        TemplateEmptyError: If the template has no content.
        TemplateCorruptedError: If it is too short to carry a signature.
        InvalidTemplateFormatError: If the ZIP signature is missing.
    """
    size = source_size(source)

    if size > max_size_bytes:
        size_mb = size / (1024 * 1024)
        max_mb = max_size_bytes / (1024 * 1024)
        logger.warning(f"Template file exceeds maximum size: {size_mb:.2f}MB > {max_mb:.2f}MB")
        raise TemplateTooLargeError(f"Template file: {size_mb:.1f}MB > {max_mb:g}MB")

    if size == 0:
        logger.warning("Template file is empty")
        raise TemplateEmptyError("Template file")

    head = read_head(source, len(PPTX_SIGNATURE))
    if len(head) < len(PPTX_SIGNATURE):
        logger.warning("Template file is too small to be valid PowerPoint")
        raise TemplateCorruptedError("PowerPoint template")

    if head != PPTX_SIGNATURE:
        logger.warning(f"Template file has invalid PowerPoint signature. Bytes: {head.hex(' ').upper()}")
        raise InvalidTemplateFormatError("Expected .pptx file")

    logger.info(f"Template file validated successfully ({size} bytes)")
    return read_source(source)


def load_document(data: bytes) -> "PresentationType":
    """Decode template bytes into a fresh, independent presentation.

    Raises:
        TemplateCorruptedError: If the package cannot be decoded.
    """
    try:
        return Presentation(io.BytesIO(data))
    except Exception as e:
        logger.warning(f"Could not open PowerPoint package: {e}")
        raise TemplateCorruptedError(f"PowerPoint template: {e}") from e


def save_document(prs: "PresentationType") -> bytes:
    """Serialize a presentation back to .pptx bytes."""
    buffer = io.BytesIO()
    prs.save(buffer)
    return buffer.getvalue()


def iter_slides(prs: "PresentationType") -> list["Slide"]:
    """Snapshot the slide list."""
    return list(prs.slides)


def paragraph_text(paragraph: "_Paragraph") -> str:
    """Concatenate the text of a paragraph's runs in order."""
    return "".join(run.text or "" for run in paragraph.runs)


def shape_text(shape: "BaseShape") -> str:
    """Concatenate every ``a:t`` text node under a shape."""
    return "".join(t.text or "" for t in shape._element.iter(qn("a:t")))


def get_geometry(shape: "BaseShape") -> ShapeGeometry | None:
    """Read a shape's own transform.

    Placeholder geometry inherited from the layout is deliberately not
    consulted; only an ``a:xfrm`` on the shape itself counts.

    Returns:
        ShapeGeometry, or None when the shape has no ``a:xfrm``.
    """
    try:
        xfrm = shape._element.xfrm
    except AttributeError:
        return None
    if xfrm is None:
        return None
    return ShapeGeometry(x=xfrm.x, y=xfrm.y, cx=xfrm.cx, cy=xfrm.cy)
