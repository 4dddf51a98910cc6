from __future__ import annotations

import io

import pytest
from PIL import Image
from pptx import Presentation

from bizcard_pptx.models import Record
from bizcard_pptx.templates import build_template, create_basic_template, create_qrcode_template


def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (1, 1), "white").save(buffer, format="PNG")
    return buffer.getvalue()


def open_pptx(data: bytes):
    return Presentation(io.BytesIO(data))


def slide_texts(prs) -> list[str]:
    """Text of every text shape on the first slide, in z-order."""
    return [shape.text_frame.text for shape in prs.slides[0].shapes if shape.has_text_frame]


@pytest.fixture
def fake_image_generator():
    data = png_bytes()

    def generate(record: Record) -> bytes:
        return data

    return generate


@pytest.fixture
def basic_template() -> bytes:
    return create_basic_template()


@pytest.fixture
def qrcode_template() -> bytes:
    return create_qrcode_template()


@pytest.fixture
def make_template():
    return build_template


@pytest.fixture
def full_record() -> Record:
    return Record(
        name="Alice",
        name_en="Alice Kim",
        company="Acme Corp",
        department="Research",
        position="대표",
        email="alice@acme.test",
        mobile="010-1234-5678",
        phone="02-555-0100",
        extension="1234",
        fax="02-555-0199",
    )
