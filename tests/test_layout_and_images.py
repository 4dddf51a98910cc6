from __future__ import annotations

from pptx.util import Inches

from bizcard_pptx.images import insert_image_shape, square_bounds
from bizcard_pptx.layout import widen_name_shape, width_multiplier
from bizcard_pptx.models import Record
from bizcard_pptx.shape_ids import ShapeIdAllocator

from conftest import open_pptx


def test_width_multiplier_by_length() -> None:
    assert width_multiplier(3) == 1.0
    assert width_multiplier(4) == 1.25
    assert width_multiplier(5) == 1.40
    assert width_multiplier(12) == 1.40


def test_four_character_name_widens_by_quarter(make_template) -> None:
    prs = open_pptx(make_template([("Anna", 1.0, 1.0, 2.0, 0.5, 24, True)]))
    shape = prs.slides[0].shapes[0]

    delta = widen_name_shape(shape, 4)

    assert shape.width == int(Inches(2.0) * 1.25)
    assert delta == shape.width - Inches(2.0)


def test_english_name_box_found_on_slide_when_not_given(make_template) -> None:
    prs = open_pptx(make_template([
        ("Alexander", 0.5, 0.5, 3.0, 0.5, 24, True),
        ("{name_en}", 4.0, 0.5, 2.0, 0.5, 12, False),
    ]))
    name_shape, name_en_shape = prs.slides[0].shapes
    before = name_en_shape.left

    delta = widen_name_shape(name_shape, 9)

    assert delta > 0
    assert name_en_shape.left == before + delta


def test_english_name_box_to_the_left_stays(make_template) -> None:
    prs = open_pptx(make_template([
        ("{name_en}", 0.5, 0.5, 2.0, 0.5, 12, False),
        ("Alexander", 4.0, 0.5, 3.0, 0.5, 24, True),
    ]))
    name_en_shape, name_shape = prs.slides[0].shapes
    before = name_en_shape.left

    widen_name_shape(name_shape, 9)

    assert name_en_shape.left == before


def test_square_bounds_uses_smaller_side(make_template) -> None:
    prs = open_pptx(make_template([("{qrcode}", 7.0, 2.0, 2.0, 1.5, 10, False)]))
    left, top, side = square_bounds(prs.slides[0].shapes[0])

    assert (left, top) == (Inches(7.0), Inches(2.0))
    assert side == Inches(1.5)


def test_insert_image_shape_takes_marker_place(make_template, fake_image_generator) -> None:
    prs = open_pptx(make_template([
        ("{name}", 0.5, 0.5, 3.0, 0.5, 24, True),
        ("{qrcode}", 7.0, 2.0, 1.5, 1.5, 10, False),
        ("{company}", 5.0, 0.5, 3.5, 0.5, 16, True),
    ]))
    slide = prs.slides[0]

    picture = insert_image_shape(slide, slide.shapes[1], Record(name="A"), fake_image_generator,
                                 ShapeIdAllocator(start=50))

    assert picture is not None
    assert picture.shape_id == 51
    names = [shape.name for shape in slide.shapes]
    assert names[1] == "QR Code"
    assert len(names) == 3


def test_insert_image_shape_failure_leaves_slide_untouched(make_template) -> None:
    prs = open_pptx(make_template([("{qrcode}", 7.0, 2.0, 1.5, 1.5, 10, False)]))
    slide = prs.slides[0]

    def broken(record: Record) -> bytes:
        return b"not an image"

    assert insert_image_shape(slide, slide.shapes[0], Record(name="A"), broken) is None
    assert len(slide.shapes) == 1
    assert slide.shapes[0].text_frame.text == "{qrcode}"
