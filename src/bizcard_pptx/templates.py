"""Sample business card templates.

Builds single-slide 10" x 7.5" presentations whose text boxes carry the
placeholder tokens the merge engine understands. Useful as a starting
point for designers and as test fixtures.
"""

import io
from typing import List, Tuple

from pptx import Presentation
from pptx.util import Inches, Pt

SLIDE_WIDTH_IN = 10
SLIDE_HEIGHT_IN = 7.5

# Index of the "Blank" layout in the default python-pptx template
BLANK_LAYOUT_IDX = 6

# (text, left, top, width, height, font size pt, bold); positions in inches
TextBoxSpec = Tuple[str, float, float, float, float, int, bool]

BASIC_TEMPLATE: List[TextBoxSpec] = [
    ("{name}", 0.5, 0.5, 3.0, 0.5, 24, True),
    ("{position}", 0.5, 1.1, 3.0, 0.4, 14, False),
    ("{department}", 0.5, 1.6, 3.0, 0.4, 12, False),
    ("Email: {email}", 0.5, 2.3, 4.0, 0.3, 11, False),
    ("Mobile: {mobile}", 0.5, 2.7, 4.0, 0.3, 11, False),
    ("Phone: {phone}", 0.5, 3.1, 4.0, 0.3, 11, False),
    ("{company}", 5.5, 0.5, 3.5, 0.5, 16, True),
    ("Your Company Address", 5.5, 1.1, 3.5, 0.8, 10, False),
]

QRCODE_TEMPLATE: List[TextBoxSpec] = [
    ("{name}", 0.5, 0.5, 3.0, 0.5, 24, True),
    ("{position}", 0.5, 1.1, 3.0, 0.4, 14, False),
    ("{department}", 0.5, 1.6, 3.0, 0.4, 12, False),
    ("Email: {email}", 0.5, 2.3, 3.5, 0.3, 11, False),
    ("Mobile: {mobile}", 0.5, 2.7, 3.5, 0.3, 11, False),
    ("{qrcode}", 7.0, 2.0, 1.5, 1.5, 10, False),
    ("{company}", 5.0, 0.5, 3.5, 0.5, 16, True),
    ("Your Company Address", 5.0, 1.1, 3.5, 0.8, 10, False),
]


def build_template(boxes: List[TextBoxSpec]) -> bytes:
    """Create a one-slide presentation with the given text boxes.

    Args:
        boxes: Text box specs, in z-order.

    Returns:
        .pptx bytes.
    """
    prs = Presentation()
    prs.slide_width = Inches(SLIDE_WIDTH_IN)
    prs.slide_height = Inches(SLIDE_HEIGHT_IN)

    slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT_IDX])

    for text, left, top, width, height, font_size, bold in boxes:
        textbox = slide.shapes.add_textbox(Inches(left), Inches(top), Inches(width), Inches(height))
        text_frame = textbox.text_frame
        text_frame.word_wrap = True

        run = text_frame.paragraphs[0].add_run()
        run.text = text
        run.font.size = Pt(font_size)
        run.font.bold = bold

    buffer = io.BytesIO()
    prs.save(buffer)
    return buffer.getvalue()


def create_basic_template() -> bytes:
    """Contact-details card: name, role, department, email, mobile, phone."""
    return build_template(BASIC_TEMPLATE)


def create_qrcode_template() -> bytes:
    """Contact-details card with a ``{qrcode}`` box on the right."""
    return build_template(QRCODE_TEMPLATE)
