"""Text substitution across every slide of a card.

For each text shape and each paragraph, the runs are concatenated and the
full text is examined:

1. ``{qrcode}`` -> the shape is replaced by a generated picture
   (or the line is dropped when no generator is configured)
2. an empty optional contact field -> the line is dropped
3. otherwise tokens are substituted; a changed paragraph is rewritten as a
   single run that keeps the first run's formatting

Long names widen the name box once per shape after its paragraphs are done.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from pptx.oxml.ns import qn
from pptx.oxml.xmlchemy import OxmlElement

from .document import iter_slides, paragraph_text
from .images import ImageGenerator, insert_image_shape
from .layout import find_name_en_shapes, widen_name_shape
from .line_removal import should_remove
from .models import Record
from .placeholder_resolver import (
    DEFAULT_POLICY,
    NAME_TOKEN,
    FormattingPolicy,
    contains_image_token,
    substitute_text,
)
from .shape_ids import ShapeIdAllocator, default_allocator

if TYPE_CHECKING:
    from pptx.presentation import Presentation
    from pptx.shapes.base import BaseShape
    from pptx.slide import Slide
    from pptx.text.text import _Paragraph

logger = logging.getLogger(__name__)

# Names at least this long trigger name-box widening
LONG_NAME_MIN_LENGTH = 4


@dataclass
class MergeContext:
    """Collaborators shared by every paragraph of one card.

    Attributes:
        policy: Formatting rules for contact fields and role titles.
        image_generator: Renders a record into PNG bytes; None disables
            image insertion (image lines are removed instead).
        id_allocator: Source of ids for inserted pictures.
    """
    policy: FormattingPolicy = field(default_factory=lambda: DEFAULT_POLICY)
    image_generator: Optional[ImageGenerator] = None
    id_allocator: ShapeIdAllocator = field(default_factory=lambda: default_allocator)


def rewrite_paragraph(paragraph: "_Paragraph", text: str) -> None:
    """Replace all runs of a paragraph with one run carrying ``text``.

    The new run copies the first original run's ``a:rPr`` and is placed
    before ``a:endParaRPr`` when the paragraph has one.
    """
    p = paragraph._p
    runs = list(p.r_lst)

    rPr = None
    if runs and runs[0].rPr is not None:
        rPr = copy.deepcopy(runs[0].rPr)

    for r in runs:
        p.remove(r)

    new_r = OxmlElement("a:r")
    if rPr is not None:
        new_r.append(rPr)
    t = OxmlElement("a:t")
    t.text = text
    new_r.append(t)

    end_para_rPr = p.find(qn("a:endParaRPr"))
    if end_para_rPr is not None:
        end_para_rPr.addprevious(new_r)
    else:
        p.append(new_r)


def _drop_paragraphs(shape: "BaseShape", doomed: list["_Paragraph"]) -> None:
    """Rebuild the text body's paragraph list without ``doomed``."""
    if not doomed:
        return

    txBody = shape.text_frame._txBody
    doomed_elements = [para._p for para in doomed]
    kept = [p for p in txBody.p_lst if not any(p is d for d in doomed_elements)]

    for p in list(txBody.p_lst):
        txBody.remove(p)
    for p in kept:
        txBody.append(p)

    # A text body must hold at least one paragraph
    if not kept:
        txBody.add_p()


def process_shape(
    slide: "Slide",
    shape: "BaseShape",
    record: Record,
    context: MergeContext,
    name_en_shapes: list["BaseShape"] | None = None,
) -> int:
    """Merge one text shape.

    Args:
        slide: Slide owning the shape.
        shape: Shape with a text frame.
        record: Record being merged.
        context: Merge collaborators.
        name_en_shapes: English-name boxes on this slide, found before any
            substitution ran.

    Returns:
        Number of replacements made in this shape.
    """
    replacements = 0
    doomed: list["_Paragraph"] = []
    name_replaced = False

    for paragraph in list(shape.text_frame.paragraphs):
        if not paragraph.runs:
            continue

        full_text = paragraph_text(paragraph)

        if contains_image_token(full_text):
            if context.image_generator is None:
                doomed.append(paragraph)
                continue

            picture = insert_image_shape(
                slide, shape, record, context.image_generator, context.id_allocator
            )
            replacements += 1
            if picture is not None:
                # The shape has left the slide; nothing more to do with it
                return replacements
            doomed.append(paragraph)
            continue

        if should_remove(full_text, record, context.policy):
            doomed.append(paragraph)
            replacements += 1
            continue

        replaced_text = substitute_text(full_text, record, context.policy)
        if replaced_text != full_text:
            rewrite_paragraph(paragraph, replaced_text)
            replacements += 1
            if NAME_TOKEN in full_text:
                name_replaced = True

    _drop_paragraphs(shape, doomed)

    if name_replaced and len(record.name) >= LONG_NAME_MIN_LENGTH:
        widen_name_shape(shape, len(record.name), name_en_shapes)

    return replacements


def process_slide(slide: "Slide", record: Record, context: MergeContext) -> int:
    """Merge every text shape on a slide; returns the replacement count."""
    shapes = list(slide.shapes)
    name_en_shapes = find_name_en_shapes(shapes)

    replacements = 0
    for shape in shapes:
        if not shape.has_text_frame:
            continue
        replacements += process_shape(slide, shape, record, context, name_en_shapes)

    return replacements


def process_presentation(prs: "Presentation", record: Record, context: MergeContext) -> int:
    """Merge a record into every slide of a presentation.

    Returns:
        Total replacement count, for diagnostics only.
    """
    total = 0
    for idx, slide in enumerate(iter_slides(prs)):
        count = process_slide(slide, record, context)
        logger.debug(f"  Slide {idx + 1}: {count} replacement(s)")
        total += count
    return total
