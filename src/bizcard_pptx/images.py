"""Image handling for card templates.

A text shape carrying the ``{qrcode}`` token marks where the record's
QR code goes. The shape is replaced structurally: a new square picture is
created at the same offset, placed right after the marker in the shape
tree, and the marker shape is removed.
"""

import io
import logging
from typing import Callable, Optional, TYPE_CHECKING

from pptx.util import Emu

from .document import EMU_PER_INCH, get_geometry
from .models import Record
from .shape_ids import ShapeIdAllocator, default_allocator

if TYPE_CHECKING:
    from pptx.shapes.base import BaseShape
    from pptx.shapes.picture import Picture
    from pptx.slide import Slide

# Callable that renders a record into raw image bytes (PNG)
ImageGenerator = Callable[[Record], bytes]

PICTURE_NAME = "QR Code"


def square_bounds(target: 'BaseShape') -> tuple[int, int, int]:
    """Compute the square box a picture replacing ``target`` should occupy.

    Missing offsets default to 0 and missing extents to one inch, then the
    box is squared to the smaller side so the image fits the placeholder.

    Args:
        target: Shape being replaced

    Returns:
        Tuple of (left, top, side) in EMU
    """
    geometry = get_geometry(target)

    x = geometry.x if geometry is not None and geometry.x is not None else 0
    y = geometry.y if geometry is not None and geometry.y is not None else 0
    width = geometry.cx if geometry is not None and geometry.cx is not None else EMU_PER_INCH
    height = geometry.cy if geometry is not None and geometry.cy is not None else EMU_PER_INCH

    return x, y, min(width, height)


def insert_image_shape(
    slide: 'Slide',
    target: 'BaseShape',
    record: Record,
    image_generator: ImageGenerator,
    id_allocator: Optional[ShapeIdAllocator] = None,
) -> Optional['Picture']:
    """Replace a placeholder shape with a picture generated for the record.

    Failures are logged and swallowed so a broken image never fails the
    whole card.

    Args:
        slide: Slide that owns ``target``
        target: Shape carrying the image token
        record: Record to render
        image_generator: Callable returning image bytes for the record
        id_allocator: Shape id source (defaults to the process-wide counter)

    Returns:
        The new Picture shape, or None if insertion failed
    """
    allocator = id_allocator or default_allocator

    try:
        image_bytes = image_generator(record)

        left, top, side = square_bounds(target)

        # add_picture embeds the image part and appends a p:pic to the tree
        picture = slide.shapes.add_picture(
            io.BytesIO(image_bytes),
            Emu(left),
            Emu(top),
            width=Emu(side),
            height=Emu(side),
        )

        c_nv_pr = picture._element.nvPicPr.cNvPr
        c_nv_pr.id = allocator.next_id()
        c_nv_pr.name = PICTURE_NAME

        # Take the marker's place in z-order, then drop the marker
        target_el = target._element
        target_el.addnext(picture._element)
        target_el.getparent().remove(target_el)

        logging.debug(f"Inserted QR code for {record.name} (shape id {c_nv_pr.id})")
        return picture

    except Exception as e:
        logging.warning(f"Failed to insert QR code for {record.name}: {e}")
        return None
