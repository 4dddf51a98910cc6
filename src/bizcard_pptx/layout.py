"""Name box widening for long names.

Card templates size the name box for short names. For four or more
characters the box grows and stops wrapping; an English-name box sitting to
its right is pushed along by the same amount so the two don't overlap.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from .document import get_geometry, shape_text
from .placeholder_resolver import NAME_EN_TOKEN

if TYPE_CHECKING:
    from pptx.shapes.base import BaseShape

logger = logging.getLogger(__name__)

# Width multipliers by name length
WIDEN_FOUR_CHARS = 1.25
WIDEN_FIVE_PLUS_CHARS = 1.40


def width_multiplier(name_length: int) -> float:
    """Get the width multiplier for a name of the given length (1.0 = unchanged)."""
    if name_length >= 5:
        return WIDEN_FIVE_PLUS_CHARS
    if name_length == 4:
        return WIDEN_FOUR_CHARS
    return 1.0


def find_name_en_shapes(shapes: Iterable["BaseShape"]) -> list["BaseShape"]:
    """Shapes whose text body carries the English-name token."""
    return [s for s in shapes if getattr(s, "has_text_frame", False) and NAME_EN_TOKEN in shape_text(s)]


def widen_name_shape(
    name_shape: "BaseShape",
    name_length: int,
    candidates: Iterable["BaseShape"] | None = None,
) -> int:
    """Widen a name box and shift the English-name box to its right.

    Purely cosmetic: any failure is logged and the card is left as it was.

    Args:
        name_shape: Shape holding the name.
        name_length: Length of the resolved name.
        candidates: English-name shapes to consider. Defaults to the shapes
            on the name shape's slide whose text contains ``{name_en}``.

    Returns:
        Width increase in EMU (0 when nothing was changed).
    """
    try:
        multiplier = width_multiplier(name_length)
        if multiplier == 1.0:
            return 0

        geometry = get_geometry(name_shape)
        if geometry is None or not geometry.has_offset or not geometry.has_extents:
            return 0
        if not name_shape.has_text_frame:
            return 0

        current_width = geometry.cx
        new_width = int(current_width * multiplier)
        delta = new_width - current_width

        name_shape._element.xfrm.cx = new_width
        name_shape.text_frame.word_wrap = False

        logger.debug(f"Widened name box '{name_shape.name}': {current_width} -> {new_width} EMU")

        _shift_name_en_shape(name_shape, geometry.x, delta, candidates)
        return delta

    except Exception as e:
        logger.warning(f"Failed to adjust text box size for long name: {e}")
        return 0


def _shift_name_en_shape(
    name_shape: "BaseShape",
    name_x: int,
    delta: int,
    candidates: Iterable["BaseShape"] | None,
) -> None:
    try:
        if candidates is None:
            candidates = find_name_en_shapes(name_shape.part.slide.shapes)

        for shape in candidates:
            if shape._element is name_shape._element:
                continue

            geometry = get_geometry(shape)
            if geometry is None or geometry.x is None:
                continue

            # Only the first English-name box is considered
            if geometry.x > name_x:
                shape._element.xfrm.x = geometry.x + delta
                logger.debug(f"Adjusted English name position: {geometry.x} -> {geometry.x + delta}")
            break

    except Exception as e:
        logger.warning(f"Failed to adjust English name position: {e}")
