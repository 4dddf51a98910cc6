#!/usr/bin/env python3
"""Inspect a business card template: text shapes, their tokens and geometry."""

from pptx import Presentation
import json
import sys

from bizcard_pptx.document import EMU_PER_INCH, get_geometry, shape_text
from bizcard_pptx.placeholder_resolver import find_tokens, contains_image_token


def emu_to_inches(emu):
    """Convert EMUs to inches for readability."""
    return round(emu / EMU_PER_INCH, 2) if emu else 0


def inspect_template(template_path: str):
    """Dump every token-bearing shape to stdout and return it as a dict."""
    prs = Presentation(template_path)

    result = {
        "template_path": template_path,
        "slide_dimensions": {
            "width_inches": emu_to_inches(prs.slide_width),
            "height_inches": emu_to_inches(prs.slide_height),
        },
        "slides": []
    }

    print(f"=== Template: {template_path} ===")
    print(f"Slide dimensions: {result['slide_dimensions']['width_inches']}\" x {result['slide_dimensions']['height_inches']}\"")
    print()

    for slide_idx, slide in enumerate(prs.slides):
        slide_data = {"index": slide_idx, "shapes": []}
        print(f"--- Slide {slide_idx + 1} ---")

        for shape in slide.shapes:
            if not shape.has_text_frame:
                continue
            text = shape_text(shape)
            tokens = find_tokens(text)
            if not tokens:
                continue

            geometry = get_geometry(shape)
            shape_data = {
                "id": shape.shape_id,
                "name": shape.name,
                "tokens": tokens,
                "image": contains_image_token(text),
                "geometry": None if geometry is None else {
                    "left_inches": emu_to_inches(geometry.x),
                    "top_inches": emu_to_inches(geometry.y),
                    "width_inches": emu_to_inches(geometry.cx),
                    "height_inches": emu_to_inches(geometry.cy),
                },
            }
            slide_data["shapes"].append(shape_data)

            print(f"  [{shape.shape_id}] \"{shape.name}\": {', '.join(tokens)}")
            if shape_data["geometry"]:
                g = shape_data["geometry"]
                print(f"      pos: ({g['left_inches']}\", {g['top_inches']}\") "
                      f"size: {g['width_inches']}\" x {g['height_inches']}\"")
            else:
                print("      (no own geometry)")

        result["slides"].append(slide_data)
        print()

    return result


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: inspect_template.py TEMPLATE.pptx [OUTPUT.json]")
        sys.exit(1)

    result = inspect_template(sys.argv[1])

    if len(sys.argv) > 2:
        with open(sys.argv[2], "w", encoding="utf-8") as f:
            json.dump(result, f, indent=2, ensure_ascii=False)
        print(f"JSON output written to: {sys.argv[2]}")
