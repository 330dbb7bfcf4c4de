"""Absolute page geometry for scene objects.

All values are in page units with a top-left origin, as produced by the
fabric canvas. Conversion to the PDF's bottom-left origin happens in the
document builder.
"""

from __future__ import annotations

Point = tuple[float, float]
Box = tuple[float, float, float, float]


def circle_geometry(*, left: float, top: float, radius: float, scale_x: float) -> tuple[float, float, float]:
    # Circles scale uniformly by scaleX; scaleY is intentionally not applied.
    r = float(radius) * float(scale_x)
    return float(left) + r, float(top) + r, r


def rect_box(*, left: float, top: float, width: float, height: float, scale_x: float, scale_y: float) -> Box:
    return float(left), float(top), float(width) * float(scale_x), float(height) * float(scale_y)


def triangle_vertices(
    *, left: float, top: float, width: float, height: float, scale_x: float, scale_y: float
) -> list[Point]:
    h = float(height) * float(scale_y)
    base_half = (float(width) * float(scale_x)) / 2.0
    x = float(left)
    y = float(top)
    return [
        (x, y + h),
        (x + base_half, y),
        (x + base_half * 2.0, y + h),
    ]


def text_font_size(*, font_size: float, scale_x: float, scale_y: float) -> float:
    return float(font_size) * min(float(scale_x), float(scale_y))


def text_box_width(*, width: float, scale_x: float) -> float:
    return float(width) * float(scale_x)


def image_box(*, left: float, top: float, width: float, height: float, scale_x: float, scale_y: float) -> Box:
    return rect_box(left=left, top=top, width=width, height=height, scale_x=scale_x, scale_y=scale_y)
