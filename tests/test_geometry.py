from app.services.geometry import (
    circle_geometry,
    image_box,
    rect_box,
    text_box_width,
    text_font_size,
    triangle_vertices,
)


def test_circle_uses_scale_x_only():
    cx, cy, r = circle_geometry(left=100, top=50, radius=10, scale_x=2)
    assert r == 20
    assert (cx, cy) == (120, 70)


def test_rect_box_scales_each_axis():
    assert rect_box(left=10, top=20, width=30, height=40, scale_x=2, scale_y=0.5) == (10, 20, 60, 20)


def test_triangle_apex_centered_above_base():
    points = triangle_vertices(left=10, top=20, width=40, height=30, scale_x=1.5, scale_y=2)
    assert points == [(10, 80), (40, 20), (70, 80)]


def test_text_font_size_uses_smaller_scale():
    assert text_font_size(font_size=20, scale_x=2, scale_y=0.5) == 10
    assert text_box_width(width=100, scale_x=1.5) == 150


def test_image_box_matches_rect_box():
    assert image_box(left=1, top=2, width=3, height=4, scale_x=2, scale_y=3) == (1, 2, 6, 12)
