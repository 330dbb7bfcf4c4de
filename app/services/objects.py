from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from pydantic import ValidationError

from app.errors import RenderError, UnrecognizedObjectType, summarize_validation_errors
from app.schemas import (
    CircleObject,
    ImageObject,
    RectObject,
    SceneObject,
    TextBoxObject,
    TriangleObject,
)
from app.services.geometry import (
    circle_geometry,
    image_box,
    rect_box,
    text_box_width,
    text_font_size,
    triangle_vertices,
)

logger = logging.getLogger(__name__)

_OBJECT_MODELS: dict[str, type] = {
    "circle": CircleObject,
    "rect": RectObject,
    "triangle": TriangleObject,
    "textbox": TextBoxObject,
    "image": ImageObject,
}


class Fetcher(Protocol):
    def fetch(self, url: str) -> bytes: ...


@dataclass(frozen=True)
class DrawCommand:
    """One builder call, resolved ahead of time so it can be committed in scene order."""

    op: str
    args: tuple = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def apply(self, builder: Any) -> None:
        getattr(builder, self.op)(*self.args, **self.kwargs)


def parse_scene_object(raw: Any, *, index: int = 0) -> SceneObject:
    if not isinstance(raw, dict):
        raise RenderError(f"objects[{index}]: expected an object, got {type(raw).__name__}")

    object_type = str(raw.get("type") or "")
    model = _OBJECT_MODELS.get(object_type)
    if model is None:
        raise UnrecognizedObjectType(object_type, index=index)

    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise RenderError(f"objects[{index}] ({object_type}): {summarize_validation_errors(e.errors())}") from e


def _circle(obj: CircleObject, _fetcher: Fetcher) -> DrawCommand:
    cx, cy, r = circle_geometry(left=obj.left, top=obj.top, radius=obj.radius, scale_x=obj.scale_x)
    return DrawCommand("fill_circle", (cx, cy, r, obj.fill))


def _rect(obj: RectObject, _fetcher: Fetcher) -> DrawCommand:
    x, y, w, h = rect_box(
        left=obj.left, top=obj.top, width=obj.width, height=obj.height, scale_x=obj.scale_x, scale_y=obj.scale_y
    )
    return DrawCommand("fill_rect", (x, y, w, h, obj.fill))


def _triangle(obj: TriangleObject, _fetcher: Fetcher) -> DrawCommand:
    points = triangle_vertices(
        left=obj.left, top=obj.top, width=obj.width, height=obj.height, scale_x=obj.scale_x, scale_y=obj.scale_y
    )
    return DrawCommand("fill_polygon", (points, obj.fill))


def _textbox(obj: TextBoxObject, _fetcher: Fetcher) -> DrawCommand:
    return DrawCommand(
        "draw_text",
        (obj.text, obj.left, obj.top),
        {
            "width": text_box_width(width=obj.width, scale_x=obj.scale_x),
            "font_size": text_font_size(font_size=obj.font_size, scale_x=obj.scale_x, scale_y=obj.scale_y),
            "fill": obj.fill,
            "align": obj.text_align,
            "line_height": obj.line_height,
        },
    )


def _image(obj: ImageObject, fetcher: Fetcher) -> DrawCommand:
    data = fetcher.fetch(obj.src)
    x, y, w, h = image_box(
        left=obj.left, top=obj.top, width=obj.width, height=obj.height, scale_x=obj.scale_x, scale_y=obj.scale_y
    )
    return DrawCommand("draw_image", (data, x, y, w, h))


_HANDLERS: dict[type, Callable[[Any, Fetcher], DrawCommand]] = {
    CircleObject: _circle,
    RectObject: _rect,
    TriangleObject: _triangle,
    TextBoxObject: _textbox,
    ImageObject: _image,
}


def prepare_object(obj: SceneObject, fetcher: Fetcher) -> DrawCommand:
    """Resolve a parsed object to its draw command. Image objects block on the fetch."""
    handler = _HANDLERS.get(type(obj))
    if handler is None:
        raise UnrecognizedObjectType(str(getattr(obj, "type", "") or type(obj).__name__))
    return handler(obj, fetcher)


def parse_or_skip(raw: Any, *, index: int = 0) -> SceneObject | None:
    """Parse one raw object; unsupported types are logged and yield ``None``."""
    try:
        return parse_scene_object(raw, index=index)
    except UnrecognizedObjectType as e:
        logger.warning("UNSUPPORTED_OBJECT_TYPE", extra={"object_type": e.object_type, "index": index})
        return None


def render_object(raw: Any, builder: Any, fetcher: Fetcher, *, index: int = 0) -> DrawCommand | None:
    """Parse, resolve and draw one object. Unsupported types are skipped."""
    obj = parse_or_skip(raw, index=index)
    if obj is None:
        return None
    command = prepare_object(obj, fetcher)
    command.apply(builder)
    return command
