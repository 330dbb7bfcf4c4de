from typing import Any, Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from app.services.colors import parse_color

# fabric.Text default
DEFAULT_LINE_HEIGHT = 1.16


class FabricScene(BaseModel):
    background: str | None = None
    # Kept raw so each object is parsed on its own: an unknown type is skipped,
    # a malformed one is reported with its index.
    objects: list[Any] = Field(default_factory=list)

    @field_validator("background", mode="before")
    @classmethod
    def _blank_background(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("background")
    @classmethod
    def _check_background(cls, v: str | None) -> str | None:
        if v is not None:
            parse_color(v)
        return v


class ConvertRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    fabric_json: FabricScene = Field(alias="fabricJSON")


class ErrorResponse(BaseModel):
    error: str
    message: str


class SceneObjectBase(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    type: str
    left: float
    top: float
    scale_x: float = Field(default=1.0, alias="scaleX")
    scale_y: float = Field(default=1.0, alias="scaleY")

    @field_validator("scale_x", "scale_y", mode="before")
    @classmethod
    def _default_scale(cls, v: Any) -> Any:
        return 1.0 if v is None else v


class FilledObject(SceneObjectBase):
    fill: str

    @field_validator("fill")
    @classmethod
    def _check_fill(cls, v: str) -> str:
        parse_color(v)
        return v


class CircleObject(FilledObject):
    type: Literal["circle"] = "circle"
    radius: float


class RectObject(FilledObject):
    type: Literal["rect"] = "rect"
    width: float
    height: float


class TriangleObject(FilledObject):
    type: Literal["triangle"] = "triangle"
    width: float
    height: float


class TextBoxObject(FilledObject):
    type: Literal["textbox"] = "textbox"
    text: str
    font_size: float = Field(alias="fontSize")
    width: float
    fill: str = "#000000"
    text_align: Literal["left", "center", "right", "justify"] = Field(default="left", alias="textAlign")
    line_height: float = Field(default=DEFAULT_LINE_HEIGHT, alias="lineHeight")

    @field_validator("text_align", mode="before")
    @classmethod
    def _normalize_align(cls, v: Any) -> Any:
        if v is None:
            return "left"
        align = str(v).strip().lower()
        # fabric's justify-left / justify-center / justify-right
        if align.startswith("justify"):
            return "justify"
        return align

    @field_validator("line_height", mode="before")
    @classmethod
    def _default_line_height(cls, v: Any) -> Any:
        return DEFAULT_LINE_HEIGHT if v is None else v


class ImageObject(SceneObjectBase):
    type: Literal["image"] = "image"
    src: str
    width: float
    height: float


SceneObject = CircleObject | RectObject | TriangleObject | TextBoxObject | ImageObject
