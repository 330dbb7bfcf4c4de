from __future__ import annotations

import io
import logging
import re
import threading
from pathlib import Path
from typing import Sequence
from xml.sax.saxutils import escape

from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4, letter
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import Paragraph

from app.errors import RenderError
from app.services.colors import parse_color

logger = logging.getLogger(__name__)

TEXT_FONT = "Helvetica"

PAGE_SIZES: dict[str, tuple[float, float]] = {
    "letter": (float(letter[0]), float(letter[1])),
    "a4": (float(A4[0]), float(A4[1])),
}

_ALIGNMENTS = {
    "left": TA_LEFT,
    "center": TA_CENTER,
    "right": TA_RIGHT,
    "justify": TA_JUSTIFY,
}


def page_size_pt(name: str) -> tuple[float, float]:
    try:
        return PAGE_SIZES[str(name or "").strip().lower()]
    except KeyError as e:
        raise ValueError(f"Unknown page size: {name}") from e


def _color(value: str):
    try:
        return parse_color(value)
    except ValueError as e:
        raise RenderError(str(e)) from e


# Leading spaces and every space after the first in a run; Paragraph would collapse them.
_KEPT_SPACES = re.compile(r"^ |(?<= ) ")


def _text_markup(text: str) -> str:
    lines = str(text or "").replace("\r\n", "\n").split("\n")
    return "<br/>".join(_KEPT_SPACES.sub("&nbsp;", escape(line)) for line in lines)


class PdfDocumentBuilder:
    """Single page reportlab canvas with a top-left origin drawing API.

    Every command runs under one lock so concurrent callers never interleave
    writes to the canvas. ``finalize`` is terminal.
    """

    def __init__(self, output_path: str | Path, page_size: tuple[float, float] = PAGE_SIZES["letter"]) -> None:
        self.output_path = Path(output_path)
        self.page_width, self.page_height = float(page_size[0]), float(page_size[1])
        self._canvas = Canvas(str(self.output_path), pagesize=(self.page_width, self.page_height))
        self._lock = threading.Lock()
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def _check_open(self) -> None:
        if self._finalized:
            raise RuntimeError("DOCUMENT_FINALIZED")

    def _y(self, top: float, height: float = 0.0) -> float:
        return self.page_height - float(top) - float(height)

    def fill_page(self, fill: str) -> None:
        color = _color(fill)
        with self._lock:
            self._check_open()
            c = self._canvas
            c.saveState()
            c.setFillColor(color)
            c.rect(0.0, 0.0, self.page_width, self.page_height, stroke=0, fill=1)
            c.restoreState()

    def fill_circle(self, cx: float, cy: float, radius: float, fill: str) -> None:
        color = _color(fill)
        with self._lock:
            self._check_open()
            c = self._canvas
            c.saveState()
            c.setFillColor(color)
            c.circle(float(cx), self._y(cy), float(radius), stroke=0, fill=1)
            c.restoreState()

    def fill_rect(self, x: float, y: float, width: float, height: float, fill: str) -> None:
        color = _color(fill)
        with self._lock:
            self._check_open()
            c = self._canvas
            c.saveState()
            c.setFillColor(color)
            c.rect(float(x), self._y(y, height), float(width), float(height), stroke=0, fill=1)
            c.restoreState()

    def fill_polygon(self, points: Sequence[tuple[float, float]], fill: str) -> None:
        if len(points) < 3:
            raise RenderError("a filled path needs at least 3 points")
        color = _color(fill)
        with self._lock:
            self._check_open()
            c = self._canvas
            c.saveState()
            c.setFillColor(color)
            p = c.beginPath()
            first_x, first_y = points[0]
            p.moveTo(float(first_x), self._y(first_y))
            for px, py in points[1:]:
                p.lineTo(float(px), self._y(py))
            p.close()
            c.drawPath(p, stroke=0, fill=1)
            c.restoreState()

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        *,
        width: float,
        font_size: float,
        fill: str,
        align: str = "left",
        line_height: float = 1.16,
    ) -> None:
        if font_size <= 0:
            raise RenderError(f"text font size must be > 0, got {font_size}")
        if width <= 0:
            raise RenderError(f"text box width must be > 0, got {width}")
        color = _color(fill)
        style = ParagraphStyle(
            name="textbox",
            fontName=TEXT_FONT,
            fontSize=float(font_size),
            leading=float(font_size) * float(line_height),
            textColor=color,
            alignment=_ALIGNMENTS.get(str(align or "left"), TA_LEFT),
        )
        para = Paragraph(_text_markup(text), style)
        with self._lock:
            self._check_open()
            _w, h = para.wrap(float(width), self.page_height)
            para.drawOn(self._canvas, float(x), self._y(y, h))

    def draw_image(self, data: bytes, x: float, y: float, width: float, height: float) -> None:
        try:
            img = ImageReader(io.BytesIO(bytes(data)))
            img.getSize()
        except Exception as e:
            raise RenderError(f"unreadable image data: {e}") from e
        with self._lock:
            self._check_open()
            self._canvas.drawImage(
                img,
                float(x),
                self._y(y, height),
                width=float(width),
                height=float(height),
                mask="auto",
            )

    def finalize(self) -> bytes:
        with self._lock:
            self._check_open()
            self._finalized = True
            self._canvas.showPage()
            self._canvas.save()
        data = self.output_path.read_bytes()
        if not data.startswith(b"%PDF-"):
            raise RenderError("INVALID_PDF_OUTPUT: expected %PDF- header")
        logger.debug("DOCUMENT_FINALIZED", extra={"path": str(self.output_path), "bytes": len(data)})
        return data
