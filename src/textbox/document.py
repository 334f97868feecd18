"""Document context: ambient text settings and drawing services over a ReportLab canvas."""

from __future__ import annotations

import logging
import unicodedata
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Sequence

from reportlab.lib.colors import Color, HexColor
from reportlab.lib.pagesizes import letter
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen.canvas import Canvas

from textbox.config import DEFAULT_FONT, DEFAULT_FONT_SIZE, LINE_HEIGHT_RATIO
from textbox.fonts import resolve_face
from textbox.types import BoundingBox, ColorSpec, Direction, Point, RenderMode

logger = logging.getLogger(__name__)

RENDER_MODES: dict[str, int] = {
    "fill": 0,
    "stroke": 1,
    "fill_stroke": 2,
    "invisible": 3,
    "fill_clip": 4,
    "stroke_clip": 5,
    "fill_stroke_clip": 6,
    "clip": 7,
}

# Python codecs for the single-byte encodings of the standard Type 1 fonts
_TYPE1_CODECS = {
    "WinAnsiEncoding": "cp1252",
    "MacRomanEncoding": "mac_roman",
}


@dataclass
class Bounds:
    """
    A rectangle on the page in absolute coordinates.

    A stretchy bounds has no fixed bottom; text boxes inside it may grow down
    to the bottom of the innermost non-stretchy ancestor (the frame).
    """

    left: float
    bottom: float
    right: float
    top: float
    stretchy: bool = False
    parent: Bounds | None = None

    def frame(self) -> Bounds:
        """Innermost non-stretchy bounds, walking up through stretchy ones."""
        frame = self
        while frame.stretchy and frame.parent is not None:
            frame = frame.parent
        return frame


def to_color(color: ColorSpec) -> Color:
    """Convert an RGB tuple (0-1) or a hex string like "FF0000" to a ReportLab Color."""
    if isinstance(color, str):
        return HexColor(color if color.startswith("#") else f"#{color}")
    return Color(*color)


class Document:
    """
    Ambient text state plus the font and drawing services a text box consumes.

    Every setter that changes drawing state is a context manager that puts the
    previous value back on exit, including when the body raises.
    """

    def __init__(
        self,
        canvas: Canvas,
        bounds: Bounds | None = None,
        page_size: tuple[float, float] = letter,
        font: str = DEFAULT_FONT,
        font_size: float = DEFAULT_FONT_SIZE,
        text_direction: Direction = "ltr",
        fallback_fonts: Sequence[str] = (),
        default_leading: float = 0.0,
        character_spacing: float = 0.0,
        text_rendering_mode: RenderMode = "fill",
        default_kerning: bool = True,
        skip_encoding: bool = False,
        line_width: float = 0.5,
    ) -> None:
        """
        Initialize document context.

        Args:
            canvas: ReportLab canvas to draw on.
            bounds: Area text boxes default to. Defaults to the whole page.
            page_size: Page (width, height) in points, used when bounds is not given.
            font: Current font name.
            font_size: Current font size in points.
            text_direction: Default text direction for boxes.
            fallback_fonts: Default fallback fonts for boxes.
            default_leading: Default extra space between lines.
            character_spacing: Current extra space between glyphs.
            text_rendering_mode: Current text rendering mode.
            default_kerning: Whether boxes kern by default.
            skip_encoding: Whether boxes skip text normalization by default.
            line_width: Stroke width for underline and strikethrough.
        """
        self.canvas = canvas
        if bounds is None:
            page_width, page_height = page_size
            bounds = Bounds(0.0, 0.0, page_width, page_height)
        self.bounds = bounds
        self.font_name = font
        self.font_size = font_size
        self.text_direction = text_direction
        self.fallback_fonts = list(fallback_fonts)
        self.default_leading = default_leading
        self.character_spacing = character_spacing
        self.text_rendering_mode = text_rendering_mode
        self.default_kerning = default_kerning
        self.skip_encoding = skip_encoding
        self.line_width = line_width
        self.word_spacing = 0.0

    # ========================================================================
    # Fonts
    # ========================================================================

    def set_font(self, name: str | None = None, styles: Sequence[str] | frozenset[str] = ()) -> str:
        """
        Make a font current, applying bold/italic through its family.

        Returns:
            The face now current.

        Raises:
            BadFontFamily: If the font or the styled face is not registered.
        """
        self.font_name = resolve_face(name or self.font_name, styles)
        return self.font_name

    @contextmanager
    def font(self, name: str | None = None, styles: Sequence[str] | frozenset[str] = ()) -> Iterator[str]:
        """Scoped set_font()."""
        with self.save_font():
            yield self.set_font(name, styles)

    @contextmanager
    def save_font(self) -> Iterator[None]:
        """Restore the current font and size on exit."""
        font_name, font_size = self.font_name, self.font_size
        try:
            yield
        finally:
            self.font_name, self.font_size = font_name, font_size

    @contextmanager
    def font_size_scope(self, size: float) -> Iterator[None]:
        previous = self.font_size
        self.font_size = size
        try:
            yield
        finally:
            self.font_size = previous

    def process_text_options(self, size: float | None, style: str | None, kerning: bool | None) -> tuple[float, bool]:
        """
        Apply base text options to the current font state.

        Must run inside save_font() since it changes the current font.

        Returns:
            Effective (font size, kerning).
        """
        if style and style != "normal":
            self.set_font(None, tuple(style.split("_")))
        if size is not None:
            self.font_size = size
        return self.font_size, self.default_kerning if kerning is None else kerning

    def glyph_present(self, char: str, font_name: str | None = None) -> bool:
        """
        Whether a font can render a character.

        Control characters are never drawn, so they count as present.
        """
        if unicodedata.category(char).startswith("C"):
            return True
        font = pdfmetrics.getFont(font_name or self.font_name)
        if isinstance(font, TTFont):
            return ord(char) in font.face.charToGlyph
        codec = _TYPE1_CODECS.get(getattr(font.encoding, "name", ""))
        if codec is None:
            return True
        try:
            char.encode(codec)
        except UnicodeEncodeError:
            return False
        return True

    def normalize_encoding(self, text: str) -> str:
        """
        Normalize text for the current font.

        Text is NFC-composed; characters a standard (Type 1) font cannot encode
        are replaced with "?".
        """
        text = unicodedata.normalize("NFC", text)
        font = pdfmetrics.getFont(self.font_name)
        if isinstance(font, TTFont):
            return text
        codec = _TYPE1_CODECS.get(getattr(font.encoding, "name", ""))
        if codec is None:
            return text
        normalized = text.encode(codec, errors="replace").decode(codec)
        if normalized != text:
            logger.warning(f"Replaced characters {self.font_name} cannot encode in {text!r}")
        return normalized

    def width_of(
        self,
        text: str,
        font_name: str | None = None,
        size: float | None = None,
        character_spacing: float | None = None,
    ) -> float:
        """Advance width of text, including character spacing after each glyph."""
        font_name = font_name or self.font_name
        size = self.font_size if size is None else size
        spacing = self.character_spacing if character_spacing is None else character_spacing
        return pdfmetrics.stringWidth(text, font_name, size) + spacing * len(text)

    def ascender(self, font_name: str | None = None, size: float | None = None) -> float:
        """Height above the baseline, in points."""
        size = self.font_size if size is None else size
        return pdfmetrics.getAscent(font_name or self.font_name, size)

    def descender(self, font_name: str | None = None, size: float | None = None) -> float:
        """Depth below the baseline as a positive number, in points."""
        size = self.font_size if size is None else size
        return -pdfmetrics.getDescent(font_name or self.font_name, size)

    def line_height(self, font_name: str | None = None, size: float | None = None) -> float:
        size = self.font_size if size is None else size
        glyph_height = self.ascender(font_name, size) + self.descender(font_name, size)
        return max(size * LINE_HEIGHT_RATIO, glyph_height)

    # ========================================================================
    # Scoped drawing state
    # ========================================================================

    @contextmanager
    def character_spacing_scope(self, spacing: float) -> Iterator[None]:
        previous = self.character_spacing
        self.character_spacing = spacing
        try:
            yield
        finally:
            self.character_spacing = previous

    @contextmanager
    def rendering_mode_scope(self, mode: RenderMode) -> Iterator[None]:
        if mode not in RENDER_MODES:
            raise ValueError(f"Unknown text rendering mode: {mode}")
        previous = self.text_rendering_mode
        self.text_rendering_mode = mode
        try:
            yield
        finally:
            self.text_rendering_mode = previous

    @contextmanager
    def word_spacing_scope(self, spacing: float) -> Iterator[None]:
        previous = self.word_spacing
        self.word_spacing = spacing
        try:
            yield
        finally:
            self.word_spacing = previous

    @contextmanager
    def fill_color(self, color: ColorSpec | None) -> Iterator[None]:
        """Fill and stroke with a color. A None color leaves the canvas alone."""
        if color is None:
            yield
            return
        self.canvas.saveState()
        try:
            rl_color = to_color(color)
            self.canvas.setFillColor(rl_color)
            self.canvas.setStrokeColor(rl_color)
            yield
        finally:
            self.canvas.restoreState()

    @contextmanager
    def rotate(self, degrees: float, origin: Point) -> Iterator[None]:
        """Rotate the coordinate system counter-clockwise about a point."""
        x, y = origin
        self.canvas.saveState()
        try:
            self.canvas.translate(x, y)
            self.canvas.rotate(degrees)
            self.canvas.translate(-x, -y)
            yield
        finally:
            self.canvas.restoreState()

    # ========================================================================
    # Drawing
    # ========================================================================

    def draw_text(self, text: str, at: Point, kerning: bool = True) -> None:
        """
        Draw text with the current font, size, spacing and rendering mode.

        ReportLab draws without pair kerning, so kerning is accepted only for
        interface compatibility.
        """
        x, y = at
        self.canvas.saveState()
        try:
            self.canvas.setFont(self.font_name, self.font_size)
            self.canvas.drawString(
                x,
                y,
                text,
                mode=RENDER_MODES[self.text_rendering_mode],
                charSpace=self.character_spacing,
                wordSpace=self.word_spacing or None,
            )
        finally:
            self.canvas.restoreState()

    def stroke_line(self, points: Sequence[Point]) -> None:
        (x1, y1), (x2, y2) = points[0], points[-1]
        self.canvas.saveState()
        try:
            self.canvas.setLineWidth(self.line_width)
            self.canvas.line(x1, y1, x2, y2)
        finally:
            self.canvas.restoreState()

    def link_annotation(self, box: BoundingBox, url: str) -> None:
        """Borderless link from a rectangle to a URL."""
        self.canvas.linkURL(url, box, relative=1, thickness=0)

    def anchor_annotation(self, box: BoundingBox, destination: str) -> None:
        """Borderless link from a rectangle to a named destination."""
        self.canvas.linkRect("", destination, box, relative=1, thickness=0)
