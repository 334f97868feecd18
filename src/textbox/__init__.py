"""Styled text boxes for ReportLab: font fallback, overflow handling, alignment and rotation."""

__version__ = "0.1.0"

from textbox.box import TextBox, formatted_text_box, text_box
from textbox.config import BoxConfig
from textbox.document import Bounds, Document
from textbox.errors import BadFontFamily, CannotFit, ConfigurationError, TextBoxError, UnknownOption
from textbox.fallback import FallbackResolver
from textbox.fonts import register_font_family, register_fonts, resolve_font
from textbox.models import Fragment, RenderPhase, StyledRun
from textbox.wrap import LineWrap, WrapResult

__all__ = [
    "TextBox",
    "formatted_text_box",
    "text_box",
    "BoxConfig",
    "Bounds",
    "Document",
    "TextBoxError",
    "ConfigurationError",
    "UnknownOption",
    "BadFontFamily",
    "CannotFit",
    "FallbackResolver",
    "register_fonts",
    "register_font_family",
    "resolve_font",
    "Fragment",
    "RenderPhase",
    "StyledRun",
    "LineWrap",
    "WrapResult",
]
