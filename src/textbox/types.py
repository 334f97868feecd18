"""Type aliases used across the textbox package."""

from typing import Literal, Tuple, Union

# Coordinates
Point = Tuple[float, float]  # (x, y) in PDF points, origin bottom-left
BoundingBox = Tuple[float, float, float, float]  # (x0, y0, x1, y1)

# Color types
RGBColor = Tuple[float, float, float]  # RGB color in 0-1 range
ColorSpec = Union[RGBColor, str]  # RGB tuple or hex string like "FF0000"

# Box options
Align = Literal["left", "center", "right", "justify"]
VerticalAlign = Literal["top", "center", "bottom"]
Direction = Literal["ltr", "rtl"]
Overflow = Literal["truncate", "shrink_to_fit", "expand"]
RotatePivot = Literal["center", "upper_left", "upper_right", "lower_left", "lower_right"]

# Text rendering modes, named after the PDF Tr operator values
RenderMode = Literal[
    "fill",
    "stroke",
    "fill_stroke",
    "invisible",
    "fill_clip",
    "stroke_clip",
    "fill_stroke_clip",
    "clip",
]

# Per-run style flags
StyleTag = Literal["bold", "italic", "underline", "strikethrough", "subscript", "superscript"]
