"""Box configuration loading and validation."""

import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from textbox.errors import ConfigurationError, UnknownOption
from textbox.types import Align, Direction, Overflow, RenderMode, RotatePivot, VerticalAlign

DEFAULT_FONT = "Helvetica"
DEFAULT_FONT_SIZE = 12.0
DEFAULT_MIN_FONT_SIZE = 5.0
SHRINK_STEP = 0.5
"""Font size decrement per shrink-to-fit iteration, in points."""

LINE_HEIGHT_RATIO = 1.2
"""Line height as a multiple of font size (ReportLab's default leading)."""

FIT_TOLERANCE = 0.0001


class BoxConfig(BaseModel):
    """
    Settings for one text box.

    Every field left as None is resolved from the document at construction
    time (bounds, direction, leading, character spacing, ...).
    """

    model_config = ConfigDict(extra="forbid", frozen=True, allow_inf_nan=False)

    # ========================================================================
    # Footprint
    # ========================================================================
    at: tuple[float, float] | None = None
    """Upper-left corner of the box. Default: upper-left of the document bounds."""

    width: float | None = Field(default=None, ge=0)
    """Box width. Default: from `at` to the right edge of the bounds."""

    height: float | None = Field(default=None, ge=0)
    """Box height. Default: from `at` to the bottom of the enclosing frame."""

    # ========================================================================
    # Alignment
    # ========================================================================
    align: Align | None = None
    """Horizontal alignment. Default: "right" for rtl text, otherwise "left"."""

    valign: VerticalAlign = "top"
    """Vertical alignment of the printed text inside the box."""

    direction: Direction | None = None
    """Text direction. Default: the document's text direction."""

    rotate: float = 0.0
    """Rotation in degrees, counter-clockwise."""

    rotate_around: RotatePivot = "upper_left"
    """Pivot point for rotation."""

    # ========================================================================
    # Overflow
    # ========================================================================
    overflow: Overflow = "truncate"
    """What to do when the text does not fit the box height."""

    min_font_size: float = Field(default=DEFAULT_MIN_FONT_SIZE, gt=0)
    """Smallest size shrink_to_fit may reduce the font to."""

    single_line: bool = False
    """Print at most one line."""

    # ========================================================================
    # Text options
    # ========================================================================
    leading: float | None = None
    """Extra space between lines. Default: the document's default leading."""

    character_spacing: float | None = None
    """Extra space between glyphs. Default: the document's character spacing."""

    mode: RenderMode | None = None
    """Text rendering mode. Default: the document's rendering mode."""

    fallback_fonts: list[str] | None = None
    """Fonts to try, in order, for glyphs the run's font lacks."""

    skip_encoding: bool | None = None
    """Pass run text to the font untouched."""

    size: float | None = Field(default=None, gt=0)
    """Base font size. Default: the document's font size."""

    style: Literal["normal", "bold", "italic", "bold_italic"] | None = None
    """Base font style applied through the current font family."""

    kerning: bool | None = None
    """Apply kerning. Default: the document's kerning setting."""

    @field_validator("fallback_fonts")
    @classmethod
    def _no_blank_fonts(cls, value: list[str] | None) -> list[str] | None:
        if value is not None and any(not name.strip() for name in value):
            raise ValueError("fallback font names must not be blank")
        return value


VALID_OPTIONS = frozenset(BoxConfig.model_fields)


def verify_options(options: dict[str, Any]) -> None:
    """
    Reject option keys that are not part of the box whitelist.

    Raises:
        UnknownOption: If any key is unrecognised.
    """
    unknown = [key for key in options if key not in VALID_OPTIONS]
    if unknown:
        raise UnknownOption(unknown)


def build_config(options: dict[str, Any]) -> BoxConfig:
    """
    Validate raw box options into a BoxConfig.

    Raises:
        UnknownOption: If any key is unrecognised.
        ConfigurationError: If a value is invalid.
    """
    verify_options(options)
    try:
        return BoxConfig(**options)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


class BoxFile(BaseModel):
    """A text box described in a TOML file, as consumed by the CLI."""

    model_config = ConfigDict(extra="forbid")

    page_size: Literal["letter", "a4"] = "letter"
    margin: float = Field(default=36.0, ge=0)
    font: str = DEFAULT_FONT
    font_size: float = Field(default=DEFAULT_FONT_SIZE, gt=0)
    google_fonts: list[str] = Field(default_factory=list)
    """Font specs like "Noto Sans:400" to download and register before rendering."""

    box: dict[str, Any] = Field(default_factory=dict)
    runs: list[dict[str, Any]] = Field(default_factory=list)


def load_box_file(path: Path) -> BoxFile:
    """
    Load a text box description from a TOML file.

    Args:
        path: Path to the TOML file.

    Returns:
        Validated BoxFile.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ConfigurationError: If the file contents are invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Box file not found: {path}")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e

    try:
        box_file = BoxFile(**data)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e

    verify_options(box_file.box)
    return box_file
