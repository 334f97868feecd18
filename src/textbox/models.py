"""Data models for styled runs, positioned fragments and render state."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Mapping

from textbox.errors import ConfigurationError
from textbox.types import BoundingBox, ColorSpec, Point

STYLE_TAGS = frozenset({"bold", "italic", "underline", "strikethrough", "subscript", "superscript"})

# Subscript/superscript sizing, as a fraction of the run's font size
SCRIPT_SIZE_RATIO = 0.583
SUPERSCRIPT_RISE = 0.33
SUBSCRIPT_DROP = 0.24

UNDERLINE_OFFSET = 1.25
STRIKETHROUGH_RATIO = 0.3


@dataclass(frozen=True)
class StyledRun:
    """
    A span of text sharing one style set.

    Attributes:
        text: The text content.
        styles: Style flags (bold, italic, underline, strikethrough, subscript, superscript).
        size: Font size in points. None means the box's size.
        character_spacing: Extra space between glyphs. None means the box's spacing.
        font: Font or font family name. None means the document's current font.
        color: RGB tuple in 0-1 range or hex string.
        link: URL to link the printed text to.
        anchor: Named destination to link the printed text to.
        callbacks: Objects with optional render_behind/render_in_front methods.
    """
    text: str
    styles: frozenset[str] = frozenset()
    size: float | None = None
    character_spacing: float | None = None
    font: str | None = None
    color: ColorSpec | None = None
    link: str | None = None
    anchor: str | None = None
    callbacks: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        unknown = set(self.styles) - STYLE_TAGS
        if unknown:
            raise ConfigurationError(f"Unknown style(s): {', '.join(sorted(unknown))}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StyledRun":
        """
        Build a run from a mapping such as {"text": "hi", "styles": ["bold"]}.

        A "callback" key may hold one callback object or a list of them.
        """
        callbacks = data.get("callback", data.get("callbacks", ()))
        if callbacks is None:
            callbacks = ()
        elif not isinstance(callbacks, (list, tuple)):
            callbacks = (callbacks,)

        color = data.get("color")
        if isinstance(color, list):
            color = tuple(color)

        return cls(
            text=str(data.get("text", "")),
            styles=frozenset(data.get("styles") or ()),
            size=data.get("size"),
            character_spacing=data.get("character_spacing"),
            font=data.get("font"),
            color=color,
            link=data.get("link"),
            anchor=data.get("anchor"),
            callbacks=tuple(callbacks),
        )

    def with_text(self, text: str, **changes: Any) -> "StyledRun":
        """Copy of this run carrying different text (and optionally other changes)."""
        return replace(self, text=text, **changes)


def coerce_runs(runs: Iterable[StyledRun | Mapping[str, Any]]) -> tuple[StyledRun, ...]:
    """Copy a caller-supplied run list into an immutable tuple of StyledRuns."""
    return tuple(run if isinstance(run, StyledRun) else StyledRun.from_dict(run) for run in runs)


@dataclass
class Fragment:
    """
    A positioned, single-font slice of a run, ready to draw.

    left and baseline are page coordinates filled in by the box when the
    fragment is placed.
    """
    text: str
    font: str
    size: float
    styles: frozenset[str] = frozenset()
    width: float = 0.0
    ascender: float = 0.0
    descender: float = 0.0
    y_offset: float = 0.0
    left: float = 0.0
    baseline: float = 0.0
    word_spacing: float = 0.0
    character_spacing: float = 0.0
    color: ColorSpec | None = None
    link: str | None = None
    anchor: str | None = None
    callbacks: tuple[Any, ...] = ()
    run: StyledRun | None = None
    """The (fallback-split) run this fragment was cut from."""

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def top(self) -> float:
        return self.baseline + self.ascender

    @property
    def bottom(self) -> float:
        return self.baseline - self.descender

    @property
    def underline_points(self) -> tuple[Point, Point]:
        y = self.baseline - UNDERLINE_OFFSET
        return ((self.left, y), (self.right, y))

    @property
    def strikethrough_points(self) -> tuple[Point, Point]:
        y = self.baseline + self.ascender * STRIKETHROUGH_RATIO
        return ((self.left, y), (self.right, y))

    @property
    def bounding_box(self) -> BoundingBox:
        return (self.left, self.bottom, self.right, self.top)

    def space_count(self) -> int:
        return self.text.count(" ")


class RenderPhase(Enum):
    """States visited by one render pass, in order."""

    CONFIGURING = "configuring"
    ENCODING = "encoding"
    SIZING = "sizing"
    VERTICAL_ALIGNING = "vertical_aligning"
    INKING = "inking"
    SETTLED = "settled"


@dataclass
class RenderState:
    """Mutable state of one render pass. Created fresh by every render()."""

    at: Point
    height: float
    font_size: float = 0.0
    kerning: bool = True
    baseline_y: float = 0.0
    line_height: float = 0.0
    ascender: float = 0.0
    descender: float = 0.0
    inked: bool = False
    everything_printed: bool = False
    nothing_printed: bool = True
    printed_runs: list[StyledRun] = field(default_factory=list)
    unprinted_runs: list[StyledRun] = field(default_factory=list)
    consumed_height: float = 0.0
    """Height the last wrap pass reported using."""
    font_sizes_tried: list[float] = field(default_factory=list)
    phase: RenderPhase = RenderPhase.CONFIGURING

    def reset_lines(self) -> None:
        """Forget line metrics from a previous wrap pass."""
        self.baseline_y = 0.0
        self.line_height = 0.0
        self.ascender = 0.0
        self.descender = 0.0
        self.everything_printed = False
        self.nothing_printed = True
        self.printed_runs = []
        self.unprinted_runs = []
        self.consumed_height = 0.0
