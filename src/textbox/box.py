"""Text boxes: lay styled runs out inside a rectangle and draw them."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Sequence

from textbox.config import build_config
from textbox.document import Document
from textbox.fallback import FallbackResolver
from textbox.geometry import fragment_position, line_fits, next_baseline, rotation_pivot, vertical_shift
from textbox.models import Fragment, RenderPhase, RenderState, StyledRun, coerce_runs
from textbox.overflow import resolve_overflow, shrink_to_fit
from textbox.types import Point
from textbox.wrap import LineWrap, WrapEngine

logger = logging.getLogger(__name__)

# Style tags stroked over the glyphs, with the Fragment property giving each stroke
DECORATION_LINES = (
    ("underline", "underline_points"),
    ("strikethrough", "strikethrough_points"),
)


class TextBox:
    """
    Draws formatted text into a box.

    Text that does not fit is truncated, or the font shrinks to fit, depending
    on the overflow option. Boxes are independent of any document cursor.

    Construct with the runs and options, then call render(). A dry run
    (render(dry_run=True)) does everything except drawing, which allows
    look-ahead queries of height and unprinted text.

        box = TextBox([{"text": "hello "}, {"text": "world", "styles": ["bold"]}],
                      document=doc, at=(72, 720), width=200, height=50)
        leftover = box.render()

    Replace the line wrapping by passing any object with a
    wrap(box, runs) -> WrapResult method as wrap=.
    """

    def __init__(
        self,
        runs: Iterable[StyledRun | Mapping[str, Any]],
        document: Document,
        wrap: WrapEngine | None = None,
        **options: Any,
    ) -> None:
        """
        Initialize text box.

        Args:
            runs: Styled runs (StyledRun objects or mappings) to print.
            document: Document providing fonts, defaults and drawing.
            wrap: Wrap engine. Defaults to LineWrap.
            **options: Box options, see BoxConfig.

        Raises:
            UnknownOption: If an option key is not recognised.
            ConfigurationError: If an option value is invalid.
        """
        self.config = build_config(options)
        self.document = document
        self.wrap_engine: WrapEngine = wrap or LineWrap()
        self._original_runs = coerce_runs(runs)

        config = self.config
        bounds = document.bounds
        self.direction = config.direction or document.text_direction
        self.fallback_fonts = list(config.fallback_fonts if config.fallback_fonts is not None else document.fallback_fonts)
        self.at: Point = config.at if config.at is not None else (bounds.left, bounds.top)
        self.width = config.width if config.width is not None else max(0.0, bounds.right - self.at[0])
        self.overflow, self.box_height = resolve_overflow(config.overflow, config.height, document, self.at)
        self.align = config.align or ("right" if self.direction == "rtl" else "left")
        self.valign = config.valign
        self.leading = config.leading if config.leading is not None else document.default_leading
        self.character_spacing = (
            config.character_spacing if config.character_spacing is not None else document.character_spacing
        )
        self.mode = config.mode or document.text_rendering_mode
        self.rotate = config.rotate
        self.rotate_around = config.rotate_around
        self.single_line = config.single_line
        self.skip_encoding = config.skip_encoding if config.skip_encoding is not None else document.skip_encoding
        self.min_font_size = config.min_font_size

        self.state = RenderState(at=self.at, height=self.box_height)

    # ========================================================================
    # Rendering
    # ========================================================================

    def render(self, dry_run: bool = False) -> list[StyledRun]:
        """
        Render the text into the box.

        Args:
            dry_run: Run every step except drawing.

        Returns:
            Runs holding the text that did not print (empty if everything fit).

        Raises:
            BadFontFamily: If a styled run's font has no registered family.
            CannotFit: If the box is too narrow for a single glyph.
        """
        document = self.document
        self.state = state = RenderState(at=self.at, height=self.box_height)

        with document.save_font(), \
                document.character_spacing_scope(self.character_spacing), \
                document.rendering_mode_scope(self.mode):
            self._enter(RenderPhase.CONFIGURING)
            state.font_size, state.kerning = document.process_text_options(
                self.config.size, self.config.style, self.config.kerning
            )

            self._enter(RenderPhase.ENCODING)
            runs = list(self._original_runs) if self.skip_encoding else self.normalize_encoding()

            with document.font_size_scope(state.font_size):
                if self.overflow == "shrink_to_fit":
                    self._enter(RenderPhase.SIZING)
                    shrink_to_fit(self, runs, self.min_font_size)

                self._enter(RenderPhase.VERTICAL_ALIGNING)
                self.process_vertical_alignment(runs)

                self._enter(RenderPhase.INKING)
                state.inked = not dry_run
                try:
                    if self.rotate != 0 and state.inked:
                        unprinted = self.render_rotated(runs)
                    else:
                        unprinted = self.wrap(runs)
                finally:
                    state.inked = False

        self._enter(RenderPhase.SETTLED)
        return unprinted

    def wrap(self, runs: Sequence[StyledRun]) -> list[StyledRun]:
        """Run one wrap pass from the top of the box and record its outcome."""
        state = self.state
        state.reset_lines()
        result = self.wrap_engine.wrap(self, runs)
        state.unprinted_runs = list(result.unprinted)
        state.everything_printed = result.everything_fit
        state.consumed_height = result.consumed_height
        state.nothing_printed = not state.printed_runs
        return list(result.unprinted)

    def render_rotated(self, runs: Sequence[StyledRun]) -> list[StyledRun]:
        pivot = rotation_pivot(self.state.at, self.width, self.state.height, self.rotate_around)
        with self.document.rotate(self.rotate, pivot):
            return self.wrap(runs)

    def process_vertical_alignment(self, runs: Sequence[StyledRun]) -> None:
        """Measure once at the nominal height, then move the top edge and shrink to fit the text."""
        if self.valign == "top":
            return
        state = self.state
        self.wrap(runs)
        consumed = self.height
        x, y = state.at
        state.at = (x, y + vertical_shift(self.valign, state.height, consumed))
        state.height = consumed

    def normalize_encoding(self) -> list[StyledRun]:
        """Split runs for fallback fonts, then normalize each run's text for its font."""
        runs = FallbackResolver(self.document, self.fallback_fonts).process(self._original_runs)
        normalized = []
        for run in runs:
            with self.document.font(run.font):
                normalized.append(run.with_text(self.document.normalize_encoding(run.text)))
        return normalized

    def _enter(self, phase: RenderPhase) -> None:
        self.state.phase = phase
        logger.debug(f"Text box render: {phase.value}")

    # ========================================================================
    # Hooks used by wrap engines
    # ========================================================================

    def fits_line(self, ascender: float, descender: float, line_height: float) -> bool:
        state = self.state
        return line_fits(state.baseline_y, ascender, descender, line_height, self.leading, state.height)

    def move_baseline_down(self, ascender: float, descender: float, line_height: float) -> None:
        """Advance to the next line and make its metrics current."""
        state = self.state
        state.ascender = ascender
        state.descender = descender
        state.line_height = line_height
        state.baseline_y = next_baseline(state.baseline_y, ascender, line_height, self.leading)

    def draw_fragment(
        self,
        fragment: Fragment,
        accumulated_width: float = 0,
        line_width: float = 0,
        word_spacing: float = 0,
    ) -> None:
        """
        Place a fragment on the current line and, when inking, draw it.

        Drawing order: behind callbacks, glyphs, underline/strikethrough,
        link, anchor, in-front callbacks.
        """
        state = self.state
        x, y = fragment_position(
            state.at,
            self.width,
            line_width,
            accumulated_width,
            state.baseline_y,
            fragment.y_offset,
            self.align,
            self.direction,
        )
        fragment.left = x
        fragment.baseline = y

        if not state.inked:
            return

        document = self.document
        self.draw_fragment_underlays(fragment)
        with document.font(fragment.font), \
                document.font_size_scope(fragment.size), \
                document.character_spacing_scope(fragment.character_spacing), \
                document.fill_color(fragment.color):
            with document.word_spacing_scope(word_spacing):
                document.draw_text(fragment.text, (x, y), kerning=state.kerning)
            self.draw_fragment_overlay_styles(fragment)
        self.draw_fragment_overlay_link(fragment)
        self.draw_fragment_overlay_anchor(fragment)
        for callback in fragment.callbacks:
            if hasattr(callback, "render_in_front"):
                callback.render_in_front(fragment)

    def draw_fragment_underlays(self, fragment: Fragment) -> None:
        for callback in fragment.callbacks:
            if hasattr(callback, "render_behind"):
                callback.render_behind(fragment)

    def draw_fragment_overlay_styles(self, fragment: Fragment) -> None:
        for style, points in DECORATION_LINES:
            if style in fragment.styles:
                self.document.stroke_line(getattr(fragment, points))

    def draw_fragment_overlay_link(self, fragment: Fragment) -> None:
        if fragment.link:
            self.document.link_annotation(fragment.bounding_box, fragment.link)

    def draw_fragment_overlay_anchor(self, fragment: Fragment) -> None:
        if fragment.anchor:
            self.document.anchor_annotation(fragment.bounding_box, fragment.anchor)

    # ========================================================================
    # Results of the last render
    # ========================================================================

    @property
    def available_width(self) -> float:
        return self.width

    @property
    def height(self) -> float:
        """Height the wrap engine reported for the last render; 0 before any render."""
        return self.state.consumed_height

    @property
    def line_height(self) -> float:
        return self.state.line_height

    @property
    def ascender(self) -> float:
        return self.state.ascender

    @property
    def descender(self) -> float:
        return self.state.descender

    @property
    def line_gap(self) -> float:
        return self.line_height - (self.ascender + self.descender)

    @property
    def text(self) -> list[StyledRun]:
        """Runs holding the text that printed (or would have, for a dry run)."""
        return list(self.state.printed_runs)

    @property
    def nothing_printed(self) -> bool:
        return self.state.nothing_printed

    @property
    def everything_printed(self) -> bool:
        return self.state.everything_printed


def formatted_text_box(
    document: Document,
    runs: Iterable[StyledRun | Mapping[str, Any]],
    **options: Any,
) -> list[StyledRun]:
    """
    Draw styled runs in a box.

    Returns:
        Runs holding the text that did not print.
    """
    return TextBox(runs, document=document, **options).render()


def text_box(document: Document, text: str, **options: Any) -> list[StyledRun]:
    """
    Draw a plain string in a box, using the box's base font options.

    Returns:
        Runs holding the text that did not print.
    """
    return formatted_text_box(document, [StyledRun(text)], **options)
