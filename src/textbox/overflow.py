"""Overflow policies: how much room a box gets and what size its text prints at."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from textbox.config import SHRINK_STEP
from textbox.document import Document
from textbox.models import StyledRun
from textbox.types import Overflow, Point

if TYPE_CHECKING:
    from textbox.box import TextBox

logger = logging.getLogger(__name__)


def default_height(document: Document, at: Point) -> float:
    """
    Height available below at, down to the bottom of the enclosing frame.

    Inside stretchy bounds the frame is the innermost non-stretchy ancestor,
    so the box may grow past the stretchy bounds' current bottom.
    """
    frame = document.bounds.frame()
    return max(0.0, at[1] - frame.bottom)


def resolve_overflow(overflow: Overflow, height: float | None, document: Document, at: Point) -> tuple[Overflow, float]:
    """
    Effective overflow policy and box height.

    expand pins the height to everything available and then behaves like
    truncate, since the box cannot grow any further.

    Returns:
        (overflow, height)
    """
    if overflow == "expand":
        return "truncate", default_height(document, at)
    if height is None:
        return overflow, default_height(document, at)
    return overflow, height


def shrink_to_fit(box: TextBox, runs: Sequence[StyledRun], min_font_size: float) -> float:
    """
    Reduce the box's font size until the runs fit or min_font_size is reached.

    Every size tried is measured with a dry wrap pass and recorded in
    box.state.font_sizes_tried. Text that still overflows at min_font_size is
    left for the real pass to truncate.

    A CannotFit raised by a pass ends the loop: a glyph wider than the box at
    the starting size fails the first pass, even if a smaller size would fit.
    Use a smaller base size for boxes that narrow.

    Returns:
        The final font size.

    Raises:
        CannotFit: If a pass cannot place a single glyph on a line.
    """
    state = box.state
    document = box.document

    if state.font_size < min_font_size:
        state.font_size = min_font_size
        document.font_size = min_font_size

    state.font_sizes_tried.append(state.font_size)
    box.wrap(runs)
    while not state.everything_printed and state.font_size > min_font_size:
        state.font_size = max(state.font_size - SHRINK_STEP, min_font_size)
        document.font_size = state.font_size
        state.font_sizes_tried.append(state.font_size)
        box.wrap(runs)

    logger.debug(
        f"Shrink to fit settled at {state.font_size}pt after {len(state.font_sizes_tried)} pass(es)"
        f"{'' if state.everything_printed else ', text still overflows'}"
    )
    return state.font_size
