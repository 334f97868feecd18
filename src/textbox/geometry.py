"""Placement math for text boxes: alignment, baselines, rotation pivots."""

from textbox.config import FIT_TOLERANCE
from textbox.types import Align, Direction, Point, RotatePivot, VerticalAlign


def line_origin_x(at: Point, width: float, line_width: float, align: Align, direction: Direction) -> float:
    """
    Left edge of a line inside the box.

    Justified text starts at the reading edge: left for ltr, right for rtl.

    Args:
        at: Upper-left corner of the box.
        width: Box width.
        line_width: Measured width of the whole line.
        align: Horizontal alignment.
        direction: Text direction.

    Returns:
        X coordinate where the line starts.
    """
    left = at[0]
    if align == "left" or (align == "justify" and direction == "ltr"):
        return left
    if align == "center":
        return left + width * 0.5 - line_width * 0.5
    # right, or justify in rtl
    return left + width - line_width


def fragment_position(
    at: Point,
    width: float,
    line_width: float,
    accumulated_width: float,
    baseline_y: float,
    y_offset: float,
    align: Align,
    direction: Direction,
) -> Point:
    """
    Page position of a fragment's baseline origin.

    Args:
        at: Upper-left corner of the box.
        width: Box width.
        line_width: Measured width of the fragment's line.
        accumulated_width: Width of the fragments before it on the line.
        baseline_y: Baseline of the line, relative to the top of the box (<= 0).
        y_offset: Fragment's own vertical shift (superscript/subscript).
        align: Horizontal alignment.
        direction: Text direction.
    """
    x = line_origin_x(at, width, line_width, align, direction) + accumulated_width
    y = at[1] + baseline_y + y_offset
    return (x, y)


def next_baseline(baseline_y: float, ascender: float, line_height: float, leading: float) -> float:
    """
    Baseline of the next line.

    The first line (baseline 0) sits one ascender below the top; every later
    line moves down by line height plus leading.
    """
    if baseline_y == 0:
        return -ascender
    return baseline_y - (line_height + leading)


def line_fits(
    baseline_y: float,
    ascender: float,
    descender: float,
    line_height: float,
    leading: float,
    height: float,
) -> bool:
    """Whether a line with these metrics still fits above the bottom of the box."""
    if baseline_y == 0:
        needed = ascender + descender
    else:
        needed = descender + line_height + leading
    return abs(baseline_y) + needed <= height + FIT_TOLERANCE


def vertical_shift(valign: VerticalAlign, box_height: float, consumed_height: float) -> float:
    """
    Change to the box's top edge so the printed text sits at valign.

    Returns:
        Amount to add to at.y (zero or negative).
    """
    if valign == "center":
        return -(box_height - consumed_height) * 0.5
    if valign == "bottom":
        return -(box_height - consumed_height)
    return 0.0


def rotation_pivot(at: Point, width: float, height: float, pivot: RotatePivot) -> Point:
    """
    Point the box rotates around.

    upper_left is the box origin; the others are the remaining corners and the
    center of the box rectangle.
    """
    x, y = at
    if pivot == "center":
        return (x + width * 0.5, y - height * 0.5)
    if pivot == "upper_right":
        return (x + width, y)
    if pivot == "lower_right":
        return (x + width, y - height)
    if pivot == "lower_left":
        return (x, y - height)
    return (x, y)
