"""Line wrapping: turns styled runs into positioned fragments, line by line."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Protocol, Sequence

from textbox.config import FIT_TOLERANCE
from textbox.errors import CannotFit
from textbox.models import SCRIPT_SIZE_RATIO, SUBSCRIPT_DROP, SUPERSCRIPT_RISE, Fragment, StyledRun

if TYPE_CHECKING:
    from textbox.box import TextBox

logger = logging.getLogger(__name__)

_TOKEN_PATTERN = re.compile(r"\n| +|[^ \n]+")


@dataclass
class WrapResult:
    """Outcome of one wrap pass."""

    unprinted: list[StyledRun]
    everything_fit: bool
    consumed_height: float
    fragments: list[Fragment] = field(default_factory=list)


class WrapEngine(Protocol):
    """
    The wrap capability a TextBox drives.

    An engine breaks runs into lines, asks the box whether each line fits
    (box.fits_line), moves the box baseline (box.move_baseline_down) and
    places every fragment through box.draw_fragment, in reading order. It
    must be safe to call repeatedly on the same runs.

    The box records the returned everything_fit and consumed_height as its
    everything_printed and height.
    """

    def wrap(self, box: TextBox, runs: Sequence[StyledRun]) -> WrapResult: ...


@dataclass
class _Token:
    """A word, a run of spaces or a hard line break, measured in its run's font."""

    run: StyledRun
    kind: str  # "word", "space" or "newline"
    text: str
    font: str
    size: float
    character_spacing: float
    width: float
    ascender: float
    descender: float
    line_height: float
    y_offset: float


@dataclass
class _Line:
    tokens: list[_Token]
    metric_tokens: list[_Token]
    end: int
    ends_paragraph: bool
    split: tuple[int, _Token] | None = None
    """Index and remainder of a word broken at the end of this line."""

    @property
    def ascender(self) -> float:
        return max((t.ascender for t in self.metric_tokens), default=0.0)

    @property
    def descender(self) -> float:
        return max((t.descender for t in self.metric_tokens), default=0.0)

    @property
    def line_height(self) -> float:
        return max((t.line_height for t in self.metric_tokens), default=0.0)


class LineWrap:
    """
    Greedy line wrapping at spaces, breaking inside a word only when the word
    alone is wider than the box.
    """

    def wrap(self, box: TextBox, runs: Sequence[StyledRun]) -> WrapResult:
        tokens = self.tokenize(box, runs)
        width = box.available_width
        fragments: list[Fragment] = []
        position = 0
        lines = 0

        while position < len(tokens):
            line = self.break_line(box, tokens, position, width)
            if not box.fits_line(line.ascender, line.descender, line.line_height):
                break
            box.move_baseline_down(line.ascender, line.descender, line.line_height)
            if line.split is not None:
                index, tail = line.split
                tokens[index] = tail
            fragments.extend(self.draw_line(box, line))
            position = line.end
            lines += 1
            if box.single_line:
                break

        unprinted = self.remaining_runs(tokens, position)
        logger.debug(f"Wrapped {lines} line(s), {len(fragments)} fragment(s), {len(unprinted)} run(s) left")
        return WrapResult(
            unprinted=unprinted,
            everything_fit=not unprinted,
            consumed_height=abs(box.state.baseline_y - box.state.descender) if lines else 0.0,
            fragments=fragments,
        )

    # ========================================================================
    # Tokenizing and measuring
    # ========================================================================

    def tokenize(self, box: TextBox, runs: Sequence[StyledRun]) -> list[_Token]:
        document = box.document
        tokens: list[_Token] = []
        for run in runs:
            if not run.text:
                continue
            size = run.size if run.size is not None else box.state.font_size
            y_offset = 0.0
            if "superscript" in run.styles:
                y_offset = size * SUPERSCRIPT_RISE
                size *= SCRIPT_SIZE_RATIO
            elif "subscript" in run.styles:
                y_offset = -size * SUBSCRIPT_DROP
                size *= SCRIPT_SIZE_RATIO
            spacing = run.character_spacing if run.character_spacing is not None else document.character_spacing

            with document.font(run.font, run.styles) as face:
                ascender = document.ascender(face, size)
                descender = document.descender(face, size)
                line_height = document.line_height(face, size)
                for match in _TOKEN_PATTERN.finditer(run.text):
                    text = match.group(0)
                    kind = "newline" if text == "\n" else "space" if text.startswith(" ") else "word"
                    tokens.append(_Token(
                        run=run,
                        kind=kind,
                        text=text,
                        font=face,
                        size=size,
                        character_spacing=spacing,
                        width=0.0 if kind == "newline" else document.width_of(text, face, size, spacing),
                        ascender=ascender,
                        descender=descender,
                        line_height=line_height,
                        y_offset=y_offset,
                    ))
        return tokens

    def split_word(self, box: TextBox, token: _Token, available: float) -> tuple[_Token | None, _Token]:
        """Longest prefix of a word that fits in available width, and the rest."""
        document = box.document
        fit = 0
        for end in range(1, len(token.text) + 1):
            width = document.width_of(token.text[:end], token.font, token.size, token.character_spacing)
            if width > available + FIT_TOLERANCE:
                break
            fit = end
        if fit == 0:
            return None, token
        head_text, tail_text = token.text[:fit], token.text[fit:]
        head = replace(token, text=head_text, width=document.width_of(head_text, token.font, token.size, token.character_spacing))
        tail = replace(token, text=tail_text, width=document.width_of(tail_text, token.font, token.size, token.character_spacing))
        return head, tail

    # ========================================================================
    # Line breaking
    # ========================================================================

    def break_line(self, box: TextBox, tokens: list[_Token], start: int, width: float) -> _Line:
        """
        Collect the tokens of one line starting at start.

        A word wider than the whole line is split by character, with the
        remainder carried on the returned line. Trailing spaces are consumed but
        not printed.

        Raises:
            CannotFit: If not even the first glyph of a line fits.
        """
        line: list[_Token] = []
        metric_tokens: list[_Token] = []
        used = 0.0
        i = start
        has_word = False

        while i < len(tokens):
            token = tokens[i]
            if token.kind == "newline":
                metric_tokens.append(token)
                return self._finish_line(line, metric_tokens, i + 1, True)
            if token.kind == "space":
                line.append(token)
                metric_tokens.append(token)
                used += token.width
                i += 1
                continue
            if used + token.width <= width + FIT_TOLERANCE:
                line.append(token)
                metric_tokens.append(token)
                used += token.width
                has_word = True
                i += 1
                continue
            if has_word:
                return self._finish_line(line, metric_tokens, i, False)

            head, tail = self.split_word(box, token, width - used)
            if head is None:
                if line:
                    return self._finish_line(line, metric_tokens, i, False)
                raise CannotFit(
                    f"Box width {width:.2f} is too narrow for '{token.text[0]}' "
                    f"in {token.font} at {token.size:.1f}pt"
                )
            line.append(head)
            metric_tokens.append(head)
            finished = self._finish_line(line, metric_tokens, i, False)
            finished.split = (i, tail)
            return finished

        return self._finish_line(line, metric_tokens, i, True)

    @staticmethod
    def _finish_line(line: list[_Token], metric_tokens: list[_Token], end: int, ends_paragraph: bool) -> _Line:
        while line and line[-1].kind == "space":
            line.pop()
        return _Line(tokens=line, metric_tokens=metric_tokens, end=end, ends_paragraph=ends_paragraph)

    # ========================================================================
    # Placing
    # ========================================================================

    def arrange(self, line: _Line) -> list[Fragment]:
        """Merge a line's tokens into one fragment per consecutive run."""
        fragments: list[Fragment] = []
        for token in line.tokens:
            if fragments and fragments[-1].run is token.run:
                fragments[-1].text += token.text
                fragments[-1].width += token.width
                continue
            run = token.run
            fragments.append(Fragment(
                text=token.text,
                font=token.font,
                size=token.size,
                styles=run.styles,
                width=token.width,
                ascender=token.ascender,
                descender=token.descender,
                y_offset=token.y_offset,
                character_spacing=token.character_spacing,
                color=run.color,
                link=run.link,
                anchor=run.anchor,
                callbacks=run.callbacks,
                run=run,
            ))
        return fragments

    def draw_line(self, box: TextBox, line: _Line) -> list[Fragment]:
        fragments = self.arrange(line)
        for fragment in fragments:
            box.state.printed_runs.append(fragment.run.with_text(fragment.text))

        line_width = sum(f.width for f in fragments)
        word_spacing = 0.0
        if box.align == "justify" and not line.ends_paragraph:
            spaces = sum(f.space_count() for f in fragments)
            if spaces:
                word_spacing = (box.available_width - line_width) / spaces
                for fragment in fragments:
                    fragment.width += word_spacing * fragment.space_count()
                    fragment.word_spacing = word_spacing
                line_width = sum(f.width for f in fragments)

        if box.direction == "rtl":
            fragments.reverse()
            for fragment in fragments:
                fragment.text = fragment.text[::-1]

        accumulated = 0.0
        for fragment in fragments:
            box.draw_fragment(fragment, accumulated, line_width, word_spacing)
            accumulated += fragment.width
        return fragments

    # ========================================================================
    # Leftovers
    # ========================================================================

    @staticmethod
    def remaining_runs(tokens: list[_Token], position: int) -> list[StyledRun]:
        """Rebuild unprinted runs from the tokens after position."""
        rest = tokens[position:]
        if position > 0 and tokens[position - 1].kind != "newline":
            while rest and rest[0].kind == "space":
                rest = rest[1:]

        runs: list[StyledRun] = []
        current: StyledRun | None = None
        parts: list[str] = []
        for token in rest:
            if token.run is not current:
                if parts and current is not None:
                    runs.append(current.with_text("".join(parts)))
                current = token.run
                parts = []
            parts.append(token.text)
        if parts and current is not None:
            runs.append(current.with_text("".join(parts)))
        return runs
