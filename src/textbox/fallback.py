"""Per-glyph font selection for glyphs the run's font lacks."""

import logging
from typing import Iterable, Sequence

from textbox.document import Document
from textbox.models import StyledRun

logger = logging.getLogger(__name__)


class FallbackResolver:
    """
    Splits runs so every sub-run prints in one font that has all its glyphs.

    For each character the candidates are tried in order: the run's own font,
    then each fallback font, then the run's font again as the unconditional
    last resort. Consecutive characters that land on the same font are merged.
    """

    def __init__(self, document: Document, fallback_fonts: Sequence[str]) -> None:
        self.document = document
        self.fallback_fonts = list(fallback_fonts)

    def process(self, runs: Iterable[StyledRun]) -> list[StyledRun]:
        """Split every run; an empty fallback list returns the runs unchanged."""
        runs = list(runs)
        if not self.fallback_fonts:
            return runs

        split: list[StyledRun] = []
        for run in runs:
            split.extend(self.split_run(run))
        return split

    def split_run(self, run: StyledRun) -> list[StyledRun]:
        """Split one run into single-font sub-runs, preserving every other attribute."""
        if not self.fallback_fonts:
            return [run]

        with self.document.save_font():
            run_font = self.document.set_font(run.font, run.styles)
            candidates = [*self.fallback_fonts, run_font]
            pairs = [(self.find_font(char, run_font, candidates), char) for char in run.text]

        sub_runs = self.group_pairs(pairs, run)
        if len(sub_runs) > 1:
            logger.debug(f"Split run {run.text!r} into {len(sub_runs)} fallback sub-runs")
        return sub_runs

    def find_font(self, char: str, current_font: str, candidates: Sequence[str]) -> str:
        """
        First font among current_font and candidates that has the glyph.

        Each step consumes one candidate, so the loop ends after at most
        len(candidates) steps; the last candidate is taken unconditionally.
        """
        font = current_font
        remaining = list(candidates)
        while remaining and not self.document.glyph_present(char, font):
            font = self.document.set_font(remaining.pop(0))
        return font

    @staticmethod
    def group_pairs(pairs: Sequence[tuple[str, str]], run: StyledRun) -> list[StyledRun]:
        """Merge consecutive (font, char) pairs sharing a font into sub-runs."""
        sub_runs: list[StyledRun] = []
        current_font = None
        chars: list[str] = []
        for font, char in pairs:
            if font != current_font:
                if chars:
                    sub_runs.append(run.with_text("".join(chars), font=current_font))
                current_font = font
                chars = [char]
            else:
                chars.append(char)
        if chars:
            sub_runs.append(run.with_text("".join(chars), font=current_font))
        return sub_runs
