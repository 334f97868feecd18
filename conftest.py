"""Shared fixtures: a ReportLab canvas in memory and a document that records what it draws."""

import io

import pytest
from reportlab.pdfgen.canvas import Canvas

from textbox.document import Bounds, Document

PAGE_SIZE = (612.0, 792.0)
MARGIN = 36.0


class RecordingDocument(Document):
    """
    Document that logs every drawing call, in order, to self.calls.

    missing_glyphs maps a font name to characters that font pretends to lack.
    """

    def __init__(self, *args, missing_glyphs=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = []
        self.missing_glyphs = missing_glyphs or {}

    def glyph_present(self, char, font_name=None):
        if char in self.missing_glyphs.get(font_name or self.font_name, ""):
            return False
        return super().glyph_present(char, font_name)

    def draw_text(self, text, at, kerning=True):
        self.calls.append((
            "draw_text",
            {
                "text": text,
                "at": at,
                "font": self.font_name,
                "size": self.font_size,
                "character_spacing": self.character_spacing,
                "word_spacing": self.word_spacing,
                "mode": self.text_rendering_mode,
            },
        ))
        super().draw_text(text, at, kerning)

    def stroke_line(self, points):
        self.calls.append(("stroke_line", points))
        super().stroke_line(points)

    def link_annotation(self, box, url):
        self.calls.append(("link", url))
        super().link_annotation(box, url)

    def anchor_annotation(self, box, destination):
        self.calls.append(("anchor", destination))
        super().anchor_annotation(box, destination)

    def rotate(self, degrees, origin):
        self.calls.append(("rotate", degrees, origin))
        return super().rotate(degrees, origin)

    def kinds(self):
        return [call[0] for call in self.calls]

    def draws(self):
        return [call[1] for call in self.calls if call[0] == "draw_text"]


class RecordingCallback:
    """Fragment callback that logs into a document's call list."""

    def __init__(self, document):
        self.document = document

    def render_behind(self, fragment):
        self.document.calls.append(("behind", fragment.text))

    def render_in_front(self, fragment):
        self.document.calls.append(("front", fragment.text))


@pytest.fixture
def canvas():
    return Canvas(io.BytesIO(), pagesize=PAGE_SIZE)


@pytest.fixture
def make_document(canvas):
    def factory(**kwargs):
        kwargs.setdefault("bounds", Bounds(MARGIN, MARGIN, PAGE_SIZE[0] - MARGIN, PAGE_SIZE[1] - MARGIN))
        return RecordingDocument(canvas, **kwargs)
    return factory


@pytest.fixture
def document(make_document):
    return make_document()


@pytest.fixture
def callback(document):
    return RecordingCallback(document)
