"""Tests for fallback font selection."""

from textbox.fallback import FallbackResolver
from textbox.models import StyledRun


def test_alternating_glyphs_group_into_three_runs(make_document):
    document = make_document(missing_glyphs={"Helvetica": "xy"})
    resolver = FallbackResolver(document, ["Courier"])

    runs = resolver.split_run(StyledRun("abxya", font="Helvetica"))

    assert [run.text for run in runs] == ["ab", "xy", "a"]
    assert [run.font for run in runs] == ["Helvetica", "Courier", "Helvetica"]


def test_empty_fallback_list_is_identity(document):
    runs = [StyledRun("hello"), StyledRun("world", styles=frozenset({"bold"}))]
    assert FallbackResolver(document, []).process(runs) == runs


def test_glyph_missing_everywhere_uses_the_run_font(make_document):
    document = make_document(missing_glyphs={"Helvetica": "x", "Courier": "x", "Times-Roman": "x"})
    resolver = FallbackResolver(document, ["Courier", "Times-Roman"])

    runs = resolver.split_run(StyledRun("axa", font="Helvetica"))

    assert [(run.text, run.font) for run in runs] == [("axa", "Helvetica")]


def test_later_fallback_is_tried_when_earlier_one_lacks_glyph(make_document):
    document = make_document(missing_glyphs={"Helvetica": "x", "Courier": "x"})
    resolver = FallbackResolver(document, ["Courier", "Times-Roman"])

    runs = resolver.split_run(StyledRun("ax", font="Helvetica"))

    assert [(run.text, run.font) for run in runs] == [("a", "Helvetica"), ("x", "Times-Roman")]


def test_sub_runs_keep_parent_attributes(make_document):
    document = make_document(missing_glyphs={"Helvetica": "b"})
    parent = StyledRun(
        "ab",
        styles=frozenset({"underline"}),
        size=14,
        color=(1, 0, 0),
        link="https://example.com",
    )

    runs = FallbackResolver(document, ["Courier"]).split_run(parent)

    assert len(runs) == 2
    for run in runs:
        assert run.styles == parent.styles
        assert run.size == 14
        assert run.color == (1, 0, 0)
        assert run.link == "https://example.com"


def test_run_without_font_starts_from_document_font(make_document):
    document = make_document(font="Times-Roman", missing_glyphs={"Times-Roman": "z"})
    runs = FallbackResolver(document, ["Courier"]).split_run(StyledRun("az"))
    assert [run.font for run in runs] == ["Times-Roman", "Courier"]


def test_document_font_is_restored_after_analysis(make_document):
    document = make_document(missing_glyphs={"Helvetica": "x"})
    FallbackResolver(document, ["Courier"]).process([StyledRun("xxx")])
    assert document.font_name == "Helvetica"


def test_characters_are_walked_by_code_point(make_document):
    document = make_document(missing_glyphs={"Helvetica": "\U0001F600"})
    runs = FallbackResolver(document, ["Courier"]).split_run(StyledRun("a\U0001F600b"))
    assert "".join(run.text for run in runs) == "a\U0001F600b"
    assert len(runs) == 1
