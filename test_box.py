"""Tests for TextBox: options, rendering pipeline, overflow and drawing order."""

import pytest

from textbox import TextBox, text_box
from textbox.document import Bounds
from textbox.errors import BadFontFamily, CannotFit, ConfigurationError, UnknownOption
from textbox.models import Fragment, RenderPhase, StyledRun
from textbox.wrap import WrapResult

# Helvetica 12pt metrics
ASCENDER = 8.616
DESCENDER = 2.484
LINE_HEIGHT = 14.4


class OneLineEngine:
    """Wrap engine that prints a single 40pt line (ascender 30, descender 10)."""

    def __init__(self):
        self.fragments = []

    def wrap(self, box, runs):
        if not box.fits_line(30, 10, 40):
            return WrapResult(list(runs), False, 0.0)
        box.move_baseline_down(30, 10, 40)
        fragment = Fragment(text="x", font="Helvetica", size=12, width=10)
        box.draw_fragment(fragment, 0, 10)
        self.fragments.append(fragment)
        return WrapResult([], True, 40.0, [fragment])


class ReportingEngine:
    """Wrap engine that moves one line down and returns a fixed outcome."""

    def __init__(self, everything_fit, consumed_height):
        self.everything_fit = everything_fit
        self.consumed_height = consumed_height

    def wrap(self, box, runs):
        box.move_baseline_down(30, 10, 40)
        return WrapResult([], self.everything_fit, self.consumed_height)


# ============================================================================
# Options
# ============================================================================

def test_unknown_option_is_rejected(document):
    with pytest.raises(UnknownOption) as excinfo:
        TextBox([], document, colour="red", bogus=1)
    assert excinfo.value.keys == ["bogus", "colour"]


@pytest.mark.parametrize(
    "options",
    [
        {"align": "middle"},
        {"width": -5},
        {"width": float("inf")},
        {"overflow": "wrap"},
        {"min_font_size": 0},
        {"fallback_fonts": ["Courier", " "]},
    ],
)
def test_invalid_option_values(document, options):
    with pytest.raises(ConfigurationError):
        TextBox([], document, **options)


def test_unknown_style_is_a_configuration_error(document):
    with pytest.raises(ConfigurationError):
        TextBox([{"text": "x", "styles": ["blink"]}], document)


def test_defaults_come_from_document_bounds(document):
    box = TextBox([], document)
    assert box.at == (36, 756)
    assert box.width == 540
    assert box.box_height == 720
    assert box.align == "left"
    assert box.overflow == "truncate"


def test_rtl_defaults_to_right_alignment(make_document):
    box = TextBox([], make_document(text_direction="rtl"))
    assert box.direction == "rtl"
    assert box.align == "right"


def test_expand_uses_all_height_below_at(document):
    box = TextBox([], document, at=(36, 400), height=10, overflow="expand")
    assert box.overflow == "truncate"
    assert box.box_height == 364


def test_stretchy_bounds_grow_to_the_frame(make_document):
    page = Bounds(36, 36, 576, 756)
    document = make_document(bounds=Bounds(36, 500, 300, 700, stretchy=True, parent=page))
    box = TextBox([], document)
    assert box.at == (36, 700)
    assert box.box_height == 664


# ============================================================================
# Printing and overflow
# ============================================================================

def test_text_that_fits_prints_everything(document):
    box = TextBox([StyledRun("hello world")], document, width=200, height=100)
    assert box.render() == []
    assert box.everything_printed
    assert not box.nothing_printed
    assert [draw["text"] for draw in document.draws()] == ["hello world"]
    assert box.state.phase is RenderPhase.SETTLED


def test_empty_runs_print_nothing(document):
    box = TextBox([], document, width=200, height=100)
    assert box.render() == []
    assert box.nothing_printed
    assert box.everything_printed
    assert box.height == 0


def test_truncate_returns_the_unprinted_suffix(document):
    box = TextBox([StyledRun("hello world")], document, width=40, height=20)
    assert box.render() == [StyledRun("world")]
    assert not box.everything_printed
    assert box.text == [StyledRun("hello")]
    assert [draw["text"] for draw in document.draws()] == ["hello"]


def test_height_is_zero_before_render_and_measured_after(document):
    box = TextBox([StyledRun("hello")], document, width=200, height=100)
    assert box.height == 0
    box.render()
    assert box.height == pytest.approx(ASCENDER + DESCENDER)
    assert box.line_height == pytest.approx(LINE_HEIGHT)
    assert box.line_gap == pytest.approx(3.3)


def test_dry_run_draws_nothing_and_is_repeatable(document):
    box = TextBox([StyledRun("hello world " * 20)], document, width=100, height=50)
    first = box.render(dry_run=True)
    first_height = box.height
    second = box.render(dry_run=True)

    assert document.calls == []
    assert first == second
    assert box.height == pytest.approx(first_height)


def test_caller_runs_are_not_mutated(document):
    runs = [{"text": "hello world", "styles": ["bold"]}, {"text": " again"}]
    snapshot = [dict(run) for run in runs]
    TextBox(runs, document, width=30, height=20).render()
    assert runs == snapshot


def test_text_box_helper(document):
    assert text_box(document, "hello", at=(36, 756), width=200, height=50) == []
    assert document.draws()[0]["text"] == "hello"
    assert document.draws()[0]["at"] == pytest.approx((36, 756 - ASCENDER))


def test_box_too_narrow_for_a_glyph_raises_and_restores_state(document):
    box = TextBox([StyledRun("hello")], document, width=1, height=100, character_spacing=2, size=20)
    with pytest.raises(CannotFit):
        box.render()
    assert document.font_name == "Helvetica"
    assert document.font_size == 12
    assert document.character_spacing == 0


def test_bad_font_family_restores_document_state(document):
    box = TextBox([StyledRun("x", font="NoSuchFont")], document, character_spacing=2, mode="stroke")
    with pytest.raises(BadFontFamily):
        box.render()
    assert document.font_name == "Helvetica"
    assert document.character_spacing == 0
    assert document.text_rendering_mode == "fill"


def test_failed_rotated_render_restores_the_transform(document):
    matrix = tuple(document.canvas._currentMatrix)
    box = TextBox([StyledRun("hello")], document, at=(100, 400), width=1, height=100, rotate=30)

    with pytest.raises(CannotFit):
        box.render()

    assert document.calls[0] == ("rotate", 30, (100, 400))
    assert tuple(document.canvas._currentMatrix) == matrix


def test_engine_reported_partial_fit_is_recorded(document):
    box = TextBox([StyledRun("x")], document, wrap=ReportingEngine(False, 40.0), width=100, height=100)
    box.render()
    assert box.everything_printed is False
    assert box.height == pytest.approx(40)


def test_height_comes_from_the_engine(document):
    box = TextBox([StyledRun("x")], document, wrap=ReportingEngine(True, 25.0), width=100, height=100)
    box.render()
    assert box.everything_printed is True
    assert box.height == pytest.approx(25)


def test_single_line_prints_one_line(document):
    box = TextBox([StyledRun("aaaa bbbb cccc")], document, width=40, height=200, single_line=True)
    leftover = box.render()
    assert len(document.draws()) == 1
    assert "".join(run.text for run in leftover) == "bbbb cccc"


# ============================================================================
# Shrink to fit
# ============================================================================

def test_shrink_stops_at_the_first_fitting_size(document):
    box = TextBox([StyledRun("hi")], document, width=200, height=100, overflow="shrink_to_fit")
    box.render()
    assert box.state.font_sizes_tried == [12]


def test_shrink_steps_down_by_half_points(document):
    box = TextBox(
        [StyledRun("aaaa bbbb cccc dddd")],
        document,
        width=60,
        height=20,
        overflow="shrink_to_fit",
    )
    assert box.render() == []
    assert box.state.font_sizes_tried == [12, 11.5, 11, 10.5, 10, 9.5, 9]
    assert {draw["size"] for draw in document.draws()} == {9}


def test_shrink_truncates_at_the_minimum_size(document):
    box = TextBox(
        [StyledRun("word " * 200)],
        document,
        width=100,
        height=20,
        overflow="shrink_to_fit",
        min_font_size=5,
    )
    leftover = box.render()
    tried = box.state.font_sizes_tried

    assert leftover
    assert tried[-1] == 5
    assert all(a - b == pytest.approx(0.5) for a, b in zip(tried, tried[1:]))
    assert document.font_size == 12


def test_shrink_does_not_retry_when_a_glyph_is_too_wide(document):
    # "W" is about 11.3pt wide at 12pt and 4.7pt at 5pt
    box = TextBox([StyledRun("W")], document, width=8, height=100, overflow="shrink_to_fit")
    with pytest.raises(CannotFit):
        box.render()
    assert box.state.font_sizes_tried == [12]


# ============================================================================
# Placement
# ============================================================================

def test_vertical_center_moves_the_top_edge(document):
    engine = OneLineEngine()
    box = TextBox([StyledRun("x")], document, wrap=engine, at=(0, 200), width=100, height=100, valign="center")
    box.render()

    assert box.state.at == (0, 170)
    assert box.height == pytest.approx(40)
    assert engine.fragments[-1].baseline == pytest.approx(140)


def test_vertical_bottom_moves_the_top_edge(document):
    engine = OneLineEngine()
    box = TextBox([StyledRun("x")], document, wrap=engine, at=(0, 200), width=100, height=100, valign="bottom")
    box.render()

    assert box.state.at == (0, 140)
    assert engine.fragments[-1].baseline == pytest.approx(110)


def test_vertical_alignment_does_not_accumulate_across_renders(document):
    engine = OneLineEngine()
    box = TextBox([StyledRun("x")], document, wrap=engine, at=(0, 200), width=100, height=100, valign="center")
    box.render(dry_run=True)
    box.render()
    assert box.state.at == (0, 170)


def test_draw_fragment_centers_the_line(document):
    box = TextBox([], document, at=(100, 100), width=200, align="center")
    fragment = Fragment(text="x", font="Helvetica", size=12, width=50)
    box.draw_fragment(fragment, 0, 50)
    assert fragment.left == pytest.approx(175)
    assert fragment.baseline == pytest.approx(100)
    assert document.calls == []


def test_justified_lines_spread_words_except_the_last(document):
    box = TextBox([StyledRun("aaa bbb ccc ddd eee fff")], document, width=60, height=200, align="justify")
    box.render()
    draws = document.draws()

    assert [draw["text"] for draw in draws] == ["aaa bbb", "ccc ddd", "eee fff"]
    assert draws[0]["word_spacing"] == pytest.approx(60 - document.width_of("aaa bbb"))
    assert draws[1]["word_spacing"] > 0
    assert draws[2]["word_spacing"] == 0


def test_rtl_text_is_reversed_against_the_right_edge(document):
    box = TextBox([StyledRun("abc")], document, at=(100, 700), width=200, height=50, direction="rtl")
    box.render()
    draw = document.draws()[0]

    assert draw["text"] == "cba"
    assert draw["at"][0] + document.width_of("abc") == pytest.approx(300)


def test_newline_moves_down_one_line_plus_leading(document):
    box = TextBox([StyledRun("a\nb")], document, width=200, height=200, leading=2)
    box.render()
    first, second = document.draws()
    assert second["at"][1] - first["at"][1] == pytest.approx(-(LINE_HEIGHT + 2))


def test_superscript_is_raised_and_smaller(document):
    box = TextBox([StyledRun("x"), StyledRun("2", styles=frozenset({"superscript"}))], document, width=200, height=50)
    box.render()
    base, script = document.draws()

    assert script["at"][1] - base["at"][1] == pytest.approx(12 * 0.33)
    assert script["size"] == pytest.approx(12 * 0.583)


def test_rotation_pivots_around_the_requested_corner(document):
    box = TextBox([StyledRun("x")], document, at=(0, 100), width=50, height=40, rotate=30, rotate_around="lower_right")
    box.render()
    assert document.calls[0] == ("rotate", 30, (50, 60))


def test_dry_run_does_not_rotate(document):
    TextBox([StyledRun("x")], document, at=(0, 100), width=50, height=40, rotate=30).render(dry_run=True)
    assert document.calls == []


# ============================================================================
# Drawing
# ============================================================================

def test_side_effects_run_in_order(document, callback):
    run = StyledRun(
        "hi",
        styles=frozenset({"underline", "strikethrough"}),
        link="https://example.com",
        anchor="chapter-1",
        callbacks=(callback,),
    )
    TextBox([run], document, width=200, height=100).render()

    assert document.kinds() == [
        "behind",
        "draw_text",
        "stroke_line",
        "stroke_line",
        "link",
        "anchor",
        "front",
    ]


def test_rendering_mode_and_styles_reach_the_draw_call(document):
    box = TextBox([StyledRun("x", styles=frozenset({"bold"}))], document, width=200, height=50, mode="stroke")
    box.render()
    draw = document.draws()[0]

    assert draw["mode"] == "stroke"
    assert draw["font"] == "Helvetica-Bold"
    assert document.text_rendering_mode == "fill"


def test_fallback_fonts_draw_separate_fragments(make_document):
    document = make_document(missing_glyphs={"Helvetica": "x"})
    TextBox([StyledRun("axa")], document, width=200, height=50, fallback_fonts=["Courier"]).render()
    draws = document.draws()

    assert [(draw["text"], draw["font"]) for draw in draws] == [
        ("a", "Helvetica"),
        ("x", "Courier"),
        ("a", "Helvetica"),
    ]
    assert draws[0]["at"][0] < draws[1]["at"][0] < draws[2]["at"][0]
