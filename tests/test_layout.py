import pytest
from PIL import ImageFont

from postgen.formats import AnchorMode, TextPlacement
from postgen.layout import TextLayoutEngine

LOREM = (
    "Officials confirmed late on Tuesday that the new coastal railway line will open "
    "to passengers next spring after years of delays and a series of budget reviews"
)


@pytest.fixture
def engine():
    return TextLayoutEngine()


@pytest.fixture
def font():
    return ImageFont.load_default(32)


def _placement(mode, anchor_y=590, line_height=62):
    return TextPlacement(
        anchor_x=60, anchor_y=anchor_y, max_width=480,
        font_size=32, line_height=line_height, anchor_mode=mode,
    )


def test_wrap_respects_max_width(engine, font):
    for max_width in (120, 240, 480):
        lines = engine.wrap(LOREM, font, max_width)
        assert len(lines) > 1
        for line in lines:
            if " " in line:
                assert font.getlength(line) <= max_width


def test_wrap_keeps_all_words_in_order(engine, font):
    lines = engine.wrap(LOREM, font, 200)
    assert " ".join(lines).split() == LOREM.split()


def test_wrap_is_greedy(engine, font):
    lines = engine.wrap(LOREM, font, 300)
    # The first word of each following line would not have fit on the previous one
    for current, following in zip(lines, lines[1:]):
        next_word = following.split()[0]
        assert font.getlength(f"{current} {next_word}") > 300


def test_oversize_word_stays_whole_on_its_own_line(engine, font):
    word = "Supercalifragilisticexpialidocious"
    lines = engine.wrap(f"A {word} day", font, 100)
    assert word in lines
    assert lines == ["A", word, "day"]


def test_wrap_blank_text(engine, font):
    assert engine.wrap("", font, 480) == []
    assert engine.wrap("   \n ", font, 480) == []


def test_wrap_collapses_whitespace(engine, font):
    assert engine.wrap("Breaking\n\n  News", font, 480) == ["Breaking News"]


@pytest.mark.parametrize("count", [1, 2, 3, 5, 8])
def test_bottom_up_last_line_on_anchor(engine, count):
    lines = [f"line {i}" for i in range(count)]
    placed = engine.place(lines, _placement(AnchorMode.BOTTOM_UP))
    assert placed[-1].baseline == 590
    assert placed[0].baseline == 590 - (count - 1) * 62
    assert [p.text for p in placed] == lines


def test_top_down_grows_downward(engine):
    placed = engine.place(["a", "b", "c"], _placement(AnchorMode.TOP_DOWN, anchor_y=375, line_height=42))
    assert [p.baseline for p in placed] == [375, 417, 459]
    assert all(p.x == 60 for p in placed)


def test_layout_headline_grows_upward(engine, font):
    placement = _placement(AnchorMode.BOTTOM_UP)
    short = engine.layout("Short", font, placement)
    long = engine.layout(LOREM, font, placement)
    assert short[-1].baseline == long[-1].baseline == 590
    assert long[0].baseline < short[0].baseline
