import pytest

from postgen.exceptions import UnknownFormat
from postgen.formats import (
    AnchorMode,
    FormatId,
    TextSource,
    get_format_options,
    resolve,
    template_references,
)


def test_every_format_resolves():
    for format_id in FormatId:
        slides = resolve(format_id)
        assert len(slides) >= 1


def test_simple_is_one_headline_slide():
    slides = resolve(FormatId.SIMPLE)
    assert len(slides) == 1
    assert slides[0].text_source is TextSource.TITLE
    assert slides[0].template == "template_simple.png"
    assert slides[0].suffix == "_simple"


def test_double_is_headline_then_body():
    slides = resolve(FormatId.DOUBLE)
    assert [s.text_source for s in slides] == [TextSource.TITLE, TextSource.BODY]
    assert [s.suffix for s in slides] == ["_pag1", "_pag2"]
    assert slides[0].placement.anchor_mode is AnchorMode.BOTTOM_UP
    assert slides[1].placement.anchor_mode is AnchorMode.TOP_DOWN


def test_breaking_variants():
    assert resolve(FormatId.BREAKING_EXN)[0].template == "template_breaking_exn.png"
    assert resolve(FormatId.BREAKING_EXD)[0].template == "template_breaking_exd.png"


def test_resolve_is_stable():
    assert resolve(FormatId.DOUBLE) == resolve(FormatId.DOUBLE)


def test_resolve_accepts_string_value():
    assert resolve("double") == resolve(FormatId.DOUBLE)


def test_unknown_format_raises():
    with pytest.raises(UnknownFormat) as exc_info:
        resolve("triple")
    assert exc_info.value.format_id == "triple"
    assert isinstance(exc_info.value, LookupError)


def test_headline_defaults():
    placement = resolve(FormatId.SIMPLE)[0].placement
    assert (placement.anchor_x, placement.anchor_y) == (60, 590)
    assert placement.max_width == 480
    assert placement.font_size == 48
    assert placement.line_height == 62


def test_body_starts_at_vertical_centre():
    placement = resolve(FormatId.DOUBLE)[1].placement
    assert placement.anchor_y == 750 // 2
    assert placement.font_size == 30
    assert placement.line_height == 42


def test_template_references_unique():
    refs = template_references()
    assert len(refs) == len(set(refs)) == 5


def test_format_options():
    options = {o["id"]: o for o in get_format_options()}
    assert set(options) == {"simple", "double", "breaking_exn", "breaking_exd"}
    assert options["double"]["slides"] == 2
