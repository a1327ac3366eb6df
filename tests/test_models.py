import pytest
from pydantic import ValidationError

from postgen.formats import FormatId, resolve
from postgen.models import PlacementOverride, RenderedAsset, RenderInput


def test_render_input_defaults():
    render_input = RenderInput()
    assert render_input.format is FormatId.SIMPLE
    assert render_input.background is None
    assert render_input.title == ""


def test_render_input_parses_format_string():
    assert RenderInput(format="breaking_exd").format is FormatId.BREAKING_EXD


def test_render_input_rejects_unknown_format():
    with pytest.raises(ValidationError):
        RenderInput(format="triple")


def test_render_input_is_frozen():
    render_input = RenderInput(title="Original")
    with pytest.raises(ValidationError):
        render_input.title = "Changed"


def test_render_input_keeps_bytes_background():
    assert RenderInput(background=b"\x89PNG").background == b"\x89PNG"
    assert RenderInput(background="photo.jpg").background == "photo.jpg"


def test_placement_override_partial():
    base = resolve(FormatId.SIMPLE)[0].placement
    moved = PlacementOverride(y=500, size=40).apply(base)

    assert moved.anchor_y == 500
    assert moved.font_size == 40
    assert moved.anchor_x == base.anchor_x
    assert moved.line_height == base.line_height
    assert moved.anchor_mode is base.anchor_mode


def test_empty_override_returns_same_placement():
    base = resolve(FormatId.SIMPLE)[0].placement
    assert PlacementOverride().apply(base) is base


def test_rendered_asset_filename():
    asset = RenderedAsset(image_data=b"", suffix="_pag1", width=600, height=750)
    assert asset.filename("breaking_news") == "breaking_news_pag1.png"
