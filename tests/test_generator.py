import io

import pytest
from PIL import Image

from postgen.formats import FormatId, resolve
from postgen.generator import SlideGenerator
from postgen.layout import TextLayoutEngine
from postgen.models import RenderInput

from conftest import png_bytes


def _white_rows(asset, top, bottom):
    image = Image.open(io.BytesIO(asset.image_data)).convert("RGB")
    region = image.crop((60, top, 540, bottom))
    return any(min(pixel) > 245 for pixel in region.getdata())


@pytest.mark.asyncio
@pytest.mark.parametrize("format_id", list(FormatId))
async def test_one_asset_per_slide_in_order(generator, format_id):
    assets = await generator.generate(RenderInput(format=format_id, title="Title", body="Body"))
    assert [a.suffix for a in assets] == [s.suffix for s in resolve(format_id)]
    assert all((a.width, a.height) == (600, 750) for a in assets)


@pytest.mark.asyncio
async def test_simple_breaking_news(generator, fonts):
    """Format simple, headline only, no background image."""
    assets = await generator.generate(RenderInput(format=FormatId.SIMPLE, title="Breaking News"))

    assert len(assets) == 1
    assert assets[0].suffix == "_simple"
    assert Image.open(io.BytesIO(assets[0].image_data)).size == (600, 750)

    placement = resolve(FormatId.SIMPLE)[0].placement
    lines = TextLayoutEngine().layout("Breaking News", fonts.get(placement.font_size), placement)
    assert lines[-1].baseline == 590


@pytest.mark.asyncio
async def test_double_with_image(generator):
    """Format double: headline slide then body slide, each with only its own text."""
    render_input = RenderInput(
        format=FormatId.DOUBLE,
        background=png_bytes((1080, 720), (0, 0, 0)),
        title="Headline",
        body="Longer descriptive paragraph that explains the story in more detail.",
    )
    headline, body = await generator.generate(render_input)

    assert (headline.suffix, body.suffix) == ("_pag1", "_pag2")
    # Headline sits just above y=590, body starts at y=375 and runs downward
    assert _white_rows(headline, 540, 592)
    assert not _white_rows(headline, 300, 470)
    assert _white_rows(body, 345, 470)
    assert not _white_rows(body, 560, 592)


@pytest.mark.asyncio
async def test_generator_makes_font_ready(generator):
    assert not generator.compositor.fonts.ready
    await generator.generate(RenderInput(title="x"))
    assert generator.compositor.fonts.ready


@pytest.mark.asyncio
async def test_preload_templates(generator, cache):
    assert await generator.preload_templates() == 5
    assert len(cache) == 5


def test_generator_builds_default_compositor(settings, cache):
    generator = SlideGenerator(settings=settings, cache=cache)
    assert generator.compositor.loader.cache is cache
    assert generator.compositor.settings is settings
