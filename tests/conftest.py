import io

import pytest
from PIL import Image

from postgen.assets import AssetCache, AssetLoader
from postgen.compositor import Compositor
from postgen.config import Settings
from postgen.fonts import FontProvider
from postgen.formats import template_references
from postgen.generator import SlideGenerator

# Opaque strip along the bottom of every test overlay
OVERLAY_BAR_TOP = 700
OVERLAY_BAR_COLOR = (200, 0, 0, 255)


def png_bytes(size, color, mode="RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        template_dir=tmp_path / "templates",
        download_dir=tmp_path / "downloads",
        download_delay=0.8,
        font_path=None,
    )


@pytest.fixture
def template_dir(settings):
    directory = settings.template_dir
    directory.mkdir(parents=True)
    for name in template_references():
        overlay = Image.new("RGBA", settings.canvas_size, (0, 0, 0, 0))
        bar = Image.new("RGBA", (settings.canvas_width, settings.canvas_height - OVERLAY_BAR_TOP), OVERLAY_BAR_COLOR)
        overlay.paste(bar, (0, OVERLAY_BAR_TOP))
        overlay.save(directory / name)
    return directory


@pytest.fixture
def fonts(settings):
    # No candidates: always Pillow's built-in scalable font, same on every machine
    return FontProvider(settings=settings, candidates=[])


@pytest.fixture
def cache():
    return AssetCache()


@pytest.fixture
def loader(settings, cache):
    return AssetLoader(cache=cache, settings=settings)


@pytest.fixture
def compositor(settings, loader, fonts, template_dir):
    return Compositor(loader=loader, fonts=fonts, settings=settings)


@pytest.fixture
def generator(settings, compositor):
    return SlideGenerator(compositor=compositor, settings=settings)
