from types import SimpleNamespace

import pytest
from PIL import Image

from psd_skins.config import ExportConfig
from psd_skins.document import Document, FontStyle, LayerNode, TextContent


@pytest.fixture
def raster():
    return Image.new('RGBA', (4, 4), (255, 0, 0, 255))


@pytest.fixture
def config(tmp_path):
    return ExportConfig(skins_dir=tmp_path / 'skins', fonts_dir=tmp_path / 'fonts')


@pytest.fixture
def scenario_document(raster):
    """400x300 document with group G holding text T and raster I."""
    text = LayerNode(
        name='T',
        left=0, top=0, right=100, bottom=50,
        text=TextContent(
            text='Hi',
            font=FontStyle(name='Arial', colors=[[255, 0, 0]], sizes=[24]),
        ),
    )
    image = LayerNode(name='I', left=0, top=0, right=200, bottom=200, raster=raster)
    group = LayerNode(name='G', left=0, top=0, right=200, bottom=200, children=[text, image])
    return Document(width=400, height=300, children=[group])


class FakePsdLayer(SimpleNamespace):
    """Stand-in for a psd-tools layer."""

    def __iter__(self):
        return iter(getattr(self, 'layers', []))

    def is_group(self):
        return self.kind == 'group'

    def has_pixels(self):
        return getattr(self, 'pixels', None) is not None

    def topil(self):
        return self.pixels


@pytest.fixture
def fake_layer():
    def make(**kwargs):
        defaults = dict(name='', kind='pixel', left=0, top=0, right=0, bottom=0, pixels=None)
        defaults.update(kwargs)
        return FakePsdLayer(**defaults)
    return make
