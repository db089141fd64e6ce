import json
import re

import pytest
from PIL import Image

from psd_skins.config import ExportConfig
from psd_skins.document import Document, FontStyle, LayerNode, TextContent
from psd_skins.errors import AssetError, ErrorKind, InvalidDocumentError
from psd_skins.skin_exporter import SkinExporter


def test_scenario_group_text_image(config, scenario_document):
    result = SkinExporter(config).convert(scenario_document, 'doc')

    assert result.envelope['layers'] == [
        {'type': 'image', 'src': None, 'name': 'G', 'x': 0, 'y': 0, 'width': 200, 'height': 200},
        {'type': 'text', 'src': None, 'name': 'T', 'x': 0, 'y': 0, 'width': 100, 'height': 50,
         'font': 'Arial', 'color': '0xff0000', 'size': 24, 'text': 'Hi'},
        {'type': 'image', 'src': '../skins/doc/i.png', 'name': 'I', 'x': 0, 'y': 0, 'width': 200, 'height': 200},
    ]
    assert result.fonts == ['Arial']
    assert [image.name for image in result.images] == ['i.png']
    assert (config.skins_dir / 'doc' / 'i.png').exists()


def test_envelope_metadata(config, scenario_document):
    envelope = SkinExporter(config).convert(scenario_document, 'banner').envelope
    assert envelope['name'] == 'banner'
    assert envelope['path'] == 'banner/'
    assert envelope['info'] == {
        'description': 'Normal',
        'file': 'banner',
        'date': 'sRGB',
        'title': '',
        'author': '',
        'keywords': '',
        'generator': 'Export Kit v1.2.8',
    }


def test_result_body_is_json_serializable(config, scenario_document):
    body = SkinExporter(config).convert(scenario_document, 'doc').to_dict()
    decoded = json.loads(json.dumps(body))
    assert set(decoded) == {'json', 'images', 'fonts'}
    assert decoded['images'][0]['name'] == 'i.png'
    assert decoded['images'][0]['base64'].startswith('data:image/png;base64,')


def test_conversion_is_deterministic(config, raster):
    document = Document(width=10, height=10, children=[
        LayerNode(children=[LayerNode(raster=raster), LayerNode(raster=raster)]),
        LayerNode(raster=raster),
    ])
    exporter = SkinExporter(config)
    first = exporter.convert(document, 'doc').to_dict()
    second = exporter.convert(document, 'doc').to_dict()
    assert first == second


def test_encoder_failure_drops_leaf(config, raster):
    def encoder(handle):
        raise RuntimeError('boom')

    document = Document(width=10, height=10, children=[
        LayerNode(name='broken', raster=raster),
        LayerNode(name='label', text=TextContent(text='ok')),
    ])
    result = SkinExporter(config, encoder=encoder).convert(document, 'doc')
    assert [layer['name'] for layer in result.envelope['layers']] == ['label']
    assert result.images == []


def test_colliding_names_overwrite_on_disk(config):
    payloads = {'first': b'first-bytes', 'second': b'second-bytes'}
    document = Document(width=10, height=10, children=[
        LayerNode(name='My Layer!', raster='first'),
        LayerNode(name='my_layer ', raster='second'),
    ])
    result = SkinExporter(config, encoder=payloads.get).convert(document, 'doc')

    assert [image.name for image in result.images] == ['my_layer_.png', 'my_layer_.png']
    assert [image.data for image in result.images] == [b'first-bytes', b'second-bytes']
    assert (config.skins_dir / 'doc' / 'my_layer_.png').read_bytes() == b'second-bytes'
    assert [layer['src'] for layer in result.envelope['layers']] == ['../skins/doc/my_layer_.png'] * 2


def test_font_manifest_lists_each_font_once(config):
    document = Document(width=10, height=10, children=[
        LayerNode(text=TextContent(text=str(i), font=FontStyle(name='Arial'))) for i in range(5)
    ])
    assert SkinExporter(config).convert(document, 'doc').fonts == ['Arial']


def test_colors_are_six_hex_digits(config):
    document = Document(width=10, height=10, children=[
        LayerNode(text=TextContent(text='a', font=FontStyle(colors=[[9, 200, 16, 255]]))),
        LayerNode(text=TextContent(text='b', font=FontStyle(colors=[[300.4, 0.2, 127.5]]))),
    ])
    layers = SkinExporter(config).convert(document, 'doc').envelope['layers']
    for layer in layers:
        assert re.fullmatch(r'0x[0-9a-f]{6}', layer['color'])


def test_invalid_document_aborts(config):
    with pytest.raises(InvalidDocumentError):
        SkinExporter(config).convert(Document(width=0, height=100), 'doc')
    assert not (config.skins_dir / 'doc').exists()


def test_get_font_files_uses_configured_store(tmp_path):
    fonts_dir = tmp_path / 'fonts'
    fonts_dir.mkdir()
    (fonts_dir / 'arial.ttf').write_bytes(b'ttf')
    exporter = SkinExporter(ExportConfig(skins_dir=tmp_path / 'skins', fonts_dir=fonts_dir))
    assert [entry['name'] for entry in exporter.get_font_files(['Arial'])] == ['arial.ttf']


def test_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv('PSD_SKINS_DIR', str(tmp_path / 'env-skins'))
    monkeypatch.setenv('PSD_FONTS_DIR', str(tmp_path / 'env-fonts'))
    config = ExportConfig.from_env(fonts_dir=str(tmp_path / 'cli-fonts'))
    assert config.skins_dir == tmp_path / 'env-skins'
    assert config.fonts_dir == tmp_path / 'cli-fonts'
    assert config.asset_dir('doc') == tmp_path / 'env-skins' / 'doc'


def test_json_dump_canvas_is_exported(config):
    document = Document.from_dict({
        'width': 10,
        'height': 10,
        'children': [{
            'name': 'Pic',
            'right': 2,
            'bottom': 2,
            'canvas': [[[255, 0, 0, 255], [0, 0, 0, 255]], [[0, 0, 0, 255], [0, 0, 0, 255]]],
        }],
    })

    result = SkinExporter(config).convert(document, 'doc')

    assert [layer['src'] for layer in result.envelope['layers']] == ['../skins/doc/pic.png']
    assert [image.name for image in result.images] == ['pic.png']
    with Image.open(config.skins_dir / 'doc' / 'pic.png') as exported:
        assert exported.size == (2, 2)
        assert exported.getpixel((0, 0)) == (255, 0, 0, 255)


def test_numeric_layer_name_is_exported(config, raster):
    document = Document.from_dict({'width': 10, 'height': 10, 'children': [{'name': 42}]})
    document.children[0].raster = raster

    result = SkinExporter(config).convert(document, 'doc')

    assert [image.name for image in result.images] == ['42.png']


def test_export_file_reads_json_dump(config, tmp_path):
    dump = tmp_path / 'banner.json'
    dump.write_text(json.dumps({
        'width': 10,
        'height': 10,
        'children': [{'name': 'Dot', 'right': 1, 'bottom': 1, 'canvas': [[[0, 0, 255, 255]]]}],
    }))

    result = SkinExporter(config).export_file(dump)

    assert result.envelope['name'] == 'banner'
    assert result.envelope['layers'][0]['src'] == '../skins/banner/dot.png'


def test_unwritable_asset_directory_is_an_asset_error(tmp_path, scenario_document):
    blocker = tmp_path / 'skins'
    blocker.write_text('not a directory')
    config = ExportConfig(skins_dir=blocker, fonts_dir=tmp_path / 'fonts')

    with pytest.raises(AssetError) as excinfo:
        SkinExporter(config).convert(scenario_document, 'doc')
    assert excinfo.value.kind is ErrorKind.ASSET_FAILURE
