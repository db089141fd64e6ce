"""
psd-tools adapter

Opens a Photoshop document with psd-tools and converts its layer tree into the
exporter's `Document` model. Type-layer styling is read from the engine data
of the layer: font names from the `FontSet` resource, sizes and fill colors
from the style runs, justification from the first paragraph run.
"""

import logging
from pathlib import Path
from typing import Any, List, Optional

from psd_tools import PSDImage

from psd_skins.document import Document, FontStyle, LayerNode, TextContent
from psd_skins.errors import InvalidDocumentError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ('.psd',)

JUSTIFICATIONS = {
    0: 'left',
    1: 'right',
    2: 'center',
    3: 'justify-left',
    4: 'justify-right',
    5: 'justify-center',
    6: 'justify-all',
}


def _value(element: Any) -> Any:
    # engine data wraps scalars in element objects exposing `.value`
    return getattr(element, 'value', element)


def _text(element: Any) -> Optional[str]:
    value = _value(element)
    if value is None:
        return None
    return str(value).rstrip('\x00')


def _number(element: Any) -> Optional[float]:
    try:
        return float(_value(element))
    except (TypeError, ValueError):
        return None


def _style_sheets(layer) -> List[Any]:
    try:
        runs = layer.engine_dict['StyleRun']['RunArray']
    except (KeyError, TypeError, AttributeError):
        return []
    sheets = []
    for run in runs:
        try:
            sheets.append(run['StyleSheet']['StyleSheetData'])
        except (KeyError, TypeError):
            continue
    return sheets


def _font_name(layer, sheets: List[Any]) -> Optional[str]:
    if not sheets or 'Font' not in sheets[0]:
        return None
    try:
        font_set = layer.resource_dict['FontSet']
        return _text(font_set[int(_value(sheets[0]['Font']))]['Name'])
    except (KeyError, IndexError, TypeError, ValueError, AttributeError):
        return None


def _fill_color(sheet: Any) -> Optional[List[int]]:
    try:
        values = [_number(v) for v in sheet['FillColor']['Values']]
    except (KeyError, TypeError):
        return None
    if len(values) < 4 or any(v is None for v in values):
        return None
    a, r, g, b = values[:4]
    return [int(round(channel * 255)) for channel in (r, g, b, a)]


def _justification(layer) -> Optional[str]:
    try:
        paragraph = layer.engine_dict['ParagraphRun']['RunArray'][0]
        code = int(_value(paragraph['ParagraphSheet']['Properties']['Justification']))
    except (KeyError, IndexError, TypeError, ValueError, AttributeError):
        return None
    return JUSTIFICATIONS.get(code)


def convert_text(layer) -> Optional[TextContent]:
    """
    Read text and styling of a psd-tools type layer.

    Args:
        layer: psd-tools TypeLayer (or any object with the same attributes)

    Returns:
        TextContent, or None when the layer carries no text
    """
    text = getattr(layer, 'text', None)
    if not text:
        return None

    sheets = _style_sheets(layer)
    colors = [color for color in (_fill_color(sheet) for sheet in sheets) if color]
    sizes = [size for size in (_number(sheet['FontSize']) for sheet in sheets if 'FontSize' in sheet) if size]

    return TextContent(
        text=str(text),
        font=FontStyle(name=_font_name(layer, sheets), colors=colors, sizes=sizes),
        alignment=_justification(layer),
    )


def convert_layer(layer) -> LayerNode:
    """
    Convert one psd-tools layer and its subtree into a LayerNode.
    """
    is_group = bool(layer.is_group())
    children = [convert_layer(child) for child in layer] if is_group else []

    text = None
    if getattr(layer, 'kind', None) == 'type':
        text = convert_text(layer)

    raster = None
    if not is_group and layer.has_pixels():
        # Rasterised lazily by the asset exporter
        raster = layer.topil

    return LayerNode(
        name=layer.name,
        left=layer.left,
        top=layer.top,
        right=layer.right,
        bottom=layer.bottom,
        children=children,
        text=text,
        raster=raster,
    )


def convert_psd(psd) -> Document:
    """
    Convert an opened PSDImage into a validated Document.

    Raises:
        InvalidDocumentError: If the document has no usable dimensions
    """
    document = Document(
        width=getattr(psd, 'width', None),
        height=getattr(psd, 'height', None),
        children=[convert_layer(layer) for layer in psd],
    )
    document.validate()
    return document


def load_psd(psd_path: Path) -> Document:
    """
    Open and convert a Photoshop file.

    Args:
        psd_path: Path of the .psd file

    Returns:
        Validated Document

    Raises:
        InvalidDocumentError: If the file is missing, empty, not a .psd or unparseable
    """
    psd_path = Path(psd_path)

    if psd_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise InvalidDocumentError(f"Only PSD files are allowed: {psd_path.name}")
    if not psd_path.is_file():
        raise InvalidDocumentError(f"Uploaded file not found: {psd_path}")
    if psd_path.stat().st_size == 0:
        raise InvalidDocumentError(f"Empty file content: {psd_path}")

    logger.info(f"📂 Opening {psd_path}")
    try:
        psd = PSDImage.open(psd_path)
    except Exception as e:
        raise InvalidDocumentError(f"Invalid PSD file: {e}")

    return convert_psd(psd)
