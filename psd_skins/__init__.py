"""
PSD Skin Exporter

Flattens a parsed layered image document into a JSON scene description, a set of
exported PNG assets and a font-name manifest.
"""

from psd_skins.document import Document, FontStyle, LayerKind, LayerNode, TextContent, classify
from psd_skins.errors import ErrorKind, InvalidDocumentError, SkinExportError
from psd_skins.skin_exporter import ExportResult, SkinExporter

__all__ = [
    'Document',
    'ErrorKind',
    'ExportResult',
    'FontStyle',
    'InvalidDocumentError',
    'LayerKind',
    'LayerNode',
    'SkinExportError',
    'SkinExporter',
    'TextContent',
    'classify',
]
