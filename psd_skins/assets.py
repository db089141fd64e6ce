"""
Asset Exporter

Turns a raster layer into a PNG file inside the per-document skin directory
plus an in-memory descriptor carrying the bytes as a base64 data URI.

Filenames come from the sanitised layer name. Collisions are not
disambiguated: a later asset with the same sanitised name overwrites the
earlier file on disk while both descriptors stay in the asset list.
"""

import base64
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import numpy as np
from PIL import Image

from psd_skins.attributes import sanitize_filename
from psd_skins.document import LayerNode
from psd_skins.errors import AssetError

RasterEncoder = Callable[[Any], bytes]


def encode_png(raster: Any) -> bytes:
    """
    Encode a raster handle to PNG bytes.

    Args:
        raster: A PIL Image, a numpy pixel array, or a zero-argument callable
            returning either of them

    Returns:
        PNG-encoded bytes

    Raises:
        AssetError: If the handle does not resolve to an image
    """
    image = raster() if callable(raster) else raster

    if isinstance(image, np.ndarray):
        image = Image.fromarray(image)

    if not isinstance(image, Image.Image):
        raise AssetError(f"Raster handle did not produce an image: {type(image).__name__}")

    buffer = io.BytesIO()
    image.save(buffer, format='PNG')
    return buffer.getvalue()


@dataclass
class ExportedAsset:
    name: str
    data: bytes

    @property
    def data_uri(self) -> str:
        return f"data:image/png;base64,{base64.b64encode(self.data).decode('ascii')}"

    def to_dict(self) -> Dict[str, str]:
        return {'name': self.name, 'base64': self.data_uri}


@dataclass
class AssetResult:
    """Outcome of one export: either an asset and its src path, or an error."""
    asset: Optional[ExportedAsset] = None
    src: Optional[str] = None
    error: Optional[AssetError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.asset is not None


class AssetExporter:
    """
    Writes raster layers of one document into its skin directory.
    """

    def __init__(self,
                 document_name: str,
                 asset_dir: Path,
                 url_prefix: str = '../skins',
                 encoder: Optional[RasterEncoder] = None):
        """
        Initialize the exporter.

        Args:
            document_name: Name of the document, used in asset src paths
            asset_dir: Directory the PNG files are written to
            url_prefix: Prefix of the relative src path handed to the renderer
            encoder: Raster-to-PNG encoder, defaults to `encode_png`
        """
        self.document_name = document_name
        self.asset_dir = Path(asset_dir)
        self.url_prefix = url_prefix.rstrip('/')
        self.encoder = encoder or encode_png
        self.logger = logging.getLogger(__name__)

    def asset_filename(self, node: LayerNode, counter: int) -> str:
        return f"{sanitize_filename(node.name or f'image_{counter}')}.png"

    def asset_src(self, filename: str) -> str:
        return f"{self.url_prefix}/{self.document_name}/{filename}"

    def export(self, node: LayerNode, counter: int) -> AssetResult:
        """
        Encode and write the raster of an image node.

        Encode and write failures are logged and reported through the result;
        they never propagate to the caller.

        Args:
            node: Node classified as image
            counter: Number of assets exported so far, used for unnamed layers

        Returns:
            AssetResult with the asset and its src on success, the error otherwise
        """
        filename = self.asset_filename(node, counter)
        image_path = self.asset_dir / filename

        if node.raster is None:
            error = AssetError(f"Layer has no raster data: {filename}")
            self.logger.error(f"Failed to save image {filename}: {error}")
            return AssetResult(error=error)

        try:
            data = self.encoder(node.raster)
            image_path.write_bytes(data)
        except Exception as e:
            self.logger.error(f"Failed to save image {filename}: {e}")
            return AssetResult(error=e if isinstance(e, AssetError) else AssetError(str(e)))

        self.logger.debug(f"Saved image {filename} ({len(data)} bytes)")
        return AssetResult(
            asset=ExportedAsset(name=filename, data=data),
            src=self.asset_src(filename),
        )
