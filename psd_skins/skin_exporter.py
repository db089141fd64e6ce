#!/usr/bin/env python3
"""
PSD Skin Exporter

Converts a parsed layered document into the flat skin scene format consumed by
the layout tool:

- Flattened layer list (groups become placeholder records followed by their
  descendants)
- PNG assets written to <skins_dir>/<document>/ and returned as data URIs
- Deduplicated list of the font names used by text layers

It also serves font files for a list of font names from the font store.
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from psd_skins.assets import AssetExporter, ExportedAsset, RasterEncoder
from psd_skins.config import ExportConfig
from psd_skins.document import Document
from psd_skins.errors import AssetError, SkinExportError
from psd_skins.fonts import FontStore, collect_fonts
from psd_skins.psd_adapter import load_psd
from psd_skins.walker import ExportedLayer, LayerTreeWalker, WalkState


@dataclass
class ExportResult:
    """Envelope plus the sibling image and font lists of one conversion."""
    envelope: Dict[str, Any]
    layers: List[ExportedLayer] = field(default_factory=list)
    images: List[ExportedAsset] = field(default_factory=list)
    fonts: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'json': self.envelope,
            'images': [image.to_dict() for image in self.images],
            'fonts': list(self.fonts),
        }


class SkinExporter:
    """
    Converts documents into skin scenes and serves font files.
    """

    def __init__(self, config: Optional[ExportConfig] = None, encoder: Optional[RasterEncoder] = None):
        """
        Initialize the exporter.

        Args:
            config: Directories and static metadata, defaults to the environment
            encoder: Raster-to-PNG encoder handed to the asset exporter
        """
        self.config = config or ExportConfig.from_env()
        self.encoder = encoder
        self.logger = self._setup_logging()

    def _setup_logging(self):
        """Setup logging configuration."""
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s',
            handlers=[logging.StreamHandler(sys.stderr)]
        )
        return logging.getLogger(__name__)

    def export_file(self, document_path: Path) -> ExportResult:
        """
        Load a document and convert it. The document is named after the file stem.

        A `.json` file is read as a JSON document dump, anything else goes
        through the psd-tools adapter.

        Raises:
            InvalidDocumentError: If the file cannot be read as a document
        """
        document_path = Path(document_path)
        if document_path.suffix.lower() == '.json':
            document = Document.load(document_path)
        else:
            document = load_psd(document_path)
        return self.convert(document, document_path.stem)

    def convert(self, document: Document, document_name: str) -> ExportResult:
        """
        Convert a document into the skin scene format.

        Args:
            document: Parsed document
            document_name: Name used for the envelope and the asset directory

        Returns:
            ExportResult holding the envelope, the asset list and the font list

        Raises:
            InvalidDocumentError: If the document root is not usable
        """
        document.validate()
        self.logger.info(f"🎨 Converting {document_name} ({document.width}x{document.height})")

        fonts = collect_fonts(document.children)

        asset_dir = self.config.asset_dir(document_name)
        try:
            asset_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise AssetError(f"Cannot create asset directory {asset_dir}: {e}")

        asset_exporter = AssetExporter(
            document_name,
            asset_dir,
            url_prefix=self.config.asset_url_prefix,
            encoder=self.encoder,
        )
        state = WalkState()
        layers = LayerTreeWalker(asset_exporter).walk(document.children, state)

        envelope = self._build_envelope(document_name, layers)

        self.logger.info(
            f"✅ Converted {document_name}: {len(layers)} layers, "
            f"{len(state.assets)} images, {len(fonts)} fonts"
        )
        return ExportResult(envelope=envelope, layers=layers, images=state.assets, fonts=fonts)

    def _build_envelope(self, document_name: str, layers: List[ExportedLayer]) -> Dict[str, Any]:
        info = dict(self.config.info)
        info['file'] = document_name
        return {
            'name': document_name,
            'path': f"{document_name}/",
            'info': {
                'description': info.get('description', ''),
                'file': info['file'],
                'date': info.get('date', ''),
                'title': info.get('title', ''),
                'author': info.get('author', ''),
                'keywords': info.get('keywords', ''),
                'generator': info.get('generator', ''),
            },
            'layers': [layer.to_dict() for layer in layers],
        }

    def get_font_files(self, fonts: List[str]) -> List[Dict[str, str]]:
        """Look up font files for the given names in the configured font store."""
        return FontStore(self.config.fonts_dir).get_font_files(fonts)


def _write_output(payload: Any, output: Optional[str]) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output:
        output_file = Path(output)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(text, encoding='utf-8')
    else:
        sys.stdout.write(text + '\n')


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line interface for the skin exporter."""
    parser = argparse.ArgumentParser(
        description='Convert PSD documents into flat skin scenes',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Convert a document, assets go to ./skins/banner/
    psd-skins convert banner.psd --output banner.json

    # Use a custom skins directory
    psd-skins convert banner.psd --skins-dir ../skins

    # Convert a JSON document dump
    psd-skins convert banner.json --output banner.out.json

    # Fetch the font files for a list of font names
    psd-skins fonts Arial "Open Sans" --fonts-dir ./fonts
        """
    )
    parser.add_argument('--verbose', action='store_true',
                        help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    convert_parser = subparsers.add_parser('convert', help='Convert a .psd file or a JSON document dump')
    convert_parser.add_argument('document', type=str,
                                help='Path to the .psd or .json document')
    convert_parser.add_argument('--skins-dir', type=str,
                                help='Root directory for exported assets (default: $PSD_SKINS_DIR or ./skins)')
    convert_parser.add_argument('--output', type=str,
                                help='Write the result JSON to this file instead of stdout')

    fonts_parser = subparsers.add_parser('fonts', help='Fetch font files by font name')
    fonts_parser.add_argument('fonts', nargs='+',
                              help='Font names as listed in a conversion result')
    fonts_parser.add_argument('--fonts-dir', type=str,
                              help='Font-file store (default: $PSD_FONTS_DIR or ./fonts)')
    fonts_parser.add_argument('--output', type=str,
                              help='Write the result JSON to this file instead of stdout')

    args = parser.parse_args(argv)

    config = ExportConfig.from_env(
        skins_dir=getattr(args, 'skins_dir', None),
        fonts_dir=getattr(args, 'fonts_dir', None),
    )
    exporter = SkinExporter(config)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        if args.command == 'convert':
            result = exporter.export_file(Path(args.document))
            _write_output(result.to_dict(), args.output)
            print(f"✅ Exported {len(result.layers)} layers and {len(result.images)} images", file=sys.stderr)
        else:
            font_files = exporter.get_font_files(args.fonts)
            _write_output(font_files, args.output)
    except (SkinExportError, OSError) as e:
        print(f"❌ Export failed: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
