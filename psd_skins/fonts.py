"""
Font collection and retrieval.

`collect_fonts` gathers the distinct font names used by text layers, in an
independent pass over the tree. `FontStore` looks those names up as `.ttf`
files in a font directory and returns them base64-encoded.
"""

import base64
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Set

from psd_skins.attributes import sanitize_filename
from psd_skins.document import LayerNode
from psd_skins.errors import FontStoreError

logger = logging.getLogger(__name__)


def _collect_font_set(nodes: Iterable[LayerNode]) -> Set[str]:
    fonts: Set[str] = set()
    for node in nodes:
        if node.font_name:
            fonts.add(node.font_name)
        if node.children:
            fonts |= _collect_font_set(node.children)
    return fonts


def collect_fonts(nodes: Iterable[LayerNode]) -> List[str]:
    """
    Collect the distinct font names referenced anywhere in the tree.

    Args:
        nodes: Top-level nodes of the document

    Returns:
        Font names without duplicates, sorted for stable output
    """
    return sorted(_collect_font_set(nodes))


class FontStore:
    """
    Directory of font files named after their sanitised font name.
    """

    def __init__(self, fonts_dir: Path):
        self.fonts_dir = Path(fonts_dir)
        self.logger = logging.getLogger(__name__)

    def font_filename(self, font_name: str) -> str:
        return f"{sanitize_filename(font_name)}.ttf"

    def list_files(self) -> Set[str]:
        """
        List the filenames present in the store.

        Raises:
            FontStoreError: If the directory cannot be read
        """
        try:
            return {item.name for item in self.fonts_dir.iterdir() if item.is_file()}
        except OSError as e:
            raise FontStoreError(f"Cannot read font directory {self.fonts_dir}: {e}")

    def get_font_files(self, fonts: Sequence[str]) -> List[Dict[str, str]]:
        """
        Load the font files matching the given font names.

        Names without a matching file are skipped. Any read failure of the
        store yields an empty list.

        Args:
            fonts: Font names as collected from the document

        Returns:
            List of {'name': <font file name>, 'data': <base64 contents>}
        """
        font_files = []
        try:
            available = self.list_files()
            for font in fonts:
                font_filename = self.font_filename(font)
                if font_filename not in available:
                    self.logger.debug(f"No font file for {font} ({font_filename})")
                    continue
                try:
                    data = (self.fonts_dir / font_filename).read_bytes()
                except OSError as e:
                    raise FontStoreError(f"Cannot read font file {font_filename}: {e}")
                font_files.append({
                    'name': font_filename,
                    'data': base64.b64encode(data).decode('ascii'),
                })
        except FontStoreError as e:
            self.logger.error(f"Failed to read font files: {e}")
            return []

        self.logger.info(f"🔤 Found {len(font_files)} of {len(fonts)} font files")
        return font_files
