"""Export configuration."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

SKINS_DIR_ENV = 'PSD_SKINS_DIR'
FONTS_DIR_ENV = 'PSD_FONTS_DIR'

DEFAULT_INFO = {
    'description': 'Normal',
    'date': 'sRGB',
    'title': '',
    'author': '',
    'keywords': '',
    'generator': 'Export Kit v1.2.8',
}


@dataclass
class ExportConfig:
    """
    Directories and static metadata used by a conversion.

    Attributes:
        skins_dir: Root directory holding one asset directory per document
        fonts_dir: Font-file store
        asset_url_prefix: Prefix of the src paths written into layer records
        info: Static metadata copied into every envelope
    """
    skins_dir: Path = field(default_factory=lambda: Path('skins'))
    fonts_dir: Path = field(default_factory=lambda: Path('fonts'))
    asset_url_prefix: str = '../skins'
    info: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_INFO))

    def __post_init__(self):
        self.skins_dir = Path(self.skins_dir)
        self.fonts_dir = Path(self.fonts_dir)

    def asset_dir(self, document_name: str) -> Path:
        return self.skins_dir / document_name

    @classmethod
    def from_env(cls,
                 skins_dir: Optional[str] = None,
                 fonts_dir: Optional[str] = None) -> 'ExportConfig':
        """
        Build a config from the environment; explicit arguments win.

        Args:
            skins_dir: Overrides PSD_SKINS_DIR
            fonts_dir: Overrides PSD_FONTS_DIR
        """
        return cls(
            skins_dir=Path(skins_dir or os.environ.get(SKINS_DIR_ENV, 'skins')),
            fonts_dir=Path(fonts_dir or os.environ.get(FONTS_DIR_ENV, 'fonts')),
        )
