"""
Document Model

In-memory representation of a parsed layered document as handed over by the
document-model parser. The exporter only reads these objects.

The classification of a node into group / text / image / other is derived once
by `classify` and carried as a `LayerKind` so the walker never re-infers the
node type at its use sites.
"""

import json
import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from psd_skins.errors import InvalidDocumentError


class LayerKind(Enum):
    GROUP = 'group'
    TEXT = 'text'
    IMAGE = 'image'
    OTHER = 'other'


@dataclass
class FontStyle:
    name: Optional[str] = None
    colors: List[Sequence[float]] = field(default_factory=list)
    sizes: List[float] = field(default_factory=list)


@dataclass
class TextContent:
    text: Optional[str] = None
    font: Optional[FontStyle] = None
    alignment: Optional[str] = None


@dataclass
class LayerNode:
    """
    One node of the layer tree.

    Attributes:
        name: Layer name as stored in the document (may be empty)
        left, top, right, bottom: Bounding box; any of them may be missing
        children: Ordered child nodes; non-empty means the node is a group
        text: Text payload for type layers
        raster: Opaque raster handle (see `psd_skins.assets.encode_png`)
    """
    name: Optional[str] = None
    left: Optional[float] = None
    top: Optional[float] = None
    right: Optional[float] = None
    bottom: Optional[float] = None
    children: List['LayerNode'] = field(default_factory=list)
    text: Optional[TextContent] = None
    raster: Any = None

    @property
    def kind(self) -> LayerKind:
        return classify(self)

    @property
    def font_name(self) -> Optional[str]:
        if self.text and self.text.font and self.text.font.name:
            return self.text.font.name
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LayerNode':
        """
        Build a node (and its subtree) from a JSON-style layer dump.

        The keys follow the parser's field names: `name`, `left`, `top`,
        `right`, `bottom`, `children`, `text` ({text, font: {name, colors,
        sizes}, alignment}) and `canvas` or `raster` for the raster handle. A
        JSON pixel grid is turned into a numpy array.
        """
        if not isinstance(data, dict):
            raise InvalidDocumentError(f"Invalid PSD file: layer must be an object, got {type(data).__name__}")
        text_data = data.get('text')
        text = None
        if isinstance(text_data, dict):
            font_data = text_data.get('font')
            font = None
            if isinstance(font_data, dict):
                font = FontStyle(
                    name=_optional_str(font_data.get('name')),
                    colors=list(font_data.get('colors') or []),
                    sizes=list(font_data.get('sizes') or []),
                )
            text = TextContent(
                text=text_data.get('text'),
                font=font,
                alignment=text_data.get('alignment'),
            )

        return cls(
            name=_optional_str(data.get('name')),
            left=data.get('left'),
            top=data.get('top'),
            right=data.get('right'),
            bottom=data.get('bottom'),
            children=[cls.from_dict(child) for child in data.get('children') or []],
            text=text,
            raster=_raster_from_json(data.get('raster', data.get('canvas'))),
        )


@dataclass
class Document:
    """Root of a parsed document."""
    width: Any
    height: Any
    children: List[LayerNode] = field(default_factory=list)

    def validate(self) -> None:
        """
        Check that the root describes a usable document.

        Raises:
            InvalidDocumentError: If width or height is missing, zero or non-finite
        """
        for label, value in (('width', self.width), ('height', self.height)):
            if not _is_finite_number(value) or value == 0:
                raise InvalidDocumentError(f"Invalid PSD file: document {label} is {value!r}")

    @classmethod
    def from_dict(cls, data: Any) -> 'Document':
        if not isinstance(data, dict):
            raise InvalidDocumentError("Invalid PSD file: document root must be an object")
        children = data.get('children') or []
        return cls(
            width=data.get('width'),
            height=data.get('height'),
            children=[LayerNode.from_dict(child) for child in children],
        )

    @classmethod
    def load(cls, json_path: Path) -> 'Document':
        """
        Read a JSON document dump written by the document-model parser.

        Args:
            json_path: Path of the .json dump

        Returns:
            Document (not yet validated)

        Raises:
            InvalidDocumentError: If the file is missing, empty or not valid JSON
        """
        json_path = Path(json_path)
        if not json_path.is_file():
            raise InvalidDocumentError(f"Uploaded file not found: {json_path}")
        try:
            content = json_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise InvalidDocumentError(f"Cannot read {json_path}: {e}")
        if not content.strip():
            raise InvalidDocumentError(f"Empty file content: {json_path}")
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise InvalidDocumentError(f"Invalid document JSON in {json_path}: {e}")
        return cls.from_dict(data)


def classify(node: LayerNode) -> LayerKind:
    """
    Classify a node in strict priority order: group, text, image, other.

    Args:
        node: Layer node to classify

    Returns:
        The node's LayerKind
    """
    if node.children:
        return LayerKind.GROUP
    if node.text is not None and node.text.text:
        return LayerKind.TEXT
    if node.raster is not None:
        return LayerKind.IMAGE
    return LayerKind.OTHER


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def _raster_from_json(value: Any) -> Any:
    """Turn a JSON pixel grid (rows of [r, g, b, (a)] channels) into a numpy array."""
    if isinstance(value, list):
        try:
            return np.asarray(value, dtype=np.uint8)
        except (TypeError, ValueError, OverflowError):
            # ragged or non-numeric grids stay as they are and fail at encode time
            return value
    return value
