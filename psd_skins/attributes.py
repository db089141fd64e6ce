"""
Attribute extraction for a single layer node: geometry, text styling, color
and the filename sanitisation used for exported assets and font files.
"""

import math
import re
from typing import Any, Dict, Optional, Sequence

from psd_skins.document import LayerNode

_UNSAFE_FILENAME_CHARS = re.compile(r'[^A-Za-z0-9_-]')


def sanitize_filename(name: Optional[str]) -> str:
    """
    Make a layer or font name safe for use as a filename.

    Args:
        name: Original name

    Returns:
        Lower-cased name with every character outside [A-Za-z0-9_-] replaced
        by an underscore, or 'unnamed' for an empty name
    """
    if not name:
        return 'unnamed'
    return _UNSAFE_FILENAME_CHARS.sub('_', str(name)).lower()


def rgba_to_hex(rgba: Optional[Sequence[float]]) -> Optional[str]:
    """
    Convert an [r, g, b, (a)] channel sequence to a '0xrrggbb' string.

    Alpha is dropped. Returns None when fewer than three channels are given.
    """
    if not rgba or len(rgba) < 3:
        return None
    r, g, b = (_channel(value) for value in list(rgba)[:3])
    return f"0x{r:02x}{g:02x}{b:02x}"


def _channel(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return max(0, min(255, int(round(number))))


def _finite_or_zero(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value if math.isfinite(value) else 0


def extract_geometry(node: LayerNode) -> Dict[str, float]:
    """
    Extract position and size of a node.

    Missing or non-finite bounds count as 0; width and height never go negative.
    """
    left = _finite_or_zero(node.left)
    top = _finite_or_zero(node.top)
    right = _finite_or_zero(node.right)
    bottom = _finite_or_zero(node.bottom)
    return {
        'x': left,
        'y': top,
        'width': max(0, right - left),
        'height': max(0, bottom - top),
    }


def extract_text_attributes(node: LayerNode) -> Dict[str, Any]:
    """
    Extract text styling from a text node.

    Only fields present on the node are copied; nothing is defaulted.

    Args:
        node: Node classified as text

    Returns:
        Dict with any of 'font', 'justification', 'color', 'size', 'text'
    """
    attributes: Dict[str, Any] = {}
    content = node.text
    if content is None:
        return attributes

    font = content.font
    if font is not None and font.name:
        attributes['font'] = font.name
    if content.alignment:
        attributes['justification'] = content.alignment
    if font is not None and font.colors:
        color = rgba_to_hex(font.colors[0])
        if color is not None:
            attributes['color'] = color
    if font is not None and font.sizes and font.sizes[0]:
        attributes['size'] = font.sizes[0]
    if content.text:
        attributes['text'] = content.text

    return attributes
