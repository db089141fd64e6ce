"""
Layer Tree Walker

Preorder depth-first flattening of the layer tree into an ordered list of
layer records. A group's own placeholder record comes first, followed by its
flattened descendants in document order; the nesting itself is not kept.

The naming counter and the asset list live in an explicit `WalkState` that is
passed down every recursive call, so a whole traversal shares one counter.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from psd_skins.assets import AssetExporter, ExportedAsset
from psd_skins.attributes import extract_geometry, extract_text_attributes
from psd_skins.document import LayerKind, LayerNode, classify

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ('font', 'justification', 'color', 'size', 'text')


@dataclass
class ExportedLayer:
    """One flattened layer record of the output scene."""
    type: str
    name: str
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0
    src: Optional[str] = None
    font: Optional[str] = None
    justification: Optional[str] = None
    color: Optional[str] = None
    size: Optional[float] = None
    text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        record = {
            'type': self.type,
            'src': self.src,
            'name': self.name,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
        }
        for key in _TEXT_FIELDS:
            value = getattr(self, key)
            if value is not None:
                record[key] = value
        return record


@dataclass
class WalkState:
    """Accumulator threaded through a traversal."""
    counter: int = 0
    assets: List[ExportedAsset] = field(default_factory=list)


def output_type(kind: LayerKind) -> str:
    # Only text keeps its own type; groups and other layers are emitted as images.
    return 'text' if kind is LayerKind.TEXT else 'image'


def should_include(kind: LayerKind, record: ExportedLayer) -> bool:
    """An image record without an exported asset is dropped; everything else is kept."""
    return kind is not LayerKind.IMAGE or record.src is not None


class LayerTreeWalker:
    """
    Flattens a layer tree, exporting raster layers on the way.
    """

    def __init__(self, asset_exporter: AssetExporter):
        self.asset_exporter = asset_exporter
        self.logger = logger

    def walk(self, nodes: Sequence[LayerNode], state: Optional[WalkState] = None) -> List[ExportedLayer]:
        """
        Flatten a sequence of sibling nodes and their subtrees.

        Args:
            nodes: Nodes in document order
            state: Shared traversal state; a fresh one is created when omitted

        Returns:
            Flattened layer records in preorder
        """
        if state is None:
            state = WalkState()

        result: List[ExportedLayer] = []
        for node in nodes:
            kind = classify(node)
            record = self._build_record(node, kind, state)

            if should_include(kind, record):
                result.append(record)
            else:
                self.logger.debug(f"Skipping image layer without asset: {record.name}")

            if kind is LayerKind.GROUP:
                result.extend(self.walk(node.children, state))

        return result

    def _build_record(self, node: LayerNode, kind: LayerKind, state: WalkState) -> ExportedLayer:
        record = ExportedLayer(
            type=output_type(kind),
            name=node.name or f"layer_{state.counter}",
            **extract_geometry(node),
        )

        if kind is LayerKind.IMAGE:
            outcome = self.asset_exporter.export(node, state.counter)
            if outcome.ok:
                record.src = outcome.src
                state.assets.append(outcome.asset)
                state.counter += 1
        elif kind is LayerKind.TEXT:
            for key, value in extract_text_attributes(node).items():
                setattr(record, key, value)

        return record
