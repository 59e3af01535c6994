"""Z-ordered registry of draw layers.

Each :class:`Layer` is a named draw callback plus opaque data handed back to
it on every pass. The registry keeps its layers **already sorted** by
``z_index`` (ascending; equal indices keep registration order), so a draw
pass simply iterates it.

Registering a name that already exists replaces the old entry: last write
wins, and the layer moves to the slot of its new ``z_index``.
"""

from bisect import bisect_right
from dataclasses import dataclass
import logging
from typing import Any, Iterator, List, Optional

from pyrsistent import pvector
from pyrsistent.typing import PVector

from tileview.types import DrawFn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Layer:
    """One contribution to a composed frame.

    Attributes:
        z_index: Draw order; lower draws first (further back).
        name: Unique key within a registry.
        draw_fn: Called as ``draw_fn(canvas, viewport, data)``; returning
            ``False`` reports a failed pass.
        data: Arbitrary payload passed back to ``draw_fn``.
    """

    z_index: int
    name: str
    draw_fn: DrawFn
    data: Any = None


class LayerRegistry:
    """Ordered set of :class:`Layer` entries."""

    def __init__(self) -> None:
        self._layers: PVector[Layer] = pvector()

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)

    def __contains__(self, name: object) -> bool:
        return any(layer.name == name for layer in self._layers)

    def _index_of(self, name: str) -> Optional[int]:
        for index, layer in enumerate(self._layers):
            if layer.name == name:
                return index
        return None

    def get(self, name: str) -> Optional[Layer]:
        index = self._index_of(name)
        return None if index is None else self._layers[index]

    def names(self) -> List[str]:
        """Layer names in draw order."""
        return [layer.name for layer in self._layers]

    def register(
        self, z_index: int, name: str, draw_fn: DrawFn, data: Any = None
    ) -> Layer:
        """Add ``name`` at ``z_index``, replacing any layer of the same name."""
        layers = self._layers
        existing = self._index_of(name)
        if existing is not None:
            logger.info(
                "Replacing layer: name=%s z_index=%s -> %s",
                name,
                layers[existing].z_index,
                z_index,
            )
            layers = layers.delete(existing)
        layer = Layer(z_index=z_index, name=name, draw_fn=draw_fn, data=data)
        index = bisect_right([entry.z_index for entry in layers], z_index)
        self._layers = layers[:index] + pvector([layer]) + layers[index:]
        logger.debug("Registered layer: name=%s z_index=%s", name, z_index)
        return layer

    def unregister(self, name: str) -> bool:
        """Drop ``name``; returns whether it was present."""
        index = self._index_of(name)
        if index is None:
            return False
        self._layers = self._layers.delete(index)
        return True
