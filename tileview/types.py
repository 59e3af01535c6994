"""Common type aliases and enumerations.

``DrawFn`` is the central extension point of the renderer: every layer,
built-in or contributed by an extension, is a callable of this shape.
"""

from enum import StrEnum
from typing import Any, Callable, Optional, TYPE_CHECKING


# Forward declaration for DrawFn typing to avoid circular imports:
if TYPE_CHECKING:
    from PIL.Image import Image
    from tileview.viewport import Viewport

PlayerID = str

# Wall-clock milliseconds.
Clock = Callable[[], float]

DrawFn = Callable[["Image", "Viewport", Any], Optional[bool]]


class Facing(StrEnum):
    """Base orientation of a player (values are the wire representation)."""

    UP = "U"
    DOWN = "D"
    LEFT = "L"
    RIGHT = "R"


class Stride(StrEnum):
    """Walk-cycle modifier appended to a facing to select a sprite frame."""

    NONE = ""
    RIGHT = "R"
    LEFT = "L"
