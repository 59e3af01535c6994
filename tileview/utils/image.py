import numpy as np
import numpy.typing as npt
from PIL import Image, ImageDraw, ImageFont
from typing import Tuple, Union

from tileview.assets import RenderInfo

# Type aliases for clarity
UInt8Array = npt.NDArray[np.uint8]
Font = Union[ImageFont.ImageFont, ImageFont.FreeTypeFont]


def region_image(info: RenderInfo, size: int) -> Image.Image:
    """
    Crop the region described by ``info`` and scale it to a ``size`` x ``size`` RGBA tile.
    """
    box = (
        info.src_x,
        info.src_y,
        info.src_x + info.src_width,
        info.src_y + info.src_height,
    )
    tile = info.image.crop(box)
    if tile.mode != "RGBA":
        tile = tile.convert("RGBA")
    if tile.size != (size, size):
        tile = tile.resize((size, size))
    return tile


def composite_clipped(
    canvas: Image.Image, image: Image.Image, dest: Tuple[int, int]
) -> bool:
    """
    Alpha-composite ``image`` onto ``canvas`` with its top-left at ``dest``,
    cropping whatever falls outside the canvas (``dest`` may be negative).
    Returns False if nothing was visible.
    """
    x, y = dest
    left, top = max(0, -x), max(0, -y)
    right = min(image.width, canvas.width - x)
    bottom = min(image.height, canvas.height - y)
    if right <= left or bottom <= top:
        return False

    if image.mode != "RGBA":
        image = image.convert("RGBA")
    if (left, top, right, bottom) != (0, 0, image.width, image.height):
        image = image.crop((left, top, right, bottom))
    canvas.alpha_composite(image, (x + left, y + top))
    return True


def load_label_font(size: int) -> Font:
    """Pillow's bundled font at ``size`` pixels."""
    return ImageFont.load_default(size=size)


def draw_label(
    draw: ImageDraw.ImageDraw,
    text: str,
    anchor: Tuple[int, int],
    font: Font,
    fill: Tuple[int, int, int, int],
) -> None:
    """
    Draw ``text`` horizontally centered on ``anchor`` with its bottom edge on it.
    """
    # Bitmap fonts reject the ``anchor`` argument, so position from the bbox.
    left, _, right, bottom = draw.textbbox((0, 0), text, font=font)
    x = anchor[0] - (right - left) / 2 - left
    y = anchor[1] - bottom
    draw.text((x, y), text, font=font, fill=fill)


def canvas_to_array(canvas: Image.Image) -> UInt8Array:
    """
    Copy an RGBA canvas into an ``(H, W, 4)`` uint8 array.
    """
    if canvas.mode != "RGBA":
        canvas = canvas.convert("RGBA")
    return np.array(canvas, dtype=np.uint8)
