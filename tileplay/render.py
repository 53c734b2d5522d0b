"""Rasterise tile-set primitives into Pillow images."""

from __future__ import annotations

from PIL import Image, ImageDraw

from tileplay.constants import DESIGN_SIZE
from tileplay.tile import Tile
from tileplay.tilesets import Primitive, TileSet

_HALF = DESIGN_SIZE / 2


def _turn_point(x: float, y: float, quarter: int) -> tuple[float, float]:
    """Rotate (x, y) clockwise by *quarter* right angles about the centre."""
    for _ in range(quarter % 4):
        x, y = _HALF - (y - _HALF), _HALF + (x - _HALF)
    return x, y


def _turn_box(box, quarter: int) -> tuple[float, float, float, float]:
    x0, y0 = _turn_point(box[0], box[1], quarter)
    x1, y1 = _turn_point(box[2], box[3], quarter)
    return min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)


def _draw(draw: ImageDraw.ImageDraw, prim: Primitive, scale: float) -> None:
    q = prim.quarter
    width = max(1, round(prim.stroke_width * scale))

    if prim.kind in ("polygon", "rect"):
        if prim.kind == "rect":
            x0, y0, x1, y1 = prim.box
            pts = ((x0, y0), (x1, y0), (x1, y1), (x0, y1))
        else:
            pts = prim.points
        xy = [(px * scale, py * scale) for px, py in (_turn_point(x, y, q) for x, y in pts)]
        draw.polygon(xy, fill=prim.fill, outline=prim.stroke, width=width)
        return

    box = [v * scale for v in _turn_box(prim.box, q)]
    start, end = prim.start + 90 * q, prim.end + 90 * q
    if prim.kind == "ellipse":
        draw.ellipse(box, fill=prim.fill, outline=prim.stroke, width=width)
    elif prim.kind == "pieslice":
        draw.pieslice(box, start, end, fill=prim.fill, outline=prim.stroke)
    elif prim.kind == "arc":
        draw.arc(box, start, end, fill=prim.fill, width=width)
    else:
        raise ValueError(f"unknown primitive kind: {prim.kind!r}")


def render_tile(
    tile_set: TileSet,
    tile: Tile,
    size: int = 100,
    rotation: int | None = None,
    target: Image.Image | None = None,
) -> Image.Image:
    """Draw *tile* into *target* (or a fresh ``size`` x ``size`` RGB image)."""
    img = target if target is not None else Image.new("RGB", (size, size), "#000000")
    scale = img.width / DESIGN_SIZE
    draw = ImageDraw.Draw(img)
    for prim in tile_set.drawable(tile, rotation):
        _draw(draw, prim, scale)
    return img


def render_board(tile_set: TileSet, board, cell: int = 64) -> Image.Image:
    """Compose the whole board into one image, empty cells left dark."""
    img = Image.new("RGB", (cell * board.size, cell * board.size), "#1a1a2e")
    for x, y, tile in board.iter_tiles():
        img.paste(render_tile(tile_set, tile, cell), (x * cell, y * cell))
    return img
