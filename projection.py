# projection.py: geode projection parser
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple, Union

from models import BlockType, Vec2

# Accepted glyphs per block type.  ``to_text`` writes the first one.
_GLYPHS: Dict[BlockType, str] = {
    BlockType.AIR: "._ ",
    BlockType.CRYSTAL: "Cc*",
    BlockType.BUD: "#B",
}
_CHAR_TO_BLOCK: Dict[str, BlockType] = {
    ch: block for block, chars in _GLYPHS.items() for ch in chars
}
_COMMENT = ";"


class GeodeProjection:
    """A rectangular 2D grid of blocks; anything outside the extent is air."""

    def __init__(self, x_range: range, y_range: range, blocks: Dict[Vec2, BlockType]):
        self.x_range = x_range
        self.y_range = y_range
        self._blocks = {
            pos: b for pos, b in blocks.items()
            if b is not BlockType.AIR and pos.x in x_range and pos.y in y_range
        }

    def __getitem__(self, pos: Vec2) -> BlockType:
        return self._blocks.get(pos, BlockType.AIR)

    def get(self, x: int, y: int) -> BlockType:
        return self[Vec2(x, y)]

    @property
    def width(self) -> int:
        return len(self.x_range)

    @property
    def height(self) -> int:
        return len(self.y_range)

    def crystals(self) -> List[Vec2]:
        return [
            Vec2(x, y)
            for y in self.y_range
            for x in self.x_range
            if self._blocks.get(Vec2(x, y)) is BlockType.CRYSTAL
        ]

    def buds(self) -> List[Vec2]:
        return [
            Vec2(x, y)
            for y in self.y_range
            for x in self.x_range
            if self._blocks.get(Vec2(x, y)) is BlockType.BUD
        ]

    # ---------- parsing ----------

    @classmethod
    def from_rows(cls, rows: Sequence[str], origin: Tuple[int, int] = (0, 0)) -> "GeodeProjection":
        rows = [r.rstrip("\n") for r in rows]
        ox, oy = origin
        width = max((len(r) for r in rows), default=0)
        blocks: Dict[Vec2, BlockType] = {}
        for y, row in enumerate(rows):
            for x, ch in enumerate(row):
                block = _CHAR_TO_BLOCK.get(ch)
                if block is None:
                    raise ValueError(f"unknown block glyph {ch!r} at row {y + 1}, column {x + 1}")
                if block is not BlockType.AIR:
                    blocks[Vec2(ox + x, oy + y)] = block
        return cls(range(ox, ox + width), range(oy, oy + len(rows)), blocks)

    @classmethod
    def from_text(cls, text: str) -> List["GeodeProjection"]:
        """Parse every geode in ``text``; geodes are separated by empty lines.

        A line holding only spaces is a row of air, not a separator.
        """
        out: List[GeodeProjection] = []
        for chunk in _split_blocks(text.splitlines()):
            out.append(cls.from_rows(chunk))
        return out

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> List["GeodeProjection"]:
        with open(path, "r", encoding="utf-8") as fh:
            return cls.from_text(fh.read())

    def to_text(self) -> str:
        lines = []
        for y in self.y_range:
            lines.append("".join(_GLYPHS[self.get(x, y)][0] for x in self.x_range))
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"GeodeProjection({self.width}x{self.height}, "
            f"crystals={len(self.crystals())}, buds={len(self.buds())})"
        )


def _split_blocks(lines: Iterable[str]) -> List[List[str]]:
    blocks: List[List[str]] = []
    current: List[str] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        if line.lstrip().startswith(_COMMENT):
            continue
        if line == "":
            if current:
                blocks.append(current)
                current = []
            continue
        current.append(line)
    if current:
        blocks.append(current)
    return blocks


__all__ = ["GeodeProjection"]
