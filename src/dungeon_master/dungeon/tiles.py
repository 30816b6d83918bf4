from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .entities import Entity


class TileType(str, Enum):
    WALL = "wall"
    FLOOR = "floor"
    ENTRANCE = "entrance"
    STAIRS = "stairs"
    CORE = "core"

    @property
    def is_special(self) -> bool:
        return self in SPECIAL_TILE_TYPES


SPECIAL_TILE_TYPES = frozenset({TileType.ENTRANCE, TileType.STAIRS, TileType.CORE})

# Single-character codes used by Floor.to_ascii/from_ascii.
TILE_CHARS = {
    TileType.WALL: "#",
    TileType.FLOOR: ".",
    TileType.ENTRANCE: "E",
    TileType.STAIRS: "S",
    TileType.CORE: "C",
}
CHAR_TILES = {ch: t for t, ch in TILE_CHARS.items()}


@dataclass
class Tile:
    """One grid cell.

    `underlay` holds the type hidden beneath a special marker so that moving the
    marker away restores the cell instead of leaving a hole.
    """

    type: TileType = TileType.WALL
    entity: Optional["Entity"] = None
    underlay: Optional[TileType] = None

    @property
    def is_special(self) -> bool:
        return self.type.is_special

    @property
    def is_occupied(self) -> bool:
        return self.entity is not None

    def place_special(self, special: TileType) -> None:
        """Cover this cell with a special marker, remembering what was here."""
        if not special.is_special:
            raise ValueError(f"{special!r} is not a special tile type")
        self.underlay = self.type
        self.type = special

    def clear_special(self) -> TileType:
        """Remove the special marker and restore the underlay (floor by default)."""
        restored = self.underlay or TileType.FLOOR
        self.type = restored
        self.underlay = None
        self.entity = None
        return restored
