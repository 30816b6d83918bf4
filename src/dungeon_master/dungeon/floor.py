from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from ..core.random import RandomSource
from .entities import Entity
from .tiles import CHAR_TILES, TILE_CHARS, Tile, TileType

logger = logging.getLogger(__name__)

Point = Tuple[int, int]

DEFAULT_WIDTH = 10
DEFAULT_HEIGHT = 10
MAIN_ROOM = (2, 2, 6, 6)
ENTRANCE_POS: Point = (5, 1)
STAIRS_POS: Point = (5, 8)


@dataclass
class Room:
    x: int
    y: int
    width: int
    height: int

    def cells(self) -> List[Point]:
        return [
            (x, y)
            for y in range(self.y, self.y + self.height)
            for x in range(self.x, self.x + self.width)
        ]


class Floor:
    """One 1-based dungeon level: a fixed-size tile grid plus room bookkeeping.

    Coordinates are (x, y) with (0,0) at top-left; the grid is indexed grid[y][x].
    A new floor starts with one carved room, the entrance and the stairs.
    """

    def __init__(
        self,
        floor_number: int,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        generate: bool = True,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Floor width/height must be > 0")
        self.floor_number = floor_number
        self.width = width
        self.height = height
        self.grid: List[List[Tile]] = self.create_empty_grid()
        self.rooms: List[Room] = []
        if generate:
            self.generate_basic_layout()

    def create_empty_grid(self) -> List[List[Tile]]:
        return [[Tile(TileType.WALL) for _ in range(self.width)] for _ in range(self.height)]

    def generate_basic_layout(self) -> None:
        rx, ry, rw, rh = MAIN_ROOM
        room = Room(rx, ry, min(rw, self.width - rx), min(rh, self.height - ry))
        self.rooms.append(room)
        for x, y in room.cells():
            if self.is_valid_position(x, y):
                self.grid[y][x].type = TileType.FLOOR

        # place_special records the displaced type before overwriting it
        for (x, y), special in ((ENTRANCE_POS, TileType.ENTRANCE), (STAIRS_POS, TileType.STAIRS)):
            if self.is_valid_position(x, y):
                self.grid[y][x].place_special(special)
        logger.debug("Floor %d generated with basic layout", self.floor_number)

    def is_valid_position(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def tile_at(self, x: int, y: int) -> Optional[Tile]:
        if not self.is_valid_position(x, y):
            return None
        return self.grid[y][x]

    def place_entity(self, entity: Entity, x: int, y: int) -> bool:
        if not self.is_valid_position(x, y):
            return False
        tile = self.grid[y][x]
        if tile.type is not TileType.FLOOR or tile.entity is not None:
            return False
        tile.entity = entity
        return True

    def remove_entity(self, x: int, y: int) -> bool:
        if not self.is_valid_position(x, y):
            return False
        self.grid[y][x].entity = None
        return True

    def take_entity(self, x: int, y: int) -> Optional[Entity]:
        """Detach and return the occupant of (x, y), if any."""
        tile = self.tile_at(x, y)
        if tile is None:
            return None
        entity, tile.entity = tile.entity, None
        return entity

    def expand_room(self, rng: RandomSource) -> Room:
        room = Room(
            x=rng.randrange(5),
            y=rng.randrange(5),
            width=3 + rng.randrange(3),
            height=3 + rng.randrange(3),
        )
        carved = 0
        for y in range(room.y, min(room.y + room.height, self.height)):
            for x in range(room.x, min(room.x + room.width, self.width)):
                if self.grid[y][x].type is TileType.WALL:
                    self.grid[y][x].type = TileType.FLOOR
                    carved += 1
        self.rooms.append(room)
        logger.debug("Floor %d expanded with %s (%d cells carved)", self.floor_number, room, carved)
        return room

    def iter_tiles(self) -> Iterator[Tuple[int, int, Tile]]:
        for y, row in enumerate(self.grid):
            for x, tile in enumerate(row):
                yield x, y, tile

    def find_tile(self, tile_type: TileType) -> Optional[Point]:
        """First cell of the given type in row-major order."""
        for x, y, tile in self.iter_tiles():
            if tile.type is tile_type:
                return (x, y)
        return None

    def entity_position(self, entity: Entity) -> Optional[Point]:
        for x, y, tile in self.iter_tiles():
            if tile.entity is entity:
                return (x, y)
        return None

    def entities(self) -> Iterator[Entity]:
        for _, _, tile in self.iter_tiles():
            if tile.entity is not None:
                yield tile.entity

    def to_ascii(self) -> List[str]:
        """Render tile types as rows of characters (entities are not shown)."""
        return ["".join(TILE_CHARS[t.type] for t in row) for row in self.grid]

    @classmethod
    def from_ascii(cls, floor_number: int, rows: Sequence[str]) -> "Floor":
        """Build a floor from ASCII rows for tests/tools.

        '#' wall, '.' floor, 'E' entrance, 'S' stairs, 'C' core. Special cells
        get a floor underlay.
        """
        if not rows:
            raise ValueError("rows must not be empty")
        width = len(rows[0])
        for r in rows:
            if len(r) != width:
                raise ValueError("All rows must be same width")
        floor = cls(floor_number, width=width, height=len(rows), generate=False)
        for y, row in enumerate(rows):
            for x, ch in enumerate(row):
                tile_type = CHAR_TILES[ch]
                tile = floor.grid[y][x]
                if tile_type.is_special:
                    tile.type = TileType.FLOOR
                    tile.place_special(tile_type)
                else:
                    tile.type = tile_type
        return floor

    def __repr__(self) -> str:
        return f"Floor({self.floor_number}, {self.width}x{self.height})"
