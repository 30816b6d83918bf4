from .tiles import Tile, TileType
from .entities import EntityKind, EntityTemplate, Monster, Trap, Treasure
from .floor import Floor, Room

__all__ = [
    "Tile",
    "TileType",
    "EntityKind",
    "EntityTemplate",
    "Monster",
    "Trap",
    "Treasure",
    "Floor",
    "Room",
]
