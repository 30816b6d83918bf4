from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..errors import SnapshotValidationError
from ..save.snapshot import (
    CoreModel,
    DungeonSnapshot,
    FloorModel,
    MonsterModel,
    RoomModel,
    TileModel,
    TrapModel,
    TreasureModel,
)
from .entities import Entity, Monster, Trap, Treasure
from .floor import DEFAULT_HEIGHT, DEFAULT_WIDTH, Floor, Room
from .tiles import Tile, TileType

logger = logging.getLogger(__name__)

CORE_POS = (5, 5)
CORE_HP = 100


@dataclass
class CoreRecord:
    """The protected objective. Lives on floor 1; shared with the session."""

    x: int
    y: int
    hp: int = CORE_HP
    max_hp: int = CORE_HP


class DungeonData:
    """Owns the ordered floors and the core record.

    Floor N lives at index N-1; floors are only ever appended. Entities are
    owned by the tile they occupy, so the monster/trap/treasure registries are
    views over the grids rather than separate lists that could drift.
    """

    def __init__(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT, core_hp: int = CORE_HP) -> None:
        self.width = width
        self.height = height
        self.core_hp = core_hp
        self.floors: List[Floor] = [Floor(1, width, height)]
        self.dungeon_core: Optional[CoreRecord] = None

    # Floors
    def add_floor(self) -> int:
        number = len(self.floors) + 1
        self.floors.append(Floor(number, self.width, self.height))
        logger.info("Added floor %d", number)
        return number

    def get_floor(self, floor_number: int) -> Optional[Floor]:
        if floor_number < 1 or floor_number > len(self.floors):
            return None
        return self.floors[floor_number - 1]

    @property
    def floor_count(self) -> int:
        return len(self.floors)

    # Core
    def initialize_dungeon_core(self) -> CoreRecord:
        x, y = CORE_POS
        core = CoreRecord(x=x, y=y, hp=self.core_hp, max_hp=self.core_hp)
        floor1 = self.get_floor(1)
        if floor1 is not None and floor1.is_valid_position(x, y):
            tile = floor1.grid[y][x]
            if tile.type is TileType.CORE:
                logger.debug("Core tile already present at (%d,%d)", x, y)
            else:
                tile.place_special(TileType.CORE)
        self.dungeon_core = core
        return core

    def underlay_at(self, floor_number: int, x: int, y: int) -> Optional[TileType]:
        """Type hidden beneath the special tile at (floor, x, y), if any."""
        floor = self.get_floor(floor_number)
        if floor is None:
            return None
        tile = floor.tile_at(x, y)
        if tile is None or not tile.is_special:
            return None
        return tile.underlay or TileType.FLOOR

    # Entities
    def place_entity(self, floor_number: int, entity: Entity, x: int, y: int) -> bool:
        floor = self.get_floor(floor_number)
        if floor is None:
            return False
        return floor.place_entity(entity, x, y)

    def remove_entity(self, floor_number: int, x: int, y: int) -> bool:
        floor = self.get_floor(floor_number)
        if floor is None:
            return False
        return floor.remove_entity(x, y)

    def _entities_of(self, cls: type) -> List[Any]:
        return [e for floor in self.floors for e in floor.entities() if isinstance(e, cls)]

    @property
    def monsters(self) -> List[Monster]:
        return self._entities_of(Monster)

    @property
    def traps(self) -> List[Trap]:
        return self._entities_of(Trap)

    @property
    def treasures(self) -> List[Treasure]:
        return self._entities_of(Treasure)

    def update_traps(self, dt: float) -> None:
        for trap in self.traps:
            trap.tick(dt)

    # Persistence
    def export_state(self) -> Dict[str, Any]:
        snapshot = DungeonSnapshot(
            floors=[_floor_to_model(f) for f in self.floors],
            core=CoreModel(**vars(self.dungeon_core)) if self.dungeon_core else None,
        )
        return snapshot.model_dump(mode="json")

    def import_state(self, snapshot: Dict[str, Any]) -> None:
        """Replace this dungeon with the given snapshot.

        Raises SnapshotValidationError before touching any state if the snapshot
        does not match the schema.
        """
        try:
            model = DungeonSnapshot.model_validate(snapshot)
        except ValidationError as exc:
            raise SnapshotValidationError(f"Invalid dungeon snapshot: {exc.error_count()} error(s)") from exc

        self.floors = [_floor_from_model(index + 1, fm) for index, fm in enumerate(model.floors)]
        first = self.floors[0]
        self.width, self.height = first.width, first.height
        if model.core is not None:
            self.dungeon_core = CoreRecord(**model.core.model_dump())
        else:
            logger.info("Snapshot has no core record; placing a fresh core")
            self.initialize_dungeon_core()
        recovered = self.restore_special_tile_underlays()
        if recovered:
            logger.warning("Recovered %d special tile underlay(s) as floor; original types were not saved", recovered)

    def restore_special_tile_underlays(self) -> int:
        """Give every special tile without an underlay a floor underlay.

        Lossy: the true original type is unknown for such cells.
        """
        recovered = 0
        for floor in self.floors:
            for _, _, tile in floor.iter_tiles():
                if tile.is_special and tile.underlay is None:
                    tile.underlay = TileType.FLOOR
                    recovered += 1
        return recovered


def _entity_to_model(entity: Entity):
    if isinstance(entity, Monster):
        return MonsterModel(
            name=entity.name, level=entity.level, cost=entity.cost,
            hp=entity.hp, attack=entity.attack, defense=entity.defense,
        )
    if isinstance(entity, Trap):
        return TrapModel(
            name=entity.name, damage=entity.damage, cost=entity.cost, triggered=entity.triggered,
            cooldown=entity.cooldown, cooldown_remaining=entity.cooldown_remaining,
        )
    if isinstance(entity, Treasure):
        return TreasureModel(name=entity.name, value=entity.value, cost=entity.cost, collected=entity.collected)
    raise ValueError(f"Unknown entity type: {type(entity).__name__}")


def _entity_from_model(model) -> Entity:
    data = model.model_dump(exclude={"kind"})
    if isinstance(model, MonsterModel):
        return Monster(**data)
    if isinstance(model, TrapModel):
        return Trap(**data)
    if isinstance(model, TreasureModel):
        return Treasure(**data)
    raise ValueError(f"Unknown entity model: {type(model).__name__}")


def _floor_to_model(floor: Floor) -> FloorModel:
    return FloorModel(
        floor_number=floor.floor_number,
        width=floor.width,
        height=floor.height,
        grid=[
            [
                TileModel(
                    type=tile.type,
                    entity=_entity_to_model(tile.entity) if tile.entity is not None else None,
                    underlay=tile.underlay,
                )
                for tile in row
            ]
            for row in floor.grid
        ],
        rooms=[RoomModel(x=r.x, y=r.y, width=r.width, height=r.height) for r in floor.rooms],
    )


def _floor_from_model(floor_number: int, model: FloorModel) -> Floor:
    if model.floor_number != floor_number:
        logger.warning("Snapshot floor %d stored at position %d; renumbering", model.floor_number, floor_number)
    floor = Floor(floor_number, model.width, model.height, generate=False)
    floor.grid = [
        [
            Tile(
                type=tm.type,
                entity=_entity_from_model(tm.entity) if tm.entity is not None else None,
                underlay=tm.underlay,
            )
            for tm in row
        ]
        for row in model.grid
    ]
    floor.rooms = [Room(r.x, r.y, r.width, r.height) for r in model.rooms]
    return floor
