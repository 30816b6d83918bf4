from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import GameConfig
from ..core.context import GameContext
from ..core.events import Severity
from ..dungeon.data import DungeonData
from ..dungeon.entities import Entity, EntityKind, EntityTemplate, Trap
from ..dungeon.floor import Floor
from ..dungeon.tiles import TileType

logger = logging.getLogger(__name__)


class BuilderMode(str, Enum):
    IDLE = "idle"
    PLACING = "placing"
    WALL_BUILDING = "wall_building"
    WALL_DESTROYING = "wall_destroying"
    MOVING = "moving"


class MoveKind(str, Enum):
    ENTITY = "entity"
    SPECIAL = "special"


@dataclass(frozen=True)
class MoveSource:
    floor: int
    x: int
    y: int
    kind: MoveKind


class DungeonBuilder:
    """Player-facing editing protocol over a DungeonData.

    Exactly one mode is active at a time; entering a mode resets the others.
    Every action reports through the context (DP, notifications, redraws) and
    returns a bool instead of raising on invalid input.
    """

    def __init__(self, dungeon: DungeonData, context: GameContext, config: Optional[GameConfig] = None) -> None:
        self.dungeon = dungeon
        self.context = context
        self.config = config or GameConfig()
        self.mode = BuilderMode.IDLE
        self.selected_entity: Optional[Entity] = None
        self.move_source: Optional[MoveSource] = None
        self.wall_cost = self.config.wall_cost
        self.current_floor = 1

    @property
    def floor(self) -> Optional[Floor]:
        return self.dungeon.get_floor(self.current_floor)

    def cancel(self) -> None:
        if self.selected_entity is not None:
            logger.debug("Discarding selected %s", self.selected_entity.name)
        self.mode = BuilderMode.IDLE
        self.selected_entity = None
        self.move_source = None

    def _enter(self, mode: BuilderMode) -> None:
        self.cancel()
        self.mode = mode

    # Placement
    def select_entity_template(self, kind: EntityKind, template: EntityTemplate) -> bool:
        """Pay for a template and hold a fresh entity until a tile is clicked."""
        if template.kind is not kind:
            raise ValueError(f"Template {template.name!r} is a {template.kind.value}, not a {kind.value}")
        if not self.context.spend_resource(template.cost):
            self.context.notify(f"Not enough DP for {template.name} ({template.cost} DP)", Severity.WARNING)
            return False
        self._enter(BuilderMode.PLACING)
        entity = template.create()
        if isinstance(entity, Trap):
            entity.cooldown = self.config.trap_cooldown
        self.selected_entity = entity
        self.context.notify(f"Select a tile to place {template.name}", Severity.INFO)
        return True

    def place_entity_at(self, pixel_x: float, pixel_y: float) -> bool:
        size = self.config.tile_size
        return self.click_tile(int(pixel_x // size), int(pixel_y // size))

    def click_tile(self, x: int, y: int) -> bool:
        floor = self.floor
        if floor is None:
            return False
        if self.mode is BuilderMode.PLACING:
            return self._place_selected(floor, x, y)
        if self.mode is BuilderMode.WALL_BUILDING:
            return self.build_wall(x, y)
        if self.mode is BuilderMode.WALL_DESTROYING:
            return self.destroy_wall(x, y)
        if self.mode is BuilderMode.MOVING:
            return self.complete_move(x, y)
        return self.start_move(x, y)

    def _place_selected(self, floor: Floor, x: int, y: int) -> bool:
        entity = self.selected_entity
        if entity is None:
            self.cancel()
            return False
        if not floor.place_entity(entity, x, y):
            self.context.notify("Cannot place there", Severity.WARNING)
            return False
        self.context.notify(f"Placed {entity.name}", Severity.SUCCESS)
        logger.info("Placed %s at floor %d (%d,%d)", entity.name, floor.floor_number, x, y)
        self.selected_entity = None
        self.mode = BuilderMode.IDLE
        self.context.request_redraw()
        return True

    # Walls
    def start_wall_build(self) -> None:
        self._enter(BuilderMode.WALL_BUILDING)
        self.context.notify(f"Wall build mode (cost: {max(0, self.wall_cost)} DP)", Severity.INFO)

    def start_wall_destroy(self) -> None:
        self._enter(BuilderMode.WALL_DESTROYING)
        self.context.notify(f"Wall destroy mode (cost: {self.wall_cost} DP)", Severity.INFO)

    def build_wall(self, x: int, y: int) -> bool:
        floor = self.floor
        tile = floor.tile_at(x, y) if floor else None
        if tile is None or tile.type is not TileType.FLOOR or tile.entity is not None:
            self.context.notify("Walls can only be built on empty floor", Severity.WARNING)
            return False
        cost = max(0, self.wall_cost)
        if not self.context.spend_resource(cost):
            self.context.notify(f"Not enough DP to build a wall ({cost} DP)", Severity.WARNING)
            return False
        tile.type = TileType.WALL
        self.wall_cost = max(0, self.wall_cost - self.config.wall_cost_step)
        self.context.notify(f"Built a wall for {cost} DP", Severity.SUCCESS)
        self.context.request_redraw()
        return True

    def destroy_wall(self, x: int, y: int) -> bool:
        floor = self.floor
        tile = floor.tile_at(x, y) if floor else None
        if tile is None or tile.type is not TileType.WALL:
            self.context.notify("There is no wall there", Severity.WARNING)
            return False
        cost = self.wall_cost
        if not self.context.spend_resource(cost):
            self.context.notify(f"Not enough DP to destroy a wall ({cost} DP)", Severity.WARNING)
            return False
        tile.type = TileType.FLOOR
        self.wall_cost += self.config.wall_cost_step
        self.context.notify(f"Destroyed a wall for {cost} DP", Severity.SUCCESS)
        self.context.request_redraw()
        return True

    # Moving
    def start_move(self, x: int, y: int) -> bool:
        floor = self.floor
        tile = floor.tile_at(x, y) if floor else None
        if tile is None:
            return False
        if tile.entity is not None:
            kind = MoveKind.ENTITY
        elif tile.is_special:
            kind = MoveKind.SPECIAL
        else:
            return False
        self._enter(BuilderMode.MOVING)
        self.move_source = MoveSource(floor=self.current_floor, x=x, y=y, kind=kind)
        self.context.notify("Select a destination", Severity.INFO)
        return True

    def complete_move(self, x: int, y: int) -> bool:
        """Move the recorded source to (x, y) on the floor being viewed."""
        source = self.move_source
        if self.mode is not BuilderMode.MOVING or source is None:
            return False
        dest_floor = self.floor
        src_floor = self.dungeon.get_floor(source.floor)
        if dest_floor is None or src_floor is None:
            self.cancel()
            return False
        dest = dest_floor.tile_at(x, y)
        if dest is None or dest.entity is not None or dest.is_special:
            self.context.notify("Cannot move there", Severity.WARNING)
            return False

        if source.kind is MoveKind.ENTITY:
            if dest.type is TileType.WALL:
                self.context.notify("Cannot move onto a wall", Severity.WARNING)
                return False
            entity = src_floor.take_entity(source.x, source.y)
            if entity is None:
                self.cancel()
                return False
            dest.entity = entity
            label = entity.name
        else:
            src_tile = src_floor.grid[source.y][source.x]
            special = src_tile.type
            if not special.is_special:
                self.cancel()
                return False
            src_tile.clear_special()
            dest.place_special(special)
            core = self.dungeon.dungeon_core
            if special is TileType.CORE and dest_floor.floor_number == 1 and core is not None:
                core.x, core.y = x, y
            label = special.value

        logger.info(
            "Moved %s from floor %d (%d,%d) to floor %d (%d,%d)",
            label, source.floor, source.x, source.y, self.current_floor, x, y,
        )
        self.cancel()
        self.context.notify(f"Moved {label}", Severity.SUCCESS)
        self.context.request_redraw()
        return True

    # Floors
    def add_floor(self) -> Optional[int]:
        cost = self.config.floor_cost
        if not self.context.spend_resource(cost):
            self.context.notify(f"Not enough DP for a new floor ({cost} DP)", Severity.WARNING)
            return None
        number = self.dungeon.add_floor()
        self.current_floor = number
        self.context.notify(f"Floor {number} added", Severity.SUCCESS)
        self.context.request_redraw()
        return number

    def view_floor(self, floor_number: int) -> bool:
        """Switch the edited floor. A pending move survives so entities can change floors."""
        if self.dungeon.get_floor(floor_number) is None:
            return False
        self.current_floor = floor_number
        self.context.request_redraw()
        return True

    def next_floor(self) -> bool:
        return self.view_floor(self.current_floor + 1)

    def previous_floor(self) -> bool:
        return self.view_floor(self.current_floor - 1)
