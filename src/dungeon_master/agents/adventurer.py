from __future__ import annotations

import logging
import math
from enum import Enum
from typing import List, Optional, Tuple

from ..combat.damage import resolve_exchange
from ..core.context import GameContext
from ..core.events import Severity
from ..core.random import RandomSource
from ..dungeon.data import CoreRecord, DungeonData
from ..dungeon.entities import Monster, Trap, Treasure
from ..dungeon.floor import Floor
from ..dungeon.pathfinding import find_first_step, is_passable
from ..dungeon.tiles import TileType

logger = logging.getLogger(__name__)

Point = Tuple[int, int]

ARRIVAL_EPSILON = 0.1
AXIS_EPSILON = 0.01
CORE_REACH_DISTANCE = 0.5
DEFAULT_SPEED = 2.0
DEFAULT_SIGHT_RANGE = 9
DEFAULT_BRANCH_TURN_CHANCE = 0.3


class Direction(Enum):
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    @property
    def sides(self) -> Tuple["Direction", "Direction"]:
        if self in (Direction.UP, Direction.DOWN):
            return (Direction.LEFT, Direction.RIGHT)
        return (Direction.UP, Direction.DOWN)

    def step(self, x: int, y: int) -> Point:
        return (x + self.dx, y + self.dy)

    @classmethod
    def towards(cls, sx: int, sy: int, tx: int, ty: int) -> Optional["Direction"]:
        """Facing after a step from (sx, sy) to (tx, ty); horizontal wins on diagonals."""
        dx, dy = tx - sx, ty - sy
        if dx > 0:
            return cls.RIGHT
        if dx < 0:
            return cls.LEFT
        if dy > 0:
            return cls.DOWN
        if dy < 0:
            return cls.UP
        return None


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

# Order in which the four rays/neighbours are examined.
SCAN_ORDER = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)


class Adventurer:
    """An autonomous intruder walking the dungeon one cell at a time.

    The position (x, y) is continuous and interpolates toward the grid-aligned
    target at `speed` cells per second. Each time the target is reached the
    adventurer resolves the tile it stands on and picks the next target:

    1. escape toward the entrance when carrying loot or at half HP or less,
    2. walk toward a treasure visible along a cardinal ray (non-heroes),
    3. fight a monster directly ahead,
    4. otherwise follow the corridor, turning at random at branches.

    Dead and escaped are terminal; update() does nothing afterwards.
    """

    def __init__(
        self,
        name: str,
        level: int,
        dungeon: DungeonData,
        context: GameContext,
        rng: RandomSource,
        *,
        x: int = 5,
        y: int = 1,
        is_hero: bool = False,
        speed: float = DEFAULT_SPEED,
        sight_range: int = DEFAULT_SIGHT_RANGE,
        branch_turn_chance: float = DEFAULT_BRANCH_TURN_CHANCE,
    ) -> None:
        if level <= 0:
            raise ValueError("Adventurer level must be >= 1")
        self.name = name
        self.level = level
        self.hp = level * 15
        self.max_hp = self.hp
        self.attack = level * 4
        self.defense = level * 2
        self.speed = speed
        self.x = float(x)
        self.y = float(y)
        self.target_x = x
        self.target_y = y
        self.direction = Direction.DOWN
        self.current_floor = 1
        self.is_dead = False
        self.has_escaped = False
        self.escape_mode = False
        self.treasure_collected = 0
        self.last_move: Optional[Point] = None
        self.is_hero = is_hero
        self.sight_range = sight_range
        self.branch_turn_chance = branch_turn_chance
        self.dungeon = dungeon
        self.context = context
        self.rng = rng

    def __repr__(self) -> str:
        return (
            f"Adventurer({self.name} Lv{self.level} F{self.current_floor}"
            f"@{self.x:.1f},{self.y:.1f} hp={self.hp}/{self.max_hp})"
        )

    @property
    def is_terminal(self) -> bool:
        return self.is_dead or self.has_escaped

    @property
    def is_wounded(self) -> bool:
        return self.hp <= self.max_hp / 2

    @property
    def wants_to_escape(self) -> bool:
        return self.escape_mode or self.is_wounded

    @property
    def cell(self) -> Point:
        return (math.floor(self.x), math.floor(self.y))

    def at_target(self) -> bool:
        return abs(self.x - self.target_x) < ARRIVAL_EPSILON and abs(self.y - self.target_y) < ARRIVAL_EPSILON

    def set_target(self, x: int, y: int) -> None:
        self.target_x = x
        self.target_y = y

    def place_at(self, x: int, y: int) -> None:
        self.x = float(x)
        self.y = float(y)
        self.set_target(x, y)

    # Tick
    def update(self, delta_time: float) -> None:
        if self.is_terminal:
            return
        floor = self.dungeon.get_floor(self.current_floor)
        if floor is None:
            return

        if self.at_target():
            self.place_at(self.target_x, self.target_y)
            self._arrive(floor)
        else:
            self._advance(delta_time)

    def _advance(self, delta_time: float) -> None:
        dx = self.target_x - self.x
        dy = self.target_y - self.y
        move = self.speed * delta_time
        if abs(dx) > AXIS_EPSILON:
            self.x += math.copysign(min(move, abs(dx)), dx)
        if abs(dy) > AXIS_EPSILON:
            self.y += math.copysign(min(move, abs(dy)), dy)

    def _arrive(self, floor: Floor) -> None:
        self.process_current_tile(floor)
        if self.is_dead:
            return
        if self._try_escape(floor) or self._try_descend(floor):
            return
        self.decide_next_move(floor)

    # Tile effects
    def process_current_tile(self, floor: Floor) -> None:
        cx, cy = self.cell
        tile = floor.tile_at(cx, cy)
        if tile is None:
            return
        entity = tile.entity
        if isinstance(entity, Trap):
            if entity.trigger():
                self.take_damage(entity.damage)
                self.context.notify(f"{self.name} fell into {entity.name}! -{entity.damage}HP", Severity.DANGER)
                if self.is_dead:
                    self.context.notify(f"{self.name} was killed by a trap!", Severity.SUCCESS)
        elif isinstance(entity, Treasure):
            value = entity.collect()
            if value > 0:
                self.treasure_collected += value
                floor.remove_entity(cx, cy)
                self.context.notify(f"{self.name} looted {entity.name}! {value}G", Severity.WARNING)
                if not self.is_hero:
                    self.escape_mode = True
                    self.context.notify(f"{self.name} is escaping with the loot!", Severity.INFO)

    def take_damage(self, damage: int) -> None:
        self.hp -= damage
        if self.hp <= 0:
            self.hp = 0
            self.is_dead = True

    def _try_escape(self, floor: Floor) -> bool:
        cx, cy = self.cell
        tile = floor.tile_at(cx, cy)
        if tile is None or tile.type is not TileType.ENTRANCE or self.current_floor != 1:
            return False
        if not (self.is_wounded or self.treasure_collected > 0):
            return False
        self.has_escaped = True
        if self.treasure_collected > 0:
            self.context.notify(f"{self.name} escaped with {self.treasure_collected}G of treasure!", Severity.WARNING)
        else:
            self.context.notify(f"{self.name} retreated with low HP!", Severity.WARNING)
        return True

    def _try_descend(self, floor: Floor) -> bool:
        cx, cy = self.cell
        tile = floor.tile_at(cx, cy)
        if tile is None or tile.type is not TileType.STAIRS or not self.is_hero:
            return False
        next_floor = self.dungeon.get_floor(self.current_floor + 1)
        if next_floor is None:
            return False
        entrance = next_floor.find_tile(TileType.ENTRANCE)
        if entrance is None:
            logger.warning("Floor %d has no entrance; %s stays on the stairs", next_floor.floor_number, self.name)
            return False
        self.current_floor = next_floor.floor_number
        self.place_at(*entrance)
        self.last_move = None
        self.context.notify(f"{self.name} went down to floor {self.current_floor}!", Severity.INFO)
        return True

    def check_core_reached(self, core: Optional[CoreRecord]) -> bool:
        if core is None or self.current_floor != 1:
            return False
        return math.hypot(self.x - core.x, self.y - core.y) < CORE_REACH_DISTANCE

    # Decision
    def decide_next_move(self, floor: Floor) -> None:
        cx, cy = self.cell

        if self.wants_to_escape:
            entrance = floor.find_tile(TileType.ENTRANCE)
            if entrance is None:
                return
            step = find_first_step(floor, (cx, cy), entrance)
            if step is None:
                step = self.find_next_path_position(floor, cx, cy)
            if step is not None:
                self._move_to(cx, cy, step)
            return

        if not self.is_hero:
            sighted = self.find_treasure_in_sight(floor, cx, cy)
            if sighted is not None:
                self.direction = sighted
                step = sighted.step(cx, cy)
                if is_passable(floor, *step):
                    self._move_to(cx, cy, step)
                    return

        monster_pos = self.find_monster_in_path(floor, cx, cy)
        if monster_pos is not None:
            self.battle_with_monster(floor, monster_pos)
            return

        available = self.get_available_directions(floor, cx, cy)
        if len(available) >= 2 and self.rng.chance(self.branch_turn_chance):
            options = [d for d in available if d.step(cx, cy) != self.last_move]
            if options:
                turn = self.rng.choice(options)
                self._move_to(cx, cy, turn.step(cx, cy))
                return

        step = self.find_next_path_position(floor, cx, cy)
        if step is not None:
            self._move_to(cx, cy, step)

    def _move_to(self, cx: int, cy: int, step: Point) -> None:
        self.set_target(*step)
        facing = Direction.towards(cx, cy, *step)
        if facing is not None:
            self.direction = facing
        self.last_move = (cx, cy)

    def find_treasure_in_sight(self, floor: Floor, x: int, y: int) -> Optional[Direction]:
        """Direction of the first uncollected treasure on a cardinal ray, walls block sight."""
        for direction in SCAN_ORDER:
            for dist in range(1, self.sight_range + 1):
                tx, ty = x + direction.dx * dist, y + direction.dy * dist
                tile = floor.tile_at(tx, ty)
                if tile is None or tile.type is TileType.WALL:
                    break
                if isinstance(tile.entity, Treasure) and not tile.entity.collected:
                    return direction
        return None

    def find_monster_in_path(self, floor: Floor, x: int, y: int) -> Optional[Point]:
        nx, ny = self.direction.step(x, y)
        tile = floor.tile_at(nx, ny)
        if tile is not None and isinstance(tile.entity, Monster):
            return (nx, ny)
        return None

    def get_available_directions(self, floor: Floor, x: int, y: int) -> List[Direction]:
        return [d for d in SCAN_ORDER if is_passable(floor, *d.step(x, y))]

    def find_next_path_position(self, floor: Floor, x: int, y: int) -> Optional[Point]:
        """Straight ahead, then either side, then back; the last cell only as a reverse."""
        for direction in (self.direction,) + self.direction.sides:
            step = direction.step(x, y)
            if is_passable(floor, *step) and step != self.last_move:
                self.direction = direction
                return step
        back = self.direction.opposite
        step = back.step(x, y)
        if is_passable(floor, *step):
            self.direction = back
            return step
        return None

    # Combat
    def battle_with_monster(self, floor: Floor, pos: Point) -> None:
        tile = floor.tile_at(*pos)
        monster = tile.entity if tile is not None else None
        if not isinstance(monster, Monster):
            return
        result = resolve_exchange(self, monster)
        self.context.notify(f"{self.name} attacks {monster.name}! {result.damage_dealt} damage", Severity.INFO)
        if result.monster_defeated:
            floor.remove_entity(*pos)
            self.context.notify(f"{monster.name} was defeated!", Severity.SUCCESS)
            return
        self.context.notify(f"{monster.name} strikes back! {result.counter_damage} damage", Severity.DANGER)
        if result.agent_defeated:
            self.hp = 0
            self.is_dead = True
            self.context.notify(f"{self.name} fell to {monster.name}!", Severity.SUCCESS)
