from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional

from pydantic import ValidationError

from .agents.adventurer import Adventurer
from .builder.editor import DungeonBuilder
from .config import GameConfig
from .core.events import EventBus, EventName, Severity
from .core.random import RandomSource
from .dungeon.data import DungeonData
from .dungeon.tiles import TileType
from .economy.wallet import DPWallet
from .errors import SnapshotError, SnapshotValidationError
from .save.manager import SaveManager
from .save.snapshot import SCHEMA_VERSION, SessionSnapshot

logger = logging.getLogger(__name__)

ADVENTURER_CLASSES = ("Hero", "Warrior", "Mage", "Thief", "Cleric", "Archer", "Swordsman")
HERO_CLASS = "Hero"
MIN_LEVEL = 1
MAX_LEVEL = 5
LOG_CAPACITY = 100


@dataclass(frozen=True)
class Notification:
    message: str
    severity: Severity = Severity.INFO


class GameSession:
    """Owns one running game and serves as the context for builder and agents.

    Notifications and redraw requests are published on the event bus; the
    most recent notifications are also kept in `log` for headless inspection.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[RandomSource] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rng = rng or RandomSource(self.config.seed)
        self.bus = bus or EventBus()
        self.wallet = DPWallet(event_bus=self.bus)
        self.log: Deque[Notification] = deque(maxlen=LOG_CAPACITY)
        self.reputation = 0
        self.adventurers: List[Adventurer] = []
        self.game_over = False
        self.elapsed = 0.0
        self.dungeon = self._new_dungeon()
        self.builder = DungeonBuilder(self.dungeon, self, self.config)

    def _new_dungeon(self) -> DungeonData:
        return DungeonData(self.config.floor_width, self.config.floor_height, core_hp=self.config.core_hp)

    @property
    def dp(self) -> int:
        return self.wallet.amount

    def start_new_game(self) -> None:
        self.wallet.set(self.config.starting_dp, reason="new game")
        self.reputation = 0
        self.dungeon = self._new_dungeon()
        self.dungeon.initialize_dungeon_core()
        self.builder = DungeonBuilder(self.dungeon, self, self.config)
        self.adventurers = []
        self.game_over = False
        self.elapsed = 0.0
        self.notify("A new dungeon opens for business!", Severity.SUCCESS)
        self.request_redraw()

    # Context
    def spend_resource(self, amount: int, reason: str = "purchase") -> bool:
        if not self.wallet.can_afford(amount):
            return False
        self.wallet.spend(amount, reason=reason)
        return True

    def add_resource(self, amount: int, reason: str = "reward") -> None:
        self.wallet.add(amount, reason=reason)

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        notification = Notification(message, severity)
        self.log.append(notification)
        logger.info("[%s] %s", severity.value, message)
        self.bus.emit(EventName.NOTIFICATION, notification)

    def request_redraw(self) -> None:
        self.bus.emit(EventName.REDRAW)

    # Adventurers
    def spawn_adventurer(self, name: Optional[str] = None, level: Optional[int] = None) -> Optional[Adventurer]:
        floor1 = self.dungeon.get_floor(1)
        entrance = floor1.find_tile(TileType.ENTRANCE) if floor1 else None
        if entrance is None:
            logger.warning("No entrance on floor 1; adventurer not spawned")
            return None
        if name is None:
            name = f"{self.rng.choice(ADVENTURER_CLASSES)}{self.rng.randrange(100)}"
        if level is None:
            level = self.rng.randint(MIN_LEVEL, MAX_LEVEL)
        x, y = entrance
        adventurer = Adventurer(
            name,
            level,
            self.dungeon,
            self,
            self.rng,
            x=x,
            y=y,
            is_hero=name.startswith(HERO_CLASS),
            speed=self.config.adventurer_speed,
            sight_range=self.config.sight_range,
            branch_turn_chance=self.config.branch_turn_chance,
        )
        self.adventurers.append(adventurer)
        self.notify(f"{name} (Lv.{level}) has invaded!", Severity.DANGER)
        self.bus.emit(EventName.ADVENTURER_SPAWNED, adventurer)
        return adventurer

    def update(self, delta_time: float) -> None:
        """Advance the simulation by one tick."""
        if self.game_over:
            return
        self.elapsed += delta_time
        if self.rng.chance(self.config.spawn_chance):
            self.spawn_adventurer()
        self.dungeon.update_traps(delta_time)

        for adventurer in self.adventurers:
            adventurer.update(delta_time)
            if not adventurer.is_terminal and adventurer.check_core_reached(self.dungeon.dungeon_core):
                self._end_game(adventurer)

        survivors = []
        for adventurer in self.adventurers:
            if adventurer.is_terminal:
                self._retire(adventurer)
            else:
                survivors.append(adventurer)
        self.adventurers = survivors
        self.request_redraw()

    def _retire(self, adventurer: Adventurer) -> None:
        if adventurer.is_dead:
            reward = adventurer.level * 50 + self.rng.randint(0, 49)
            self.add_resource(reward, reason="reward")
            self.reputation += 1
            self.notify(f"Defeated {adventurer.name}! +{reward}DP", Severity.SUCCESS)
            self.bus.emit(EventName.ADVENTURER_DIED, adventurer)
            return
        gain = 2 + adventurer.treasure_collected // 50
        self.reputation += gain
        self.notify(f"{adventurer.name} made it out alive. Reputation +{gain}", Severity.WARNING)
        self.bus.emit(EventName.ADVENTURER_ESCAPED, adventurer)

    def _end_game(self, adventurer: Adventurer) -> None:
        if self.game_over:
            return
        self.game_over = True
        logger.warning("Core reached by %s after %.1fs", adventurer.name, self.elapsed)
        self.notify(f"{adventurer.name} reached the dungeon core!", Severity.DANGER)
        self.bus.emit(EventName.GAME_OVER, adventurer)

    # Persistence
    def export_state(self) -> Dict[str, Any]:
        return {
            "schema_version": SCHEMA_VERSION,
            "dp": self.wallet.amount,
            "floor": self.dungeon.floor_count,
            "reputation": self.reputation,
            "wall_cost": self.builder.wall_cost,
            "dungeon": self.dungeon.export_state(),
        }

    def import_state(self, snapshot: Dict[str, Any]) -> None:
        """Replace the running game with a snapshot; nothing changes if it is invalid."""
        try:
            model = SessionSnapshot.model_validate(snapshot)
        except ValidationError as exc:
            raise SnapshotValidationError(f"Invalid session snapshot: {exc.error_count()} error(s)") from exc
        if model.schema_version != SCHEMA_VERSION:
            logger.warning("Snapshot schema %d differs from %d", model.schema_version, SCHEMA_VERSION)

        dungeon = self._new_dungeon()
        dungeon.import_state(model.dungeon.model_dump(mode="json"))
        if model.floor != dungeon.floor_count:
            logger.warning("Snapshot reports %d floor(s) but holds %d", model.floor, dungeon.floor_count)

        self.dungeon = dungeon
        self.builder = DungeonBuilder(dungeon, self, self.config)
        if model.wall_cost is not None:
            self.builder.wall_cost = model.wall_cost
        self.wallet.set(model.dp, reason="load")
        self.reputation = model.reputation
        self.adventurers = []
        self.game_over = False
        self.request_redraw()

    def save(self, manager: SaveManager) -> Path:
        path = manager.save(self.export_state())
        self.notify("Game saved", Severity.SUCCESS)
        return path

    def load(self, manager: SaveManager) -> bool:
        payload = manager.load()
        if payload is None:
            self.notify("No save data found", Severity.WARNING)
            return False
        try:
            self.import_state(payload)
        except SnapshotError as exc:
            logger.warning("Could not restore save: %s", exc)
            self.notify("Save data is corrupt", Severity.WARNING)
            return False
        self.notify("Game resumed", Severity.INFO)
        return True
