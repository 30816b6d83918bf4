from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple, Union

logger = logging.getLogger(__name__)

TRAP_COOLDOWN_SECONDS = 5.0


class EntityKind(str, Enum):
    MONSTER = "monster"
    TRAP = "trap"
    TREASURE = "treasure"


@dataclass(eq=False)
class Monster:
    """A defender placed by the player. Stats scale with level."""

    name: str
    level: int
    cost: int = 0
    hp: int = field(default=-1)
    attack: int = field(default=-1)
    defense: int = field(default=-1)

    kind = EntityKind.MONSTER
    blocks_movement = True

    def __post_init__(self) -> None:
        if self.level <= 0:
            raise ValueError("Monster level must be >= 1")
        if self.hp < 0:
            self.hp = self.level * 10
        if self.attack < 0:
            self.attack = self.level * 3
        if self.defense < 0:
            self.defense = self.level * 2


@dataclass(eq=False)
class Trap:
    """Deals fixed damage once, then stays disarmed until its cooldown elapses."""

    name: str
    damage: int
    cost: int = 0
    triggered: bool = False
    cooldown: float = TRAP_COOLDOWN_SECONDS
    cooldown_remaining: float = 0.0

    kind = EntityKind.TRAP
    blocks_movement = False

    @property
    def ready(self) -> bool:
        return not self.triggered

    def trigger(self) -> bool:
        """Arm the cooldown. Returns False if the trap was already triggered."""
        if self.triggered:
            return False
        self.triggered = True
        self.cooldown_remaining = self.cooldown
        logger.debug("Trap %s triggered; re-arms in %.1fs", self.name, self.cooldown)
        return True

    def tick(self, dt: float) -> None:
        if not self.triggered:
            return
        self.cooldown_remaining -= dt
        if self.cooldown_remaining <= 0:
            self.cooldown_remaining = 0.0
            self.triggered = False
            logger.debug("Trap %s re-armed", self.name)


@dataclass(eq=False)
class Treasure:
    name: str
    value: int
    cost: int = 0
    collected: bool = False

    kind = EntityKind.TREASURE
    blocks_movement = False

    def collect(self) -> int:
        """Return the value the first time; 0 afterwards."""
        if self.collected:
            return 0
        self.collected = True
        return self.value


Entity = Union[Monster, Trap, Treasure]


@dataclass(frozen=True)
class EntityTemplate:
    """A purchasable catalogue entry.

    `power` is the monster level, the trap damage or the treasure value,
    depending on `kind`.
    """

    kind: EntityKind
    name: str
    power: int
    cost: int

    def create(self) -> Entity:
        if self.kind is EntityKind.MONSTER:
            return Monster(name=self.name, level=self.power, cost=self.cost)
        if self.kind is EntityKind.TRAP:
            return Trap(name=self.name, damage=self.power, cost=self.cost)
        if self.kind is EntityKind.TREASURE:
            return Treasure(name=self.name, value=self.power, cost=self.cost)
        raise ValueError(f"Unknown entity kind: {self.kind!r}")


def _templates(kind: EntityKind, rows: List[Tuple[str, int, int]]) -> Tuple[EntityTemplate, ...]:
    return tuple(EntityTemplate(kind=kind, name=n, power=p, cost=c) for n, p, c in rows)


MONSTER_TEMPLATES = _templates(EntityKind.MONSTER, [
    ("Slime", 1, 50),
    ("Goblin", 2, 100),
    ("Orc", 3, 200),
    ("Troll", 4, 400),
    ("Dragon", 5, 800),
])

TRAP_TEMPLATES = _templates(EntityKind.TRAP, [
    ("Pitfall", 10, 30),
    ("Arrow Trap", 15, 50),
    ("Fire Trap", 25, 100),
    ("Spike Trap", 20, 80),
    ("Poison Gas Trap", 30, 150),
])

TREASURE_TEMPLATES = _templates(EntityKind.TREASURE, [
    ("Small Chest", 50, 20),
    ("Chest", 100, 40),
    ("Large Chest", 200, 80),
    ("Luxury Chest", 500, 200),
    ("Legendary Chest", 1000, 400),
])

TEMPLATES: Dict[EntityKind, Tuple[EntityTemplate, ...]] = {
    EntityKind.MONSTER: MONSTER_TEMPLATES,
    EntityKind.TRAP: TRAP_TEMPLATES,
    EntityKind.TREASURE: TREASURE_TEMPLATES,
}


def find_template(kind: EntityKind, name: str) -> EntityTemplate:
    for template in TEMPLATES[kind]:
        if template.name == name:
            return template
    raise KeyError(f"No {kind.value} template named {name!r}")
