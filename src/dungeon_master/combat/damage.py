from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


class Fighter(Protocol):
    hp: int
    attack: int
    defense: int


@dataclass(frozen=True)
class ExchangeResult:
    """Outcome of one adventurer-vs-monster exchange.

    Attributes:
        damage_dealt: Damage the adventurer inflicted on the monster.
        counter_damage: Damage the monster inflicted back (0 if it died first).
        monster_defeated: True when the monster's HP dropped to 0 or below.
        agent_defeated: True when the counter attack dropped the adventurer to 0 or below.
    """

    damage_dealt: int
    counter_damage: int
    monster_defeated: bool
    agent_defeated: bool


def compute_damage(attack: int, defense: int) -> int:
    """Damage of one hit: attack minus defense, never less than 1."""
    return max(1, attack - defense)


def strike(attacker: Fighter, defender: Fighter) -> int:
    """Apply one hit from attacker to defender and return the damage."""
    damage = compute_damage(attacker.attack, defender.defense)
    defender.hp -= damage
    return damage


def attack_monster(agent: Fighter, monster: Fighter) -> int:
    return strike(agent, monster)


def monster_counter(monster: Fighter, agent: Fighter) -> int:
    return strike(monster, agent)


def resolve_exchange(agent: Fighter, monster: Fighter) -> ExchangeResult:
    """The adventurer strikes first; a surviving monster counters once.

    HP is not clamped here; callers decide what a non-positive HP means.
    """
    dealt = attack_monster(agent, monster)
    if monster.hp <= 0:
        logger.debug("Monster defeated by %d damage", dealt)
        return ExchangeResult(damage_dealt=dealt, counter_damage=0, monster_defeated=True, agent_defeated=False)
    counter = monster_counter(monster, agent)
    return ExchangeResult(
        damage_dealt=dealt,
        counter_damage=counter,
        monster_defeated=False,
        agent_defeated=agent.hp <= 0,
    )
