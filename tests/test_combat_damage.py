from types import SimpleNamespace

from dungeon_master.combat import compute_damage, resolve_exchange
from dungeon_master.dungeon.entities import Monster


def test_min_damage_floor_is_one():
    assert compute_damage(5, 10) == 1
    assert compute_damage(4, 4) == 1
    assert compute_damage(12, 4) == 8


def test_monster_defeated_does_not_counter():
    agent = SimpleNamespace(hp=75, attack=20, defense=10)
    slime = Monster("Slime", 1)
    result = resolve_exchange(agent, slime)
    assert result.damage_dealt == 18
    assert result.monster_defeated is True
    assert result.counter_damage == 0
    assert agent.hp == 75


def test_surviving_monster_counters():
    agent = SimpleNamespace(hp=15, attack=4, defense=2)
    orc = Monster("Orc", 3)
    result = resolve_exchange(agent, orc)
    assert result.damage_dealt == 1
    assert orc.hp == 29
    assert result.counter_damage == 7
    assert agent.hp == 8
    assert result.agent_defeated is False


def test_counter_can_defeat_agent():
    agent = SimpleNamespace(hp=5, attack=4, defense=2)
    dragon = Monster("Dragon", 5)
    result = resolve_exchange(agent, dragon)
    assert result.counter_damage == 13
    assert result.agent_defeated is True
