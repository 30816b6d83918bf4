import pytest

from dungeon_master.builder.editor import BuilderMode, DungeonBuilder, MoveKind
from dungeon_master.config import GameConfig
from dungeon_master.core.events import Severity
from dungeon_master.dungeon.data import DungeonData
from dungeon_master.dungeon.entities import EntityKind, Monster, Trap, find_template
from dungeon_master.dungeon.tiles import TileType


@pytest.fixture
def dungeon() -> DungeonData:
    data = DungeonData()
    data.initialize_dungeon_core()
    return data


@pytest.fixture
def builder(dungeon, context) -> DungeonBuilder:
    return DungeonBuilder(dungeon, context, GameConfig(trap_cooldown=2.0))


def test_wall_cost_is_symmetric(builder, dungeon, context):
    floor = dungeon.get_floor(1)
    builder.start_wall_build()
    assert builder.click_tile(3, 3) is True
    assert floor.tile_at(3, 3).type is TileType.WALL
    assert builder.wall_cost == 0
    assert context.dp == 990
    assert builder.mode is BuilderMode.WALL_BUILDING

    builder.start_wall_destroy()
    assert builder.click_tile(3, 3) is True
    assert floor.tile_at(3, 3).type is TileType.FLOOR
    assert builder.wall_cost == 10
    assert context.dp == 990


def test_wall_cost_never_negative(builder, context):
    builder.start_wall_build()
    builder.click_tile(3, 3)
    builder.click_tile(4, 3)
    assert builder.wall_cost == 0
    assert context.dp == 990


def test_walls_need_empty_floor(builder, dungeon):
    dungeon.place_entity(1, Monster("Slime", 1), 3, 3)
    builder.start_wall_build()
    assert builder.click_tile(3, 3) is False
    assert builder.click_tile(0, 0) is False
    assert builder.click_tile(5, 1) is False
    builder.start_wall_destroy()
    assert builder.click_tile(4, 4) is False


def test_insufficient_dp_changes_nothing(builder, dungeon, context):
    context.dp = 5
    builder.start_wall_build()
    assert builder.click_tile(3, 3) is False
    assert dungeon.get_floor(1).tile_at(3, 3).type is TileType.FLOOR
    assert builder.wall_cost == 10
    assert context.dp == 5
    assert context.severities()[-1] is Severity.WARNING


def test_select_and_place_template(builder, dungeon, context):
    slime = find_template(EntityKind.MONSTER, "Slime")
    assert builder.select_entity_template(EntityKind.MONSTER, slime) is True
    assert context.dp == 950
    assert builder.mode is BuilderMode.PLACING

    # (190, 299) px -> tile (3, 4)
    assert builder.place_entity_at(3 * 60 + 10, 4 * 60 + 59) is True
    placed = dungeon.get_floor(1).tile_at(3, 4).entity
    assert isinstance(placed, Monster) and placed.name == "Slime"
    assert builder.mode is BuilderMode.IDLE
    assert builder.selected_entity is None
    assert context.redraws == 1


def test_failed_placement_keeps_selection(builder, context):
    pitfall = find_template(EntityKind.TRAP, "Pitfall")
    builder.select_entity_template(EntityKind.TRAP, pitfall)
    assert builder.click_tile(0, 0) is False
    assert builder.mode is BuilderMode.PLACING
    assert isinstance(builder.selected_entity, Trap)
    assert builder.selected_entity.cooldown == 2.0


def test_unaffordable_template(builder, context):
    context.dp = 10
    dragon = find_template(EntityKind.MONSTER, "Dragon")
    assert builder.select_entity_template(EntityKind.MONSTER, dragon) is False
    assert builder.mode is BuilderMode.IDLE
    assert context.dp == 10


def test_template_kind_mismatch_is_an_error(builder):
    with pytest.raises(ValueError):
        builder.select_entity_template(EntityKind.TRAP, find_template(EntityKind.MONSTER, "Orc"))


def test_entering_a_mode_cancels_the_others(builder):
    builder.select_entity_template(EntityKind.TREASURE, find_template(EntityKind.TREASURE, "Chest"))
    builder.start_wall_build()
    assert builder.mode is BuilderMode.WALL_BUILDING
    assert builder.selected_entity is None
    builder.cancel()
    assert builder.mode is BuilderMode.IDLE


def test_move_entity_within_floor(builder, dungeon):
    floor = dungeon.get_floor(1)
    goblin = Monster("Goblin", 2)
    floor.place_entity(goblin, 3, 3)

    assert builder.click_tile(3, 3) is True
    assert builder.mode is BuilderMode.MOVING
    assert builder.move_source.kind is MoveKind.ENTITY

    assert builder.click_tile(0, 0) is False
    assert builder.mode is BuilderMode.MOVING
    assert builder.click_tile(5, 1) is False

    assert builder.click_tile(4, 6) is True
    assert floor.tile_at(4, 6).entity is goblin
    assert floor.tile_at(3, 3).entity is None
    assert builder.mode is BuilderMode.IDLE


def test_move_entity_to_another_floor(builder, dungeon, context):
    context.dp = 2000
    assert builder.add_floor() == 2
    assert builder.current_floor == 2
    assert builder.previous_floor() is True

    trap = Trap("Spike Trap", 20)
    dungeon.place_entity(1, trap, 3, 3)
    builder.start_move(3, 3)
    assert builder.view_floor(2) is True
    assert builder.mode is BuilderMode.MOVING
    assert builder.click_tile(3, 3) is True
    assert dungeon.get_floor(2).tile_at(3, 3).entity is trap
    assert dungeon.get_floor(1).tile_at(3, 3).entity is None


def test_move_special_tile_restores_underlay(builder, dungeon):
    floor = dungeon.get_floor(1)
    assert builder.start_move(5, 1) is True
    assert builder.move_source.kind is MoveKind.SPECIAL
    assert builder.complete_move(3, 3) is True
    assert floor.tile_at(5, 1).type is TileType.WALL
    assert floor.tile_at(3, 3).type is TileType.ENTRANCE
    assert dungeon.underlay_at(1, 3, 3) is TileType.FLOOR

    # special tiles may land on walls and give the wall back when they leave
    builder.start_move(3, 3)
    assert builder.complete_move(0, 0) is True
    assert floor.tile_at(3, 3).type is TileType.FLOOR
    assert floor.tile_at(0, 0).type is TileType.ENTRANCE
    assert dungeon.underlay_at(1, 0, 0) is TileType.WALL

    builder.start_move(0, 0)
    assert builder.complete_move(5, 1) is True
    assert floor.to_ascii()[1] == "#####E####"
    assert dungeon.underlay_at(1, 5, 1) is TileType.WALL
    assert floor.tile_at(0, 0).type is TileType.WALL


def test_moving_core_updates_record(builder, dungeon):
    builder.start_move(5, 5)
    assert builder.complete_move(3, 3) is True
    assert (dungeon.dungeon_core.x, dungeon.dungeon_core.y) == (3, 3)
    assert dungeon.get_floor(1).tile_at(5, 5).type is TileType.FLOOR
    assert dungeon.get_floor(1).tile_at(3, 3).type is TileType.CORE


def test_special_tiles_do_not_stack(builder, dungeon, context):
    builder.start_move(5, 1)
    assert builder.complete_move(5, 8) is False
    assert builder.complete_move(5, 5) is False
    assert builder.mode is BuilderMode.MOVING
    builder.cancel()
    assert dungeon.get_floor(1).tile_at(5, 1).type is TileType.ENTRANCE


def test_special_tiles_move_between_floors(builder, dungeon, context):
    context.dp = 1000
    floor1 = dungeon.get_floor(1)
    assert builder.start_move(5, 8) is True
    assert builder.add_floor() == 2
    assert builder.mode is BuilderMode.MOVING
    assert builder.complete_move(3, 3) is True
    floor2 = dungeon.get_floor(2)
    assert floor1.tile_at(5, 8).type is TileType.WALL
    assert floor2.tile_at(3, 3).type is TileType.STAIRS
    assert dungeon.underlay_at(2, 3, 3) is TileType.FLOOR

    assert builder.start_move(3, 3) is True
    assert builder.view_floor(1) is True
    assert builder.complete_move(5, 8) is True
    assert floor2.tile_at(3, 3).type is TileType.FLOOR
    assert dungeon.underlay_at(2, 3, 3) is None
    assert floor1.tile_at(5, 8).type is TileType.STAIRS
    assert dungeon.underlay_at(1, 5, 8) is TileType.WALL


def test_core_record_follows_floor_one_only(builder, dungeon, context):
    context.dp = 1000
    builder.add_floor()
    builder.view_floor(1)
    builder.start_move(5, 5)
    builder.view_floor(2)
    assert builder.complete_move(4, 4) is True
    assert dungeon.get_floor(2).tile_at(4, 4).type is TileType.CORE
    assert (dungeon.dungeon_core.x, dungeon.dungeon_core.y) == (5, 5)

    builder.start_move(4, 4)
    builder.view_floor(1)
    assert builder.complete_move(3, 3) is True
    assert (dungeon.dungeon_core.x, dungeon.dungeon_core.y) == (3, 3)


def _cells_holding(dungeon, entity):
    return [
        (floor.floor_number, x, y)
        for floor in dungeon.floors
        for y, row in enumerate(floor.grid)
        for x, tile in enumerate(row)
        if tile.entity is entity
    ]


def test_every_entity_occupies_exactly_one_cell(builder, dungeon, context):
    context.dp = 5000
    slime = find_template(EntityKind.MONSTER, "Slime")
    pitfall = find_template(EntityKind.TRAP, "Pitfall")
    builder.select_entity_template(EntityKind.MONSTER, slime)
    assert builder.click_tile(3, 3) is True
    builder.select_entity_template(EntityKind.TRAP, pitfall)
    assert builder.click_tile(4, 4) is True
    placed = [dungeon.get_floor(1).tile_at(3, 3).entity, dungeon.get_floor(1).tile_at(4, 4).entity]

    # entity onto empty floor, then another entity onto the cell it left
    assert builder.click_tile(3, 3) and builder.click_tile(6, 6)
    assert builder.click_tile(4, 4) and builder.click_tile(3, 3)
    # core onto the vacated cell, then an entity onto the cell the core left
    assert builder.click_tile(5, 5) and builder.click_tile(4, 4)
    assert builder.click_tile(6, 6) and builder.click_tile(5, 5)

    assert builder.add_floor() == 2
    builder.view_floor(1)
    assert builder.click_tile(3, 3)
    builder.view_floor(2)
    assert builder.click_tile(3, 3)

    builder.view_floor(1)
    builder.select_entity_template(EntityKind.MONSTER, slime)
    assert builder.click_tile(3, 3) is True
    placed.append(dungeon.get_floor(1).tile_at(3, 3).entity)

    assert _cells_holding(dungeon, placed[0]) == [(1, 5, 5)]
    assert _cells_holding(dungeon, placed[1]) == [(2, 3, 3)]
    assert _cells_holding(dungeon, placed[2]) == [(1, 3, 3)]
    assert dungeon.get_floor(1).tile_at(4, 4).type is TileType.CORE
    assert dungeon.get_floor(1).tile_at(6, 6).entity is None
    assert len(dungeon.monsters) == 2


def test_complete_move_requires_moving_mode(builder):
    assert builder.complete_move(3, 3) is False
    assert builder.click_tile(3, 3) is False


def test_floor_navigation(builder, context):
    context.dp = 999
    assert builder.add_floor() is None
    assert builder.view_floor(2) is False
    assert builder.previous_floor() is False
    assert builder.next_floor() is False
    assert builder.current_floor == 1
