from dungeon_master.core.random import RandomSource
from dungeon_master.dungeon.entities import Monster, Trap, Treasure
from dungeon_master.dungeon.floor import Floor
from dungeon_master.dungeon.tiles import TileType


def test_fresh_floor_layout():
    floor = Floor(1)
    assert (floor.width, floor.height) == (10, 10)
    assert floor.to_ascii() == [
        "##########",
        "#####E####",
        "##......##",
        "##......##",
        "##......##",
        "##......##",
        "##......##",
        "##......##",
        "#####S####",
        "##########",
    ]
    assert len(floor.rooms) == 1
    assert floor.find_tile(TileType.ENTRANCE) == (5, 1)
    assert floor.find_tile(TileType.STAIRS) == (5, 8)


def test_special_tiles_remember_what_they_covered():
    floor = Floor(1)
    assert floor.tile_at(5, 1).underlay is TileType.WALL
    assert floor.tile_at(5, 8).underlay is TileType.WALL


def test_place_entity_rules():
    floor = Floor(1)
    slime = Monster("Slime", 1)
    assert floor.place_entity(slime, 3, 3) is True
    assert floor.tile_at(3, 3).entity is slime

    # single occupant
    assert floor.place_entity(Trap("Pitfall", 10), 3, 3) is False
    # walls and special tiles
    assert floor.place_entity(Trap("Pitfall", 10), 0, 0) is False
    assert floor.place_entity(Trap("Pitfall", 10), 5, 1) is False
    # out of bounds
    assert floor.place_entity(Trap("Pitfall", 10), -1, 0) is False
    assert floor.place_entity(Trap("Pitfall", 10), 10, 0) is False
    assert floor.place_entity(Trap("Pitfall", 10), 0, 10) is False


def test_remove_and_take_entity():
    floor = Floor(1)
    chest = Treasure("Chest", 100)
    floor.place_entity(chest, 4, 4)
    assert floor.entity_position(chest) == (4, 4)
    assert floor.take_entity(4, 4) is chest
    assert floor.tile_at(4, 4).entity is None
    assert floor.remove_entity(4, 4) is True
    assert floor.remove_entity(20, 4) is False


def test_tile_at_out_of_bounds():
    floor = Floor(1)
    for x, y in [(-1, 0), (0, -1), (10, 0), (0, 10)]:
        assert floor.is_valid_position(x, y) is False
        assert floor.tile_at(x, y) is None


def test_expand_room_only_carves_walls():
    floor = Floor(1)
    room = floor.expand_room(RandomSource(seed=3))
    assert 0 <= room.x < 5 and 0 <= room.y < 5
    assert 3 <= room.width <= 5 and 3 <= room.height <= 5
    assert room in floor.rooms
    for x, y in room.cells():
        tile = floor.tile_at(x, y)
        if tile is not None:
            assert tile.type is not TileType.WALL
    # special markers are never overwritten
    assert floor.tile_at(5, 1).type is TileType.ENTRANCE
    assert floor.tile_at(5, 8).type is TileType.STAIRS


def test_from_ascii_gives_special_cells_a_floor_underlay():
    floor = Floor.from_ascii(2, ["###", "#E#", "#.#"])
    assert floor.floor_number == 2
    assert (floor.width, floor.height) == (3, 3)
    assert floor.tile_at(1, 1).type is TileType.ENTRANCE
    assert floor.tile_at(1, 1).underlay is TileType.FLOOR
    assert floor.to_ascii() == ["###", "#E#", "#.#"]
