import heapq
import itertools
from typing import Dict, Iterator, List, Optional, Tuple

from .floor import Floor
from .tiles import TileType

Point = Tuple[int, int]

# Expansion order of neighbours: up, down, left, right.
CARDINALS: Tuple[Point, ...] = ((0, -1), (0, 1), (-1, 0), (1, 0))


def is_passable(floor: Floor, x: int, y: int) -> bool:
    """True when an adventurer may step onto (x, y).

    Walls and cells holding a movement-blocking occupant (monsters) are closed.
    """
    tile = floor.tile_at(x, y)
    if tile is None or tile.type is TileType.WALL:
        return False
    return tile.entity is None or not tile.entity.blocks_movement


def neighbors4(floor: Floor, x: int, y: int) -> Iterator[Point]:
    for dx, dy in CARDINALS:
        nx, ny = x + dx, y + dy
        if is_passable(floor, nx, ny):
            yield nx, ny


def manhattan(a: Point, b: Point) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def find_path(floor: Floor, start: Point, goal: Point) -> Optional[List[Point]]:
    """Best-first search ranked by steps so far + Manhattan distance to goal.

    Ties are broken by insertion order. Returns the cells from the first step up
    to and including the goal, [] when start == goal, or None when the goal
    cannot be reached. Each cell is enqueued at most once so the search always
    terminates.
    """
    if start == goal:
        return []
    counter = itertools.count()
    frontier: List[Tuple[int, int, int, Point]] = [(manhattan(start, goal), next(counter), 0, start)]
    parent: Dict[Point, Point] = {}
    seen = {start}
    while frontier:
        _, _, dist, current = heapq.heappop(frontier)
        if current == goal:
            path = [current]
            while parent[path[-1]] != start:
                path.append(parent[path[-1]])
            path.reverse()
            return path
        for nxt in neighbors4(floor, *current):
            if nxt in seen:
                continue
            seen.add(nxt)
            parent[nxt] = current
            heapq.heappush(frontier, (dist + 1 + manhattan(nxt, goal), next(counter), dist + 1, nxt))
    return None


def find_first_step(floor: Floor, start: Point, goal: Point) -> Optional[Point]:
    """First cell of the route toward goal; the grid may change before the next step."""
    path = find_path(floor, start, goal)
    if not path:
        return None
    return path[0]
