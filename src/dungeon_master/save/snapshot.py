"""Schema of the opaque save snapshot.

The shape is an implementation detail; the only contract is that a round trip
rebuilds an equivalent dungeon (grid, rooms, underlays, entities, core).
"""
from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..dungeon.tiles import TileType

SCHEMA_VERSION = 1


class MonsterModel(BaseModel):
    kind: Literal["monster"] = "monster"
    name: str
    level: int = Field(..., ge=1)
    cost: int = 0
    hp: int
    attack: int
    defense: int


class TrapModel(BaseModel):
    kind: Literal["trap"] = "trap"
    name: str
    damage: int = Field(..., ge=0)
    cost: int = 0
    triggered: bool = False
    cooldown: float = Field(5.0, ge=0.0)
    cooldown_remaining: float = Field(0.0, ge=0.0)


class TreasureModel(BaseModel):
    kind: Literal["treasure"] = "treasure"
    name: str
    value: int = Field(..., ge=0)
    cost: int = 0
    collected: bool = False


EntityModel = Annotated[Union[MonsterModel, TrapModel, TreasureModel], Field(discriminator="kind")]


class TileModel(BaseModel):
    type: TileType = TileType.WALL
    entity: Optional[EntityModel] = None
    underlay: Optional[TileType] = None


class RoomModel(BaseModel):
    x: int
    y: int
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)


class FloorModel(BaseModel):
    floor_number: int = Field(..., ge=1)
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    grid: List[List[TileModel]]
    rooms: List[RoomModel] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_grid_shape(self) -> "FloorModel":
        if len(self.grid) != self.height or any(len(row) != self.width for row in self.grid):
            raise ValueError(f"grid does not match {self.width}x{self.height}")
        return self


class CoreModel(BaseModel):
    x: int
    y: int
    hp: int
    max_hp: int = Field(..., ge=1)


class DungeonSnapshot(BaseModel):
    floors: List[FloorModel] = Field(..., min_length=1)
    core: Optional[CoreModel] = None


class SessionSnapshot(BaseModel):
    """Everything a save slot holds besides its storage metadata."""

    model_config = ConfigDict(extra="ignore")

    schema_version: int = SCHEMA_VERSION
    dp: int = Field(0, ge=0)
    floor: int = Field(1, ge=1)
    reputation: int = 0
    wall_cost: Optional[int] = Field(None, ge=0)
    dungeon: DungeonSnapshot
