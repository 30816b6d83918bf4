from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

ENV_CONFIG_PATH = "DM_CONFIG"


@dataclass
class GameConfig:
    """Central simulation configuration.

    - floor_width/floor_height: grid size of every new floor.
    - starting_dp: DP granted when a new game starts.
    - floor_cost: DP price of appending a floor.
    - wall_cost/wall_cost_step: shared wall build/destroy price and how much it
      moves after each build (down) or destroy (up).
    - tile_size: pixel size of a tile, used to translate clicks to grid cells.
    - tick_seconds: fixed simulation step driven by the engine.
    - spawn_chance: probability per tick that a new adventurer enters.
    - trap_cooldown: seconds before a triggered trap re-arms.
    - branch_turn_chance: probability of a random turn at a corridor branch.
    - sight_range: number of cells an adventurer scans along each cardinal ray.
    """

    floor_width: int = 10
    floor_height: int = 10
    starting_dp: int = 1000
    floor_cost: int = 1000
    wall_cost: int = 10
    wall_cost_step: int = 10
    tile_size: int = 60
    tick_seconds: float = 0.1
    spawn_chance: float = 0.001
    trap_cooldown: float = 5.0
    branch_turn_chance: float = 0.3
    sight_range: int = 9
    adventurer_speed: float = 2.0
    core_hp: int = 100
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.floor_width <= 0 or self.floor_height <= 0:
            raise ValueError("floor_width/floor_height must be > 0")
        if self.tile_size <= 0:
            raise ValueError("tile_size must be > 0")
        if self.tick_seconds <= 0:
            raise ValueError("tick_seconds must be > 0")
        for name in ("spawn_chance", "branch_turn_chance"):
            value = getattr(self, name)
            if value < 0.0 or value > 1.0:
                logger.error("%s out of bounds: %s. Clamping to [0,1].", name, value)
                setattr(self, name, max(0.0, min(1.0, float(value))))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "GameConfig":
        """Build a config from a mapping. Missing fields fallback to defaults."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", unknown)
        return cls(**{k: v for k, v in raw.items() if k in known})

    @classmethod
    def from_yaml(cls, path: Path) -> "GameConfig":
        """Load configuration from a YAML file."""
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")
        logger.debug("Loaded config from %s", path)
        return cls.from_dict(raw)

    @classmethod
    def from_env(cls) -> "GameConfig":
        """Load from the file named by DM_CONFIG, or defaults when unset."""
        path = os.getenv(ENV_CONFIG_PATH)
        if not path:
            return cls()
        return cls.from_yaml(Path(path))

    def to_yaml(self, path: Path) -> None:
        """Persist configuration to a YAML file."""
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=True)
