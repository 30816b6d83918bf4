from .editor import BuilderMode, DungeonBuilder, MoveKind, MoveSource

__all__ = ["BuilderMode", "DungeonBuilder", "MoveKind", "MoveSource"]
