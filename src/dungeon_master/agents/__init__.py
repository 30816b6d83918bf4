from .adventurer import Adventurer, Direction

__all__ = ["Adventurer", "Direction"]
