from .loop import EngineConfig, GameEngine

__all__ = ["EngineConfig", "GameEngine"]
