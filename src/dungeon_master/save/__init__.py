from .manager import SaveManager

__all__ = ["SaveManager"]
