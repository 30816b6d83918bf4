from .events import EventBus, EventName, Severity
from .random import RandomSource

__all__ = ["EventBus", "EventName", "Severity", "RandomSource"]
