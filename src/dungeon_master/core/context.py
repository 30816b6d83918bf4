from __future__ import annotations

from typing import Protocol

from .events import Severity


class GameContext(Protocol):
    """Services the simulation core calls into but does not implement.

    GameSession is the production implementation; tests pass lightweight fakes.
    """

    def spend_resource(self, amount: int) -> bool: ...

    def add_resource(self, amount: int) -> None: ...

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None: ...

    def request_redraw(self) -> None: ...
