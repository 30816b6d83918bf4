import logging
from dataclasses import dataclass
from typing import Optional

from ..core.events import EventBus, EventName

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DPChanged:
    old_amount: int
    new_amount: int
    delta: int
    reason: str  # e.g., "reward", "placement", "wall", "floor", "load"


@dataclass
class DPWallet:
    """Holds the player's DP (dungeon points).

    Emits a DPChanged payload on every state change via the provided EventBus.
    """

    event_bus: Optional[EventBus] = None
    _amount: int = 0

    @property
    def amount(self) -> int:
        return self._amount

    def can_afford(self, cost: int) -> bool:
        if cost < 0:
            return False
        return self._amount >= cost

    def add(self, amount: int, reason: str = "adjust") -> int:
        if amount < 0:
            raise ValueError("Cannot add negative DP; use spend() for deduction")
        old = self._amount
        self._amount = old + amount
        logger.debug("DP added: +%s (reason=%s); old=%s new=%s", amount, reason, old, self._amount)
        self._emit(old, reason)
        return amount

    def spend(self, amount: int, reason: str = "purchase") -> int:
        if amount < 0:
            raise ValueError("Cannot spend negative DP")
        if amount == 0:
            return 0
        if not self.can_afford(amount):
            raise ValueError(f"Insufficient DP: have {self._amount}, need {amount}")
        old = self._amount
        self._amount = old - amount
        logger.debug("DP spent: -%s (reason=%s); old=%s new=%s", amount, reason, old, self._amount)
        self._emit(old, reason)
        return amount

    def set(self, amount: int, reason: str = "adjust") -> None:
        if amount < 0:
            raise ValueError("DP cannot be negative")
        old = self._amount
        self._amount = amount
        if old != amount:
            logger.debug("DP set: old=%s new=%s (reason=%s)", old, amount, reason)
            self._emit(old, reason)

    def _emit(self, old: int, reason: str) -> None:
        if self.event_bus is None:
            return
        self.event_bus.emit(
            EventName.DP_CHANGED,
            DPChanged(old_amount=old, new_amount=self._amount, delta=self._amount - old, reason=reason),
        )
