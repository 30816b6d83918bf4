import sys
from pathlib import Path
from typing import List, Tuple

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from dungeon_master.core.events import Severity  # noqa: E402


class RecordingContext:
    """In-memory stand-in for GameSession used by builder and agent tests."""

    def __init__(self, dp: int = 1000) -> None:
        self.dp = dp
        self.messages: List[Tuple[str, Severity]] = []
        self.redraws = 0

    def spend_resource(self, amount: int) -> bool:
        if self.dp < amount:
            return False
        self.dp -= amount
        return True

    def add_resource(self, amount: int) -> None:
        self.dp += amount

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        self.messages.append((message, severity))

    def request_redraw(self) -> None:
        self.redraws += 1

    def severities(self) -> List[Severity]:
        return [s for _, s in self.messages]


@pytest.fixture
def context() -> RecordingContext:
    return RecordingContext()
