class DungeonMasterError(Exception):
    """Base error for dungeon master domain exceptions."""


class SnapshotError(DungeonMasterError):
    """Raised when a dungeon snapshot cannot be restored."""


class SnapshotDecodeError(SnapshotError):
    """Raised when stored snapshot bytes are not valid JSON."""


class SnapshotValidationError(SnapshotError):
    """Raised when a snapshot does not match the expected schema."""
