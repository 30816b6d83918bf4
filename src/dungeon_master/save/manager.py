from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from platformdirs import user_data_dir

from ..errors import SnapshotDecodeError

logger = logging.getLogger(__name__)

APP_NAME = "DungeonMaster"
ENV_SAVE_DIR = "DM_SAVE_DIR"
SAVE_FILENAME = "dungeon_save.json"
STORAGE_VERSION = 1


def default_save_dir() -> Path:
    override = os.getenv(ENV_SAVE_DIR)
    if override:
        return Path(override).expanduser()
    return Path(user_data_dir(appname=APP_NAME, appauthor=False))


class SaveManager:
    """Single-slot JSON storage for session snapshots.

    The payload is opaque here; it is wrapped with a timestamp and storage
    version so that the file can be inspected without decoding the game state.
    A missing or unreadable file means "no save available" and yields None.
    """

    def __init__(self, data_dir: Optional[Path] = None, filename: str = SAVE_FILENAME) -> None:
        self.data_dir = Path(data_dir) if data_dir else default_save_dir()
        self.save_path = self.data_dir / filename

    def has_save(self) -> bool:
        return self.save_path.exists()

    def save(self, payload: Dict[str, Any]) -> Path:
        """Write payload atomically. Raises OSError on failure."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        document = {
            "version": STORAGE_VERSION,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "payload": payload,
        }
        tmp_path = self.save_path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, self.save_path)
        logger.info("Saved game to %s", self.save_path)
        return self.save_path

    def read(self) -> Dict[str, Any]:
        """Return the stored payload.

        Raises:
            FileNotFoundError: no save exists.
            SnapshotDecodeError: the file is not a valid save document.
        """
        if not self.save_path.exists():
            raise FileNotFoundError(f"No save found at {self.save_path}")
        try:
            document = json.loads(self.save_path.read_bytes().decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise SnapshotDecodeError(f"Invalid save JSON in {self.save_path}") from exc
        if not isinstance(document, dict) or not isinstance(document.get("payload"), dict):
            raise SnapshotDecodeError(f"Save document has no payload: {self.save_path}")
        if document.get("version") != STORAGE_VERSION:
            logger.warning("Save storage version %r differs from %d", document.get("version"), STORAGE_VERSION)
        return document["payload"]

    def load(self) -> Optional[Dict[str, Any]]:
        try:
            return self.read()
        except FileNotFoundError:
            logger.info("No save available at %s", self.save_path)
            return None
        except (OSError, SnapshotDecodeError) as exc:
            logger.warning("Ignoring unreadable save: %s", exc)
            return None

    def delete(self) -> bool:
        if not self.save_path.exists():
            return False
        self.save_path.unlink()
        logger.info("Deleted save %s", self.save_path)
        return True
