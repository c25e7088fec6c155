"""JSON file configuration store."""

import json
import os
from pathlib import Path
from typing import Any, Dict

import aiofiles

from ..base import BaseConfigStore
from .._utils import logger

DEFAULT_SETTINGS: Dict[str, Any] = {
    "backupRetention": 30,
    "backupSchedules": {},
}


class JsonConfigStore(BaseConfigStore):
    """Settings kept in a single JSON file.

    The file is read once on construction; ``save`` rewrites it through a
    temporary file so a crash never leaves a truncated config behind.
    """

    def __init__(self, path: str):
        self.path = Path(path).expanduser()
        self._settings: Dict[str, Any] = dict(DEFAULT_SETTINGS)

        if self.path.exists():
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._settings.update(data.get("settings", {}))
            logger.debug(f"Loaded settings from {self.path}")

    def get_setting(self, key: str) -> Any:
        return self._settings.get(key)

    def set_setting(self, key: str, value: Any) -> None:
        self._settings[key] = value

    async def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")

        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps({"settings": self._settings}, indent=2, default=str))
        os.replace(tmp_path, self.path)

        logger.debug(f"Settings saved: {self.path}")
