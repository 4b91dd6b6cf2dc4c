"""
Save store - string-keyed saved games in one JSON file.

The gameplay core only hands out and accepts plain dicts; this is the
local backing store the desktop client uses for them.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class SaveStore:
    """Reads and writes saved games keyed by slot name."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a save table")
        return data

    def _write_all(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f)
        tmp.replace(self.path)

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        return self._read_all().get(key)

    def put(self, key: str, value: Dict[str, Any]) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)
        logger.info("Saved game '%s' to %s", key, self.path)

    def delete(self, key: str) -> bool:
        data = self._read_all()
        if key not in data:
            return False
        del data[key]
        self._write_all(data)
        return True

    def keys(self) -> List[str]:
        return sorted(self._read_all())
