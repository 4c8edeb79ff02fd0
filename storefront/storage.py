"""Key/value storage with the browser ``localStorage`` contract.

Values are strings (JSON text). ``JSONFileStorage`` keeps the whole store in
one JSON file so a cart can be inspected and reconciled from the CLI;
``MemoryStorage`` is the in-process equivalent.
"""

import json
from pathlib import Path
from typing import Dict, Optional, Union

from storefront.logging_config import get_logger

__all__ = ["MemoryStorage", "JSONFileStorage"]

logger = get_logger("storage")


class MemoryStorage:
    """In-memory storage, one instance per browser tab."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JSONFileStorage(MemoryStorage):
    """Storage persisted to a JSON object file on every write.

    A missing file starts empty. A corrupt or non-object file is logged and
    treated as empty; it is overwritten on the next write.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Storage file {self.path} is corrupt, starting empty: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Storage file {self.path} is not a JSON object, starting empty")
            return {}
        # Values written by other tools may be JSON values rather than text
        return {
            str(k): v if isinstance(v, str) else json.dumps(v)
            for k, v in data.items()
        }

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, ensure_ascii=False, indent=2)

    def set_item(self, key: str, value: str) -> None:
        super().set_item(key, value)
        self._flush()

    def remove_item(self, key: str) -> None:
        super().remove_item(key)
        self._flush()

    def clear(self) -> None:
        super().clear()
        self._flush()
