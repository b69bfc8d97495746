"""Device-local key/value storage for session id and view preferences."""

import json
from pathlib import Path
from typing import Final, Protocol

from src.gallery.core.logging import get_logger

logger = get_logger(__name__)

SESSION_ID_KEY: Final[str] = "hackathon_session_id"
THEME_KEY: Final[str] = "theme"
SORT_ORDER_KEY: Final[str] = "project_sort_order"
GENERATION_FILTER_KEY: Final[str] = "generation_filter"


class LocalStorage(Protocol):
    """String key/value store; a missing key is a normal state."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class InMemoryStorage:
    def __init__(self, initial: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """Storage persisted as a flat JSON object in one file.

    An unreadable or corrupt file is treated as empty and rewritten on the
    next change.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._items = self._load()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(
                "Local storage unreadable, starting empty", path=str(self.path), error=str(e)
            )
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(self._items, ensure_ascii=False, indent=2), encoding="utf-8"
        )

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._flush()
