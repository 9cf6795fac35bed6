"""
Device-local key/value store with a hard byte capacity.

Values are strings (callers store JSON). When ``path`` is given the whole map
is mirrored to a JSON file after every write; otherwise it lives in memory.
A write that would push usage past the capacity raises QuotaExceededError and
leaves the store untouched.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger("snapcal.adapters.local")

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


class QuotaExceededError(Exception):
    """The platform signal for a write past the store's capacity"""

    def __init__(self, key: str, required: int, quota: int):
        super().__init__(
            f"Writing {key!r} needs {required} bytes; quota is {quota} bytes"
        )
        self.key = key
        self.required = required
        self.quota = quota


def _size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class LocalKeyValueStore:
    def __init__(self, path: Optional[str] = None, quota_bytes: int = DEFAULT_QUOTA_BYTES):
        self.path = Path(path).expanduser() if path else None
        self.quota_bytes = quota_bytes
        self._items: Dict[str, str] = {}
        if self.path is not None:
            self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable local store %s: %s", self.path, e)
            return
        if isinstance(raw, dict):
            self._items = {str(k): str(v) for k, v in raw.items()}

    def _flush(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".snapcal-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._items, fh, ensure_ascii=False)
            os.replace(tmp, self.path)
        except Exception:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def usage_bytes(self) -> int:
        return sum(_size(k, v) for k, v in self._items.items())

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        current = self._items.get(key)
        used = self.usage_bytes() - (_size(key, current) if current is not None else 0)
        required = used + _size(key, value)
        if required > self.quota_bytes:
            raise QuotaExceededError(key, required, self.quota_bytes)
        self._items[key] = value
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._flush()

    def keys(self) -> List[str]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()
        self._flush()

    # JSON helpers

    def get_json(self, key: str, default: Any = None) -> Any:
        """Decoded value, or ``default`` when missing or corrupt"""
        raw = self._items.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Corrupt JSON under local key %s; treating as empty", key)
            return default

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value, ensure_ascii=False, separators=(",", ":")))
