from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonFileStore:
    """Best-effort JSON persistence for small state (cursor, dedupe set, timer map).

    Reads of a missing, empty or unreadable file return the default; write
    failures are logged and swallowed. Saves are serialised and land through a
    temp file + rename so a crash never leaves half a document behind.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def read(self, default: Any) -> Any:
        try:
            if not self._path.exists():
                return default
            raw = self._path.read_text(encoding="utf-8").strip()
            if not raw:
                return default
            return json.loads(raw)
        except (OSError, ValueError) as exc:
            logger.error("Could not load %s, starting empty: %s", self._path, exc)
            return default

    def write(self, data: Any) -> bool:
        with self._lock:
            tmp_path = self._path.with_name(self._path.name + ".tmp")
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
                os.replace(tmp_path, self._path)
                return True
            except (OSError, TypeError, ValueError) as exc:
                logger.error("Could not save %s: %s", self._path, exc)
                return False
