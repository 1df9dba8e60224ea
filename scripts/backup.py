"""Back up the ledger workbook and the poller state files.

Run it while the pollers are stopped so the copies are consistent.
"""

from __future__ import annotations

import importlib
import shutil
from datetime import datetime
from pathlib import Path

from config import get_settings_module

STATE_FILES = ("processed_punches.json", "device_cursor.json", "clockify_states.json")


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    data_dir = Path(settings.DATA_DIR)

    sources = [data_dir / settings.LEDGER_FILE] + [data_dir / name for name in STATE_FILES]
    existing = [p for p in sources if p.exists()]
    if not existing:
        raise SystemExit(f"Nothing to back up in {data_dir}")

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_dir = Path(__file__).resolve().parents[1] / "backups" / ts
    out_dir.mkdir(parents=True, exist_ok=True)

    for path in existing:
        shutil.copy2(path, out_dir / path.name)
    print(f"OK: Backed up {len(existing)} file(s) to {out_dir}")


if __name__ == "__main__":
    main()
