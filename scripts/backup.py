"""Backup the ledger data.

Note: JSON backends are copied file by file; the MySQL backend uses `mysqldump`
when it is installed.
"""

from __future__ import annotations

import importlib
import shutil
import subprocess
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module


def main() -> None:
    settings = importlib.import_module(get_settings_module())

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_dir = REPO_ROOT / "backups" / ts
    out_dir.mkdir(parents=True, exist_ok=True)

    data_dir = Path(settings.DATA_DIR)
    copied = 0
    for path in sorted(data_dir.glob("*.json")):
        shutil.copy2(path, out_dir / path.name)
        copied += 1
    print(f"OK: Copied {copied} data files to {out_dir}")

    if settings.STORAGE_BACKEND != "mysql":
        return

    db = settings.DB_CONFIG
    cmd = [
        "mysqldump",
        f"-h{db['host']}",
        f"-P{db.get('port', 3306)}",
        f"-u{db['user']}",
        f"-p{db['password']}",
        db["database"],
    ]
    out_file = out_dir / f"{db['database']}.sql"
    try:
        with out_file.open("wb") as f:
            subprocess.run(cmd, stdout=f, stderr=subprocess.PIPE, check=True)
        print(f"OK: Backup created: {out_file}")
    except FileNotFoundError:
        raise SystemExit("`mysqldump` not found. Install the MySQL client tools to back up the database.")


if __name__ == "__main__":
    main()
