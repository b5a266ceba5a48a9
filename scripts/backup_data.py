# scripts/backup_data.py
import shutil
import datetime
from datetime import timezone
from pathlib import Path

from deskcrm.config import settings

DATA_PATH = settings.data_file
BACKUP_DIR = Path(settings.DATA_DIR) / "backups"
MAX_BACKUPS = 14


def backup_data(data_path: Path = DATA_PATH, backup_dir: Path = BACKUP_DIR, keep: int = MAX_BACKUPS) -> Path:
    if not data_path.exists():
        raise SystemExit(f"Data file not found at {data_path}")

    backup_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    backup_path = backup_dir / f"data_{ts}.json"

    shutil.copy2(data_path, backup_path)
    print(f"[backup] Created {backup_path}")

    # Keep only the newest `keep` backups
    backups = sorted(backup_dir.glob("data_*.json"))
    for old in backups[:-keep]:
        print(f"[backup] Deleting old backup {old}")
        old.unlink()
    return backup_path


if __name__ == "__main__":
    backup_data()
