import logging
import shutil
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

from shorty.errors import AliasFileNotFound, BackupError
from shorty.paths import get_backup_dir

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".txt"
AUTO_PREFIX = "auto_"


@dataclass
class BackupInfo:
    """A backup file on disk"""
    path: Path
    modified: datetime
    size: int

    @property
    def name(self) -> str:
        return self.path.name


class BackupManager:
    """Create, rotate and restore copies of the alias file"""

    def __init__(self, aliases_path: Path, backup_dir: Optional[Path] = None, max_backups: int = 10):
        self.aliases_path = aliases_path
        self.backup_dir = backup_dir or get_backup_dir()
        self.max_backups = max_backups

    def create_backup(self, name: Optional[str] = None) -> Path:
        """Copy the alias file into the backup directory"""
        if not self.aliases_path.exists():
            raise AliasFileNotFound(self.aliases_path)

        self.backup_dir.mkdir(parents=True, exist_ok=True)
        if name:
            backup_name = name if name.endswith(BACKUP_SUFFIX) else f"{name}{BACKUP_SUFFIX}"
        else:
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            backup_name = f"aliases_backup_{timestamp}{BACKUP_SUFFIX}"

        backup_path = self.backup_dir / backup_name
        shutil.copy2(self.aliases_path, backup_path)
        logger.debug("Backed up %s to %s", self.aliases_path, backup_path)
        return backup_path

    def auto_backup(self) -> Optional[Path]:
        """Timestamped backup taken before a modification, rotated"""
        if not self.aliases_path.exists() or self.aliases_path.stat().st_size == 0:
            return None

        self.backup_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_path = self.backup_dir / f"{AUTO_PREFIX}{timestamp}{BACKUP_SUFFIX}"
        shutil.copy2(self.aliases_path, backup_path)
        self.cleanup_old_backups(keep=self.max_backups)
        return backup_path

    def cleanup_old_backups(self, keep: int = 10) -> None:
        """Remove old automatic backups, keeping only the most recent ones"""
        backups = sorted(self.backup_dir.glob(f"{AUTO_PREFIX}*{BACKUP_SUFFIX}"))
        if len(backups) > keep:
            for backup in backups[:-keep]:
                backup.unlink()
                logger.debug("Rotated out %s", backup)

    def resolve(self, backup_file: str) -> Path:
        """Absolute paths are used as given, anything else is looked up in the backup dir"""
        path = Path(backup_file).expanduser()
        if path.is_absolute():
            return path
        return self.backup_dir / backup_file

    def restore_backup(self, backup_file: str) -> Path:
        """Replace the alias file with a backup, saving the current one first"""
        backup_path = self.resolve(backup_file)
        if not backup_path.exists():
            raise BackupError(f"Backup file not found: {backup_path}")

        if self.aliases_path.exists():
            self.create_backup("pre_restore")

        self.aliases_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(backup_path, self.aliases_path)
        return backup_path

    def list_backups(self) -> List[BackupInfo]:
        """Backups, newest first"""
        if not self.backup_dir.exists():
            return []

        backups = []
        for path in self.backup_dir.glob(f"*{BACKUP_SUFFIX}"):
            stat = path.stat()
            backups.append(BackupInfo(path=path, modified=datetime.fromtimestamp(stat.st_mtime), size=stat.st_size))
        return sorted(backups, key=lambda b: b.modified, reverse=True)

    def clean_backups(self, older_than_days: int = 30) -> List[Path]:
        """Delete backups not modified within the given number of days"""
        cutoff = datetime.now() - timedelta(days=older_than_days)
        removed = []
        for backup in self.list_backups():
            if backup.modified < cutoff:
                backup.path.unlink()
                removed.append(backup.path)
        return removed
