"""Well-known locations under the user's home directory"""

import logging
import shutil
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_ALIASES_FILE = "~/.shorty/aliases"
LEGACY_ALIASES_NAME = ".shorty_aliases"


def get_shorty_dir() -> Path:
    """~/.shorty, holding the alias file, config, registries and backups"""
    return Path.home() / ".shorty"


def get_backup_dir() -> Path:
    return get_shorty_dir() / "backups"


def get_aliases_path(configured: Optional[str] = None) -> Path:
    """Resolve the alias file, migrating the legacy ~/.shorty_aliases once"""
    if configured and configured != DEFAULT_ALIASES_FILE:
        return Path(configured).expanduser()

    home = Path.home()
    shorty_dir = get_shorty_dir()
    new_path = shorty_dir / "aliases"
    old_path = home / LEGACY_ALIASES_NAME

    try:
        shorty_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning("Could not create %s: %s", shorty_dir, e)

    if old_path.exists() and not new_path.exists():
        try:
            shutil.copy2(old_path, new_path)
        except OSError as e:
            logger.warning("Could not migrate aliases file: %s", e)
            return old_path

        backup_path = home / f"{LEGACY_ALIASES_NAME}.backup"
        try:
            old_path.rename(backup_path)
        except OSError as e:
            logger.warning("Could not back up old aliases file: %s", e)
        else:
            logger.warning("Migrated aliases to %s (old file kept at %s)", new_path, backup_path)

    return new_path
