import os
from datetime import datetime, timedelta

import pytest
from freezegun import freeze_time

from shorty.backup import BackupManager
from shorty.errors import AliasFileNotFound, BackupError


@pytest.fixture
def backups(sample_file, shorty_dir):
    return BackupManager(sample_file, shorty_dir / "backups", max_backups=3)


@freeze_time("2025-03-01 10:20:30")
def test_create_backup_default_name(backups, sample_file):
    path = backups.create_backup()

    assert path.name == "aliases_backup_2025-03-01_10-20-30.txt"
    assert path.read_text() == sample_file.read_text()


def test_create_backup_named(backups):
    assert backups.create_backup("before-cleanup").name == "before-cleanup.txt"
    assert backups.create_backup("keep.txt").name == "keep.txt"


def test_create_backup_without_alias_file(tmp_path):
    manager = BackupManager(tmp_path / "aliases", tmp_path / "backups")

    with pytest.raises(AliasFileNotFound):
        manager.create_backup()


def test_auto_backup_skips_empty_file(tmp_path):
    path = tmp_path / "aliases"
    path.write_text("")

    assert BackupManager(path, tmp_path / "backups").auto_backup() is None


def test_auto_backup_rotates(backups):
    start = datetime(2025, 1, 1, 12, 0, 0)
    for minute in range(5):
        with freeze_time(start + timedelta(minutes=minute)):
            backups.auto_backup()

    names = sorted(p.name for p in backups.backup_dir.glob("auto_*.txt"))
    assert names == ["auto_20250101_120200.txt", "auto_20250101_120300.txt", "auto_20250101_120400.txt"]


def test_restore_backup_saves_current_file(backups, sample_file):
    saved = backups.create_backup("good")
    sample_file.write_text("alias broken='x'\n")

    restored = backups.restore_backup("good.txt")

    assert restored == saved
    assert sample_file.read_text() == saved.read_text()
    assert (backups.backup_dir / "pre_restore.txt").read_text() == "alias broken='x'\n"


def test_restore_missing_backup(backups):
    with pytest.raises(BackupError, match="Backup file not found"):
        backups.restore_backup("nope.txt")


def test_restore_absolute_path(backups, sample_file, tmp_path):
    other = tmp_path / "elsewhere.txt"
    other.write_text("alias z='zz'\n")

    backups.restore_backup(str(other))

    assert sample_file.read_text() == "alias z='zz'\n"


def test_list_backups_newest_first(backups):
    old = backups.create_backup("old")
    new = backups.create_backup("new")
    stamp = (datetime.now() - timedelta(days=2)).timestamp()
    os.utime(old, (stamp, stamp))

    assert [b.path for b in backups.list_backups()] == [new, old]
    assert backups.list_backups()[0].size == new.stat().st_size


def test_list_backups_without_directory(tmp_path):
    assert BackupManager(tmp_path / "aliases", tmp_path / "missing").list_backups() == []


def test_clean_backups(backups):
    old = backups.create_backup("old")
    recent = backups.create_backup("recent")
    stamp = (datetime.now() - timedelta(days=45)).timestamp()
    os.utime(old, (stamp, stamp))

    removed = backups.clean_backups(older_than_days=30)

    assert removed == [old]
    assert not old.exists()
    assert recent.exists()
