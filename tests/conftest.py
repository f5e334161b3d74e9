from pathlib import Path

import pytest
from click.testing import CliRunner

from shorty.backup import BackupManager
from shorty.config import Config
from shorty.manager import AliasManager

SAMPLE_ALIASES = """# my aliases
alias gs='git status' # quick status #tags:git,vcs
alias ll='ls -la'

export EDITOR=vim
alias dc="docker compose" #tags:docker
"""


@pytest.fixture
def home(tmp_path, monkeypatch) -> Path:
    """Point HOME at a throwaway directory"""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("SHELL", raising=False)
    return tmp_path


@pytest.fixture
def shorty_dir(home) -> Path:
    path = home / ".shorty"
    path.mkdir()
    return path


@pytest.fixture
def aliases_file(shorty_dir) -> Path:
    return shorty_dir / "aliases"


@pytest.fixture
def sample_file(aliases_file) -> Path:
    aliases_file.write_text(SAMPLE_ALIASES)
    return aliases_file


@pytest.fixture
def config(shorty_dir) -> Config:
    return Config(shorty_dir)


@pytest.fixture
def manager(aliases_file, config, shorty_dir) -> AliasManager:
    backups = BackupManager(aliases_file, shorty_dir / "backups")
    return AliasManager(aliases_file, config, backups)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_ALIASES
