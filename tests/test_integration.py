from pathlib import Path

import pytest

from shorty.integration import (
    COMPLETIONS_END,
    COMPLETIONS_START,
    INTEGRATION_END,
    INTEGRATION_START,
    ShellIntegrator,
    completion_script,
    source_line,
    strip_section,
)
from shorty.shell import ShellType

ALIASES = Path("/home/me/.shorty/aliases")


def test_source_line():
    assert source_line(ShellType.BASH, ALIASES) == '[ -f "/home/me/.shorty/aliases" ] && source "/home/me/.shorty/aliases"'
    assert source_line(ShellType.FISH, ALIASES).startswith('test -f "/home/me/.shorty/aliases"; and source')


def test_strip_section():
    content = f"before\n{INTEGRATION_START}\nstuff\n{INTEGRATION_END}\nafter\n"

    assert strip_section(content, INTEGRATION_START, INTEGRATION_END) == ("before\nafter\n", True)


def test_strip_section_leaves_partial_block():
    content = f"before\n{INTEGRATION_START}\nstuff\n"

    assert strip_section(content, INTEGRATION_START, INTEGRATION_END) == (content, False)


class TestInstall:
    def test_install_into_new_rc_file(self, tmp_path):
        integrator = ShellIntegrator(tmp_path)

        success, message = integrator.install(ShellType.ZSH, ALIASES)

        assert success
        content = (tmp_path / ".zshrc").read_text()
        assert content == f"{INTEGRATION_START}\n{source_line(ShellType.ZSH, ALIASES)}\n{INTEGRATION_END}\n"
        assert integrator.is_installed(ShellType.ZSH)

    def test_install_keeps_existing_content_and_backs_up(self, tmp_path):
        rc = tmp_path / ".bashrc"
        rc.write_text("export PATH=$PATH:~/bin\n")

        ShellIntegrator(tmp_path).install(ShellType.BASH, ALIASES)

        assert rc.read_text().startswith("export PATH=$PATH:~/bin\n\n" + INTEGRATION_START)
        backups = list(tmp_path.glob(".bashrc.shorty_backup_*"))
        assert len(backups) == 1
        assert backups[0].read_text() == "export PATH=$PATH:~/bin\n"

    def test_install_twice_needs_force(self, tmp_path):
        integrator = ShellIntegrator(tmp_path)
        integrator.install(ShellType.BASH, ALIASES)

        success, message = integrator.install(ShellType.BASH, ALIASES)
        assert not success
        assert "--force" in message

        success, _ = integrator.install(ShellType.BASH, Path("/other/aliases"), force=True)
        content = (tmp_path / ".bashrc").read_text()
        assert success
        assert content.count(INTEGRATION_START) == 1
        assert "/other/aliases" in content
        assert str(ALIASES) not in content

    def test_install_fish_creates_config_dir(self, tmp_path):
        ShellIntegrator(tmp_path).install(ShellType.FISH, ALIASES)

        assert (tmp_path / ".config" / "fish" / "config.fish").exists()

    def test_install_unknown_shell(self, tmp_path):
        with pytest.raises(ValueError):
            ShellIntegrator(tmp_path).install(ShellType.UNKNOWN, ALIASES)


class TestCompletions:
    def test_completion_script_mentions_program(self):
        script = completion_script(ShellType.ZSH)

        assert "_SHORTY_COMPLETE" in script
        assert "shorty" in script

    def test_install_bash_completions_replaces_block(self, tmp_path):
        integrator = ShellIntegrator(tmp_path)

        integrator.install_completions("first script", ShellType.BASH)
        success, _ = integrator.install_completions("second script", ShellType.BASH)

        content = (tmp_path / ".bashrc").read_text()
        assert success
        assert content == f"{COMPLETIONS_START}\nsecond script\n{COMPLETIONS_END}\n"

    def test_install_fish_completions(self, tmp_path):
        success, message = ShellIntegrator(tmp_path).install_completions("complete -c shorty", ShellType.FISH)

        target = tmp_path / ".config" / "fish" / "completions" / "shorty.fish"
        assert success
        assert target.read_text() == "complete -c shorty"
