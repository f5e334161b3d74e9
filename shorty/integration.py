"""Hook the alias file into shell startup files"""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from shorty.shell import ShellDetector, ShellType

logger = logging.getLogger(__name__)

PROG_NAME = "shorty"
COMPLETE_VAR = "_SHORTY_COMPLETE"

INTEGRATION_START = "# === SHORTY INTEGRATION START ==="
INTEGRATION_END = "# === SHORTY INTEGRATION END ==="
COMPLETIONS_START = "# === SHORTY COMPLETIONS START ==="
COMPLETIONS_END = "# === SHORTY COMPLETIONS END ==="


def source_line(shell_type: ShellType, aliases_path: Path) -> str:
    if shell_type is ShellType.FISH:
        return f'test -f "{aliases_path}"; and source "{aliases_path}"'
    return f'[ -f "{aliases_path}" ] && source "{aliases_path}"'


def completion_script(shell_type: ShellType) -> str:
    """Click's completion script for the shorty command"""
    from click.shell_completion import get_completion_class

    from shorty.cli import main

    completion_cls = get_completion_class(shell_type.value)
    if completion_cls is None:
        raise ValueError(f"Unsupported shell: {shell_type.value}")
    return completion_cls(main, {}, PROG_NAME, COMPLETE_VAR).source()


def strip_section(content: str, start: str, end: str) -> Tuple[str, bool]:
    """Remove the first complete start/end block; partial blocks are left alone"""
    start_idx = content.find(start)
    if start_idx == -1:
        return content, False
    end_idx = content.find(end, start_idx)
    if end_idx == -1:
        return content, False
    end_idx += len(end)
    if content[end_idx:end_idx + 1] == "\n":
        end_idx += 1
    return content[:start_idx] + content[end_idx:], True


class ShellIntegrator:
    """Add or refresh the managed block in a shell rc file"""

    def __init__(self, home_dir: Optional[Path] = None):
        self.detector = ShellDetector(home_dir)

    def backup_shell_config(self, config_file: Path) -> Path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_path = config_file.with_name(f"{config_file.name}.shorty_backup_{timestamp}")
        shutil.copy2(config_file, backup_path)
        return backup_path

    def is_installed(self, shell_type: ShellType) -> bool:
        rc_file = self.detector.get_rc_file(shell_type)
        return rc_file.exists() and INTEGRATION_START in rc_file.read_text(encoding="utf-8")

    def install(self, shell_type: ShellType, aliases_path: Path, force: bool = False) -> Tuple[bool, str]:
        """Write the source line for the alias file into the shell's rc file"""
        rc_file = self.detector.get_rc_file(shell_type)
        content = rc_file.read_text(encoding="utf-8") if rc_file.exists() else ""

        if INTEGRATION_START in content:
            if not force:
                return False, f"Shorty is already integrated in {rc_file}. Use --force to reinstall"
            content, _ = strip_section(content, INTEGRATION_START, INTEGRATION_END)

        if rc_file.exists():
            backup = self.backup_shell_config(rc_file)
            logger.debug("Backed up %s to %s", rc_file, backup)

        block = "\n".join([INTEGRATION_START, source_line(shell_type, aliases_path), INTEGRATION_END])
        content = content.rstrip()
        new_content = f"{content}\n\n{block}\n" if content else f"{block}\n"

        rc_file.parent.mkdir(parents=True, exist_ok=True)
        rc_file.write_text(new_content, encoding="utf-8")
        return True, f"Added shorty integration to {rc_file}"

    def install_completions(self, script: str, shell_type: ShellType) -> Tuple[bool, str]:
        """Install completion script for the given shell"""
        try:
            if shell_type is ShellType.FISH:
                target = self.detector.home_dir / ".config" / "fish" / "completions" / f"{PROG_NAME}.fish"
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(script, encoding="utf-8")
                return True, f"Installed fish completions to {target}"

            rc_file = self.detector.get_rc_file(shell_type)
            content = rc_file.read_text(encoding="utf-8") if rc_file.exists() else ""
            content, _ = strip_section(content, COMPLETIONS_START, COMPLETIONS_END)
            block = "\n".join([COMPLETIONS_START, script.rstrip(), COMPLETIONS_END])
            content = content.rstrip()
            rc_file.write_text(f"{content}\n\n{block}\n" if content else f"{block}\n", encoding="utf-8")
            return True, f"Installed {shell_type.value} completions in {rc_file}"
        except OSError as e:
            return False, f"Failed to install completions: {e}"
