"""Shell detection and configuration file handling"""

import os
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional


class ShellType(Enum):
    """Supported shell types"""

    BASH = "bash"
    ZSH = "zsh"
    FISH = "fish"
    UNKNOWN = "unknown"


class ShellDetector:
    """Detect shell type and configuration files"""

    # Files scanned for existing aliases, in order
    CONFIG_FILES = {
        ShellType.BASH: [".bashrc", ".bash_aliases", ".bash_profile"],
        ShellType.ZSH: [".zshrc", ".zsh_aliases"],
        ShellType.FISH: [".config/fish/config.fish"],
    }

    # File that gets the source line on install
    RC_FILES = {
        ShellType.BASH: ".bashrc",
        ShellType.ZSH: ".zshrc",
        ShellType.FISH: ".config/fish/config.fish",
    }

    def __init__(self, home_dir: Optional[Path] = None):
        self.home_dir = home_dir or Path.home()

    def detect_current_shell(self) -> ShellType:
        """Detect the current shell from the environment"""
        shell_env = os.environ.get("SHELL", "").lower()
        if "zsh" in shell_env:
            return ShellType.ZSH
        elif "bash" in shell_env:
            return ShellType.BASH
        elif "fish" in shell_env:
            return ShellType.FISH

        if os.environ.get("ZSH_NAME") or os.environ.get("ZSH_VERSION"):
            return ShellType.ZSH
        elif os.environ.get("BASH_VERSION"):
            return ShellType.BASH

        hint = self._get_shell_hints_from_configs()
        return hint or ShellType.UNKNOWN

    def _get_shell_hints_from_configs(self) -> Optional[ShellType]:
        """Get shell type hints from existing configuration files"""
        for shell_type in (ShellType.ZSH, ShellType.BASH, ShellType.FISH):
            if (self.home_dir / self.RC_FILES[shell_type]).exists():
                return shell_type
        return None

    def find_config_files(self, shell_type: ShellType) -> Dict[str, Path]:
        """Existing configuration files for shell, keyed by their home-relative name"""
        config_files = {}
        for pattern in self.CONFIG_FILES.get(shell_type, []):
            config_path = self.home_dir / pattern
            if config_path.exists() and config_path.is_file():
                config_files[pattern] = config_path
        return config_files

    def get_rc_file(self, shell_type: ShellType) -> Path:
        if shell_type not in self.RC_FILES:
            raise ValueError(f"Unsupported shell: {shell_type.value}")
        return self.home_dir / self.RC_FILES[shell_type]

    @staticmethod
    def supported() -> List[str]:
        return [shell.value for shell in ShellType if shell is not ShellType.UNKNOWN]
