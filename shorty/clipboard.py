import logging
import platform
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import pyperclip

from shorty.models import AliasRecord
from shorty.parser import serialize

logger = logging.getLogger(__name__)

SHARE_HEADER = "#!/bin/bash\n# Shared alias from Shorty\n"


# Backend Interface
class ClipboardBackend(ABC):
    @abstractmethod
    def copy(self, text: str) -> bool:
        """Copy text to clipboard. Return True on success or False otherwise."""
        ...


class PyperclipBackend(ClipboardBackend):
    def copy(self, text: str) -> bool:
        try:
            pyperclip.copy(text)
            return True
        except pyperclip.PyperclipException as e:
            logger.debug("pyperclip failed: %s", e)
            return False


class MacOSBackend(ClipboardBackend):
    def copy(self, text: str) -> bool:
        if platform.system() != "Darwin":
            return False
        try:
            p = subprocess.Popen(["pbcopy"], stdin=subprocess.PIPE)
            p.communicate(text.encode("utf-8"))
            return p.returncode == 0
        except OSError as e:
            logger.debug("pbcopy failed: %s", e)
            return False


class LinuxBackend(ClipboardBackend):
    def copy(self, text: str) -> bool:
        if platform.system() != "Linux":
            return False
        # Try xclip first, then xsel
        for cmd in (["xclip", "-selection", "clipboard"], ["xsel", "--clipboard", "--input"]):
            try:
                p = subprocess.Popen(cmd, stdin=subprocess.PIPE)
                p.communicate(text.encode("utf-8"))
                if p.returncode == 0:
                    return True
            except FileNotFoundError:
                continue
        return False


class ClipboardManager:
    def __init__(self):
        self.backends = [PyperclipBackend(), MacOSBackend(), LinuxBackend()]

    def copy(self, text: str) -> bool:
        for backend in self.backends:
            if backend.copy(text):
                return True
        return False


def share_text(record: AliasRecord) -> str:
    """The alias line as pasted into someone else's shell, quotes escaped"""
    return serialize(record, shell_escape=True)


def write_share_file(record: AliasRecord, directory: Optional[Path] = None) -> Path:
    """Write shorty_share_<name>.sh holding the alias line"""
    path = (directory or Path.cwd()) / f"shorty_share_{record.name}.sh"
    with open(path, "w", encoding="utf-8") as f:
        f.write(f"{SHARE_HEADER}{share_text(record)}\n")
    return path
