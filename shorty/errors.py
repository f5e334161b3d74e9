"""Typed failures raised by shorty operations"""

from pathlib import Path
from typing import Optional


class ShortyError(Exception):
    """Base class for every error reported to the user"""


class AliasNotFound(ShortyError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Alias '{name}' not found")


class AliasFileNotFound(ShortyError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"No aliases file found at {path}")


class FormatCollision(ShortyError):
    """Input that would serialize to a line the parser cannot read back"""

    def __init__(self, reason: str, name: Optional[str] = None):
        self.reason = reason
        self.name = name
        prefix = f"Alias '{name}': " if name else ""
        super().__init__(f"{prefix}{reason}")


class CategoryError(ShortyError):
    pass


class TemplateError(ShortyError):
    pass


class BackupError(ShortyError):
    pass


class ConfigError(ShortyError):
    pass


class ImportFormatError(ShortyError):
    pass


class AliasExists(ShortyError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Alias '{name}' already exists")
