"""Data models for alias lines"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List

ALIAS_PREFIX = "alias "
TAGS_MARKER = "#tags:"
CATEGORY_TAG_PREFIX = "category:"


@dataclass
class AliasRecord:
    """Represents one parsed alias line"""
    name: str
    command: str
    note: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    line_number: int = field(default=0, compare=False)

    def __post_init__(self):
        # notes are stored trimmed, the parser reads them back that way
        if self.note is not None:
            self.note = str(self.note).strip() or None

    @property
    def category(self) -> Optional[str]:
        """Category carried as a category:<name> tag, if any"""
        for tag in self.tags:
            if tag.startswith(CATEGORY_TAG_PREFIX):
                return tag[len(CATEGORY_TAG_PREFIX):]
        return None

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def to_dict(self) -> dict:
        """Convert record to dictionary for export"""
        return {
            "name": self.name,
            "command": self.command,
            "note": self.note,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AliasRecord":
        """Create record from an exported dictionary"""
        tags = data.get("tags") or []
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.split(",") if t.strip()]
        elif not isinstance(tags, (list, tuple)):
            tags = [tags]
        return cls(
            name=str(data["name"]).strip(),
            command=str(data["command"]),
            note=data.get("note") or data.get("description") or None,
            tags=[str(t) for t in tags],
        )

    def __str__(self) -> str:
        """String representation for display"""
        return f"{self.name}='{self.command}'"


class LineKind(Enum):
    """What a raw line of the alias file turned out to be"""

    ALIAS = "alias"
    OTHER = "other"
    MALFORMED = "malformed"


class MalformedReason(Enum):
    """Why a line starting with the alias prefix could not be parsed"""

    MISSING_EQUALS = "Missing '=' in alias definition"
    EMPTY_NAME = "Empty alias name"
    INVALID_NAME = "Alias name contains whitespace or quotes"
    UNTERMINATED_QUOTE = "Unterminated quote in command"


@dataclass
class ParsedLine:
    """A raw line together with the outcome of parsing it"""
    raw: str
    kind: LineKind
    line_number: int = 0
    record: Optional[AliasRecord] = None
    reason: Optional[MalformedReason] = None
    # name is kept for malformed lines when it could still be read
    name: Optional[str] = None

    @property
    def is_alias(self) -> bool:
        return self.kind is LineKind.ALIAS

    @property
    def is_malformed(self) -> bool:
        return self.kind is LineKind.MALFORMED
