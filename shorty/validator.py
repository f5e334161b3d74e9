"""Integrity checks over the alias file"""

import logging
import shutil
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from shorty.errors import FormatCollision
from shorty.models import AliasRecord, LineKind, MalformedReason
from shorty.parser import check_record, serialize
from shorty.store import AliasStore

logger = logging.getLogger(__name__)

SHELL_BUILTINS = {
    "cd", "echo", "pwd", "exit", "source", ".", "alias", "unalias", "export",
    "set", "unset", "history", "jobs", "bg", "fg", "kill", "eval", "exec",
    "test", "true", "false", "printf", "type", "command",
}

SYSTEM_COMMANDS = {
    "ls", "cd", "cp", "mv", "rm", "mkdir", "rmdir", "cat", "grep", "find",
    "ps", "kill", "top", "chmod", "chown",
}

SUSPICIOUS_PATTERNS = [
    "rm -rf /",
    "sudo rm -rf",
    ":(){ :|:& };:",
    "mkfs",
    "dd if=",
    "> /dev/",
    "shutdown",
    "reboot",
]


class IssueType(Enum):
    """Kinds of problems the validator reports"""

    INVALID_SYNTAX = "Invalid Syntax"
    MALFORMED_LINE = "Malformed Lines"
    EMPTY_COMMAND = "Empty Commands"
    DUPLICATE = "Duplicate Aliases"
    COMMAND_NOT_FOUND = "Command Not Found"
    SYSTEM_CONFLICT = "System Command Conflicts"
    SUSPICIOUS_COMMAND = "Suspicious Commands"
    EMPTY_TAG = "Empty Tags"


@dataclass
class AliasIssue:
    """A single problem found on one line"""
    line_number: int
    alias_name: str
    issue_type: IssueType
    description: str
    suggestion: Optional[str] = None


def command_exists(command: str) -> bool:
    """True for shell builtins and anything found on PATH"""
    if command in SHELL_BUILTINS:
        return True
    return shutil.which(command) is not None


def first_word(command: str) -> str:
    parts = command.split()
    return parts[0] if parts else ""


def is_suspicious_command(command: str) -> bool:
    return any(pattern in command for pattern in SUSPICIOUS_PATTERNS)


class AliasValidator:
    """Find syntax errors, duplicates and risky commands in an alias store"""

    def __init__(self, store: AliasStore, check_path: bool = True):
        self.store = store
        self.check_path = check_path
        self.unfixable: List[str] = []

    def validate(self) -> List[AliasIssue]:
        """One issue at most per line, in file order"""
        issues = []
        seen: Dict[str, int] = {}

        for line in self.store.lines:
            stripped = line.raw.strip()
            if not stripped or stripped.startswith("#"):
                continue

            issue = self._check_line(line, seen)
            if issue:
                issues.append(issue)

        return issues

    def _check_line(self, line, seen: Dict[str, int]) -> Optional[AliasIssue]:
        number = line.line_number

        if line.kind is LineKind.OTHER:
            return AliasIssue(
                number, "unknown", IssueType.INVALID_SYNTAX,
                "Line doesn't start with 'alias'",
                "Ensure line starts with 'alias name=command'",
            )

        if line.kind is LineKind.MALFORMED:
            suggestions = {
                MalformedReason.MISSING_EQUALS: "Use format: alias name='command'",
                MalformedReason.EMPTY_NAME: "Provide a valid alias name",
                MalformedReason.INVALID_NAME: "Alias names cannot contain spaces or quotes",
                MalformedReason.UNTERMINATED_QUOTE: "Close the quote around the command",
            }
            return AliasIssue(
                number, line.name or "unknown", IssueType.MALFORMED_LINE,
                line.reason.value, suggestions[line.reason],
            )

        record = line.record
        if record.name in seen:
            return AliasIssue(
                number, record.name, IssueType.DUPLICATE,
                f"Duplicate of alias on line {seen[record.name]}",
                "Remove one of the duplicate aliases",
            )
        seen[record.name] = number

        if not record.command.strip():
            return AliasIssue(
                number, record.name, IssueType.EMPTY_COMMAND,
                "Empty command", "Provide a valid command",
            )

        word = first_word(record.command)
        if self.check_path and word and not command_exists(word):
            if record.name in SYSTEM_COMMANDS:
                return AliasIssue(
                    number, record.name, IssueType.SYSTEM_CONFLICT,
                    f"Conflicts with system command '{record.name}'",
                    "Consider using a different alias name",
                )
            return AliasIssue(
                number, record.name, IssueType.COMMAND_NOT_FOUND,
                f"Command '{word}' not found in PATH",
                "Check if command is installed or fix typo",
            )

        if is_suspicious_command(record.command):
            return AliasIssue(
                number, record.name, IssueType.SUSPICIOUS_COMMAND,
                "Potentially dangerous command detected",
                "Review this alias carefully",
            )

        if "" in record.tags:
            return AliasIssue(
                number, record.name, IssueType.EMPTY_TAG,
                "Tag list contains an empty tag",
                "Run with --fix to drop empty tags",
            )

        return None

    def find_duplicates(self) -> "OrderedDict[str, List[int]]":
        """Names defined on more than one line, with their line numbers"""
        occurrences: "OrderedDict[str, List[int]]" = OrderedDict()
        for line in self.store.lines:
            if line.name and line.kind is not LineKind.OTHER:
                occurrences.setdefault(line.name, []).append(line.line_number)
        return OrderedDict((name, lines) for name, lines in occurrences.items() if len(lines) > 1)

    def remove_duplicates(self) -> int:
        """Keep one line per duplicated name, return lines dropped

        The survivor is the last valid alias line of the name. A name with no
        valid line at all is left alone so nothing is lost before it is fixed
        by hand.
        """
        survivor = {}
        for index, line in enumerate(self.store.lines):
            if line.is_alias:
                survivor[line.name] = index

        doomed = [
            index for index, line in enumerate(self.store.lines)
            if line.name in survivor and line.kind is not LineKind.OTHER and survivor[line.name] != index
        ]
        if not doomed:
            return 0
        return self.store.remove_at(doomed)

    def drop_empty_tags(self) -> int:
        """Rewrite aliases whose tag list has empty entries

        Lines whose rewrite could not be read back are kept as they are and
        their names collected in ``unfixable``.
        """
        fixed = 0
        self.unfixable = []
        for index, line in enumerate(self.store.lines):
            if line.is_alias and "" in line.record.tags:
                record = line.record
                cleaned = AliasRecord(
                    name=record.name,
                    command=record.command,
                    note=record.note,
                    tags=[tag for tag in record.tags if tag],
                )
                try:
                    check_record(cleaned)
                except FormatCollision as e:
                    logger.debug("Leaving line %d as is: %s", line.line_number, e)
                    self.unfixable.append(record.name)
                    continue
                self.store.replace_at(index, serialize(cleaned))
                fixed += 1
        return fixed

    @staticmethod
    def group_by_type(issues: List[AliasIssue]) -> "OrderedDict[IssueType, List[AliasIssue]]":
        grouped: "OrderedDict[IssueType, List[AliasIssue]]" = OrderedDict()
        for issue in issues:
            grouped.setdefault(issue.issue_type, []).append(issue)
        return grouped
