"""Parse and serialize alias lines

The line format is::

    alias <name>='<command>' # <note> #tags:<tag1>,<tag2>

Everything after the command is optional. Parsing never raises: a line is
either an alias, some other line (blank, comment, foreign shell syntax) or a
malformed alias that the validator reports.
"""

import re
from typing import Optional, Tuple, List

from shorty.errors import FormatCollision
from shorty.models import (
    ALIAS_PREFIX,
    TAGS_MARKER,
    AliasRecord,
    LineKind,
    MalformedReason,
    ParsedLine,
)

# Characters that may not appear in an alias name
INVALID_NAME_PATTERN = re.compile(r"[=\s'\"]")

QUOTES = ("'", '"')


def parse_line(text: str, line_number: int = 0) -> ParsedLine:
    """Parse one raw line of the alias file"""
    stripped = text.lstrip()
    if not stripped.startswith(ALIAS_PREFIX):
        return ParsedLine(raw=text, kind=LineKind.OTHER, line_number=line_number)

    body = stripped[len(ALIAS_PREFIX):]
    eq_pos = body.find("=")
    if eq_pos == -1:
        return _malformed(text, line_number, MalformedReason.MISSING_EQUALS)

    name = body[:eq_pos].strip()
    if not name:
        return _malformed(text, line_number, MalformedReason.EMPTY_NAME)
    if INVALID_NAME_PATTERN.search(name):
        return _malformed(text, line_number, MalformedReason.INVALID_NAME, name)

    split = _split_command(body[eq_pos + 1:].strip())
    if split is None:
        return _malformed(text, line_number, MalformedReason.UNTERMINATED_QUOTE, name)
    command, remaining = split

    note, tags = parse_trailer(remaining)
    record = AliasRecord(
        name=name,
        command=command,
        note=note,
        tags=tags,
        line_number=line_number,
    )
    return ParsedLine(
        raw=text,
        kind=LineKind.ALIAS,
        line_number=line_number,
        record=record,
        name=name,
    )


def parse(text: str) -> Optional[AliasRecord]:
    """Return the alias record on the line, or None for any other line"""
    return parse_line(text).record


def split_lines(content: str) -> List[str]:
    """Split on newlines only

    Unlike str.splitlines, form feeds and other Unicode line breaks stay
    inside the line they appear in, so opaque lines are written back as read.
    """
    if not content:
        return []
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def parse_lines(content: str) -> List[ParsedLine]:
    """Parse a whole file's content, numbering lines from 1"""
    return [parse_line(line, number) for number, line in enumerate(split_lines(content), 1)]


def quote_command(command: str) -> str:
    """Single-quote a command for a shell, escaping embedded single quotes"""
    return "'" + command.replace("'", "'\"'\"'") + "'"


def serialize(record: AliasRecord, shell_escape: bool = False) -> str:
    """Build the canonical line for a record

    The command is always single-quoted, whatever quoting it was read with.
    With shell_escape, embedded single quotes are escaped for the shell; such
    a line is meant for pasting, the alias file parser cannot read it back.
    """
    command = quote_command(record.command) if shell_escape else f"'{record.command}'"
    line = f"{ALIAS_PREFIX}{record.name}={command}"
    if record.note:
        line += f" # {record.note}"
    if record.tags:
        line += f" {TAGS_MARKER}{','.join(record.tags)}"
    return line


def check_record(record: AliasRecord) -> None:
    """Raise FormatCollision if the record cannot survive a round-trip"""
    name = record.name
    if not name:
        raise FormatCollision("Alias name must not be empty")
    if INVALID_NAME_PATTERN.search(name):
        raise FormatCollision("Alias name must not contain '=', whitespace or quotes", name)
    if not record.command.strip():
        raise FormatCollision("Command must not be empty", name)
    if "'" in record.command:
        raise FormatCollision("Command must not contain a single quote (')", name)
    if "\n" in record.command or "\r" in record.command:
        raise FormatCollision("Command must be a single line", name)

    if record.note:
        if "\n" in record.note or "\r" in record.note:
            raise FormatCollision("Note must be a single line", name)
        if record.note != record.note.strip():
            raise FormatCollision("Note must not start or end with whitespace", name)
        if TAGS_MARKER in record.note:
            raise FormatCollision(f"Note must not contain '{TAGS_MARKER}'", name)

    for tag in record.tags:
        if "," in tag or re.search(r"\s", tag):
            raise FormatCollision(f"Tag '{tag}' must not contain commas or whitespace", name)


def _malformed(
    text: str,
    line_number: int,
    reason: MalformedReason,
    name: Optional[str] = None,
) -> ParsedLine:
    return ParsedLine(
        raw=text,
        kind=LineKind.MALFORMED,
        line_number=line_number,
        reason=reason,
        name=name,
    )


def _split_command(rest: str) -> Optional[Tuple[str, str]]:
    """Split the text after '=' into (command, trailer)

    Returns None when an opening quote is never closed.
    """
    if rest[:1] in QUOTES:
        quote = rest[0]
        end = rest.find(quote, 1)
        if end == -1:
            return None
        return rest[1:end], rest[end + 1:]

    for index, char in enumerate(rest):
        if char in (" ", "#"):
            return rest[:index], rest[index:]
    return rest, ""


def parse_trailer(remaining: str) -> Tuple[Optional[str], List[str]]:
    """Extract (note, tags) from the text following the command"""
    trailer = remaining.strip()

    marker = trailer.find(TAGS_MARKER)
    if marker != -1:
        # empty tokens are kept as given
        tags = [tag.strip() for tag in trailer[marker + len(TAGS_MARKER):].split(",")]
        note_part = trailer[:marker].strip()
        note = None
        if note_part.startswith("#"):
            note = note_part[1:].strip() or None
        return note, tags

    if trailer.startswith("#"):
        return trailer[1:].strip() or None, []

    return None, []
