import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from shorty.errors import AliasFileNotFound
from shorty.models import AliasRecord, ParsedLine
from shorty.parser import parse_line, parse_lines, serialize

logger = logging.getLogger(__name__)

# bytes that are not valid UTF-8 are carried through to the saved file unchanged
FILE_ENCODING = "utf-8"
FILE_ERRORS = "surrogateescape"


class AliasStore:
    """Ordered in-memory view of the alias file

    Lines that are not aliases are kept verbatim and written back untouched.
    Line numbers are renumbered after every mutation.
    """

    def __init__(self, path: Path, lines: Optional[List[ParsedLine]] = None):
        self.path = path
        self.lines: List[ParsedLine] = lines if lines is not None else []

    @classmethod
    def load(cls, path: Path, must_exist: bool = False) -> "AliasStore":
        """Read the whole alias file; a missing file is empty unless required"""
        if not path.exists():
            if must_exist:
                raise AliasFileNotFound(path)
            logger.debug("Alias file %s does not exist yet", path)
            return cls(path)

        # newline="" keeps carriage returns in the raw lines
        with open(path, "r", encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="") as f:
            content = f.read()
        store = cls(path, parse_lines(content))
        logger.debug("Loaded %d lines (%d aliases) from %s", len(store), len(store.records()), path)
        return store

    def __len__(self) -> int:
        return len(self.lines)

    def records(self) -> List[AliasRecord]:
        """All alias records in file order"""
        return [line.record for line in self.lines if line.is_alias]

    def malformed(self) -> List[ParsedLine]:
        return [line for line in self.lines if line.is_malformed]

    def names(self) -> List[str]:
        """Distinct alias names in order of first appearance"""
        seen = []
        for record in self.records():
            if record.name not in seen:
                seen.append(record.name)
        return seen

    def find_by_name(self, name: str) -> Optional[int]:
        """Index of the first alias line with this name"""
        for index, line in enumerate(self.lines):
            if line.is_alias and line.record.name == name:
                return index
        return None

    def get(self, name: str) -> Optional[AliasRecord]:
        """Get the first alias with this name"""
        index = self.find_by_name(name)
        if index is None:
            return None
        return self.lines[index].record

    def replace_at(self, index: int, text: str) -> None:
        """Replace one line's text, leaving every other line untouched"""
        self.lines[index] = parse_line(text, index + 1)

    def replace_record(self, index: int, record: AliasRecord) -> None:
        self.replace_at(index, serialize(record))

    def append(self, text: str) -> None:
        """Add a new last line"""
        self.lines.append(parse_line(text, len(self.lines) + 1))

    def append_record(self, record: AliasRecord) -> None:
        self.append(serialize(record))

    def remove_by_name(self, name: str) -> int:
        """Drop every line defining this name, return how many were removed

        Unlike find_by_name this is not first-match only, and it also drops
        malformed lines that still carry the name.
        """
        kept = [line for line in self.lines if line.name != name]
        removed = len(self.lines) - len(kept)
        if removed:
            self.lines = kept
            self._renumber()
        return removed

    def remove_at(self, indexes: List[int]) -> int:
        """Drop the lines at the given positions"""
        doomed = set(indexes)
        kept = [line for index, line in enumerate(self.lines) if index not in doomed]
        removed = len(self.lines) - len(kept)
        self.lines = kept
        self._renumber()
        return removed

    def text(self) -> str:
        """File content for the current lines"""
        if not self.lines:
            return ""
        return "\n".join(line.raw for line in self.lines) + "\n"

    def save(self, path: Optional[Path] = None) -> None:
        """Write the whole file back

        The content goes to a temporary file in the same directory first and
        is then moved over the target.
        """
        target = path or self.path
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="") as fh:
                fh.write(self.text())
            os.replace(tmp_name, target)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug("Wrote %d lines to %s", len(self.lines), target)

    def _renumber(self) -> None:
        for number, line in enumerate(self.lines, 1):
            line.line_number = number
            if line.record is not None:
                line.record.line_number = number
