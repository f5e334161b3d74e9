import csv
import io
import json
import logging
import shlex
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from shorty import __version__
from shorty.errors import FormatCollision, ImportFormatError
from shorty.models import ALIAS_PREFIX, AliasRecord
from shorty.parser import check_record, parse_lines, parse_trailer, quote_command, serialize
from shorty.scanner import AliasScanner
from shorty.shell import ShellType
from shorty.store import AliasStore

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "yaml", "csv", "bash")
SHELL_SOURCES = ("bash", "zsh", "fish")
EXTENSIONS = {"json": "json", "yaml": "yaml", "csv": "csv", "bash": "sh"}
CSV_HEADER = ["name", "command", "note", "tags", "created_at", "shell_source"]


@dataclass
class ImportResult:
    """What an import did, or would do on a dry run"""
    imported: List[AliasRecord] = field(default_factory=list)
    conflicts: List[AliasRecord] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)


class AliasPorter:
    """Handle import and export of aliases"""

    def __init__(self, scanner: Optional[AliasScanner] = None):
        self.scanner = scanner or AliasScanner()

    def export_to_dict(self, records: List[AliasRecord]) -> Dict[str, Any]:
        return {
            "metadata": {
                "version": "1.0",
                "exported_at": datetime.now().isoformat(),
                "tool": "shorty",
                "tool_version": __version__,
                "count": len(records),
            },
            "aliases": [record.to_dict() for record in records],
        }

    def export_to_string(self, records: List[AliasRecord], format: str = "json") -> str:
        """Render records in one of the export formats"""
        if format == "json":
            return json.dumps(self.export_to_dict(records), indent=2)
        if format == "yaml":
            return yaml.dump(self.export_to_dict(records), default_flow_style=False, sort_keys=False)
        if format == "csv":
            return self._to_csv(records)
        if format == "bash":
            return self._to_bash(records)
        raise ImportFormatError(f"Unsupported format: {format}. Supported: {', '.join(EXPORT_FORMATS)}")

    def export_to_file(self, records: List[AliasRecord], filepath: Optional[Path] = None, format: str = "json") -> Path:
        if filepath is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filepath = Path(f"shorty_export_{timestamp}.{EXTENSIONS.get(format, format)}")

        content = self.export_to_string(records, format)
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(content)
        return filepath

    def _to_csv(self, records: List[AliasRecord]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        created = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        for record in records:
            writer.writerow([record.name, record.command, record.note or "", ";".join(record.tags), created, ""])
        return buffer.getvalue()

    def _to_bash(self, records: List[AliasRecord]) -> str:
        lines = [
            "#!/bin/bash",
            "# Exported by Shorty alias manager",
            f"# Generated on: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            "",
        ]
        for record in records:
            comment = []
            if record.note:
                comment.append(record.note)
            if record.tags:
                comment.append(f"tags:{','.join(record.tags)}")
            if comment:
                lines.append(f"# {' | '.join(comment)}")
            lines.append(f"alias {record.name}={quote_command(record.command)}")
            lines.append("")
        return "\n".join(lines)

    def read_source(self, source: str, format: Optional[str] = None) -> List[AliasRecord]:
        """Records from a file path or from a shell's configuration files"""
        if source.lower() in SHELL_SOURCES and not Path(source).exists():
            shell_type = ShellType(source.lower())
            records = []
            for filename, found in self.scanner.scan_shell(shell_type).items():
                logger.debug("%s: %d aliases", filename, len(found))
                records.extend(found)
            return records
        return self.read_file(Path(source).expanduser(), format)

    def read_file(self, filepath: Path, format: Optional[str] = None) -> List[AliasRecord]:
        if not filepath.exists():
            raise ImportFormatError(f"File not found: {filepath}")

        if format is None:
            format = {
                ".json": "json",
                ".yaml": "yaml",
                ".yml": "yaml",
                ".csv": "csv",
            }.get(filepath.suffix.lower(), "bash")
        elif format == "sh":
            format = "bash"

        try:
            content = filepath.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ImportFormatError(f"{filepath.name} is not valid UTF-8: {e}")
        if format == "json":
            try:
                return self._from_data(json.loads(content))
            except json.JSONDecodeError as e:
                raise ImportFormatError(f"Invalid JSON in {filepath.name}: {e}")
        if format == "yaml":
            try:
                return self._from_data(yaml.safe_load(content))
            except yaml.YAMLError as e:
                raise ImportFormatError(f"Invalid YAML in {filepath.name}: {e}")
        if format == "csv":
            return self._from_csv(content)
        if format == "bash":
            return self._from_bash(content)
        raise ImportFormatError(f"Unsupported format: {format}")

    def _from_data(self, data: Any) -> List[AliasRecord]:
        if isinstance(data, dict) and "aliases" in data:
            data = data["aliases"]
        if not isinstance(data, list):
            raise ImportFormatError(
                "Format not recognized. Expected a list of aliases or an object with an 'aliases' field"
            )

        records = []
        for item in data:
            if not isinstance(item, dict) or "name" not in item or "command" not in item:
                raise ImportFormatError(f"Invalid alias entry: {item!r}")
            records.append(AliasRecord.from_dict(item))
        return records

    def _from_bash(self, content: str) -> List[AliasRecord]:
        records = []
        for line in parse_lines(content):
            if line.is_alias:
                records.append(_joined_shell_word(line.record, line.raw) or line.record)
        return records

    def _from_csv(self, content: str) -> List[AliasRecord]:
        records = []
        for row in csv.DictReader(io.StringIO(content)):
            name = (row.get("name") or "").strip()
            command = row.get("command") or ""
            if not name or not command:
                continue
            tags = [tag for tag in (row.get("tags") or "").split(";") if tag]
            records.append(AliasRecord(name=name, command=command, note=row.get("note") or None, tags=tags))
        return records

    def import_records(self, store: AliasStore, records: List[AliasRecord], dry_run: bool = False) -> ImportResult:
        """Append records whose names are not taken yet

        Existing names are never overwritten. Records that would not survive
        a round-trip are rejected. Nothing is appended on a dry run.
        """
        result = ImportResult()
        taken = set(store.names())
        for record in records:
            if record.name in taken:
                result.conflicts.append(record)
                continue
            try:
                check_record(record)
            except FormatCollision as e:
                logger.warning("Skipping %s: %s", record.name or "<unnamed>", e)
                result.rejected.append(str(e))
                continue
            taken.add(record.name)
            result.imported.append(record)

        if result.imported and not dry_run:
            if store.lines and store.lines[-1].raw.strip():
                store.append("")
            store.append(f"# Imported aliases - {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
            for record in result.imported:
                store.append(serialize(record))
        return result


def _joined_shell_word(record: AliasRecord, raw: str) -> Optional[AliasRecord]:
    """Re-read a single-quoted command that is glued to further quoting

    ``alias hi='echo '"'"'hi'"'"''`` is how an embedded single quote is
    escaped for the shell. The alias file parser stops at the first closing
    quote, so the whole word is read with shlex instead. Returns None for
    plain lines.
    """
    rest = raw.lstrip()[len(ALIAS_PREFIX):]
    rest = rest[rest.find("=") + 1:].strip()
    if not rest.startswith("'"):
        return None
    tail = rest[rest.find("'", 1) + 1:]
    if not tail or tail[0].isspace() or tail[0] == "#":
        return None

    quote = None
    end = len(rest)
    for index, char in enumerate(rest):
        if quote:
            if char == quote:
                quote = None
        elif char in "'\"":
            quote = char
        elif char.isspace():
            end = index
            break
    try:
        words = shlex.split(rest[:end])
    except ValueError:
        return None
    if len(words) != 1:
        return None

    note, tags = parse_trailer(rest[end:])
    return AliasRecord(name=record.name, command=words[0], note=note, tags=tags, line_number=record.line_number)
