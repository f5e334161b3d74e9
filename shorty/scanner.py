"""Scanner for aliases already defined in shell configuration"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from shorty.models import AliasRecord
from shorty.parser import parse_lines, split_lines
from shorty.shell import ShellDetector, ShellType

logger = logging.getLogger(__name__)

FISH_NOTE = "Imported from Fish abbreviation"


def parse_fish_abbr(line: str) -> Optional[AliasRecord]:
    """Read `abbr [-a] name command...` into a record"""
    parts = line.split()
    if len(parts) < 3 or parts[0] != "abbr":
        return None

    if parts[1] in ("-a", "--add"):
        if len(parts) < 4:
            return None
        name, words = parts[2], parts[3:]
    else:
        name, words = parts[1], parts[2:]

    command = " ".join(words)
    # fish accepts quoted expansions
    if len(command) >= 2 and command[0] == command[-1] and command[0] in ("'", '"'):
        command = command[1:-1]
    return AliasRecord(name=name, command=command, note=FISH_NOTE, tags=["fish"])


class AliasScanner:
    """Scan and import existing aliases from shell configuration"""

    def __init__(self, home_dir: Optional[Path] = None):
        self.detector = ShellDetector(home_dir)

    def scan_file(self, filepath: Path) -> List[AliasRecord]:
        """Alias lines in a shell file, read with the alias parser"""
        if not filepath.exists():
            return []

        content = filepath.read_text(encoding="utf-8", errors="replace")
        records = [line.record for line in parse_lines(content) if line.is_alias]
        logger.debug("Found %d aliases in %s", len(records), filepath)
        return records

    def scan_fish_file(self, filepath: Path) -> List[AliasRecord]:
        """Alias lines plus abbreviations in a fish config"""
        if not filepath.exists():
            return []

        records = self.scan_file(filepath)
        for line in split_lines(filepath.read_text(encoding="utf-8", errors="replace")):
            record = parse_fish_abbr(line.strip())
            if record:
                records.append(record)
        return records

    def scan_shell(self, shell_type: ShellType) -> Dict[str, List[AliasRecord]]:
        """Scan every known config file of one shell"""
        results = {}
        for filename, filepath in self.detector.find_config_files(shell_type).items():
            if shell_type is ShellType.FISH:
                records = self.scan_fish_file(filepath)
            else:
                records = self.scan_file(filepath)
            if records:
                results[filename] = records
        return results
