"""Statistics over the alias file"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from shorty.models import AliasRecord
from shorty.parser import split_lines
from shorty.store import FILE_ENCODING, FILE_ERRORS

COMMAND_CLASSES = [
    (("ls", "ll", "la", "dir"), "File Listing"),
    (("cd", "pushd", "popd"), "Navigation"),
    (("cp", "mv", "rm", "mkdir", "rmdir"), "File Operations"),
    (("cat", "less", "more", "head", "tail"), "File Viewing"),
    (("grep", "find", "locate", "which"), "Search"),
    (("npm", "yarn", "pnpm"), "Node.js"),
    (("cargo", "rustc"), "Rust"),
    (("python", "python3", "pip", "pip3"), "Python"),
    (("docker", "docker-compose"), "Docker"),
    (("kubectl", "k8s"), "Kubernetes"),
    (("ssh", "scp", "rsync"), "Network"),
    (("curl", "wget", "http"), "HTTP"),
]


@dataclass
class AliasStats:
    """Aggregate figures for a set of alias records"""
    total_aliases: int = 0
    aliases_with_notes: int = 0
    aliases_with_tags: int = 0
    unique_tags: int = 0
    tag_frequency: Dict[str, int] = field(default_factory=dict)
    command_types: Dict[str, int] = field(default_factory=dict)
    avg_command_length: float = 0.0
    longest_command: str = ""
    shortest_command: str = ""
    most_common_commands: List[Tuple[str, int]] = field(default_factory=list)

    def percentage(self, part: int) -> float:
        if self.total_aliases == 0:
            return 0.0
        return part / self.total_aliases * 100


@dataclass
class FileStats:
    file_size: int
    line_count: int
    last_modified: datetime


def classify_command(command: str) -> str:
    """Rough category of a command by its first word"""
    parts = command.split()
    word = parts[0] if parts else command

    if word.startswith("git"):
        return "Git"
    for words, label in COMMAND_CLASSES:
        if word in words:
            return label
    if "sudo" in command:
        return "System Admin"
    if "|" in command and "||" not in command:
        return "Pipeline"
    if "&&" in command or "||" in command:
        return "Compound"
    return "Other"


def analyze(records: List[AliasRecord]) -> AliasStats:
    stats = AliasStats(total_aliases=len(records))
    if not records:
        return stats

    first_words = Counter()
    tags = Counter()
    types = Counter()
    for record in records:
        command = record.command
        if len(command) > len(stats.longest_command):
            stats.longest_command = command
        if not stats.shortest_command or len(command) < len(stats.shortest_command):
            stats.shortest_command = command

        types[classify_command(command)] += 1
        parts = command.split()
        first_words[parts[0] if parts else command] += 1

        if record.note:
            stats.aliases_with_notes += 1
        real_tags = [tag for tag in record.tags if tag]
        if real_tags:
            stats.aliases_with_tags += 1
            tags.update(real_tags)

    stats.avg_command_length = sum(len(r.command) for r in records) / len(records)
    stats.unique_tags = len(tags)
    stats.tag_frequency = dict(tags.most_common())
    stats.command_types = dict(types.most_common())
    stats.most_common_commands = first_words.most_common(5)
    return stats


def file_stats(path: Path) -> Optional[FileStats]:
    if not path.exists():
        return None
    stat = path.stat()
    with open(path, "r", encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="") as f:
        line_count = len(split_lines(f.read()))
    return FileStats(
        file_size=stat.st_size,
        line_count=line_count,
        last_modified=datetime.fromtimestamp(stat.st_mtime),
    )


def format_file_size(size: int) -> str:
    """Human readable size, e.g. '512 B' or '1.5 KB'"""
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    if unit == 0:
        return f"{size} B"
    return f"{value:.1f} {units[unit]}"


def recommendations(stats: AliasStats) -> List[str]:
    tips = []
    if stats.aliases_with_notes < stats.total_aliases // 2:
        tips.append("Consider adding notes to more aliases for better organization")
    if stats.aliases_with_tags < stats.total_aliases // 3:
        tips.append("Try using tags to categorize your aliases")
    if stats.avg_command_length > 100:
        tips.append("Some commands are quite long - consider breaking them down")
    if stats.total_aliases > 50 and stats.unique_tags < 5:
        tips.append(f"With {stats.total_aliases} aliases, more tags could help with organization")
    return tips
