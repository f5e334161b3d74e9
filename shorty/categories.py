"""Alias categories kept in a YAML registry

An alias belongs to a category through a ``category:<name>`` tag on its line.
The registry only holds category metadata; it does not track alias names, so
a category may outlive every alias that referenced it.
"""

import logging
from collections import Counter, OrderedDict
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from shorty.errors import AliasNotFound, CategoryError
from shorty.models import CATEGORY_TAG_PREFIX, AliasRecord
from shorty.parser import check_record
from shorty.paths import get_shorty_dir

logger = logging.getLogger(__name__)

UNCATEGORIZED = "uncategorized"

PATTERN_WORDS = [
    (("docker", "docker-compose"), "docker"),
    (("npm", "yarn", "pnpm"), "nodejs"),
    (("kubectl", "k8s"), "kubernetes"),
    (("ssh", "scp", "rsync"), "network"),
    (("ls", "ll", "la", "dir"), "listing"),
    (("cd", "pushd", "popd"), "navigation"),
    (("cat", "less", "more", "head", "tail"), "viewing"),
]


@dataclass
class Category:
    """Represents a category entry in the registry"""
    name: str
    description: str = "No description"
    parent: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    created_at: str = ""

    @property
    def label(self) -> str:
        return f"{self.icon} {self.name}" if self.icon else self.name

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        return cls(
            name=str(data["name"]),
            description=data.get("description") or "No description",
            parent=data.get("parent"),
            color=data.get("color"),
            icon=data.get("icon"),
            created_at=str(data.get("created_at", "")),
        )


def default_categories() -> List[Category]:
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    return [
        Category("git", "Git version control commands", None, "orange", "🔀", timestamp),
        Category("docker", "Docker and containerization commands", None, "blue", "🐳", timestamp),
        Category("nodejs", "Node.js and npm commands", None, "green", "📦", timestamp),
        Category("network", "Network and SSH commands", None, "purple", "🌐", timestamp),
        Category("system", "System administration commands", None, "red", "⚙️", timestamp),
    ]


def command_pattern(command: str) -> str:
    """Suggested category for an uncategorized command"""
    parts = command.split()
    word = parts[0] if parts else command
    if word.startswith("git"):
        return "git"
    for words, pattern in PATTERN_WORDS:
        if word in words:
            return pattern
    return "general"


def analyze_command_patterns(records: List[AliasRecord]) -> List[Tuple[str, int]]:
    """Suggested categories with how many records would fall into each"""
    return Counter(command_pattern(record.command) for record in records).most_common()


class CategoryManager:
    """Manage the category registry"""

    def __init__(self, registry_path: Optional[Path] = None):
        self.registry_path = registry_path or get_shorty_dir() / "categories.yaml"
        self.categories: List[Category] = self.load()

    def load(self) -> List[Category]:
        """Read the registry, writing the defaults the first time"""
        if not self.registry_path.exists():
            self.categories = default_categories()
            self.save()
            return self.categories

        with open(self.registry_path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise CategoryError(f"Invalid categories file {self.registry_path}: {e}")
        return [Category.from_dict(item) for item in data.get("categories", [])]

    def save(self) -> None:
        self.registry_path.parent.mkdir(parents=True, exist_ok=True)
        data = {"version": "1.0", "categories": [asdict(c) for c in self.categories]}
        with open(self.registry_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    def get(self, name: str) -> Optional[Category]:
        for category in self.categories:
            if category.name == name:
                return category
        return None

    def require(self, name: str) -> Category:
        category = self.get(name)
        if category is None:
            raise CategoryError(f"Category '{name}' not found")
        return category

    def children(self, name: str) -> List[Category]:
        return [c for c in self.categories if c.parent == name]

    def add(
        self,
        name: str,
        description: Optional[str] = None,
        parent: Optional[str] = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Category:
        if not name or any(ch.isspace() or ch == "," for ch in name):
            raise CategoryError("Category names must be non-empty without whitespace or commas")
        if self.get(name):
            raise CategoryError(f"Category '{name}' already exists")
        if parent and not self.get(parent):
            raise CategoryError(f"Parent category '{parent}' does not exist")

        category = Category(
            name=name,
            description=description or "No description",
            parent=parent,
            color=color,
            icon=icon,
            created_at=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        )
        self.categories.append(category)
        self.save()
        return category

    def remove(self, name: str, records: List[AliasRecord], force: bool = False) -> int:
        """Drop a category, returning how many aliases still carry its tag

        Children are moved to the root level.
        """
        category = self.require(name)
        children = self.children(name)
        if children and not force:
            raise CategoryError(
                f"Category '{name}' has child categories. Use --force to remove it and move children to root level"
            )
        count = len(self.aliases_in(name, records))
        if count and not force:
            raise CategoryError(
                f"Category '{name}' contains {count} aliases. "
                "Use --force to remove category (aliases will become uncategorized)"
            )

        for child in children:
            child.parent = None
        self.categories.remove(category)
        self.save()
        return count

    @staticmethod
    def aliases_in(name: str, records: List[AliasRecord]) -> List[AliasRecord]:
        return [r for r in records if r.has_tag(f"{CATEGORY_TAG_PREFIX}{name}")]

    def counts(self, records: List[AliasRecord]) -> Dict[str, int]:
        return {c.name: len(self.aliases_in(c.name, records)) for c in self.categories}

    def tree(self) -> List[Tuple[int, Category]]:
        """Depth-first (depth, category) pairs starting from the roots"""
        known = {c.name for c in self.categories}
        nodes = []

        def walk(category: Category, depth: int) -> None:
            nodes.append((depth, category))
            for child in self.children(category.name):
                walk(child, depth + 1)

        for category in self.categories:
            # Orphans whose parent is gone are shown at the root
            if category.parent is None or category.parent not in known:
                walk(category, 0)
        return nodes

    def move_alias(self, manager, alias_name: str, category_name: str) -> AliasRecord:
        """Retag the first line for alias_name with a single category tag"""
        self.require(category_name)
        store = manager.load(must_exist=True)
        index = store.find_by_name(alias_name)
        if index is None:
            raise AliasNotFound(alias_name)

        record = store.lines[index].record
        record.tags = [t for t in record.tags if not t.startswith(CATEGORY_TAG_PREFIX)]
        record.tags.append(f"{CATEGORY_TAG_PREFIX}{category_name}")
        check_record(record)

        store.replace_record(index, record)
        manager.commit(store)
        logger.debug("Moved %s to category %s", alias_name, category_name)
        return store.lines[index].record

    @staticmethod
    def group(records: List[AliasRecord]) -> "OrderedDict[str, List[AliasRecord]]":
        """Records by category, uncategorized ones last"""
        grouped: "OrderedDict[str, List[AliasRecord]]" = OrderedDict()
        uncategorized = []
        for record in records:
            if record.category:
                grouped.setdefault(record.category, []).append(record)
            else:
                uncategorized.append(record)
        if uncategorized:
            grouped[UNCATEGORIZED] = uncategorized
        return grouped
