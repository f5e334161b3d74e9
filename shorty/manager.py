import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple

from rapidfuzz import fuzz

from shorty.backup import BackupManager
from shorty.config import Config
from shorty.errors import AliasExists, AliasNotFound, ShortyError
from shorty.models import AliasRecord
from shorty.parser import check_record
from shorty.store import AliasStore

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "command", "note", "tag")


class AliasManager:
    """Load, mutate and save the alias file, one transaction per call"""

    def __init__(self, aliases_path: Path, config: Optional[Config] = None, backups: Optional[BackupManager] = None):
        self.aliases_path = aliases_path
        self.config = config or Config()
        self.backups = backups or BackupManager(
            aliases_path, max_backups=self.config.get("backup.max_backups", 10)
        )

    def load(self, must_exist: bool = False) -> AliasStore:
        return AliasStore.load(self.aliases_path, must_exist=must_exist)

    def commit(self, store: AliasStore) -> None:
        """Back up the file on disk if configured, then write the store"""
        if self.config.get("backup.auto_backup", True):
            backup = self.backups.auto_backup()
            if backup:
                logger.debug("Automatic backup at %s", backup)
        store.save(self.aliases_path)

    def exists(self, name: str) -> bool:
        return self.load().find_by_name(name) is not None

    def get(self, name: str) -> AliasRecord:
        record = self.load().get(name)
        if record is None:
            raise AliasNotFound(name)
        return record

    def add(
        self,
        name: str,
        command: str,
        note: Optional[str] = None,
        tags: Optional[List[str]] = None,
        overwrite: bool = False,
    ) -> AliasRecord:
        """Append a new alias line

        With overwrite every existing line for the name is dropped first.
        """
        record = AliasRecord(name=name, command=command, note=note or None, tags=list(tags or []))
        check_record(record)

        store = self.load()
        if store.find_by_name(name) is not None:
            if not overwrite:
                raise AliasExists(name)
            removed = store.remove_by_name(name)
            logger.debug("Overwriting %s: dropped %d existing line(s)", name, removed)

        store.append_record(record)
        self.commit(store)
        return store.lines[-1].record

    def edit(
        self,
        name: str,
        command: str,
        note: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> AliasRecord:
        """Rewrite the first line for name in place"""
        store = self.load(must_exist=True)
        index = store.find_by_name(name)
        if index is None:
            raise AliasNotFound(name)

        existing = store.lines[index].record
        record = AliasRecord(
            name=name,
            command=command,
            note=existing.note if note is None else (note or None),
            tags=list(existing.tags) if tags is None else list(tags),
        )
        check_record(record)

        store.replace_record(index, record)
        self.commit(store)
        return store.lines[index].record

    def remove(self, name: str) -> int:
        """Remove every line for name, returning how many went"""
        store = self.load(must_exist=True)
        removed = store.remove_by_name(name)
        if not removed:
            raise AliasNotFound(name)
        self.commit(store)
        return removed

    def list_aliases(self, tag: Optional[str] = None) -> List[AliasRecord]:
        records = self.load().records()
        if tag:
            records = [record for record in records if record.has_tag(tag)]
        return records

    def search(
        self,
        keyword: str,
        field: Optional[str] = None,
        use_regex: bool = False,
    ) -> List[Tuple[AliasRecord, int]]:
        """Match records against keyword, returning (record, score) pairs

        Exact and regex matches score 100. Fuzzy matches are sorted by score.
        """
        case_sensitive = self.config.get("search.case_sensitive", False)
        fuzzy = self.config.get("search.fuzzy_matching", False) and not use_regex
        threshold = self.config.get("search.fuzzy_threshold", 70)

        if use_regex:
            try:
                pattern = re.compile(keyword, 0 if case_sensitive else re.IGNORECASE)
            except re.error as e:
                raise ShortyError(f"Invalid regex pattern: {e}")

        results = []
        for record in self.load().records():
            haystacks = self._search_fields(record, field)
            if use_regex:
                if any(pattern.search(text) for text in haystacks):
                    results.append((record, 100))
                continue

            needle = keyword if case_sensitive else keyword.lower()
            texts = haystacks if case_sensitive else [text.lower() for text in haystacks]
            if fuzzy:
                score = max((int(fuzz.partial_ratio(needle, text)) for text in texts), default=0)
                if score >= threshold:
                    results.append((record, score))
            elif any(needle in text for text in texts):
                results.append((record, 100))

        if fuzzy:
            results.sort(key=lambda pair: pair[1], reverse=True)
        return results

    def _search_fields(self, record: AliasRecord, field: Optional[str]) -> List[str]:
        if field == "name":
            return [record.name]
        if field == "command":
            return [record.command]
        if field == "note":
            return [record.note] if record.note else []
        if field == "tag":
            return [tag for tag in record.tags if tag]

        texts = [record.name, record.command]
        if record.note and self.config.get("search.search_in_notes", True):
            texts.append(record.note)
        if self.config.get("search.search_in_tags", True):
            texts.extend(tag for tag in record.tags if tag)
        return texts
