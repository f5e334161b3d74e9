import csv
import io
import json

import pytest
import yaml
from freezegun import freeze_time

from shorty.errors import ImportFormatError
from shorty.models import AliasRecord
from shorty.porter import AliasPorter
from shorty.scanner import AliasScanner
from shorty.store import AliasStore

RECORDS = [
    AliasRecord(name="gs", command="git status", note="quick status", tags=["git", "vcs"]),
    AliasRecord(name="ll", command="ls -la"),
]


@pytest.fixture
def porter(tmp_path):
    return AliasPorter(AliasScanner(tmp_path))


class TestExport:
    def test_json(self, porter):
        data = json.loads(porter.export_to_string(RECORDS, "json"))

        assert data["metadata"]["tool"] == "shorty"
        assert data["metadata"]["count"] == 2
        assert data["aliases"][0] == {"name": "gs", "command": "git status", "note": "quick status", "tags": ["git", "vcs"]}

    def test_yaml(self, porter):
        data = yaml.safe_load(porter.export_to_string(RECORDS, "yaml"))

        assert [a["name"] for a in data["aliases"]] == ["gs", "ll"]

    def test_csv(self, porter):
        rows = list(csv.DictReader(io.StringIO(porter.export_to_string(RECORDS, "csv"))))

        assert rows[0]["tags"] == "git;vcs"
        assert rows[1]["note"] == ""

    def test_bash(self, porter):
        lines = porter.export_to_string(RECORDS, "bash").splitlines()

        assert lines[0] == "#!/bin/bash"
        assert "# quick status | tags:git,vcs" in lines
        assert "alias ll='ls -la'" in lines

    def test_bash_escapes_single_quotes(self, porter):
        records = [AliasRecord(name="hi", command="echo 'hello world'")]

        lines = porter.export_to_string(records, "bash").splitlines()

        assert "alias hi='echo '\"'\"'hello world'\"'\"''" in lines

    def test_unknown_format(self, porter):
        with pytest.raises(ImportFormatError, match="Unsupported format"):
            porter.export_to_string(RECORDS, "xml")

    @freeze_time("2025-06-01 08:09:10")
    def test_default_filename(self, porter, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        path = porter.export_to_file(RECORDS, format="bash")

        assert path.name == "shorty_export_20250601_080910.sh"
        assert (tmp_path / path.name).exists()


class TestRead:
    @pytest.mark.parametrize("fmt, suffix", [("json", ".json"), ("yaml", ".yml"), ("csv", ".csv"), ("bash", ".sh")])
    def test_exported_file_reads_back(self, porter, tmp_path, fmt, suffix):
        path = tmp_path / f"export{suffix}"
        porter.export_to_file(RECORDS, path, fmt)

        records = porter.read_file(path)

        assert [(r.name, r.command) for r in records] == [("gs", "git status"), ("ll", "ls -la")]

    def test_plain_list(self, porter, tmp_path):
        path = tmp_path / "aliases.json"
        path.write_text(json.dumps([{"name": "x", "command": "echo", "tags": "a, b"}]))

        assert porter.read_file(path) == [AliasRecord(name="x", command="echo", tags=["a", "b"])]

    def test_numeric_note_becomes_text(self, porter, tmp_path):
        path = tmp_path / "aliases.json"
        path.write_text(json.dumps([{"name": "zz", "command": "ls", "note": 5, "tags": 7}]))

        assert porter.read_file(path) == [AliasRecord(name="zz", command="ls", note="5", tags=["7"])]

    def test_invalid_utf8(self, porter, tmp_path):
        path = tmp_path / "aliases.json"
        path.write_bytes(b'[{"name": "x", "command": "caf\xe9"}]')

        with pytest.raises(ImportFormatError, match="not valid UTF-8"):
            porter.read_file(path)

    def test_shell_escaped_quotes_read_back_whole_command(self, porter, tmp_path):
        path = tmp_path / "export.sh"
        path.write_text("alias hi='echo '\"'\"'hello world'\"'\"'' # greet #tags:x\n")

        assert porter.read_file(path) == [AliasRecord(name="hi", command="echo 'hello world'", note="greet", tags=["x"])]

    def test_invalid_json(self, porter, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{")

        with pytest.raises(ImportFormatError, match="Invalid JSON"):
            porter.read_file(path)

    def test_unrecognised_structure(self, porter, tmp_path):
        path = tmp_path / "odd.yaml"
        path.write_text("just: a mapping\n")

        with pytest.raises(ImportFormatError, match="Format not recognized"):
            porter.read_file(path)

    def test_missing_file(self, porter, tmp_path):
        with pytest.raises(ImportFormatError, match="File not found"):
            porter.read_source(str(tmp_path / "nope.json"))

    def test_shell_source(self, porter, tmp_path):
        (tmp_path / ".bashrc").write_text("alias ll='ls -la'\n")
        (tmp_path / ".bash_aliases").write_text("alias gs='git status'\n")

        records = porter.read_source("bash")

        assert [r.name for r in records] == ["ll", "gs"]


class TestImport:
    @freeze_time("2025-06-01 08:09:10")
    def test_import_appends_new_names(self, porter, tmp_path):
        path = tmp_path / "aliases"
        path.write_text("alias gs='git stash'\n")
        store = AliasStore.load(path)

        result = porter.import_records(store, RECORDS)

        assert [r.name for r in result.imported] == ["ll"]
        assert [r.name for r in result.conflicts] == ["gs"]
        assert store.text() == (
            "alias gs='git stash'\n"
            "\n"
            "# Imported aliases - 2025-06-01 08:09:10\n"
            "alias ll='ls -la'\n"
        )

    def test_dry_run_changes_nothing(self, porter, tmp_path):
        store = AliasStore(tmp_path / "aliases")

        result = porter.import_records(store, RECORDS, dry_run=True)

        assert len(result.imported) == 2
        assert len(store) == 0

    def test_rejects_unrepresentable_records(self, porter, tmp_path):
        store = AliasStore(tmp_path / "aliases")
        records = [AliasRecord(name="q", command="echo 'hi'"), AliasRecord(name="ok", command="echo")]

        result = porter.import_records(store, records)

        assert [r.name for r in result.imported] == ["ok"]
        assert len(result.rejected) == 1
        assert store.records()[0].name == "ok"

    def test_duplicate_names_in_input(self, porter, tmp_path):
        store = AliasStore(tmp_path / "aliases")
        records = [AliasRecord(name="a", command="1"), AliasRecord(name="a", command="2")]

        result = porter.import_records(store, records)

        assert [r.command for r in result.imported] == ["1"]
        assert len(result.conflicts) == 1

    def test_shell_escaped_quotes_are_rejected_not_truncated(self, porter, tmp_path):
        path = tmp_path / "export.sh"
        porter.export_to_file([AliasRecord(name="hi", command="echo 'hello world'")], path, "bash")
        store = AliasStore(tmp_path / "aliases")

        result = porter.import_records(store, porter.read_file(path))

        assert result.imported == []
        assert len(result.rejected) == 1
        assert len(store) == 0
