from unittest.mock import patch

import pytest

from shorty.models import AliasRecord
from shorty.store import AliasStore
from shorty.validator import AliasValidator, IssueType, command_exists, is_suspicious_command


def make_store(tmp_path, content):
    path = tmp_path / "aliases"
    path.write_text(content)
    return AliasStore.load(path)


@pytest.fixture
def on_path():
    with patch("shorty.validator.shutil.which", return_value="/usr/bin/x") as which:
        yield which


def test_clean_file_has_no_issues(tmp_path, on_path):
    store = make_store(tmp_path, "# comment\n\nalias gs='git status' #tags:git\n")

    assert AliasValidator(store).validate() == []


def test_foreign_line_is_invalid_syntax(tmp_path, on_path):
    issues = AliasValidator(make_store(tmp_path, "export FOO=bar\n")).validate()

    assert len(issues) == 1
    assert issues[0].issue_type is IssueType.INVALID_SYNTAX
    assert issues[0].line_number == 1


def test_malformed_line_reports_reason(tmp_path, on_path):
    issues = AliasValidator(make_store(tmp_path, "alias ok='echo'\nalias bad='git status\n")).validate()

    assert len(issues) == 1
    assert issues[0].issue_type is IssueType.MALFORMED_LINE
    assert issues[0].alias_name == "bad"
    assert issues[0].line_number == 2
    assert issues[0].description == "Unterminated quote in command"


def test_duplicate_points_at_first_line(tmp_path, on_path):
    issues = AliasValidator(make_store(tmp_path, "alias a='ls'\nalias b='ls'\nalias a='pwd'\n")).validate()

    assert [(i.line_number, i.issue_type) for i in issues] == [(3, IssueType.DUPLICATE)]
    assert issues[0].description == "Duplicate of alias on line 1"


def test_empty_command(tmp_path, on_path):
    issues = AliasValidator(make_store(tmp_path, "alias e=''\n")).validate()

    assert issues[0].issue_type is IssueType.EMPTY_COMMAND


def test_command_not_found(tmp_path):
    store = make_store(tmp_path, "alias x='nosuchcmd --flag'\nalias ls='nosuchls'\n")

    with patch("shorty.validator.shutil.which", return_value=None):
        issues = AliasValidator(store).validate()

    assert [i.issue_type for i in issues] == [IssueType.COMMAND_NOT_FOUND, IssueType.SYSTEM_CONFLICT]
    assert "nosuchcmd" in issues[0].description


def test_builtins_skip_path_lookup(tmp_path):
    store = make_store(tmp_path, "alias up='cd ..'\n")

    with patch("shorty.validator.shutil.which", return_value=None) as which:
        assert AliasValidator(store).validate() == []

    which.assert_not_called()


def test_check_path_disabled(tmp_path):
    store = make_store(tmp_path, "alias x='nosuchcmd'\n")

    with patch("shorty.validator.shutil.which", return_value=None):
        assert AliasValidator(store, check_path=False).validate() == []


def test_suspicious_command(tmp_path, on_path):
    issues = AliasValidator(make_store(tmp_path, "alias nuke='sudo rm -rf /tmp/x'\n")).validate()

    assert issues[0].issue_type is IssueType.SUSPICIOUS_COMMAND


def test_empty_tag(tmp_path, on_path):
    issues = AliasValidator(make_store(tmp_path, "alias x='ls' #tags:a,,b\n")).validate()

    assert issues[0].issue_type is IssueType.EMPTY_TAG


def test_find_duplicates_includes_malformed_lines(tmp_path):
    store = make_store(tmp_path, "alias a='1'\nalias b='2'\nalias a='3\nalias b='4'\nalias c='5'\n")

    assert dict(AliasValidator(store).find_duplicates()) == {"a": [1, 3], "b": [2, 4]}


def test_remove_duplicates_keeps_valid_line_over_later_malformed_one(tmp_path):
    store = make_store(tmp_path, "alias gs='git status'\nalias gs='git stat\n")

    removed = AliasValidator(store).remove_duplicates()

    assert removed == 1
    assert store.records() == [AliasRecord("gs", "git status")]
    assert store.text() == "alias gs='git status'\n"


def test_remove_duplicates_leaves_names_without_valid_line(tmp_path):
    content = "alias a='1\nalias a='2\n"
    store = make_store(tmp_path, content)

    assert AliasValidator(store).remove_duplicates() == 0
    assert store.text() == content


def test_remove_duplicates_keeps_last(tmp_path):
    store = make_store(tmp_path, "alias a='1'\n# note\nalias a='2'\nalias b='3'\nalias a='4'\n")

    removed = AliasValidator(store).remove_duplicates()

    assert removed == 2
    assert store.text() == "# note\nalias b='3'\nalias a='4'\n"


def test_remove_duplicates_nothing_to_do(tmp_path):
    store = make_store(tmp_path, "alias a='1'\n")

    assert AliasValidator(store).remove_duplicates() == 0


def test_drop_empty_tags(tmp_path):
    store = make_store(tmp_path, "alias x='ls' # n #tags:a,,b\nalias y='ls' #tags:,\n")

    assert AliasValidator(store).drop_empty_tags() == 2
    assert store.text() == "alias x='ls' # n #tags:a,b\nalias y='ls'\n"


def test_group_by_type(tmp_path, on_path):
    store = make_store(tmp_path, "export A=1\nalias a='ls'\nexport B=2\nalias a='ls'\n")
    issues = AliasValidator(store).validate()

    grouped = AliasValidator.group_by_type(issues)

    assert list(grouped) == [IssueType.INVALID_SYNTAX, IssueType.DUPLICATE]
    assert len(grouped[IssueType.INVALID_SYNTAX]) == 2


def test_helpers():
    assert command_exists("echo")
    assert is_suspicious_command("dd if=/dev/zero of=disk")
    assert not is_suspicious_command("ls -la")


def test_drop_empty_tags_keeps_lines_it_cannot_rewrite(tmp_path):
    content = "alias hi=\"echo 'hello world'\" #tags:a,,b\nalias x='ls' #tags:a,\n"
    store = make_store(tmp_path, content)
    validator = AliasValidator(store)

    assert validator.drop_empty_tags() == 1
    assert validator.unfixable == ["hi"]
    assert store.text() == "alias hi=\"echo 'hello world'\" #tags:a,,b\nalias x='ls' #tags:a\n"
    assert store.records()[0].command == "echo 'hello world'"
