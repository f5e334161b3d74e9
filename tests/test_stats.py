import pytest

from shorty.models import AliasRecord
from shorty.stats import analyze, classify_command, file_stats, format_file_size, recommendations


@pytest.mark.parametrize(
    "command, expected",
    [
        ("git status", "Git"),
        ("ls -la", "File Listing"),
        ("docker compose up", "Docker"),
        ("sudo apt update", "System Admin"),
        ("ps aux | less", "Pipeline"),
        ("make && make install", "Compound"),
        ("false || true", "Compound"),
        ("htop", "Other"),
    ],
)
def test_classify_command(command, expected):
    assert classify_command(command) == expected


def test_analyze_empty():
    stats = analyze([])

    assert stats.total_aliases == 0
    assert stats.percentage(3) == 0.0


def test_analyze():
    records = [
        AliasRecord(name="gs", command="git status", note="status", tags=["git", "vcs"]),
        AliasRecord(name="gp", command="git push", tags=["git", ""]),
        AliasRecord(name="ll", command="ls -la"),
    ]

    stats = analyze(records)

    assert stats.total_aliases == 3
    assert stats.aliases_with_notes == 1
    assert stats.aliases_with_tags == 2
    assert stats.unique_tags == 2
    assert stats.tag_frequency == {"git": 2, "vcs": 1}
    assert stats.command_types == {"Git": 2, "File Listing": 1}
    assert stats.longest_command == "git status"
    assert stats.shortest_command == "ls -la"
    assert stats.most_common_commands[0] == ("git", 2)
    assert stats.avg_command_length == pytest.approx((10 + 8 + 6) / 3)
    assert stats.percentage(stats.aliases_with_tags) == pytest.approx(66.666, rel=1e-3)


def test_file_stats(tmp_path):
    path = tmp_path / "aliases"
    assert file_stats(path) is None

    path.write_text("alias a='1'\n# c\n")
    stats = file_stats(path)

    assert stats.line_count == 2
    assert stats.file_size == len("alias a='1'\n# c\n")


def test_file_stats_counts_newlines_only(tmp_path):
    path = tmp_path / "aliases"
    path.write_bytes(b"# a\x0cb\n# caf\xe9\n")

    assert file_stats(path).line_count == 2


@pytest.mark.parametrize("size, text", [(512, "512 B"), (1536, "1.5 KB"), (3 * 1024 * 1024, "3.0 MB")])
def test_format_file_size(size, text):
    assert format_file_size(size) == text


def test_recommendations():
    bare = analyze([AliasRecord(name=f"a{i}", command="ls") for i in range(4)])
    tidy = analyze([AliasRecord(name="a", command="ls", note="n", tags=["t"])])

    assert len(recommendations(bare)) == 2
    assert recommendations(tidy) == []
