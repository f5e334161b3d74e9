import pytest
import yaml

from shorty.categories import CategoryManager, analyze_command_patterns, command_pattern
from shorty.errors import AliasNotFound, CategoryError
from shorty.models import AliasRecord


@pytest.fixture
def categories(shorty_dir):
    return CategoryManager(shorty_dir / "categories.yaml")


def test_defaults_written_on_first_load(categories, shorty_dir):
    data = yaml.safe_load((shorty_dir / "categories.yaml").read_text(encoding="utf-8"))

    assert data["version"] == "1.0"
    assert [c["name"] for c in data["categories"]] == ["git", "docker", "nodejs", "network", "system"]
    assert categories.get("docker").icon == "🐳"


def test_add_and_reload(categories, shorty_dir):
    categories.add("k8s", "Kubernetes", parent="docker", icon="☸")

    reloaded = CategoryManager(shorty_dir / "categories.yaml")
    assert reloaded.get("k8s").parent == "docker"
    assert reloaded.get("k8s").label == "☸ k8s"


@pytest.mark.parametrize(
    "name, parent, message",
    [("git", None, "already exists"), ("two words", None, "without whitespace"), ("x", "ghost", "does not exist")],
)
def test_add_rejects(categories, name, parent, message):
    with pytest.raises(CategoryError, match=message):
        categories.add(name, parent=parent)


def test_remove_with_children_needs_force(categories):
    categories.add("compose", parent="docker")

    with pytest.raises(CategoryError, match="child categories"):
        categories.remove("docker", [])

    categories.remove("docker", [], force=True)
    assert categories.get("docker") is None
    assert categories.get("compose").parent is None


def test_remove_with_aliases_needs_force(categories):
    records = [AliasRecord(name="gs", command="git status", tags=["category:git"])]

    with pytest.raises(CategoryError, match="contains 1 aliases"):
        categories.remove("git", records)

    assert categories.remove("git", records, force=True) == 1


def test_remove_unknown(categories):
    with pytest.raises(CategoryError, match="not found"):
        categories.remove("nope", [])


def test_tree(categories):
    categories.add("compose", parent="docker")
    categories.add("swarm", parent="compose")

    tree = [(depth, c.name) for depth, c in categories.tree()]

    assert tree[:4] == [(0, "git"), (0, "docker"), (1, "compose"), (2, "swarm")]


def test_counts(categories):
    records = [
        AliasRecord(name="gs", command="git status", tags=["category:git"]),
        AliasRecord(name="gp", command="git push", tags=["category:git"]),
    ]

    counts = categories.counts(records)

    assert counts["git"] == 2
    assert counts["docker"] == 0


def test_move_alias(categories, manager, aliases_file):
    aliases_file.write_text("alias gs='git status' # st #tags:vcs,category:system\n")

    categories.move_alias(manager, "gs", "git")

    assert aliases_file.read_text() == "alias gs='git status' # st #tags:vcs,category:git\n"


def test_move_alias_errors(categories, manager, aliases_file):
    aliases_file.write_text("alias gs='git status'\n")

    with pytest.raises(CategoryError):
        categories.move_alias(manager, "gs", "ghost")
    with pytest.raises(AliasNotFound):
        categories.move_alias(manager, "nope", "git")


def test_group():
    records = [
        AliasRecord(name="ll", command="ls"),
        AliasRecord(name="gs", command="git status", tags=["category:git"]),
    ]

    grouped = CategoryManager.group(records)

    assert list(grouped) == ["git", "uncategorized"]


def test_command_patterns():
    assert command_pattern("git log") == "git"
    assert command_pattern("docker ps") == "docker"
    assert command_pattern("htop") == "general"
    records = [AliasRecord(name=n, command=c) for n, c in [("a", "git st"), ("b", "gitk"), ("c", "htop")]]
    assert analyze_command_patterns(records) == [("git", 2), ("general", 1)]
