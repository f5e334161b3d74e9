import logging
import sys
from functools import wraps
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from shorty import __version__
from shorty.backup import BackupManager
from shorty.categories import CategoryManager, analyze_command_patterns, UNCATEGORIZED
from shorty.clipboard import ClipboardManager, share_text, write_share_file
from shorty.config import Config
from shorty.errors import AliasNotFound, ConfigError, ShortyError
from shorty.integration import ShellIntegrator, completion_script
from shorty.manager import SEARCH_FIELDS, AliasManager
from shorty.models import AliasRecord
from shorty.parser import check_record
from shorty.paths import get_aliases_path
from shorty.porter import EXPORT_FORMATS, AliasPorter
from shorty.shell import ShellDetector, ShellType
from shorty.stats import analyze, file_stats, format_file_size, recommendations
from shorty.templates import TemplateManager, parse_params
from shorty.validator import AliasValidator, command_exists, first_word

console = Console()
logger = logging.getLogger(__name__)

SHELLS = ShellDetector.supported()


class AppContext:
    """Objects shared by every command of one invocation"""

    def __init__(self):
        self.config = Config()
        self.aliases_path = get_aliases_path(self.config.get("aliases.file_path"))
        self.backups = BackupManager(self.aliases_path, max_backups=self.config.get("backup.max_backups", 10))
        self.manager = AliasManager(self.aliases_path, self.config, self.backups)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def handle_errors(func):
    """Report shorty, I/O and encoding failures in red and exit with status 1"""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ShortyError, OSError, UnicodeError) as e:
            logger.debug("Command failed", exc_info=True)
            console.print(f"[red]✗[/] {escape(str(e))}")
            sys.exit(1)

    return wrapper


def split_tags(values) -> list:
    """Tags from repeated and/or comma-separated -t options"""
    return [tag.strip() for value in values for tag in value.split(",") if tag.strip()]


def truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def alias_table(records, config: Config, title: str, scores=None) -> Table:
    theme = config.get_theme()
    max_len = config.get("display.max_command_length", 50)
    shorten = config.get("display.truncate_commands", True)
    show_numbers = config.get("display.show_line_numbers", False)

    table = Table(title=title)
    if show_numbers:
        table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style=theme["name_color"], no_wrap=True)
    table.add_column("Command", style=theme["command_color"])
    table.add_column("Note", style=theme["note_color"])
    table.add_column("Tags", style=theme["tags_color"])
    if scores is not None:
        table.add_column("Score", style="dim", justify="right")

    for index, record in enumerate(records):
        command = truncate(record.command, max_len) if shorten else record.command
        row = [
            escape(record.name),
            escape(command),
            escape(record.note or ""),
            escape(", ".join(record.tags)) if record.tags else "—",
        ]
        if show_numbers:
            row.insert(0, str(record.line_number))
        if scores is not None:
            row.append(f"{scores[index]}%")
        table.add_row(*row)
    return table


@click.group()
@click.version_option(version=__version__, prog_name="shorty")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx, verbose):
    """shorty - manage your shell aliases from one file"""
    setup_logging(verbose)
    ctx.obj = AppContext()


@main.command()
@click.argument("name")
@click.argument("command")
@click.option("--note", "-n", help="Add a note to the alias")
@click.option("--tags", "-t", multiple=True, help="Comma-separated tags for the alias")
@click.pass_obj
@handle_errors
def add(app, name, command, note, tags):
    """Add a new alias"""
    tag_list = split_tags(tags)
    check_record(AliasRecord(name=name, command=command, note=note, tags=tag_list))

    overwrite = False
    if app.manager.exists(name):
        console.print(f"[yellow]⚠[/] Alias '{escape(name)}' already exists")
        if not click.confirm("Do you want to overwrite it?", default=False):
            console.print("Operation aborted.")
            return
        overwrite = True

    if app.config.get("aliases.validate_on_add", True):
        word = first_word(command)
        if word and not command_exists(word):
            console.print(f"[yellow]⚠[/] Command '{escape(word)}' not found in PATH")

    app.manager.add(name, command, note=note, tags=tag_list, overwrite=overwrite)
    console.print(f"[green]✔[/] Added alias: [cyan]{escape(name)}[/] = '{escape(command)}'")


@main.command()
@click.argument("name")
@click.argument("new_command")
@click.option("--note", "-n", help="Replace the alias note")
@click.option("--tags", "-t", multiple=True, help="Replace the alias tags (comma-separated)")
@click.pass_obj
@handle_errors
def edit(app, name, new_command, note, tags):
    """Change the command of an existing alias"""
    tag_list = split_tags(tags) if tags else None
    app.manager.edit(name, new_command, note=note, tags=tag_list)
    console.print(f"[green]✔[/] Edited alias: [cyan]{escape(name)}[/] = '{escape(new_command)}'")


@main.command()
@click.argument("name")
@click.pass_obj
@handle_errors
def remove(app, name):
    """Remove an alias (every line defining it)"""
    removed = app.manager.remove(name)
    console.print(f"[green]✔[/] Removed alias '{escape(name)}'")
    if removed > 1:
        console.print(f"[dim]  {removed} lines defined it[/]")


@main.command(name="list")
@click.option("--tag", "-t", help="Filter aliases by tag")
@click.pass_obj
@handle_errors
def list_aliases(app, tag):
    """List aliases in a table"""
    records = app.manager.list_aliases(tag)
    if not records:
        if tag:
            console.print(f"[yellow]No aliases found with tag '{escape(tag)}'[/]")
        else:
            console.print("[yellow]No aliases found.[/] Add one with 'shorty add'")
        return

    title = f"📋 Your Aliases ({len(records)} total)"
    if tag:
        title = f"📋 Aliases tagged '{escape(tag)}' ({len(records)})"
    console.print(alias_table(records, app.config, title))


@main.command()
@click.argument("keyword")
@click.option("--in", "field", type=click.Choice(SEARCH_FIELDS), help="Search in a specific field")
@click.option("--regex", is_flag=True, help="Use regex pattern matching")
@click.pass_obj
@handle_errors
def search(app, keyword, field, regex):
    """Search aliases by keyword"""
    results = app.manager.search(keyword, field=field, use_regex=regex)
    if not results:
        console.print(f"[yellow]No aliases matching '{escape(keyword)}'[/]")
        return

    records = [record for record, _ in results]
    fuzzy = app.config.get("search.fuzzy_matching", False) and not regex
    scores = [score for _, score in results] if fuzzy else None
    console.print(alias_table(records, app.config, f"🔍 {len(records)} match(es) for '{escape(keyword)}'", scores))


@main.command()
@click.option("--fix", is_flag=True, help="Automatically fix issues where possible")
@click.pass_obj
@handle_errors
def validate(app, fix):
    """Check the alias file for problems"""
    store = app.manager.load(must_exist=True)
    validator = AliasValidator(store)
    issues = validator.validate()

    if not issues:
        console.print(f"[green]✔[/] All {len(store.records())} aliases are valid!")
        return

    console.print(f"[yellow]⚠[/] Found {len(issues)} issue(s):\n")
    for issue_type, group in validator.group_by_type(issues).items():
        console.print(f"[bold]{issue_type.value}[/] ({len(group)})")
        for issue in group:
            console.print(
                f"  Line {issue.line_number}: [cyan]{escape(issue.alias_name)}[/] - {escape(issue.description)}"
            )
            if issue.suggestion:
                console.print(f"    [dim]💡 {escape(issue.suggestion)}[/]")
        console.print()

    if not fix:
        console.print("[dim]Run 'shorty validate --fix' to fix duplicates and empty tags[/]")
        return

    backup = app.backups.create_backup()
    duplicates = validator.remove_duplicates()
    empty_tags = validator.drop_empty_tags()
    if duplicates or empty_tags:
        store.save()
    console.print(f"[green]✔[/] Backup created: {backup.name}")
    console.print(f"[green]✔[/] Removed {duplicates} duplicate line(s), cleaned tags on {empty_tags} alias(es)")
    for name in validator.unfixable:
        console.print(f"[yellow]⚠[/] Left tags on [cyan]{escape(name)}[/] as they are: the line cannot be rewritten safely")


@main.command()
@click.option("--remove", "remove_", is_flag=True, help="Remove duplicates, keeping the last valid definition")
@click.pass_obj
@handle_errors
def duplicates(app, remove_):
    """Find aliases defined more than once"""
    store = app.manager.load(must_exist=True)
    validator = AliasValidator(store, check_path=False)
    found = validator.find_duplicates()

    if not found:
        console.print("[green]✔[/] No duplicate aliases found")
        return

    console.print(f"[yellow]⚠[/] Found {len(found)} duplicated alias name(s):")
    for name, lines in found.items():
        console.print(f"  [cyan]{escape(name)}[/] on lines {', '.join(str(n) for n in lines)}")

    if remove_:
        backup = app.backups.create_backup()
        removed = validator.remove_duplicates()
        store.save()
        console.print(f"[green]✔[/] Backup created: {backup.name}")
        console.print(f"[green]✔[/] Removed {removed} duplicate line(s)")
    else:
        console.print("\n[dim]Run 'shorty duplicates --remove' to keep only the last valid definition[/]")


@main.command()
@click.pass_obj
@handle_errors
def stats(app):
    """Show statistics about your aliases"""
    info = file_stats(app.aliases_path)
    if info is None:
        console.print("[yellow]No aliases file found.[/] Create some aliases first!")
        return

    result = analyze(app.manager.list_aliases())
    text = f"""[bold cyan]📊 Shorty Statistics[/]

[yellow]Total aliases:[/] {result.total_aliases}
[yellow]With notes:[/] {result.aliases_with_notes} ({result.percentage(result.aliases_with_notes):.1f}%)
[yellow]With tags:[/] {result.aliases_with_tags} ({result.percentage(result.aliases_with_tags):.1f}%)
[yellow]Unique tags:[/] {result.unique_tags}
[yellow]Average command length:[/] {result.avg_command_length:.1f} characters"""
    if result.longest_command:
        text += (
            f"\n[yellow]Longest command:[/] {escape(truncate(result.longest_command, 50))}"
            f" ({len(result.longest_command)} chars)"
        )
    if result.shortest_command:
        text += (
            f"\n[yellow]Shortest command:[/] {escape(truncate(result.shortest_command, 50))}"
            f" ({len(result.shortest_command)} chars)"
        )
    console.print(Panel.fit(text, border_style="cyan"))

    if result.command_types:
        console.print("\n[bold]Command Types:[/]")
        for label, count in list(result.command_types.items())[:5]:
            console.print(f"  {label}: {count} ({result.percentage(count):.1f}%)")

    if result.most_common_commands:
        console.print("\n[bold]Most Common Commands:[/]")
        for i, (command, count) in enumerate(result.most_common_commands, 1):
            console.print(f"  {i}. {escape(command)} ({count}x)")

    if result.tag_frequency:
        console.print("\n[bold]Popular Tags:[/]")
        for tag, count in list(result.tag_frequency.items())[:5]:
            console.print(f"  #{escape(tag)}: {count}x")

    console.print("\n[bold]File Information:[/]")
    console.print(f"  File size: {format_file_size(info.file_size)}")
    console.print(f"  Total lines: {info.line_count}")
    console.print(f"  Last modified: {info.last_modified.strftime('%Y-%m-%d %H:%M:%S')}")

    tips = recommendations(result)
    if tips:
        console.print("\n[bold]Recommendations:[/]")
        for tip in tips:
            console.print(f"  • {tip}")
    console.print("\n[dim]💡 Use 'shorty validate' to check for potential issues[/]")


@main.group()
def backup():
    """Create, restore and clean backups of the alias file"""
    pass


@backup.command(name="create")
@click.option("--name", help="Custom backup name")
@click.pass_obj
@handle_errors
def backup_create(app, name):
    """Create a backup now"""
    path = app.backups.create_backup(name)
    console.print(f"[green]✔[/] Backup created: {path}")


@backup.command(name="restore")
@click.argument("backup_file")
@click.pass_obj
@handle_errors
def backup_restore(app, backup_file):
    """Restore the alias file from a backup"""
    path = app.backups.restore_backup(backup_file)
    console.print(f"[green]✔[/] Restored aliases from {path.name}")


@backup.command(name="list")
@click.pass_obj
@handle_errors
def backup_list(app):
    """List available backups"""
    backups = app.backups.list_backups()
    if not backups:
        console.print("[yellow]No backups found[/]")
        return

    table = Table(title=f"💾 Backups ({len(backups)})")
    table.add_column("Name", style="cyan")
    table.add_column("Modified", style="white")
    table.add_column("Size", style="dim", justify="right")
    for info in backups:
        table.add_row(info.name, info.modified.strftime("%Y-%m-%d %H:%M:%S"), format_file_size(info.size))
    console.print(table)


@backup.command(name="clean")
@click.option("--older-than", default=30, show_default=True, help="Remove backups older than N days")
@click.pass_obj
@handle_errors
def backup_clean(app, older_than):
    """Remove old backups"""
    removed = app.backups.clean_backups(older_than)
    if not removed:
        console.print(f"[dim]No backups older than {older_than} days[/]")
        return
    console.print(f"[green]✔[/] Removed {len(removed)} backup(s) older than {older_than} days")


@main.group(name="config")
def config_group():
    """View and change settings"""
    pass


@config_group.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_obj
@handle_errors
def config_set(app, key, value):
    """Set a configuration value"""
    app.config.set(key, value)
    console.print(f"[green]✔[/] {key} = {app.config.get(key)}")


@config_group.command(name="get")
@click.argument("key")
@click.pass_obj
@handle_errors
def config_get(app, key):
    """Show one configuration value"""
    if key not in app.config.keys():
        raise ConfigError(f"Unknown configuration key: {key}")
    click.echo(app.config.get(key))


@config_group.command(name="list")
@click.pass_obj
@handle_errors
def config_list(app):
    """Show every configuration value"""
    table = Table(title="⚙️ Configuration")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for key, value in app.config.items():
        table.add_row(key, escape(str(value)))
    console.print(table)
    console.print(f"[dim]Stored in {app.config.config_path}[/]")


@config_group.command(name="reset")
@click.pass_obj
@handle_errors
def config_reset(app):
    """Restore the default configuration"""
    app.config.reset()
    console.print("[green]✔[/] Configuration reset to defaults")


@main.command()
@click.option("--format", "format_", type=click.Choice(EXPORT_FORMATS), default="json", show_default=True)
@click.option("--output", "-o", type=click.Path(), help="Output file path")
@click.pass_obj
@handle_errors
def export(app, format_, output):
    """Export aliases to JSON, YAML, CSV or a bash script"""
    records = app.manager.list_aliases()
    if not records:
        console.print("[yellow]No aliases found to export[/]")
        return

    path = AliasPorter().export_to_file(records, Path(output) if output else None, format_)
    console.print(f"[green]✔[/] Exported {len(records)} aliases to {path}")
    console.print(f"  With notes: {sum(1 for r in records if r.note)}")
    console.print(f"  With tags: {sum(1 for r in records if r.tags)}")


@main.command(name="import")
@click.argument("source")
@click.option("--format", "format_", type=click.Choice(EXPORT_FORMATS + ("sh",)), help="Source format")
@click.option("--dry-run", is_flag=True, help="Preview import without making changes")
@click.pass_obj
@handle_errors
def import_aliases(app, source, format_, dry_run):
    """Import aliases from a file or from bash, zsh or fish config"""
    porter = AliasPorter()
    records = porter.read_source(source, format_)
    if not records:
        console.print("[yellow]No aliases found to import[/]")
        return
    console.print(f"[cyan]Found {len(records)} aliases to import[/]")

    store = app.manager.load()
    result = porter.import_records(store, records, dry_run=dry_run)

    if result.conflicts:
        console.print(f"[yellow]⚠[/] Skipping {len(result.conflicts)} conflicting alias(es):")
        for record in result.conflicts:
            console.print(f"  • {escape(record.name)}")
    for reason in result.rejected:
        console.print(f"[yellow]⚠[/] Skipped: {escape(reason)}")

    if dry_run:
        console.print("\n[bold]DRY RUN - aliases that would be imported:[/]")
        for record in result.imported:
            console.print(f"  • [cyan]{escape(record.name)}[/] → {escape(truncate(record.command, 50))}")
        console.print("\n[dim]Run without --dry-run to import these aliases[/]")
        return

    if not result.imported:
        console.print("[yellow]Nothing imported.[/] All aliases conflict with existing ones or were invalid")
        return

    app.manager.commit(store)
    console.print(f"[green]✔[/] Imported {len(result.imported)} aliases into {app.aliases_path}")


@main.group()
def template():
    """Manage parameterised alias templates"""
    pass


@template.command(name="add")
@click.argument("name")
@click.argument("pattern")
@click.option("--description", "-d", help="Template description")
@click.option("--category", "-c", help="Template category")
@handle_errors
def template_add(name, pattern, description, category):
    """Add a template; use {param} placeholders in PATTERN"""
    created = TemplateManager().add(name, pattern, description, category)
    console.print(f"[green]✔[/] Template '{escape(name)}' added")
    if created.parameters:
        console.print(f"[dim]Parameters: {', '.join(p.name for p in created.parameters)}[/]")


@template.command(name="list")
@click.option("--category", "-c", help="Filter by category")
@handle_errors
def template_list(category):
    """List templates"""
    templates = TemplateManager().list_templates(category)
    if not templates:
        console.print(f"[yellow]No templates found in category '{escape(category or 'all')}'[/]")
        return

    table = Table(title=f"📋 Templates ({len(templates)})")
    table.add_column("Name", style="cyan")
    table.add_column("Category", style="yellow")
    table.add_column("Pattern", style="green")
    table.add_column("Parameters", style="dim")
    table.add_column("Used", justify="right")
    for tpl in templates:
        table.add_row(
            tpl.name,
            tpl.category,
            escape(tpl.pattern),
            ", ".join(p.name for p in tpl.parameters) or "—",
            str(tpl.usage_count),
        )
    console.print(table)


@template.command(name="use")
@click.argument("name")
@click.option("--params", help="Template parameters (key=value,key2=value2)")
@click.option("--alias-name", "-a", help="Custom alias name")
@click.pass_obj
@handle_errors
def template_use(app, name, params, alias_name):
    """Create an alias from a template"""
    manager = TemplateManager()
    values = parse_params(params)
    tpl = manager.get_template(name)
    target = alias_name or manager.alias_name_for(tpl, values)

    overwrite = False
    if app.manager.exists(target):
        console.print(f"[yellow]⚠[/] Alias '{escape(target)}' already exists")
        if not click.confirm("Do you want to overwrite it?", default=False):
            console.print("Operation aborted.")
            return
        overwrite = True

    created, command = manager.use(app.manager, name, values, target, overwrite=overwrite)
    console.print(f"[green]✔[/] Alias '{escape(created)}' created from template '{escape(name)}'")
    console.print(f"[dim]  {escape(command)}[/]")


@template.command(name="remove")
@click.argument("name")
@handle_errors
def template_remove(name):
    """Remove a template"""
    TemplateManager().remove(name)
    console.print(f"[green]✔[/] Template '{escape(name)}' removed")


@template.command(name="show")
@click.argument("name")
@handle_errors
def template_show(name):
    """Show a template and how to use it"""
    tpl = TemplateManager().get_template(name)
    console.print(f"[bold cyan]{escape(tpl.name)}[/] - {escape(tpl.description)}")
    console.print(f"  Pattern: [green]{escape(tpl.pattern)}[/]")
    console.print(f"  Category: {escape(tpl.category)}")
    console.print(f"  Used: {tpl.usage_count} times")
    if tpl.parameters:
        console.print("\n[bold]Parameters:[/]")
        for param in tpl.parameters:
            kind = "required" if param.required else "optional"
            console.print(f"  • {param.name} ({kind}) - {escape(param.description)}")
            if param.default_value is not None:
                console.print(f"      default: {escape(param.default_value)}")
            if param.validation_pattern:
                console.print(f"      pattern: {escape(param.validation_pattern)}")
        console.print(f"\n[dim]Example: shorty template use {tpl.name} --params {escape(tpl.example_params())}[/]")


@template.command(name="update")
@click.argument("name")
@click.option("--pattern", help="New pattern")
@click.option("--description", help="New description")
@click.option("--category", help="New category")
@handle_errors
def template_update(name, pattern, description, category):
    """Update a template"""
    changes = TemplateManager().update(name, pattern, description, category)
    if not changes:
        console.print("[yellow]No changes specified[/]")
        return
    console.print(f"[green]✔[/] Template '{escape(name)}' updated: {', '.join(changes)}")


@main.group()
def category():
    """Organise aliases into categories"""
    pass


@category.command(name="add")
@click.argument("name")
@click.option("--description", "-d", help="Category description")
@click.option("--parent", "-p", help="Parent category")
@click.option("--color", "-c", help="Category color")
@click.option("--icon", "-i", help="Category icon")
@handle_errors
def category_add(name, description, parent, color, icon):
    """Add a category"""
    CategoryManager().add(name, description, parent, color, icon)
    console.print(f"[green]✔[/] Category '{escape(name)}' created")
    if parent:
        console.print(f"[dim]  Parent: {escape(parent)}[/]")


@category.command(name="list")
@click.option("--tree", is_flag=True, help="Show as tree structure")
@click.option("--counts", is_flag=True, help="Show alias counts")
@click.pass_obj
@handle_errors
def category_list(app, tree, counts):
    """List categories"""
    categories = CategoryManager()
    if not categories.categories:
        console.print("[yellow]No categories found.[/] Add one with 'shorty category add'")
        return

    alias_counts = categories.counts(app.manager.list_aliases()) if (tree or counts) else {}
    if tree:
        for depth, cat in categories.tree():
            console.print(f"{'  ' * depth}{escape(cat.label)} ({alias_counts[cat.name]} aliases)")
        return

    for cat in categories.categories:
        line = escape(cat.label)
        if cat.parent:
            line += f" [dim](child of {escape(cat.parent)})[/]"
        if counts:
            line += f" - {alias_counts[cat.name]} aliases"
        console.print(line)
        if cat.description and cat.description != "No description":
            console.print(f"    [dim]{escape(cat.description)}[/]")


@category.command(name="remove")
@click.argument("name")
@click.option("--force", is_flag=True, help="Remove even if the category has children or aliases")
@click.pass_obj
@handle_errors
def category_remove(app, name, force):
    """Remove a category"""
    count = CategoryManager().remove(name, app.manager.list_aliases(), force=force)
    console.print(f"[green]✔[/] Category '{escape(name)}' removed")
    if count:
        console.print(f"[dim]  {count} aliases still carry its tag and are now uncategorized[/]")


@category.command(name="move")
@click.argument("alias")
@click.argument("category_name", metavar="CATEGORY")
@click.pass_obj
@handle_errors
def category_move(app, alias, category_name):
    """Move an alias into a category"""
    CategoryManager().move_alias(app.manager, alias, category_name)
    console.print(f"[green]✔[/] Moved '{escape(alias)}' to category '{escape(category_name)}'")


@category.command(name="show")
@click.argument("name")
@click.pass_obj
@handle_errors
def category_show(app, name):
    """Show a category with its aliases"""
    categories = CategoryManager()
    cat = categories.require(name)
    members = categories.aliases_in(name, app.manager.list_aliases())

    console.print(f"[bold cyan]{escape(cat.label)}[/] - {escape(cat.description)}")
    if cat.parent:
        console.print(f"  Parent: {escape(cat.parent)}")
    if cat.color:
        console.print(f"  Color: {escape(cat.color)}")
    console.print(f"  Created: {cat.created_at}")
    console.print(f"  Aliases: {len(members)}")

    children = categories.children(name)
    if children:
        console.print("\n[bold]Subcategories:[/]")
        for child in children:
            console.print(f"  • {escape(child.label)}")
    if members:
        console.print("\n[bold]Aliases:[/]")
        for record in members:
            console.print(f"  [cyan]{escape(record.name)}[/] → {escape(truncate(record.command, 50))}")


@category.command(name="group")
@click.pass_obj
@handle_errors
def category_group(app):
    """Show aliases grouped by category"""
    records = app.manager.list_aliases()
    if not records:
        console.print("[yellow]No aliases found.[/]")
        return

    categories = CategoryManager()
    grouped = categories.group(records)
    for name, members in grouped.items():
        if name == UNCATEGORIZED:
            header = "Uncategorized"
        else:
            cat = categories.get(name)
            header = cat.label if cat else f"{name} (category not found)"
        console.print(f"\n[bold cyan]📁 {escape(header)}[/] ({len(members)} aliases)")
        for record in members:
            line = f"  [cyan]{escape(record.name)}[/] → {escape(truncate(record.command, 40))}"
            if record.note:
                line += f" [dim]# {escape(record.note)}[/]"
            console.print(line)

    uncategorized = grouped.get(UNCATEGORIZED, [])
    categorized = len(records) - len(uncategorized)
    console.print("\n[bold]Summary:[/]")
    console.print(f"  Categorized: {categorized} ({categorized / len(records) * 100:.1f}%)")
    console.print(f"  Uncategorized: {len(uncategorized)} ({len(uncategorized) / len(records) * 100:.1f}%)")

    suggestions = [(p, n) for p, n in analyze_command_patterns(uncategorized) if n > 1]
    if suggestions:
        console.print("\n[bold]Suggested categories:[/]")
        for pattern, n in suggestions:
            console.print(f"  • {pattern}: {n} aliases")


def resolve_shell(shell):
    if shell:
        return ShellType(shell)
    detected = ShellDetector().detect_current_shell()
    if detected is ShellType.UNKNOWN:
        raise ShortyError(f"Unable to determine shell. Specify one with --shell ({', '.join(SHELLS)})")
    return detected


@main.command()
@click.option("--shell", "-s", type=click.Choice(SHELLS), help="Target shell (auto-detect if not specified)")
@click.option("--force", is_flag=True, help="Force reinstall even if already integrated")
@click.pass_obj
@handle_errors
def install(app, shell, force):
    """Load the alias file from your shell's startup file"""
    shell_type = resolve_shell(shell)
    success, message = ShellIntegrator().install(shell_type, app.aliases_path, force=force)
    if not success:
        console.print(f"[yellow]⚠[/] {escape(message)}")
        return
    console.print(f"[green]✔[/] {escape(message)}")
    console.print("[dim]Restart your terminal or source your shell config to load your aliases.[/]")


@main.command()
@click.option("--shell", "-s", type=click.Choice(SHELLS), help="Target shell (auto-detect if not specified)")
@click.option("--install", "install_", is_flag=True, help="Install the completion script")
@handle_errors
def completion(shell, install_):
    """Print or install the shell completion script"""
    shell_type = resolve_shell(shell)
    script = completion_script(shell_type)
    if not install_:
        click.echo(script)
        return

    success, message = ShellIntegrator().install_completions(script, shell_type)
    if not success:
        raise ShortyError(message)
    console.print(f"[green]✔[/] {escape(message)}")


@main.command()
@click.argument("alias")
@click.option("--method", type=click.Choice(["clipboard", "file"]), default="clipboard", show_default=True)
@click.pass_obj
@handle_errors
def share(app, alias, method):
    """Share an alias through the clipboard or a shell file"""
    record = app.manager.load().get(alias)
    if record is None:
        raise AliasNotFound(alias)

    if method == "file":
        path = write_share_file(record)
        console.print(f"[green]✔[/] Alias written to {path}")
        return

    line = share_text(record)
    if ClipboardManager().copy(line):
        console.print(f"[green]✔[/] Copied to clipboard: {escape(line)}")
    else:
        console.print("[yellow]⚠[/] Clipboard not available. Copy the line below:")
        click.echo(line)


if __name__ == "__main__":
    main()
