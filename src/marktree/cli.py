"""Command line interface for Marktree."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from marktree.auth import GateResult
from marktree.config import ConfigError, ConfigManager, MarktreeConfig, flatten_for_env
from marktree.logs import configure_logging
from marktree.session import Session
from marktree.store import Bookmark, StoreError, StoreRepository
from marktree.tree import ALL_BOOKMARKS_LABEL, FAVORITES_LABEL

console = Console()

AUTH_REQUIRED_MESSAGE = (
    "Authentication required: set an API key with --api-key, MARKTREE_API_KEY "
    "or `marktree config set auth.api_key --value KEY`."
)
MASKED_SECRET = "********"


@dataclass(slots=True)
class CLIState:
    """Global options captured by the root command.

    Attributes:
        config_path: Optional configuration file override.
        store_path: Optional bookmark store override.
        api_key: Optional API key override.
        quiet: Whether non-error output is suppressed.
    """

    config_path: Optional[Path]
    store_path: Optional[str]
    api_key: Optional[str]
    quiet: bool


@dataclass(slots=True)
class Workspace:
    """Loaded configuration, store location and session for one command."""

    config: MarktreeConfig
    store_path: Path
    session: Session
    repository: StoreRepository

    def save(self) -> None:
        self.repository.save(self.store_path, self.session.store)


def _load_workspace(
    ctx: click.Context, *, view_overrides: dict[str, Any] | None = None
) -> Workspace:
    """Resolve configuration and open the bookmark store for a command.

    Args:
        ctx: Click context carrying :class:`CLIState`.
        view_overrides: Extra dotted overrides from command options.

    Returns:
        Workspace: Ready-to-use session and persistence handles.

    Raises:
        click.ClickException: If configuration or the store cannot be loaded.
    """
    state: CLIState = ctx.obj
    overrides: dict[str, Any] = dict(view_overrides or {})
    if state.store_path:
        overrides["store.path"] = state.store_path
    if state.api_key:
        overrides["auth.api_key"] = state.api_key

    try:
        config = ConfigManager(state.config_path).load(cli_overrides=overrides)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    _resolve_quiet(ctx, config)
    configure_logging(config.logging)

    repository = StoreRepository()
    store_path = Path(config.store.path).expanduser()
    try:
        store = repository.load_or_seed(store_path, seed_sample=config.store.seed_sample)
    except StoreError as exc:
        raise click.ClickException(str(exc)) from exc

    return Workspace(
        config=config,
        store_path=store_path,
        session=Session.from_config(store, config),
        repository=repository,
    )


def _resolve_quiet(ctx: click.Context, config: MarktreeConfig) -> None:
    """Apply ``cli.quiet_default`` unless ``--quiet`` was given on the command line."""
    state: CLIState = ctx.obj
    explicit_quiet = ctx.find_root().get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    state.quiet = state.quiet if explicit_quiet else config.cli.quiet_default


def _masked(config: MarktreeConfig) -> MarktreeConfig:
    if not config.auth.api_key:
        return config
    auth = config.auth.model_copy(update={"api_key": MASKED_SECRET})
    return config.model_copy(update={"auth": auth})


def _apply(workspace: Workspace, result: GateResult, failure: str) -> Any:
    """Persist a successful gated mutation or raise a user-facing error.

    Args:
        workspace: Workspace whose store was mutated.
        result: Outcome reported by the mutation gate.
        failure: Message used when the store ignored the mutation.

    Returns:
        Any: The value returned by the store operation.

    Raises:
        click.ClickException: On authentication rejection or a no-op mutation.
    """
    if result.rejected:
        raise click.ClickException(AUTH_REQUIRED_MESSAGE)
    if not result.value:
        raise click.ClickException(failure)
    workspace.save()
    return result.value


def _echo(ctx: click.Context, message: Any) -> None:
    if not ctx.obj.quiet:
        console.print(message)


def _bookmark_table(title: str, bookmarks: list[Bookmark]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("URL", overflow="fold")
    table.add_column("Tags")
    table.add_column("Fav", justify="center")
    for bookmark in bookmarks:
        table.add_row(
            bookmark.id,
            bookmark.title,
            bookmark.url,
            ", ".join(bookmark.tags),
            "*" if bookmark.favorite else "",
        )
    return table


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="marktree")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file (defaults to ~/.marktree/config.yaml).",
)
@click.option(
    "--store",
    "store_path",
    type=click.Path(dir_okay=False, path_type=str),
    help="Bookmark store JSON file (overrides store.path).",
)
@click.option("--api-key", envvar="MARKTREE_API_KEY", help="API key unlocking changes.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[Path],
    store_path: Optional[str],
    api_key: Optional[str],
    quiet: bool,
) -> None:
    """Marktree organizes bookmarks into folders, tags and favorites."""
    ctx.obj = CLIState(
        config_path=config_path,
        store_path=store_path,
        api_key=api_key,
        quiet=quiet,
    )


@cli.command("list")
@click.option("--folder", "folder_id", type=str, help="Show bookmarks in this folder.")
@click.option("--favorites", is_flag=True, help="Show favorite bookmarks.")
@click.option("--tag", type=str, help="Show bookmarks carrying this tag.")
@click.option("--search", "query", type=str, default="", help="Case-insensitive text filter.")
@click.option(
    "--flatten/--no-flatten",
    default=None,
    help="Include bookmarks from subfolders (defaults to view.flatten_subfolders).",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of a table.")
@click.pass_context
def list_bookmarks(
    ctx: click.Context,
    folder_id: Optional[str],
    favorites: bool,
    tag: Optional[str],
    query: str,
    flatten: Optional[bool],
    json_output: bool,
) -> None:
    """List the bookmarks visible for a folder, favorites or tag scope."""
    if tag and (folder_id or favorites):
        raise click.ClickException("--tag cannot be combined with --folder or --favorites.")
    if folder_id and favorites:
        raise click.ClickException("--folder cannot be combined with --favorites.")

    overrides = {} if flatten is None else {"view.flatten_subfolders": flatten}
    workspace = _load_workspace(ctx, view_overrides=overrides)
    session = workspace.session
    if tag:
        session.select_tag(tag)
    else:
        session.select_folder("favorites" if favorites else folder_id)
    session.set_search(query)

    visible = session.visible_bookmarks()
    tiles = session.subfolders()
    title = session.path_name()

    if json_output:
        console.print_json(
            data={
                "title": title,
                "scope": session.selection.scope.model_dump(mode="json"),
                "counts": {"total": len(session.store.bookmarks), "matches": len(visible)},
                "subfolders": [folder.model_dump(mode="json") for folder in tiles],
                "results": [bookmark.model_dump(mode="json") for bookmark in visible],
            }
        )
        return

    if tiles:
        _echo(ctx, "Subfolders: " + ", ".join(f"{folder.name} ({folder.id})" for folder in tiles))
    if not visible:
        _echo(ctx, "[yellow]No bookmarks found.[/yellow]")
        return
    _echo(ctx, _bookmark_table(title, visible))


@cli.command("folders")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of a tree.")
@click.option("--flat", is_flag=True, help="Print an indented id and name list instead of a tree.")
@click.pass_context
def folders_command(ctx: click.Context, json_output: bool, flat: bool) -> None:
    """Show the folder tree with recursive bookmark counts."""
    session = _load_workspace(ctx).session
    tree = session.tree()
    counts = session.bookmark_counts()

    if json_output and flat:
        raise click.ClickException("--json cannot be combined with --flat.")

    if flat:
        for folder_id, label in tree.folder_options():
            _echo(ctx, f"{folder_id}  {label} ({counts[folder_id]})")
        return

    if json_output:
        console.print_json(
            data=[
                {
                    "id": folder.id,
                    "name": folder.name,
                    "parent_id": folder.parent_id,
                    "depth": depth,
                    "path": tree.path_name(folder.id),
                    "count": counts[folder.id],
                }
                for depth, folder in tree.walk()
            ]
        )
        return

    root = Tree(f"{ALL_BOOKMARKS_LABEL} ({len(session.store.bookmarks)})")
    root.add(f"{FAVORITES_LABEL} ({session.favorites_count()})")
    branches: dict[str, Tree] = {}
    for depth, folder in tree.walk():
        parent = branches.get(folder.parent_id or "") if depth else None
        label = f"{folder.name} ({counts[folder.id]}) [dim]{folder.id}[/dim]"
        branches[folder.id] = (parent or root).add(label)
    _echo(ctx, root)


@cli.command("tags")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of a table.")
@click.pass_context
def tags_command(ctx: click.Context, json_output: bool) -> None:
    """List tags with the number of bookmarks carrying each."""
    counts = _load_workspace(ctx).session.tag_counts()
    if json_output:
        console.print_json(data=counts)
        return

    table = Table(title="Tags")
    table.add_column("Tag")
    table.add_column("Bookmarks", justify="right")
    for tag, count in counts.items():
        table.add_row(tag, str(count))
    _echo(ctx, table)


@cli.group()
def folder() -> None:
    """Create, rename and move folders."""


@folder.command("create")
@click.argument("name")
@click.option("--parent", "parent_id", type=str, help="Parent folder id.")
@click.pass_context
def folder_create(ctx: click.Context, name: str, parent_id: Optional[str]) -> None:
    """Create a folder called NAME."""
    workspace = _load_workspace(ctx)
    created = _apply(
        workspace,
        workspace.session.create_folder(name, parent_id),
        "Folder name must not be blank.",
    )
    _echo(ctx, f"[green]Created folder {created.name} ({created.id}).[/green]")


@folder.command("rename")
@click.argument("folder_id")
@click.argument("name")
@click.pass_context
def folder_rename(ctx: click.Context, folder_id: str, name: str) -> None:
    """Rename folder FOLDER_ID to NAME."""
    workspace = _load_workspace(ctx)
    _apply(
        workspace,
        workspace.session.rename_folder(folder_id, name),
        f"Could not rename {folder_id}: unknown folder or blank name.",
    )
    _echo(ctx, f"[green]Renamed {folder_id} to {workspace.session.path_name(folder_id)}.[/green]")


@folder.command("move")
@click.argument("folder_id")
@click.option("--parent", "parent_id", type=str, help="New parent id (omit for top level).")
@click.pass_context
def folder_move(ctx: click.Context, folder_id: str, parent_id: Optional[str]) -> None:
    """Move folder FOLDER_ID under another folder."""
    workspace = _load_workspace(ctx)
    _apply(
        workspace,
        workspace.session.move_folder(folder_id, parent_id),
        f"Could not move {folder_id}: unknown folder or the move would create a cycle.",
    )
    _echo(ctx, f"[green]Moved to {workspace.session.path_name(folder_id)}.[/green]")


@cli.group()
def bookmark() -> None:
    """Add, edit, tag and remove bookmarks."""


@bookmark.command("add")
@click.option("--folder", "folder_id", type=str, help="Folder to file the bookmark in.")
@click.option("--title", type=str, help="Bookmark title.")
@click.option("--url", type=str, help="Bookmark URL.")
@click.option("--description", type=str, help="Bookmark description.")
@click.option("--tag", "tags", multiple=True, help="Tag to attach (repeatable).")
@click.pass_context
def bookmark_add(
    ctx: click.Context,
    folder_id: Optional[str],
    title: Optional[str],
    url: Optional[str],
    description: Optional[str],
    tags: tuple[str, ...],
) -> None:
    """Add a bookmark, using placeholders for omitted fields."""
    workspace = _load_workspace(ctx)
    defaults: dict[str, Any] = {
        key: value
        for key, value in (("title", title), ("url", url), ("description", description))
        if value is not None
    }
    cleaned_tags = [tag.strip() for tag in tags if tag.strip()]
    if cleaned_tags:
        defaults["tags"] = cleaned_tags

    session = workspace.session
    session.select_folder(folder_id)
    created = _apply(workspace, session.add_bookmark(defaults), "Bookmark was not added.")
    _echo(ctx, f"[green]Added {created.title} ({created.id}) to {session.path_name()}.[/green]")


@bookmark.command("update")
@click.argument("bookmark_id")
@click.option("--title", type=str, help="New title.")
@click.option("--url", type=str, help="New URL.")
@click.option("--description", type=str, help="New description.")
@click.option("--thumbnail", type=str, help="New thumbnail URL.")
@click.option("--folder", "folder_id", type=str, help="Folder id to move the bookmark into.")
@click.option("--unfiled", is_flag=True, help="Remove the bookmark from its folder.")
@click.pass_context
def bookmark_update(
    ctx: click.Context,
    bookmark_id: str,
    title: Optional[str],
    url: Optional[str],
    description: Optional[str],
    thumbnail: Optional[str],
    folder_id: Optional[str],
    unfiled: bool,
) -> None:
    """Edit fields of bookmark BOOKMARK_ID."""
    if folder_id and unfiled:
        raise click.ClickException("--folder cannot be combined with --unfiled.")
    patch: dict[str, Any] = {
        key: value
        for key, value in (
            ("title", title),
            ("url", url),
            ("description", description),
            ("thumbnail", thumbnail),
            ("folder_id", folder_id),
        )
        if value is not None
    }
    if unfiled:
        patch["folder_id"] = None
    if not patch:
        raise click.ClickException("Nothing to update; pass at least one field option.")

    workspace = _load_workspace(ctx)
    _apply(
        workspace,
        workspace.session.update_bookmark(bookmark_id, patch),
        f"Unknown bookmark {bookmark_id}.",
    )
    _echo(ctx, f"[green]Updated {bookmark_id}.[/green]")


@bookmark.command("delete")
@click.argument("bookmark_id")
@click.pass_context
def bookmark_delete(ctx: click.Context, bookmark_id: str) -> None:
    """Delete bookmark BOOKMARK_ID."""
    workspace = _load_workspace(ctx)
    _apply(
        workspace,
        workspace.session.delete_bookmark(bookmark_id),
        f"Unknown bookmark {bookmark_id}.",
    )
    _echo(ctx, f"[green]Deleted {bookmark_id}.[/green]")


@bookmark.command("favorite")
@click.argument("bookmark_id")
@click.pass_context
def bookmark_favorite(ctx: click.Context, bookmark_id: str) -> None:
    """Toggle the favorite flag of BOOKMARK_ID."""
    workspace = _load_workspace(ctx)
    _apply(
        workspace,
        workspace.session.toggle_favorite(bookmark_id),
        f"Unknown bookmark {bookmark_id}.",
    )
    updated = workspace.session.store.get_bookmark(bookmark_id)
    state = "now a favorite" if updated is not None and updated.favorite else "no longer a favorite"
    _echo(ctx, f"[green]{bookmark_id} is {state}.[/green]")


@bookmark.command("tag")
@click.argument("bookmark_id")
@click.argument("tag")
@click.pass_context
def bookmark_tag(ctx: click.Context, bookmark_id: str, tag: str) -> None:
    """Attach TAG to BOOKMARK_ID."""
    workspace = _load_workspace(ctx)
    _apply(
        workspace,
        workspace.session.add_tag(bookmark_id, tag),
        f"Could not tag {bookmark_id}: unknown bookmark, blank tag or tag already present.",
    )
    _echo(ctx, f"[green]Tagged {bookmark_id} with {tag.strip()}.[/green]")


@bookmark.command("untag")
@click.argument("bookmark_id")
@click.argument("tag")
@click.pass_context
def bookmark_untag(ctx: click.Context, bookmark_id: str, tag: str) -> None:
    """Remove TAG from BOOKMARK_ID."""
    workspace = _load_workspace(ctx)
    _apply(
        workspace,
        workspace.session.remove_tag(bookmark_id, tag),
        f"Could not untag {bookmark_id}: unknown bookmark or tag not present.",
    )
    _echo(ctx, f"[green]Removed {tag} from {bookmark_id}.[/green]")


@cli.group()
def config() -> None:
    """Inspect and update Marktree configuration."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.option(
    "--shell",
    "shell_format",
    is_flag=True,
    help="Print MARKTREE__ environment assignments instead of YAML.",
)
@click.pass_context
def config_view(ctx: click.Context, no_env: bool, shell_format: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    The API key is masked in both output formats.
    """
    manager = ConfigManager(ctx.obj.config_path)
    try:
        effective = _masked(manager.load(include_env=not no_env))
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if shell_format:
        for key, value in flatten_for_env(effective).items():
            console.print(f"{key}={value}", markup=False, highlight=False)
        return

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal assigned to KEY.")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Persist a configuration value addressed by a dotted KEY."""
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    manager = ConfigManager(ctx.obj.config_path)
    try:
        updated = manager.set_value(key, parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    _resolve_quiet(ctx, updated)
    _echo(ctx, f"[green]Updated {key}.[/green]")


__all__ = ["cli"]
