"""CLI entry point for multicontext."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.tree import Tree

from multicontext.config import load_config
from multicontext.graph import queries
from multicontext.graph.invariants import find_inconsistencies
from multicontext.models.config import Config
from multicontext.models.state import GraphState
from multicontext.services.exceptions import EmptyContextError, MulticontextError
from multicontext.services.json_store import JsonGraphStore, load_seed
from multicontext.services.session import OutlineSession
from multicontext.utils.logging import configure_logging, get_logger


logger = get_logger(__name__)
console = Console()


def open_session(ctx: click.Context) -> OutlineSession:
    """
    Load configuration and the stored graph into a session.

    Raises:
        click.ClickException: If config is invalid or the store is corrupted
    """
    config: Config = ctx.obj["config"]
    store = JsonGraphStore(Path(config.storage.data_dir))
    try:
        state = store.load()
    except MulticontextError as e:
        logger.error("store_load_error", error=str(e))
        raise click.ClickException(str(e))
    return OutlineSession(state=state, target=store, config=config)


def _format_path(path) -> str:
    return " / ".join(path) if path else "(top level)"


@click.group()
@click.version_option(version="0.1.0", prog_name="multicontext")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (default: ~/.config/multicontext/config.yaml)",
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Override the data directory from the configuration",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], data_dir: Optional[Path]):
    """multicontext: an outline where every thought can live in many contexts."""
    configure_logging()

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))

    if data_dir is not None:
        config = config.model_copy(
            update={"storage": config.storage.model_copy(update={"data_dir": str(data_dir)})}
        )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@click.argument("value")
@click.option("-c", "--context", "context", multiple=True, help="Context path element (repeat for each level)")
@click.option("--rank", type=int, default=None, help="Sibling rank (default: after the last sibling)")
@click.option("--as-context", is_flag=True, help="Add VALUE as a new context of the item the context path names")
@click.pass_context
def add(ctx: click.Context, value: str, context: tuple[str, ...], rank: Optional[int], as_context: bool):
    """
    Add an item under a context.

    Examples:
        multicontext add Cat -c Animal            # Cat becomes a child of Animal
        multicontext add Pet -c Animal -c Cat --as-context   # Pet becomes a context of Cat
    """
    logger.info("add_command_started", value=value, context=list(context), as_context=as_context)
    session = open_session(ctx)
    try:
        result = session.submit(value, context=context, add_as_context=as_context, rank=rank)
    except MulticontextError as e:
        logger.error("add_command_failed", error=str(e))
        raise click.ClickException(str(e))

    if as_context:
        target = queries.signifier(context)
        membership = result.state.items.get(target).membership_for((value,))
        click.echo(f"Added {value} as a context of {target} (rank {membership.rank})")
    elif context:
        membership = result.state.items.get(value).membership_for(tuple(context))
        click.echo(f"Added {value} to {_format_path(context)} (rank {membership.rank})")
    else:
        click.echo(f"Added {value}")


@cli.command()
@click.argument("path", nargs=-1, required=True)
@click.pass_context
def children(ctx: click.Context, path: tuple[str, ...]):
    """List the children of a context path in rank order."""
    session = open_session(ctx)
    entries = session.children(path)
    if not entries:
        click.echo(f"No children in {_format_path(path)}")
        return
    for child in entries:
        click.echo(f"{child.rank}\t{child.key}")


@cli.command()
@click.argument("path", nargs=-1, required=True)
@click.pass_context
def parents(ctx: click.Context, path: tuple[str, ...]):
    """List the contexts the item at PATH belongs to."""
    session = open_session(ctx)
    try:
        memberships = session.parents(path)
    except MulticontextError as e:
        raise click.ClickException(str(e))
    if not memberships:
        click.echo(f"{queries.signifier(path)} has no contexts")
        return
    for membership in memberships:
        click.echo(f"{membership.rank}\t{_format_path(membership.context)}")


def _label(state: GraphState, path: tuple[str, ...]) -> str:
    value = queries.signifier(path)
    label = value
    if queries.exists(state, path):
        count = len(queries.parents_of(state, path))
        if count > 1:
            label += f" [dim]({count} contexts)[/dim]"
        if queries.is_leaf(state, path):
            label = f"[dim]{label}[/dim]"
    return label


def build_tree(session: OutlineSession, focus: tuple[str, ...], from_path: tuple[str, ...] = ()) -> Tree:
    """
    Render a focus path as a rich Tree of subheadings and their children.

    Follows a redirect when the configured policy asks for one.

    Raises:
        NotFoundError: If the focus item does not exist
        EmptyContextError: Under the error policy
    """
    view = session.view(focus, from_path or None)
    if view.redirect_to is not None:
        view = session.view(view.redirect_to)

    state = session.state
    root_view = queries.is_root(view.focus, session.root)
    tree = Tree(f"[bold]{_format_path(view.focus)}[/bold]")
    for subheading in view.subheadings:
        branch = tree if root_view else tree.add(" + ".join(subheading))
        values = queries.sort_by_display(queries.child_values(state, subheading))
        for value in values:
            child_path = (() if root_view else subheading) + (value,)
            branch.add(_label(state, child_path))
    return tree


@cli.command()
@click.argument("path", nargs=-1, required=True)
@click.option("--from", "from_path", multiple=True, help="Breadcrumb path element the view was reached from")
@click.pass_context
def show(ctx: click.Context, path: tuple[str, ...], from_path: tuple[str, ...]):
    """Show a context path with its subheadings and children."""
    session = open_session(ctx)
    try:
        tree = build_tree(session, tuple(path), tuple(from_path))
    except EmptyContextError as e:
        raise click.ClickException(f"{e} (try: {_format_path(e.redirect_to)})")
    except MulticontextError as e:
        raise click.ClickException(str(e))
    console.print(tree)


@cli.command()
@click.pass_context
def check(ctx: click.Context):
    """Verify that the item store and the context children index agree."""
    session = open_session(ctx)
    problems = find_inconsistencies(session.state)
    if problems:
        for problem in problems:
            click.echo(f"✗ {problem}", err=True)
        logger.error("check_failed", problems=len(problems))
        ctx.exit(1)
    click.echo(f"✓ {len(session.state.items)} items, {len(session.state.context_children)} contexts consistent")


@cli.command()
@click.argument("seed_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Replace an existing store")
@click.pass_context
def seed(ctx: click.Context, seed_file: Path, force: bool):
    """Initialise the store from a YAML seed file of value -> context paths."""
    config: Config = ctx.obj["config"]
    store = JsonGraphStore(Path(config.storage.data_dir))
    if store.items_path.exists() and not force:
        raise click.ClickException(f"Store already exists at {store.data_dir} (use --force to replace)")
    try:
        state = load_seed(seed_file)
    except MulticontextError as e:
        raise click.ClickException(str(e))
    store.save(state)
    click.echo(f"Seeded {len(state.items)} items into {store.data_dir}")


def main():
    """Main entry point for setuptools console script."""
    cli()


if __name__ == "__main__":
    main()
