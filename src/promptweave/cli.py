"""CLI entry point for promptweave."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from block_document import PromptBlock
from promptweave.config import load_config
from promptweave.models.config import Config
from promptweave.models.prompt import payload_from_prompt
from promptweave.services.draft_store import DraftStore
from promptweave.services.exceptions import StoreError
from promptweave.services.prompt_store import PromptStore
from promptweave.session import EditorSession
from promptweave.utils.logging import LOG_LEVELS, configure_logging, get_logger


logger = get_logger(__name__)
console = Console()


def _load_config(config_path: Optional[Path]) -> Config:
    """
    Load configuration, turning errors into a clean CLI failure.

    Raises:
        click.ClickException: If the config file is invalid
    """
    try:
        return load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))


def _preview(text: str, width: int = 60) -> str:
    flat = " ".join(text.split())
    return flat if len(flat) <= width else flat[: width - 1] + "…"


class AppContext:
    """Stores and session built from configuration, shared by all commands."""

    def __init__(self, config: Config):
        self.config = config
        self.prompt_store = PromptStore(config.storage.prompts_file)
        self.draft_store = DraftStore(
            config.storage.drafts_file,
            limit=config.storage.draft_history_limit,
        )

    def session(self) -> EditorSession:
        return EditorSession(self.prompt_store, self.draft_store, self.config.editor)

    def open_draft(self, draft_id: str) -> EditorSession:
        """
        Session with ``draft_id`` loaded.

        Raises:
            click.ClickException: If the draft does not exist
        """
        session = self.session()
        if not session.open_draft(draft_id):
            raise click.ClickException(f"Draft not found: {draft_id}")
        return session

    def commit(self, session: EditorSession) -> None:
        """
        Persist the session's document back to draft history.

        A document left without content is dropped from history instead.

        Raises:
            click.ClickException: If the draft could not be saved
        """
        if not session.has_content():
            if session.draft_id is not None:
                session.delete_draft(session.draft_id)
            return
        if session.save_draft() is None:
            raise click.ClickException("Failed to save draft (see log for details)")


pass_app = click.make_pass_decorator(AppContext)


@click.group()
@click.version_option(version="0.1.0", prog_name="promptweave")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: ~/.config/promptweave/config.yaml)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level (default: PROMPTWEAVE_LOG_LEVEL or INFO)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], log_level: Optional[str]):
    """promptweave: compose prompts from text and reusable prompt blocks."""
    configure_logging(log_level)
    ctx.obj = AppContext(_load_config(config_path))


# Prompt library


@cli.group()
def prompts():
    """Manage the saved prompt library."""


@prompts.command("list")
@click.option("--tag", default=None, help="Only prompts carrying this tag")
@click.option("--search", "query", default=None, help="Case-insensitive title/content search")
@pass_app
def prompts_list(app: AppContext, tag: Optional[str], query: Optional[str]):
    """List saved prompts."""
    results = app.prompt_store.search(query, tag)
    if not results:
        click.echo("No prompts found.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", no_wrap=True)
    table.add_column("Title")
    table.add_column("Tags")
    table.add_column("Content")
    for prompt in results:
        table.add_row(prompt.id, escape(prompt.title), escape(", ".join(prompt.tags)), escape(_preview(prompt.content)))
    console.print(table)


@prompts.command("add")
@click.argument("title")
@click.option("--content", default=None, help="Prompt text (read from stdin if omitted)")
@click.option("--tag", "tags", multiple=True, help="Tag to attach (repeatable)")
@pass_app
def prompts_add(app: AppContext, title: str, content: Optional[str], tags: tuple[str, ...]):
    """Save a new prompt."""
    if content is None:
        content = sys.stdin.read()
    try:
        prompt = app.prompt_store.create(title, content, list(tags))
    except ValueError as e:
        raise click.ClickException(str(e))
    except StoreError as e:
        logger.error("prompt_add_failed", error=str(e))
        raise click.ClickException(str(e))
    click.echo(prompt.id)


@prompts.command("delete")
@click.argument("prompt_id")
@pass_app
def prompts_delete(app: AppContext, prompt_id: str):
    """Delete a saved prompt (documents keep their snapshots)."""
    try:
        removed = app.prompt_store.delete(prompt_id)
    except StoreError as e:
        raise click.ClickException(str(e))
    if not removed:
        raise click.ClickException(f"Prompt not found: {prompt_id}")
    click.echo(f"Deleted prompt {prompt_id}")


@prompts.command("tags")
@pass_app
def prompts_tags(app: AppContext):
    """List known tags."""
    for tag in app.prompt_store.tags():
        click.echo(tag)


# Drafts


@cli.group()
def drafts():
    """Compose and manage drafts."""


@drafts.command("list")
@click.option("--search", "query", default=None, help="Case-insensitive title search")
@pass_app
def drafts_list(app: AppContext, query: Optional[str]):
    """List drafts, newest first."""
    results = app.draft_store.search(query) if query else app.draft_store.list_drafts()
    if not results:
        click.echo("No drafts found.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", no_wrap=True)
    table.add_column("Title")
    table.add_column("Updated")
    for draft in results:
        table.add_row(draft.id, escape(draft.title), str(draft.updated_at))
    console.print(table)


@drafts.command("new")
@click.option("--title", default=None, help="Draft title")
@click.option("--text", default="", help="Initial text")
@pass_app
def drafts_new(app: AppContext, title: Optional[str], text: str):
    """Start a draft with some initial text."""
    session = app.session()
    if title is not None:
        session.title = title
    session.edit_text(session.blocks[0].id, text)
    if not session.has_content():
        raise click.ClickException("Nothing to save: draft text is empty")
    app.commit(session)
    click.echo(session.draft_id)


@drafts.command("show")
@click.argument("draft_id")
@pass_app
def drafts_show(app: AppContext, draft_id: str):
    """Print a draft as plain text."""
    session = app.open_draft(draft_id)
    click.echo(session.plain_text())


@drafts.command("blocks")
@click.argument("draft_id")
@pass_app
def drafts_blocks(app: AppContext, draft_id: str):
    """Show a draft's block structure."""
    session = app.open_draft(draft_id)
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Block ID", no_wrap=True)
    table.add_column("Content")
    for i, block in enumerate(session.blocks):
        label = f"[{block.title}] " if isinstance(block, PromptBlock) else ""
        table.add_row(str(i), block.kind, block.id, escape(label + _preview(block.content)))
    console.print(table)


@drafts.command("insert")
@click.argument("draft_id")
@click.argument("prompt_id")
@click.option("--at", "at_index", type=int, default=None, help="Insertion index (default: end)")
@pass_app
def drafts_insert(app: AppContext, draft_id: str, prompt_id: str, at_index: Optional[int]):
    """Insert a saved prompt into a draft."""
    prompt = app.prompt_store.get(prompt_id)
    if prompt is None:
        raise click.ClickException(f"Prompt not found: {prompt_id}")
    session = app.open_draft(draft_id)
    if not session.insert_payload(payload_from_prompt(prompt), at_index):
        raise click.ClickException(f"Cannot insert at index {at_index}")
    app.commit(session)
    click.echo(f"Inserted '{prompt.title}' into {draft_id}")


@drafts.command("move")
@click.argument("draft_id")
@click.argument("block_id")
@click.argument("index", type=int)
@pass_app
def drafts_move(app: AppContext, draft_id: str, block_id: str, index: int):
    """Move a block to a new insertion index."""
    session = app.open_draft(draft_id)
    if session.move_block(block_id, index):
        app.commit(session)
        click.echo(f"Moved {block_id}")
    else:
        click.echo("Nothing to move.")


@drafts.command("remove-block")
@click.argument("draft_id")
@click.argument("block_id")
@pass_app
def drafts_remove_block(app: AppContext, draft_id: str, block_id: str):
    """Remove one block from a draft."""
    session = app.open_draft(draft_id)
    if not session.remove_block(block_id):
        raise click.ClickException(f"Block not found: {block_id}")
    app.commit(session)
    click.echo(f"Removed {block_id}")


@drafts.command("delete")
@click.argument("draft_id")
@pass_app
def drafts_delete(app: AppContext, draft_id: str):
    """Delete a draft from history."""
    session = app.session()
    if not session.delete_draft(draft_id):
        raise click.ClickException(f"Draft not found: {draft_id}")
    click.echo(f"Deleted draft {draft_id}")


def main():
    """Main entry point for setuptools console script."""
    cli()


if __name__ == "__main__":
    main()
