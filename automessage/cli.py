"""CLI entry point for automessage."""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, NoReturn

import structlog
import typer
import yaml
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax

from automessage.changelog import ChangelogWriter, render_section
from automessage.config import (
    DEFAULT_CONFIG_TEMPLATE,
    AutoMessageConfig,
    load_config,
    set_config_value,
    user_config_path,
)
from automessage.config.loader import PROJECT_CONFIG
from automessage.drafter import ComposerSettings, MessageDrafter, RequestComposer
from automessage.errors import AutoMessageError
from automessage.llm import create_generation_client
from automessage.vcs import RepositoryReader, abbreviate_sha

app = typer.Typer(
    name="automessage",
    help="Draft commit messages, tag notes and changelogs from local git history.",
    no_args_is_help=True,
)

config_app = typer.Typer(help="Manage automessage configuration.")
app.add_typer(config_app, name="config")

err_console = Console(stderr=True)

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class CliState:
    config_path: str | None = None
    repo: str = "."
    _config: AutoMessageConfig | None = field(default=None, repr=False)

    def config(self) -> AutoMessageConfig:
        if self._config is None:
            self._config = load_config(self.config_path)
            _configure_logging(self._config)
        return self._config


def _json_formatter() -> structlog.stdlib.ProcessorFormatter:
    """One JSON object per record for stdlib loggers."""
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
    )


def _configure_logging(cfg: AutoMessageConfig) -> None:
    if cfg.log_format == "json":
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(_json_formatter())
    else:
        handler = RichHandler(console=err_console, show_path=False)
    logging.basicConfig(level=_LOG_LEVELS[cfg.log_level], handlers=[handler], force=True)


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(1)


def _state(ctx: typer.Context) -> CliState:
    if not isinstance(ctx.obj, CliState):
        ctx.obj = CliState()
    return ctx.obj


def _build_drafter(state: CliState, *, with_client: bool = True) -> MessageDrafter:
    cfg = state.config()
    reader = RepositoryReader(state.repo)
    composer = RequestComposer(ComposerSettings.from_config(cfg))
    factory = (lambda: create_generation_client(cfg.llm)) if with_client else None
    return MessageDrafter(reader, composer, client_factory=factory)


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to automessage.yaml")
    ] = None,
    repo: Annotated[
        str, typer.Option("--repo", "-C", help="Path inside the target repository")
    ] = ".",
) -> None:
    """Global options."""
    ctx.obj = CliState(config_path=config, repo=repo)


@app.command()
def commit(
    ctx: typer.Context,
    create: Annotated[
        bool, typer.Option("--commit", help="Create the commit with the generated message")
    ] = False,
    stage_all: Annotated[
        bool, typer.Option("--all", "-a", help="Stage the listed changes before committing")
    ] = False,
    prompt: Annotated[
        str | None, typer.Option("--prompt", help="Custom instruction for this message")
    ] = None,
    max_length: Annotated[
        int, typer.Option("--max-length", help="Advisory wrap width for the message body")
    ] = 72,
) -> None:
    """Generate a commit message for staged changes."""
    state = _state(ctx)
    try:
        drafter = _build_drafter(state)
        draft = asyncio.run(drafter.draft_commit_message(prompt, max_length))
        if draft is None:
            rprint("[yellow]No staged changes found.[/yellow] Stage your changes first.")
            return
        if not draft.message:
            _fail("The model returned an empty commit message; nothing was committed.")

        if not create:
            rprint(Panel(escape(draft.message), title="Commit message", border_style="green"))
            rprint("[dim]Use --commit to create the commit automatically.[/dim]")
            return

        if stage_all:
            drafter.reader.stage_files(draft.files)
        sha = drafter.reader.create_commit(draft.message)
        rprint(f"[green]Commit created:[/green] {abbreviate_sha(sha)}")
        rprint(escape(draft.message))
    except AutoMessageError as e:
        _fail(str(e))


@app.command()
def tag(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Tag name"),
    annotated: Annotated[
        bool, typer.Option("--annotated", help="Create an annotated tag with the message")
    ] = False,
    prompt: Annotated[
        str | None, typer.Option("--prompt", help="Custom instruction for this message")
    ] = None,
    reference: Annotated[
        str, typer.Option("--reference", help="Commit, branch or tag to describe")
    ] = "HEAD",
) -> None:
    """Generate a tag message and optionally create the tag."""
    state = _state(ctx)
    try:
        drafter = _build_drafter(state)
        message = asyncio.run(drafter.draft_tag_message(name, reference, prompt))
        if not message:
            _fail(f"The model returned an empty message for tag '{name}'.")

        if annotated:
            drafter.reader.create_annotated_tag(name, message, reference)
            rprint(f"[green]Annotated tag created:[/green] {escape(name)}")
            rprint(escape(message))
        else:
            rprint(Panel(escape(message), title=f"Tag message: {escape(name)}", border_style="green"))
            rprint("[dim]Use --annotated to create the tag automatically.[/dim]")
    except AutoMessageError as e:
        _fail(str(e))


@app.command()
def changelog(
    ctx: typer.Context,
    commits: Annotated[
        int | None, typer.Option("--commits", "-n", help="Number of recent commits")
    ] = None,
    range_expr: Annotated[
        str | None, typer.Option("--range", help="Commit range, e.g. v1.0.0..v1.1.0")
    ] = None,
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Write to this changelog file")
    ] = None,
    write: Annotated[
        bool, typer.Option("--write", "-w", help="Write to the configured changelog.path")
    ] = False,
    append: Annotated[
        bool, typer.Option("--append", help="Insert into the existing file instead of replacing it")
    ] = False,
    template: Annotated[
        bool, typer.Option("--template", help="Group commits by type without calling the LLM")
    ] = False,
    fallback: Annotated[
        bool,
        typer.Option("--fallback/--no-fallback", help="Use the template if generation fails"),
    ] = True,
    prompt: Annotated[
        str | None, typer.Option("--prompt", help="Custom instruction for the summary")
    ] = None,
) -> None:
    """Generate a changelog section for recent commits or a range."""
    state = _state(ctx)
    try:
        cfg = state.config()
        drafter = _build_drafter(state, with_client=not template)
        count = commits if commits is not None else cfg.changelog.commits
        selected = drafter.collect_commits(count, range_expr)
        section = asyncio.run(
            drafter.draft_changelog_section(
                selected,
                templated=template,
                fallback=fallback,
                custom_instruction=prompt,
            )
        )
        if section is None:
            rprint("[yellow]No commits found in the selected range.[/yellow]")
            return

        target = output
        if target is None and write:
            target = drafter.reader.root / cfg.changelog.path
        if target:
            dest = ChangelogWriter(target).write(section, append=append)
            rprint(f"[green]Changelog written to[/green] {dest}")
        else:
            rprint(Syntax(render_section(section), "markdown", theme="monokai"))
    except AutoMessageError as e:
        _fail(str(e))


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


def _config_target(local: bool) -> Path:
    return PROJECT_CONFIG if local else user_config_path()


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show current resolved configuration."""
    try:
        cfg = _state(ctx).config()
    except AutoMessageError as e:
        _fail(str(e))
    data = cfg.model_dump(mode="json")
    if data["llm"].get("api_key"):
        data["llm"]["api_key"] = "***"
    rprint(Syntax(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), "yaml"))


@config_app.command("init")
def config_init(
    local: bool = typer.Option(False, "--local", help="Write ./automessage.yaml instead"),
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create a default config file (user-global unless --local)."""
    target = _config_target(local)
    if target.exists() and not force:
        rprint(f"[yellow]{target} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    rprint(f"[green]Created[/green] {target}")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Dotted key, e.g. llm.model"),
    value: str = typer.Argument(..., help="New value (empty string clears it)"),
    local: bool = typer.Option(False, "--local", help="Edit ./automessage.yaml instead"),
) -> None:
    """Set one configuration value."""
    target = _config_target(local)
    try:
        set_config_value(target, key, value)
    except AutoMessageError as e:
        _fail(str(e))
    rprint(f"[green]Set[/green] {key} in {target}")


if __name__ == "__main__":
    app()
