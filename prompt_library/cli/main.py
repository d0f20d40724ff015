"""Prompt library CLI — library command."""

from __future__ import annotations

import json
import sys
from typing import Any

import click

from prompt_library.cli.client import LibraryClient


def _format_table(rows: list[dict], columns: list[str]) -> str:
    """Simple table formatter."""
    if not rows:
        return "No results."
    widths = {c: len(c) for c in columns}
    for row in rows:
        for c in columns:
            widths[c] = max(widths[c], len(str(row.get(c, ""))))

    header = "  ".join(c.upper().ljust(widths[c]) for c in columns)
    separator = "  ".join("-" * widths[c] for c in columns)
    lines = [header, separator]
    for row in rows:
        lines.append("  ".join(str(row.get(c, "")).ljust(widths[c]) for c in columns))
    return "\n".join(lines)


def _output(ctx: click.Context, data: Any, columns: list[str] | None = None) -> None:
    fmt = ctx.meta.get("output_format", "table")
    if fmt == "table" and isinstance(data, list) and columns:
        click.echo(_format_table(data, columns))
    else:
        click.echo(json.dumps(data, indent=2, default=str))


def _load_components(file_path: str | None) -> list[dict]:
    """Read a JSON component list from --file or stdin."""
    if file_path:
        with open(file_path) as f:
            data = json.load(f)
    else:
        data = json.load(sys.stdin)
    if isinstance(data, dict):
        data = data.get("components", [])
    return data


@click.group()
@click.option("--api", default="http://localhost:8400", envvar="LIBRARY_API", help="API base URL")
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table")
@click.pass_context
def cli(ctx: click.Context, api: str, output_format: str) -> None:
    """Prompt library CLI — create, compose and resolve prompts."""
    ctx.obj = LibraryClient(base_url=api)
    ctx.meta["output_format"] = output_format


# --- Prompt commands ---


@cli.group()
def prompt() -> None:
    """Manage plain prompts."""


@prompt.command("create")
@click.option("--title", required=True)
@click.option("--text", "prompt_text", required=True)
@click.pass_context
def prompt_create(ctx: click.Context, title: str, prompt_text: str) -> None:
    """Create a plain text prompt."""
    client: LibraryClient = ctx.obj
    _output(ctx, client.create_prompt({"title": title, "prompt_text": prompt_text}))


@prompt.command("show")
@click.argument("prompt_id")
@click.pass_context
def prompt_show(ctx: click.Context, prompt_id: str) -> None:
    """Show prompt details."""
    client: LibraryClient = ctx.obj
    _output(ctx, client.get_prompt(prompt_id))


# --- Compound commands ---


@cli.group()
def compound() -> None:
    """Compose, validate and resolve compound prompts."""


@compound.command("create")
@click.option("--title", required=True)
@click.option("--file", "-f", "file_path", default=None, help="JSON component list")
@click.pass_context
def compound_create(ctx: click.Context, title: str, file_path: str | None) -> None:
    """Create a compound prompt. Reads components from --file or stdin (JSON)."""
    client: LibraryClient = ctx.obj
    components = _load_components(file_path)
    _output(ctx, client.create_compound({"title": title, "components": components}))


@compound.command("edit")
@click.argument("prompt_id")
@click.option("--file", "-f", "file_path", default=None, help="JSON component list")
@click.pass_context
def compound_edit(ctx: click.Context, prompt_id: str, file_path: str | None) -> None:
    """Replace a compound prompt's components."""
    client: LibraryClient = ctx.obj
    _output(ctx, client.replace_components(prompt_id, _load_components(file_path)))


@compound.command("resolve")
@click.argument("prompt_ids", nargs=-1, required=True)
@click.pass_context
def compound_resolve(ctx: click.Context, prompt_ids: tuple[str, ...]) -> None:
    """Print the resolved text of one or more prompts."""
    client: LibraryClient = ctx.obj
    if len(prompt_ids) == 1:
        result = client.resolve(prompt_ids[0])
        if ctx.meta.get("output_format") == "json":
            _output(ctx, result)
        else:
            click.echo(result.get("resolved_text", ""))
        return

    result = client.resolve_many(list(prompt_ids))
    rows = [{"prompt_id": pid, "resolved_text": text} for pid, text in result["resolved"].items()]
    _output(ctx, rows, ["prompt_id", "resolved_text"])
    for pid, error in result.get("errors", {}).items():
        click.echo(f"  - {pid}: {error}", err=True)


@compound.command("preview")
@click.option("--file", "-f", "file_path", default=None, help="JSON component list")
@click.pass_context
def compound_preview(ctx: click.Context, file_path: str | None) -> None:
    """Preview unsaved components."""
    client: LibraryClient = ctx.obj
    result = client.preview(_load_components(file_path))
    click.echo(result.get("resolved_text", ""))


@compound.command("validate")
@click.argument("compound_prompt_id")
@click.argument("component_prompt_id")
@click.pass_context
def compound_validate(ctx: click.Context, compound_prompt_id: str, component_prompt_id: str) -> None:
    """Check that one prompt may be added as a component of another."""
    client: LibraryClient = ctx.obj
    try:
        result = client.validate(compound_prompt_id, component_prompt_id)
    except RuntimeError as e:
        raise click.ClickException(str(e))
    click.echo(f"Valid (resulting depth {result.get('max_depth')})")


@compound.command("deps")
@click.argument("prompt_id")
@click.pass_context
def compound_deps(ctx: click.Context, prompt_id: str) -> None:
    """List the prompts a compound prompt depends on."""
    client: LibraryClient = ctx.obj
    result = client.dependencies(prompt_id)
    _output(ctx, [{"prompt_id": d} for d in result["dependencies"]], ["prompt_id"])


if __name__ == "__main__":
    cli()
