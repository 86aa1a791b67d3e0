"""CLI entrypoint: Typer app and command implementations"""

import zipfile
from pathlib import Path
from typing import Annotated, List, Optional

import typer

from obsidian2hugo.config import SiteConfig, load_config
from obsidian2hugo.core.archive import (
    assemble_posts,
    assemble_site,
    load_archive,
    read_existing_site,
    site_root_name,
    write_archive,
)
from obsidian2hugo.core.diff import compute_line_diff, render_unified
from obsidian2hugo.core.discovery import NoteDiscovery
from obsidian2hugo.core.models import BatchResult
from obsidian2hugo.core.processor import transform_batch


app = typer.Typer(name="obsidian2hugo", no_args_is_help=True, help="Convert Obsidian notes into Hugo posts")


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None, config_file: Optional[Path] = None) -> SiteConfig:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides, path=config_file)
    except ValueError as e:
        _fail(str(e))


def _parse_dirs(values: Optional[List[str]]) -> dict:
    """Parse repeated NAME=DIR options."""
    overrides = {}
    for value in values or []:
        name, sep, directory = value.partition("=")
        if not sep or not name.strip() or not directory.strip():
            _fail(f"Invalid --dir value '{value}', expected NAME=DIR")
        overrides[name.strip()] = directory.strip().strip("/")
    return overrides


def _echo_batch(batch: BatchResult) -> None:
    """Print per-document advisories and a summary line."""
    for doc, result in batch.items:
        status = "ok" if result.ok else "failed"
        typer.echo(f"  {status}: {doc.name} -> {doc.target_path}")
        for w in result.warnings:
            typer.echo(f"    [{w.level}] {w.message}")
    typer.echo(
        f"Converted {len(batch.transformed)} of {len(batch.items)} note(s) - "
        f"{batch.warning_count} warning(s), {batch.notice_count} notice(s)"
    )


@app.command(name="convert")
def convert_cmd(
    sources: Annotated[List[Path], typer.Argument(help="Note files or folders of notes")],
    out: Annotated[Optional[Path], typer.Option("--out", help="Output zip archive")] = None,
    existing: Annotated[Optional[Path], typer.Option("--existing", help="Previously exported site archive")] = None,
    posts_only: Annotated[bool, typer.Option("--posts-only", help="Write only the converted posts")] = False,
    config_file: Annotated[Optional[Path], typer.Option("--config", help="Config YAML file")] = None,
    site_name: Annotated[Optional[str], typer.Option("--site-name", help="Site title")] = None,
    description: Annotated[Optional[str], typer.Option("--description", help="Site description")] = None,
    author: Annotated[Optional[str], typer.Option("--author", help="Site author")] = None,
    github_user: Annotated[Optional[str], typer.Option("--github-user", help="GitHub user or org")] = None,
    repo: Annotated[Optional[str], typer.Option("--repo", help="GitHub repository name")] = None,
    alt_delimiters: Annotated[bool, typer.Option("--alt-delimiters", help="Wrap display math in $$$$")] = False,
    alt_line_breaks: Annotated[bool, typer.Option("--alt-line-breaks", help="Double \\\\ in display math")] = False,
    regenerate_config: Annotated[bool, typer.Option("--regenerate-config", help="Replace the existing hugo.toml")] = False,
    dirs: Annotated[Optional[List[str]], typer.Option("--dir", help="Place a note in a content folder: NAME=DIR")] = None,
    workers: Annotated[int, typer.Option("--workers", min=1, help="Parallel conversion threads")] = 1,
    ):
    """Convert notes and write a Hugo site (or posts-only) archive."""
    overrides = {
        "site_name": site_name, "description": description, "author": author,
        "github_username": github_user, "repo_name": repo,
        "math_alt_delimiters": alt_delimiters or None, "math_alt_line_breaks": alt_line_breaks or None,
    }
    if regenerate_config:
        overrides["preserve_site_config"] = False
    settings = _settings(overrides, config_file)

    existing_site = None
    if existing:
        try:
            existing_site = read_existing_site(load_archive(existing))
        except (OSError, zipfile.BadZipFile) as e:
            _fail(f"Could not read existing site {existing}", e)
        if existing_site.site_info:
            # Carry the imported site identity into the regenerated files
            info = existing_site.site_info
            settings = settings.model_copy(update={
                k: v for k, v in (
                    ("site_name", info.get("title")),
                    ("description", info.get("description")),
                    ("author", info.get("author")),
                ) if v and overrides.get(k) is None
            })

    try:
        documents = NoteDiscovery(sources, settings.default_directory, _parse_dirs(dirs)).discover_all()
    except FileNotFoundError as e:
        _fail(str(e))
    if not documents:
        _fail("No Markdown notes found")

    batch = transform_batch(documents, settings, existing_site=existing_site, max_workers=workers)
    _echo_batch(batch)
    if not batch.transformed:
        _fail("Every note failed to convert")

    if posts_only or not (settings.has_repository or existing_site):
        entries = assemble_posts(batch.transformed)
        root = None
        target = out or Path("posts.zip")
    else:
        entries = assemble_site(batch.transformed, settings, existing_site)
        root = site_root_name(settings)
        target = out or Path(f"{root}.zip")

    write_archive(target, entries, root=root)
    typer.echo(f"Wrote {len(entries)} file(s) to {target}")


@app.command(name="diff")
def diff_cmd(
    note: Annotated[Path, typer.Argument(help="Note to convert and compare")],
    notes_dir: Annotated[Optional[Path], typer.Option("--notes-dir", help="Folder used to resolve wikilinks")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", help="Config YAML file")] = None,
    ):
    """Show the line diff between a note and its converted output."""
    settings = _settings(config_file=config_file)
    discovery = NoteDiscovery([notes_dir or note.parent], settings.default_directory)
    try:
        documents = discovery.discover_all()
    except FileNotFoundError as e:
        _fail(str(e))

    target = next((doc for doc in documents if Path(doc.id).resolve() == note.resolve()), None)
    if target is None:
        target = discovery.load(note)
        documents.append(target)
    batch = transform_batch(documents, settings)
    result = next(r for doc, r in batch.items if doc is target)
    if not result.ok:
        _fail(result.warnings[0].message)

    alignment = compute_line_diff(target.raw_text, result.output_text)
    for line in render_unified(target.raw_text, result.output_text, alignment):
        typer.echo(line)
    if not alignment.exact:
        typer.echo("(note too large for a line diff; showing converted text)", err=True)
