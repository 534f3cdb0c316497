"""CLI command implementations"""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from blogpub.config import Settings, load_config
from blogpub.core.lint import has_errors
from blogpub.core.pipeline import run_commit, run_export, run_extract, run_lint
from blogpub.crud.database import init_db, make_engine, reset_db
from blogpub.crud.posts import (
    get_all_posts,
    get_by_category,
    get_by_slug,
    get_last_committed,
    list_authors,
    list_categories,
)
from blogpub.crud.versioning import diff_versions, list_versions, revert_to_version


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling; also applies the configured log level."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logger = logging.getLogger("blogpub")
    if logger.level == logging.NOTSET:
        logger.setLevel(settings.log_level)
    return settings


def _echo_commit(counts: dict, changes: list) -> None:
    """Print per-post commit status and a summary line."""
    for status, slug in changes:
        typer.echo(f"  {status}: {slug}")
    typer.echo(
        f"Commit complete - "
        f"{counts['created']} created, "
        f"{counts['updated']} updated, "
        f"{counts['unchanged']} unchanged"
    )


def _extract(path: Optional[str], settings: Settings) -> None:
    staging_dir = Path(settings.staging_dir)
    target = path or settings.posts_dir
    if not Path(target).exists():
        _fail(f"No such file or directory: {target}")
    try:
        extracted = run_extract(target, settings.parser_config, staging_dir)
    except RuntimeError as e:
        _fail(str(e))
    for src, out_file in extracted:
        typer.echo(f"  {src} -> {out_file}")
    typer.echo(f"Extracted {len(extracted)} post(s) to {staging_dir}/")


def _export(session: Session, posts: list, settings: Settings) -> None:
    output_dir = Path(settings.output_dir)
    results = run_export(session, posts, output_dir, settings)
    for slug, md_path in results:
        typer.echo(f"  {slug} -> {md_path}")
    typer.echo(f"Exported {len(results)} post(s) to {output_dir}/")


def build_cmd(
    path: Annotated[Optional[str], typer.Argument(help="Post file or directory (default: posts_dir)")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    versions: Annotated[Optional[int], typer.Option("--max-versions", help="Max stored versions per post")] = None,
    ):
    """Run the full pipeline: extract -> commit -> export."""
    settings = _settings(overrides={"output_dir": out, "staging_dir": staging, "max_versions": versions})
    engine = make_engine(settings.db_url)
    init_db(engine)

    _extract(path, settings)

    try:
        counts, changes = run_commit(engine, settings.max_versions, Path(settings.staging_dir))
    except Exception as e:
        _fail("Commit failed", e)
    if counts:
        _echo_commit(counts, changes)

    try:
        with Session(engine) as session:
            _export(session, get_last_committed(session), settings)
    except Exception as e:
        _fail("Export failed", e)


def extract_cmd(
    path: Annotated[Optional[str], typer.Argument(help="Post file or directory (default: posts_dir)")] = None,
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Parse posts into staging JSON: front matter, recognized fields, code samples."""
    settings = _settings(overrides={"staging_dir": staging, "parser_config": parser})
    _extract(path, settings)


def commit_cmd(
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    versions: Annotated[Optional[int], typer.Option("--max-versions", help="Max stored versions per post")] = None,
    ):
    """Upsert staged posts into the database."""
    settings = _settings(overrides={"staging_dir": staging, "max_versions": versions})
    engine = make_engine(settings.db_url)
    init_db(engine)

    try:
        counts, changes = run_commit(engine, settings.max_versions, Path(settings.staging_dir))
    except Exception as e:
        _fail("Commit failed", e)
    if not counts:
        typer.echo("Nothing staged. Run 'blogpub extract <path>' first.")
        raise typer.Exit(1)

    _echo_commit(counts, changes)


def export_cmd(
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    category: Annotated[Optional[str], typer.Option("--category", help="Export posts in this category")] = None,
    all_posts: Annotated[bool, typer.Option("--all", help="Export every post in the database")] = False,
    ):
    """Write normalized Markdown, sidecar JSON and the site index to the output dir."""
    settings = _settings(overrides={"output_dir": out})
    engine = make_engine(settings.db_url)
    init_db(engine)

    try:
        with Session(engine) as session:
            if all_posts:
                posts = get_all_posts(session)
                scope = "all"
            elif category:
                posts = get_by_category(session, category)
                scope = f"category '{category}'"
            else:
                posts = get_last_committed(session)
                scope = "last commit"

            if not posts:
                typer.echo(f"No posts found for scope: {scope}.")
                raise typer.Exit(1)

            _export(session, posts, settings)
    except typer.Exit:
        raise
    except Exception as e:
        _fail("Export failed", e)


def lint_cmd(
    path: Annotated[Optional[str], typer.Argument(help="Post file or directory (default: posts_dir)")] = None,
    strict: Annotated[bool, typer.Option("--strict", help="Treat warnings as errors")] = False,
    fmt: Annotated[str, typer.Option("--format", help="Report format: text or json")] = "text",
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Check front matter, titles, code fences and duplicates; exit 1 on errors."""
    if fmt not in ("text", "json"):
        _fail(f"Unknown format '{fmt}' (expected text or json)")
    settings = _settings(overrides={"parser_config": parser})
    target = path or settings.posts_dir
    try:
        findings = run_lint(target, settings.parser_config)
    except FileNotFoundError as e:
        _fail(str(e))

    if fmt == "json":
        typer.echo(json.dumps([f.model_dump(mode="json") for f in findings], indent=2))
    else:
        for f in findings:
            typer.echo(str(f))
        errors = sum(1 for f in findings if f.severity == "error")
        typer.echo(f"{len(findings)} finding(s): {errors} error(s), {len(findings) - errors} warning(s)")

    if has_errors(findings, strict):
        raise typer.Exit(1)


def list_cmd(
    authors: Annotated[bool, typer.Option("--authors", help="List authors instead of categories")] = False,
    ):
    """List categories (or authors) of posts stored in the database."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        names = list_authors(session) if authors else list_categories(session)
    if not names:
        typer.echo("No posts found in database.")
        raise typer.Exit(1)
    for name in names:
        typer.echo(name)


def versions_cmd(
    slug: Annotated[str, typer.Argument(help="Post slug")],
    ):
    """List stored versions of a post."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        post = get_by_slug(session, slug)
        if post is None:
            _fail(f"No post with slug '{slug}'")
        versions = list_versions(session, post.id)
        for v in versions:
            typer.echo(f"  v{v.version_num}  {v.created_at:%Y-%m-%d %H:%M:%S}  {v.hash[:12]}")
    typer.echo(f"{len(versions)} version(s) of {slug}")


def diff_cmd(
    slug: Annotated[str, typer.Argument(help="Post slug")],
    from_num: Annotated[int, typer.Argument(help="Older version number")],
    to_num: Annotated[int, typer.Argument(help="Newer version number")],
    ):
    """Show a unified diff between two stored versions of a post."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        post = get_by_slug(session, slug)
        if post is None:
            _fail(f"No post with slug '{slug}'")
        try:
            lines = diff_versions(session, post.id, from_num, to_num)
        except ValueError as e:
            _fail(str(e))
    typer.echo("".join(lines) or "No differences.")


def revert_cmd(
    slug: Annotated[str, typer.Argument(help="Post slug")],
    version_num: Annotated[int, typer.Argument(help="Version number to restore")],
    versions: Annotated[Optional[int], typer.Option("--max-versions", help="Max stored versions per post")] = None,
    ):
    """Restore a stored version of a post; the current state is kept as a new version."""
    settings = _settings(overrides={"max_versions": versions})
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        post = get_by_slug(session, slug)
        if post is None:
            _fail(f"No post with slug '{slug}'")
        try:
            revert_to_version(session, post, version_num, settings.max_versions)
        except ValueError as e:
            _fail(str(e))
        session.commit()
    typer.echo(f"Reverted {slug} to v{version_num}. Run 'blogpub export --all' to publish it.")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")
