"""CLI entrypoint: Typer app definition and command registration"""

import logging
from typing import Annotated

import typer

from blogpub.cli.commands import (
    build_cmd, commit_cmd, diff_cmd, export_cmd, extract_cmd, init_cmd, lint_cmd, list_cmd, revert_cmd,
    versions_cmd,
)


app = typer.Typer(name="blogpub", no_args_is_help=True, help="Blog post linting and publishing pipeline")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log pipeline progress to stderr")] = False,
    ):
    """Blog post linting and publishing pipeline."""
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    # NOTSET lets the configured log_level apply once settings are loaded.
    logging.getLogger("blogpub").setLevel(logging.DEBUG if verbose else logging.NOTSET)


app.command(name="init")(init_cmd)
app.command(name="extract")(extract_cmd)
app.command(name="commit")(commit_cmd)
app.command(name="export")(export_cmd)
app.command(name="build")(build_cmd)
app.command(name="lint")(lint_cmd)
app.command(name="list")(list_cmd)
app.command(name="versions")(versions_cmd)
app.command(name="diff")(diff_cmd)
app.command(name="revert")(revert_cmd)
