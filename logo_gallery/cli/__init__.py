"""CLI entry point for the logo gallery upload pipeline."""

from __future__ import annotations

import click

from logo_gallery.cli.commands import (
    compare,
    find_similar,
    init_db,
    list_logos,
    upload,
)


@click.group()
def cli() -> None:
    """Logo gallery upload and similarity tools."""


cli.add_command(init_db)
cli.add_command(upload)
cli.add_command(compare)
cli.add_command(find_similar)
cli.add_command(list_logos)
