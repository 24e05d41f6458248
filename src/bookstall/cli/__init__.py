# ABOUTME: CLI package for bookstall, built on Click.
# ABOUTME: Defines the root command group, configures logging, and registers subcommands.

import logging

import click
from rich.logging import RichHandler

from bookstall.cli.commands import info_cmd, inspect_cmd, ls_cmd, serve_cmd, tag_cmd, upload_cmd


@click.group()
@click.version_option(package_name="bookstall")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
def cli(verbose: int) -> None:
    """bookstall - publish EPUB files as downloadable store products."""
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


cli.add_command(upload_cmd.upload)
cli.add_command(inspect_cmd.inspect)
cli.add_command(info_cmd.info)
cli.add_command(ls_cmd.ls)
cli.add_command(tag_cmd.tag)
cli.add_command(serve_cmd.serve)
