#!/usr/bin/env python3

import logging
import sys
import traceback
from pathlib import Path

import click

from . import __version__
from .config import DEFAULT_CONFIG_FILE, load_config
from .exceptions import StructTSError
from .generator import Generator

def print_version(ctx, param, value):
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"structts {__version__}")
    ctx.exit()

@click.group()
@click.option('--version', is_flag=True, callback=print_version,
              expose_value=False, is_eager=True, help='Show version and exit.')
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging and tracebacks.')
@click.pass_context
def main(ctx, verbose):
    """Generate TypeScript types from Go source packages."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

@main.command()
@click.option('--config', '-c', 'config_path', type=click.Path(path_type=Path),
              default=DEFAULT_CONFIG_FILE, show_default=True,
              help='Path to the YAML configuration file.')
@click.pass_context
def generate(ctx, config_path):
    """Generate TypeScript files for every configured package."""
    verbose = ctx.obj.get('verbose', False) if ctx.obj else False

    try:
        config = load_config(config_path)
        written = Generator(config).generate()
    except StructTSError as e:
        click.echo(f"Error: {e}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(1)

    for output_path in written:
        click.echo(f"Wrote {output_path}")

if __name__ == '__main__':
    main()
