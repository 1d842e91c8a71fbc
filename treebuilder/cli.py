"""Click CLI commands for TreeBuilder."""

import dataclasses
import logging

import click

from .builder import TreeBuilder
from .config import TreeConfig

logger = logging.getLogger(__name__)


def _config(billboards: bool, density):
    config = TreeConfig.from_env()
    changes = {}
    if billboards:
        changes['use_billboards'] = True
    if density is not None:
        changes['trees_per_square_meter'] = density
    return dataclasses.replace(config, **changes)


@click.group()
def cli():
    """TreeBuilder CLI for placing and rendering trees from OpenStreetMap data."""
    pass


@cli.command()
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', default='output/trees.glb', help='Output GLB file path')
@click.option('--billboards', is_flag=True, help='Draw crossed billboards instead of columns')
@click.option('--density', type=float, default=None, help='Forest trees per square metre')
@click.option('--metric', is_flag=True, help='Input coordinates are already metres')
def glb(input_path: str, output: str, billboards: bool, density, metric: bool):
    """Render trees from a GeoJSON file into a GLB mesh."""
    try:
        builder = TreeBuilder(_config(billboards, density))
        builder.load(input_path, project=False if metric else None)
        path = builder.generate_glb(output)
        click.echo(f"Wrote {path}")
    except Exception as e:
        logger.error(f"Error generating GLB: {e}")
        raise click.ClickException(str(e))


@cli.command()
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', default='output/trees.pov', help='Output POV-Ray scene path')
@click.option('--density', type=float, default=None, help='Forest trees per square metre')
@click.option('--metric', is_flag=True, help='Input coordinates are already metres')
def pov(input_path: str, output: str, density, metric: bool):
    """Render trees from a GeoJSON file into a POV-Ray scene."""
    try:
        builder = TreeBuilder(_config(False, density))
        builder.load(input_path, project=False if metric else None)
        path = builder.generate_pov(output)
        click.echo(f"Wrote {path}")
    except Exception as e:
        logger.error(f"Error generating POV-Ray scene: {e}")
        raise click.ClickException(str(e))


if __name__ == '__main__':
    cli()
