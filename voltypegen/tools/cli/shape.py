import sys

import rich_click as click
from rich.console import Console

from voltypegen.core import GenerationError, InvalidArgument
from voltypegen.generator import TypeGenerator
from voltypegen.printers import to_ddl

from .utils import MaxExtentParamType, make_config, setup_logging


@click.command(short_help="Generate a random dataspace and print it as DDL")
@click.argument("rank", type=int)
@click.option(
    "-m",
    "--max",
    "max_extents",
    type=MaxExtentParamType(),
    multiple=True,
    help="Maximum extent of a dimension, repeat once per dimension. Use [bold]unlimited[/] for unbounded dimensions.",
)
@click.option(
    "-s", "--seed", type=int, default=None, help="Seed of the random source, random when left out."
)
@click.option(
    "--set",
    "settings",
    multiple=True,
    metavar="NAME=VALUE",
    help="Override a generator ceiling, e.g. [bold]--set max_dim_size=4[/].",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def shape(rank, max_extents, seed, settings, verbose):
    """Generate a random dataspace and print it as DDL"""
    console = Console()
    setup_logging(verbose)

    generator = TypeGenerator(make_config(settings, seed))

    try:
        dataspace = generator.shape(rank, max_extents or None)
    except InvalidArgument as e:
        raise click.BadParameter(str(e), param_hint="RANK")
    except GenerationError as e:
        console.print(f"[bold red] :police_car_light: Generating dataspace failed:[/] {e}")
        sys.exit(1)

    console.print(to_ddl(dataspace), markup=False, highlight=False, soft_wrap=True)
    dataspace.close()
