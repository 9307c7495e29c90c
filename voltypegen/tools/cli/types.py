import sys
from collections import Counter

import rich_click as click
from rich.console import Console
from rich.table import Table

from voltypegen.core import GenerationError
from voltypegen.generator import TypeGenerator
from voltypegen.printers import to_ddl
from voltypegen.types import TypeKind, walk

from .utils import make_config, setup_logging


@click.command(short_help="Generate random datatypes and print them as DDL")
@click.option(
    "-n", "--number", type=click.IntRange(min=1), default=1, help="Number of datatypes to generate."
)
@click.option(
    "-s", "--seed", type=int, default=None, help="Seed of the random source, random when left out."
)
@click.option(
    "-p",
    "--parent",
    type=click.Choice(["none", "array"]),
    default="none",
    help="Generate datatypes suitable for nesting in this kind of datatype.",
)
@click.option(
    "--set",
    "settings",
    multiple=True,
    metavar="NAME=VALUE",
    help="Override a generator ceiling, e.g. [bold]--set max_depth=2[/].",
)
@click.option(
    "--stats", is_flag=True, help="Print how often every kind occurs in the generated datatypes."
)
@click.option("-v", "--verbose", is_flag=True, help="Log every rejected draw.")
@click.option(
    "--color",
    type=click.Choice(["auto", "standard", "256", "truecolor", "windows", "none"]),
    default="auto",
    help="""Force the command to output with/without terminal colors. By default output colours if the terminal supports it."
See the [underline blue][link=https://rich.readthedocs.io/en/stable/console.html#color-systems]Rich documentation[/link][/] for more info on what the options mean.""",
)
def types(number, seed, parent, settings, stats, verbose, color):
    """Generate random datatypes and print them as DDL"""
    console = Console(color_system=None if color == "none" else color)
    setup_logging(verbose)

    generator = TypeGenerator(make_config(settings, seed))
    parent_kind = TypeKind.Array if parent == "array" else None
    counts = Counter()

    for i in range(number):
        try:
            datatype = generator.generate(parent_kind)
        except GenerationError as e:
            console.print(f"[bold red] :police_car_light: Generating datatype {i} failed:[/] {e}")
            sys.exit(1)

        with datatype:
            counts.update(d.kind for _, d in walk(datatype))
            console.print(f"[magenta]# datatype {i}, {datatype.size} bytes")
            console.print(to_ddl(datatype), markup=False, highlight=False, soft_wrap=True)

    if stats:
        table = Table(title="Kinds")
        table.add_column("Kind")
        table.add_column("Count", justify="right")
        for kind in TypeKind:
            table.add_row(kind.name, str(counts[kind]))
        console.print(table)
