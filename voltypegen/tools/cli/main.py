import rich_click as click

from .settings import CONTEXT_SETTINGS
from .types import types
from .shape import shape


@click.group(context_settings=CONTEXT_SETTINGS)
def cli():
    # Initialize the CLI group
    pass


cli.add_command(types)
cli.add_command(shape)

if __name__ == "__main__":
    cli()
