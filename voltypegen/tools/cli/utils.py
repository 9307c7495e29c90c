import logging

import rich_click as click

from voltypegen.config import GeneratorConfig
from voltypegen.core import InvalidArgument
from voltypegen.shape import UNLIMITED

from .settings import LOG_FORMAT


class MaxExtentParamType(click.ParamType):
    name = "extent:n,unlimited"

    def convert(self, value, param, ctx):
        if value is UNLIMITED or isinstance(value, int):
            return value

        if value.strip().lower() in ("unlimited", "inf", "h5s_unlimited"):
            return UNLIMITED

        try:
            extent = int(value)
        except ValueError:
            self.fail(f"{value} is not a valid maximum extent", param, ctx)
            return

        if extent < 1:
            self.fail(f"{value} is not a positive maximum extent", param, ctx)
        return extent


def make_config(settings, seed, param_hint="--set") -> GeneratorConfig:
    try:
        config = GeneratorConfig.from_pairs(settings)
        if seed is not None:
            config.seed = seed
        return config
    except (ValueError, InvalidArgument) as e:
        raise click.BadParameter(str(e), param_hint=param_hint)


def setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)
