"""
 * Copyright(c) 2022 ZettaScale Technology and others
 *
 * This program and the accompanying materials are made available under the
 * terms of the Eclipse Public License v. 2.0 which is available at
 * http://www.eclipse.org/legal/epl-2.0, or the Eclipse Distribution License
 * v. 1.0 which is available at
 * http://www.eclipse.org/org/documents/edl-v10.php.
 *
 * SPDX-License-Identifier: EPL-2.0 OR BSD-3-Clause
"""

import logging
from functools import reduce
from operator import mul
from random import Random
from typing import Optional, Sequence, Tuple

from .core import GenerationError, InvalidArgument
from .config import GeneratorConfig


log = logging.getLogger(__name__)


class _Unlimited:
    def __repr__(self) -> str:
        return "UNLIMITED"

    def __reduce__(self):
        return "UNLIMITED"


UNLIMITED = _Unlimited()
"""Maximum extent of a dimension that may grow without bound."""


class ShapeDescriptor:
    """Rank and extents of a dataspace.

    Attributes
    ----------
    extents: Tuple[int, ...]
        Current size of every dimension.
    max_extents: Tuple[int | UNLIMITED, ...]
        Declared upper bound of every dimension, equal to ``extents`` unless given.
    """

    def __init__(self, extents: Sequence[int], max_extents: Optional[Sequence] = None) -> None:
        extents = tuple(extents)
        if any(type(e) != int or e < 1 for e in extents):
            raise ValueError(f"Dataspace extents should be positive integers, got {extents}.")

        if max_extents is None:
            max_extents = extents
        else:
            max_extents = tuple(max_extents)
            if len(max_extents) != len(extents):
                raise ValueError(f"Expected {len(extents)} maximum extents, got {len(max_extents)}.")
            for current, maximum in zip(extents, max_extents):
                if maximum is UNLIMITED:
                    continue
                if type(maximum) != int or maximum < current:
                    raise ValueError(f"Maximum extent {maximum!r} is smaller than current extent {current}.")

        self.extents: Tuple[int, ...] = extents
        self.max_extents: tuple = max_extents
        self._closed = False

    @property
    def rank(self) -> int:
        return len(self.extents)

    @property
    def is_scalar(self) -> bool:
        return not self.extents

    @property
    def npoints(self) -> int:
        return reduce(mul, self.extents, 1)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def __eq__(self, o: object) -> bool:
        return isinstance(o, ShapeDescriptor) and o.extents == self.extents and o.max_extents == self.max_extents

    def __hash__(self) -> int:
        return hash((self.extents, self.max_extents))

    def __repr__(self) -> str:
        return f"ShapeDescriptor({list(self.extents)}, max={list(self.max_extents)})"


def generate_random_shape(rank: int, max_extents: Optional[Sequence] = None, *,
                          random: Optional[Random] = None, config: Optional[GeneratorConfig] = None) -> ShapeDescriptor:
    """Generate a dataspace of the given rank with random current extents.

    Parameters
    ----------
    rank: int
        Number of dimensions, zero gives a scalar dataspace.
    max_extents: Sequence[int | UNLIMITED], optional
        Declared maximum of every dimension. These bound the object's layout
        and are independent of the random current extents.
    random: Random, optional
        Source of randomness, a fresh unseeded one when left out.
    config: GeneratorConfig, optional
        Supplies ``max_dim_size`` and ``max_rank``.

    Raises
    ------
    InvalidArgument
        If the rank is negative or above the maximum rank.
    GenerationError
        If the dataspace could not be built from the drawn extents.
    """
    config = config or GeneratorConfig()
    random = random or Random()

    if type(rank) != int or rank < 0:
        raise InvalidArgument(f"Dataspace rank should be a non-negative integer, got {rank!r}")
    if rank > config.max_rank:
        raise InvalidArgument(f"Dataspace rank {rank} exceeds the maximum of {config.max_rank}")

    extents = [random.randint(1, config.max_dim_size) for _ in range(rank)]

    try:
        return ShapeDescriptor(extents, max_extents)
    except (ValueError, TypeError) as e:
        log.error("couldn't create dataspace with extents %s: %s", extents, e)
        raise GenerationError(f"couldn't create dataspace: {e}") from e
