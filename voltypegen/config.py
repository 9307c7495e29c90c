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

from typing import Iterable, Optional

from .core import InvalidArgument


# The maximum allowable size of a generated datatype. Datatype information
# is stored in the object header, so keep it small enough for every connector.
GENERATED_DATATYPE_MAX_SIZE = 65536

# How deep generate_random_type() may recurse before it is forced to pick
# a kind that does not recurse any further.
TYPE_GEN_RECURSION_MAX_DEPTH = 3

COMPOUND_TYPE_MAX_MEMBERS = 4

ARRAY_TYPE_MAX_DIMS = 4

ENUM_TYPE_MAX_MEMBER_NAME_LENGTH = 256
ENUM_TYPE_MAX_MEMBERS = 16

STRING_TYPE_MAX_SIZE = 1024

# Largest extent of a dimension, for both array datatypes and dataspaces.
MAX_DIM_SIZE = 16

# Largest rank a dataspace may have.
MAX_RANK = 32


class GeneratorConfig:
    """Ceilings and seed used by a :class:`TypeGenerator<voltypegen.generator.TypeGenerator>`.

    Every argument is keyword-only and defaults to the module level constant
    of the same (upper case) name.
    """

    int_fields = [
        "max_size", "max_depth", "compound_max_members", "array_max_dims",
        "enum_max_member_name_length", "enum_max_members", "string_max_size",
        "max_dim_size", "max_rank", "seed"
    ]

    def __init__(
            self, *,
            max_size: int = GENERATED_DATATYPE_MAX_SIZE,
            max_depth: int = TYPE_GEN_RECURSION_MAX_DEPTH,
            compound_max_members: int = COMPOUND_TYPE_MAX_MEMBERS,
            array_max_dims: int = ARRAY_TYPE_MAX_DIMS,
            enum_max_member_name_length: int = ENUM_TYPE_MAX_MEMBER_NAME_LENGTH,
            enum_max_members: int = ENUM_TYPE_MAX_MEMBERS,
            string_max_size: int = STRING_TYPE_MAX_SIZE,
            max_dim_size: int = MAX_DIM_SIZE,
            max_rank: int = MAX_RANK,
            seed: Optional[int] = None
        ) -> None:
        self.max_size: int = max_size
        self.max_depth: int = max_depth
        self.compound_max_members: int = compound_max_members
        self.array_max_dims: int = array_max_dims
        self.enum_max_member_name_length: int = enum_max_member_name_length
        self.enum_max_members: int = enum_max_members
        self.string_max_size: int = string_max_size
        self.max_dim_size: int = max_dim_size
        self.max_rank: int = max_rank
        self.seed: Optional[int] = seed
        self._validate()

    def _validate(self) -> None:
        for name in self.int_fields:
            if name == "seed":
                continue
            value = getattr(self, name)
            if type(value) != int or value < 1:
                raise InvalidArgument(f"{name} should be a positive integer, got {value!r}")

        # Fixed-length strings are drawn from [1, string_max_size)
        if self.string_max_size < 2:
            raise InvalidArgument("string_max_size should be at least 2")

        # Neither array datatypes nor dataspaces go beyond MAX_RANK dimensions
        for name in ("array_max_dims", "max_rank"):
            if getattr(self, name) > MAX_RANK:
                raise InvalidArgument(f"{name} should be at most {MAX_RANK}, got {getattr(self, name)}")

        # Room for "enum_val<index>" plus a terminator
        if self.enum_max_member_name_length <= len(f"enum_val{self.enum_max_members - 1}"):
            raise InvalidArgument("enum_max_member_name_length is too small to name every enum member")

    @classmethod
    def from_pairs(cls, pairs: Iterable[str]) -> 'GeneratorConfig':
        """Build a config from ``name=value`` strings, e.g. ``["max_depth=2", "seed=12"]``."""
        data = {}
        for arg in pairs:
            name, sep, value = arg.partition('=')
            name = name.strip()
            if not sep:
                raise ValueError(f"Config item {arg!r} should look like name=value")
            if name not in cls.int_fields:
                raise ValueError(f"Unknown config item {name}")
            data[name] = int(value)
        return cls(**data)

    def __repr__(self) -> str:
        items = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.int_fields)
        return f"GeneratorConfig({items})"

    def __eq__(self, o: object) -> bool:
        return isinstance(o, GeneratorConfig) and \
            all(getattr(self, name) == getattr(o, name) for name in self.int_fields)
