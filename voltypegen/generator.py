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
import threading
from contextlib import contextmanager
from random import Random
from typing import Callable, Dict, List, Optional, Sequence

from .core import GenerationError
from .config import GeneratorConfig
from .shape import ShapeDescriptor, generate_random_shape as _generate_random_shape
from .types import (
    TypeKind, TypeDescriptor, StringPad, CharSet, VARIABLE,
    StringType, EnumType, CompoundType, ArrayType,
    INTEGER_TYPES, FLOAT_TYPES, NATIVE_INT, STD_REF_OBJ
)


log = logging.getLogger(__name__)

# The largest value the enum member values are drawn from
_ENUM_VALUE_MAX = 2 ** 31 - 1


@contextmanager
def _constructing(what: str):
    """Turn a failing datatype constructor into a GenerationError."""
    try:
        yield
    except (ValueError, TypeError, MemoryError) as e:
        log.error("couldn't %s: %s", what, e)
        raise GenerationError(f"couldn't {what}: {e}") from e


class _Owned:
    """Holds descriptors that are not yet handed over to a parent.

    Whatever is still held when the scope ends is closed, so a datatype that is
    abandoned halfway through construction never outlives its generator call.
    """

    def __init__(self) -> None:
        self._held: List[TypeDescriptor] = []

    def hold(self, descriptor: TypeDescriptor) -> TypeDescriptor:
        self._held.append(descriptor)
        return descriptor

    def release(self, descriptor: TypeDescriptor) -> TypeDescriptor:
        del self._held[next(i for i, d in enumerate(self._held) if d is descriptor)]
        return descriptor

    def __enter__(self) -> '_Owned':
        return self

    def __exit__(self, *args) -> None:
        while self._held:
            self._held.pop().close()


class TypeGenerator:
    """Generates random, structurally valid datatypes and dataspaces.

    Every generator owns its source of randomness, so separate generators
    can be used from separate threads. A single generator is not thread-safe.

    Parameters
    ----------
    config: GeneratorConfig, optional
        Ceilings on the generated types. The config seed seeds ``random``
        when no explicit source of randomness is given.
    random: Random, optional
        Source of randomness.
    """

    def __init__(self, config: Optional[GeneratorConfig] = None, random: Optional[Random] = None) -> None:
        self.config: GeneratorConfig = config or GeneratorConfig()
        self.random: Random = random or Random(self.config.seed)
        self._kinds: List[TypeKind] = list(TypeKind)
        self._emitters: Dict[TypeKind, Callable[[Optional[TypeKind], int], Optional[TypeDescriptor]]] = {
            TypeKind.Integer: self._emit_integer,
            TypeKind.Float: self._emit_float,
            TypeKind.Time: self._emit_unsupported,
            TypeKind.String: self._emit_string,
            TypeKind.Bitfield: self._emit_unsupported,
            TypeKind.Opaque: self._emit_unsupported,
            TypeKind.Compound: self._emit_compound,
            TypeKind.Reference: self._emit_reference,
            TypeKind.Enum: self._emit_enum,
            TypeKind.VariableLength: self._emit_unsupported,
            TypeKind.Array: self._emit_array,
        }

    def seed(self, value=None) -> None:
        self.random.seed(value)

    def generate(self, parent_kind: Optional[TypeKind] = None) -> TypeDescriptor:
        """Generate a random datatype.

        Parameters
        ----------
        parent_kind: TypeKind, optional
            Kind of the datatype the result will be nested in. Pass
            ``TypeKind.Array`` for array elements, leave out otherwise.

        Raises
        ------
        GenerationError
            If constructing the datatype failed.
        """
        return self._generate(parent_kind, 1)

    def shape(self, rank: int, max_extents: Optional[Sequence] = None) -> ShapeDescriptor:
        """Generate a random dataspace, see :func:`voltypegen.shape.generate_random_shape`."""
        return _generate_random_shape(rank, max_extents, random=self.random, config=self.config)

    def _generate(self, parent_kind: Optional[TypeKind], depth: int) -> TypeDescriptor:
        # Kinds that can't be generated here are rejected by their emitter,
        # in which case a fresh kind is drawn until one sticks.
        while True:
            kind = self.random.choice(self._kinds)
            datatype = self._emitters[kind](parent_kind, depth)
            if datatype is not None:
                return datatype
            log.debug("%s datatype rejected (parent=%s, depth=%d), drawing again",
                      kind.name, parent_kind.name if parent_kind else None, depth)

    def _emit_unsupported(self, parent_kind: Optional[TypeKind], depth: int) -> None:
        return None

    def _emit_integer(self, parent_kind: Optional[TypeKind], depth: int) -> TypeDescriptor:
        predefined = self.random.choice(INTEGER_TYPES)
        with _constructing("copy predefined integer type"):
            return predefined.copy()

    def _emit_float(self, parent_kind: Optional[TypeKind], depth: int) -> TypeDescriptor:
        predefined = self.random.choice(FLOAT_TYPES)
        with _constructing("copy predefined floating-point type"):
            return predefined.copy()

    def _emit_string(self, parent_kind: Optional[TypeKind], depth: int) -> TypeDescriptor:
        # Only ASCII is supported for the character set, fixed-length strings
        # are null padded and variable-length strings null terminated.
        if self.random.randrange(2) == 0:
            length = self.random.randrange(1, self.config.string_max_size)
            with _constructing("create fixed-length string datatype"):
                return StringType(length, StringPad.NULLPAD, CharSet.ASCII)

        with _constructing("create variable-length string datatype"):
            return StringType(VARIABLE, StringPad.NULLTERM, CharSet.ASCII)

    def _emit_compound(self, parent_kind: Optional[TypeKind], depth: int) -> Optional[TypeDescriptor]:
        # Arrays of compounds are unsupported
        if parent_kind == TypeKind.Array or depth > self.config.max_depth:
            return None

        with _Owned() as owned:
            with _constructing("create compound datatype"):
                datatype = owned.hold(CompoundType())

            num_members = self.random.randint(1, self.config.compound_max_members)
            next_offset = 0

            for i in range(num_members):
                try:
                    member = owned.hold(self._generate(None, depth + 1))
                except GenerationError:
                    log.error("couldn't create compound datatype member %d", i)
                    raise

                with _constructing(f"insert compound datatype member {i}"):
                    datatype.set_size(next_offset + member.size)
                    datatype.insert(f"compound_member{i}", next_offset, member)
                owned.release(member)

                next_offset += member.size

            if datatype.size > self.config.max_size:
                log.debug("compound datatype of %d bytes is too large", datatype.size)
                return None

            return owned.release(datatype)

    def _emit_reference(self, parent_kind: Optional[TypeKind], depth: int) -> Optional[TypeDescriptor]:
        # Arrays of references are unsupported
        if parent_kind == TypeKind.Array:
            return None

        if self.random.randrange(2) == 0:
            with _constructing("copy object reference datatype"):
                return STD_REF_OBJ.copy()

        # Region references are unsupported
        return None

    def _emit_enum(self, parent_kind: Optional[TypeKind], depth: int) -> Optional[TypeDescriptor]:
        # Arrays of enums are unsupported
        if parent_kind == TypeKind.Array:
            return None

        with _Owned() as owned:
            with _constructing("create enum datatype"):
                datatype = owned.hold(EnumType(NATIVE_INT, self.config.enum_max_member_name_length))

            for i in range(self.random.randint(1, self.config.enum_max_members)):
                value = self.random.randint(0, _ENUM_VALUE_MAX)
                with _constructing("insert member into enum datatype"):
                    datatype.insert(f"enum_val{i}", value)

            return owned.release(datatype)

    def _emit_array(self, parent_kind: Optional[TypeKind], depth: int) -> Optional[TypeDescriptor]:
        # Arrays of arrays are unsupported
        if parent_kind == TypeKind.Array or depth > self.config.max_depth:
            return None

        ndims = self.random.randint(1, self.config.array_max_dims)
        dims = [self.random.randint(1, self.config.max_dim_size) for _ in range(ndims)]

        with _Owned() as owned:
            try:
                element = owned.hold(self._generate(TypeKind.Array, depth + 1))
            except GenerationError:
                log.error("couldn't create array base datatype")
                raise

            with _constructing("create array datatype"):
                datatype = ArrayType(element, dims)
            owned.release(element)
            owned.hold(datatype)

            if datatype.size > self.config.max_size:
                log.debug("array datatype of %d bytes is too large", datatype.size)
                return None

            return owned.release(datatype)


_default_generator = TypeGenerator()
_default_lock = threading.Lock()


def configure(config: GeneratorConfig) -> None:
    """Replace the process-wide generator with one using the given config."""
    global _default_generator
    with _default_lock:
        _default_generator = TypeGenerator(config)


def seed(value=None) -> None:
    """Seed the process-wide generator, typically once at process start."""
    with _default_lock:
        _default_generator.seed(value)


def generate_random_type(parent_kind: Optional[TypeKind] = None) -> TypeDescriptor:
    """Generate a random datatype with the process-wide generator.

    Unsupported kinds (time, bitfield, opaque, variable-length and region
    references) are never returned. Pass ``TypeKind.Array`` as ``parent_kind``
    to get a datatype that may be used as an array element.
    """
    with _default_lock:
        return _default_generator.generate(parent_kind)


def generate_random_shape(rank: int, max_extents: Optional[Sequence] = None) -> ShapeDescriptor:
    """Generate a random dataspace with the process-wide generator."""
    with _default_lock:
        return _default_generator.shape(rank, max_extents)
