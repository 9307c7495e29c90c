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

import sys
from dataclasses import dataclass
from enum import Enum
from functools import reduce
from operator import mul
from typing import Iterator, List, Sequence, Tuple

from .core import GenerationError, TypeGenException
from .config import ENUM_TYPE_MAX_MEMBER_NAME_LENGTH, MAX_RANK


class TypeKind(Enum):
    Integer = 0
    Float = 1
    Time = 2
    String = 3
    Bitfield = 4
    Opaque = 5
    Compound = 6
    Reference = 7
    Enum = 8
    VariableLength = 9
    Array = 10

    @classmethod
    def unsupported(cls):
        """Kinds that are never generated."""
        return {cls.Time, cls.Bitfield, cls.Opaque, cls.VariableLength}


class ByteOrder(Enum):
    LE = 0
    BE = 1

    @classmethod
    def native(cls) -> 'ByteOrder':
        return cls.LE if sys.byteorder == "little" else cls.BE


class StringPad(Enum):
    NULLTERM = 0
    NULLPAD = 1


class CharSet(Enum):
    ASCII = 0


class ReferenceKind(Enum):
    OBJECT = 0
    DATASET_REGION = 1


# Fixed-length string size that marks a variable-length string
VARIABLE = -1

# Size of the in-record part of variable-length strings and references
_POINTER_SIZE = 8
_REGION_REFERENCE_SIZE = 12


class TypeDescriptor:
    """Base of all datatype descriptors.

    A descriptor owns every descriptor nested inside it. Closing it closes
    the nested descriptors as well, closing it twice does nothing. The
    predefined descriptors of this module are shared and never close, use
    :meth:`copy` to get one you own.

    Equality and hashing follow the structure, so do not hash a compound or
    enum while members are still being inserted.
    """

    kind: TypeKind = None
    predefined: bool = False

    def __init__(self) -> None:
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def size(self) -> int:
        raise NotImplementedError()

    def children(self) -> List['TypeDescriptor']:
        return []

    def copy(self) -> 'TypeDescriptor':
        raise NotImplementedError()

    def close(self) -> None:
        if self._closed or self.predefined:
            return
        self._closed = True
        for child in self.children():
            child.close()

    def _check_open(self) -> None:
        if self._closed:
            raise GenerationError(
                f"{self!r} was already released",
                code=TypeGenException.RETCODE_ALREADY_DELETED
            )

    def _key(self) -> tuple:
        raise NotImplementedError()

    def __eq__(self, o: object) -> bool:
        return type(o) == type(self) and o._key() == self._key()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._key()))

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class IntegerType(TypeDescriptor):
    kind = TypeKind.Integer

    def __init__(self, name: str, size: int, signed: bool, order: ByteOrder) -> None:
        super().__init__()
        self.name: str = name
        self._size: int = size
        self.signed: bool = signed
        self.order: ByteOrder = order

    @property
    def size(self) -> int:
        return self._size

    def copy(self) -> 'IntegerType':
        self._check_open()
        return IntegerType(self.name, self._size, self.signed, self.order)

    def _key(self) -> tuple:
        return (self._size, self.signed, self.order)

    def __repr__(self) -> str:
        return f"IntegerType({self.name})"


class FloatType(TypeDescriptor):
    kind = TypeKind.Float

    def __init__(self, name: str, size: int, order: ByteOrder) -> None:
        super().__init__()
        self.name: str = name
        self._size: int = size
        self.order: ByteOrder = order

    @property
    def size(self) -> int:
        return self._size

    def copy(self) -> 'FloatType':
        self._check_open()
        return FloatType(self.name, self._size, self.order)

    def _key(self) -> tuple:
        return (self._size, self.order)

    def __repr__(self) -> str:
        return f"FloatType({self.name})"


class StringType(TypeDescriptor):
    """A string datatype, either of a fixed length or variable-length
    when created with :data:`VARIABLE` as length."""

    kind = TypeKind.String

    def __init__(self, length: int, pad: StringPad = None, cset: CharSet = CharSet.ASCII) -> None:
        if type(length) != int or (length < 1 and length != VARIABLE):
            raise ValueError(f"String length should be a positive integer or VARIABLE, got {length!r}")
        super().__init__()
        self.length: int = length
        if pad is None:
            pad = StringPad.NULLTERM if length == VARIABLE else StringPad.NULLPAD
        self.pad: StringPad = pad
        self.cset: CharSet = cset

    @property
    def is_variable_length(self) -> bool:
        return self.length == VARIABLE

    @property
    def size(self) -> int:
        return _POINTER_SIZE if self.is_variable_length else self.length

    def copy(self) -> 'StringType':
        self._check_open()
        return StringType(self.length, self.pad, self.cset)

    def _key(self) -> tuple:
        return (self.length, self.pad, self.cset)

    def __repr__(self) -> str:
        if self.is_variable_length:
            return f"StringType(variable, {self.pad.name}, {self.cset.name})"
        return f"StringType({self.length}, {self.pad.name}, {self.cset.name})"


class ReferenceType(TypeDescriptor):
    kind = TypeKind.Reference

    def __init__(self, ref_kind: ReferenceKind) -> None:
        super().__init__()
        self.ref_kind: ReferenceKind = ref_kind

    @property
    def size(self) -> int:
        return _POINTER_SIZE if self.ref_kind == ReferenceKind.OBJECT else _REGION_REFERENCE_SIZE

    def copy(self) -> 'ReferenceType':
        self._check_open()
        return ReferenceType(self.ref_kind)

    def _key(self) -> tuple:
        return (self.ref_kind,)

    def __repr__(self) -> str:
        return f"ReferenceType({self.ref_kind.name})"


@dataclass(frozen=True)
class EnumMember:
    name: str
    value: int


class EnumType(TypeDescriptor):
    kind = TypeKind.Enum

    def __init__(self, base: IntegerType, max_name_length: int = ENUM_TYPE_MAX_MEMBER_NAME_LENGTH) -> None:
        if not isinstance(base, IntegerType):
            raise TypeError("An enum is based on an integer datatype.")
        base._check_open()
        super().__init__()
        self.base: IntegerType = base.copy()
        self.max_name_length: int = max_name_length
        self.members: List[EnumMember] = []

    @property
    def size(self) -> int:
        return self.base.size

    def insert(self, name: str, value: int) -> None:
        self._check_open()
        if not name or len(name) >= self.max_name_length:
            raise ValueError(f"Enum member name should be between 1 and {self.max_name_length - 1} characters.")
        if any(m.name == name for m in self.members):
            raise ValueError(f"Enum member {name} is already defined.")

        bits = 8 * self.base.size
        low, high = (-(1 << (bits - 1)), (1 << (bits - 1)) - 1) if self.base.signed else (0, (1 << bits) - 1)
        if not low <= value <= high:
            raise ValueError(f"Enum value {value} does not fit in {self.base.name}.")

        self.members.append(EnumMember(name, value))

    def copy(self) -> 'EnumType':
        self._check_open()
        c = EnumType(self.base, self.max_name_length)
        c.members = list(self.members)
        return c

    def _key(self) -> tuple:
        return (self.base._key(), tuple(self.members))

    def __repr__(self) -> str:
        return f"EnumType({self.base.name}, {len(self.members)} members)"


@dataclass(frozen=True)
class CompoundMember:
    name: str
    offset: int
    type: TypeDescriptor


class CompoundType(TypeDescriptor):
    """A record of named members. Inserted member datatypes are owned by the compound."""

    kind = TypeKind.Compound

    def __init__(self, size: int = 1) -> None:
        if type(size) != int or size < 1:
            raise ValueError("Compound size should be a positive integer.")
        super().__init__()
        self._size: int = size
        self.members: List[CompoundMember] = []

    @property
    def size(self) -> int:
        return self._size

    def set_size(self, size: int) -> None:
        self._check_open()
        end = max((m.offset + m.type.size for m in self.members), default=0)
        if size < max(end, 1):
            raise ValueError(f"Compound size {size} would truncate its members.")
        self._size = size

    def insert(self, name: str, offset: int, member: TypeDescriptor) -> None:
        """Insert a member, taking ownership of its datatype on success."""
        self._check_open()
        member._check_open()
        if any(m.name == name for m in self.members):
            raise ValueError(f"Compound member {name} is already defined.")
        if offset < 0 or offset + member.size > self._size:
            raise ValueError(f"Compound member {name} does not fit in a compound of size {self._size}.")
        for m in self.members:
            if offset < m.offset + m.type.size and m.offset < offset + member.size:
                raise ValueError(f"Compound member {name} overlaps with {m.name}.")

        self.members.append(CompoundMember(name, offset, member))

    def children(self) -> List[TypeDescriptor]:
        return [m.type for m in self.members]

    def copy(self) -> 'CompoundType':
        self._check_open()
        c = CompoundType(self._size)
        for m in self.members:
            c.members.append(CompoundMember(m.name, m.offset, m.type.copy()))
        return c

    def _key(self) -> tuple:
        return (self._size, tuple((m.name, m.offset, m.type) for m in self.members))

    def __repr__(self) -> str:
        inner = ", ".join(f"{m.name}@{m.offset}: {m.type!r}" for m in self.members)
        return f"CompoundType[{inner}]"


class ArrayType(TypeDescriptor):
    """A fixed-size array of an element datatype, which the array takes ownership of."""

    kind = TypeKind.Array

    def __init__(self, element: TypeDescriptor, dims: Sequence[int]) -> None:
        element._check_open()
        dims = tuple(dims)
        if not 1 <= len(dims) <= MAX_RANK:
            raise ValueError(f"An array has between 1 and {MAX_RANK} dimensions.")
        if any(type(d) != int or d < 1 for d in dims):
            raise ValueError(f"Array dimensions should be positive integers, got {dims}.")
        super().__init__()
        self.element: TypeDescriptor = element
        self.dims: Tuple[int, ...] = dims

    @property
    def rank(self) -> int:
        return len(self.dims)

    @property
    def size(self) -> int:
        return self.element.size * reduce(mul, self.dims, 1)

    def children(self) -> List[TypeDescriptor]:
        return [self.element]

    def copy(self) -> 'ArrayType':
        self._check_open()
        return ArrayType(self.element.copy(), self.dims)

    def _key(self) -> tuple:
        return (self.element, self.dims)

    def __repr__(self) -> str:
        return f"ArrayType[{self.element!r}, {'x'.join(str(d) for d in self.dims)}]"


def walk(descriptor: TypeDescriptor, level: int = 0) -> Iterator[Tuple[int, TypeDescriptor]]:
    """Yield ``(level, descriptor)`` for a descriptor and everything nested in it, pre-order."""
    yield level, descriptor
    for child in descriptor.children():
        yield from walk(child, level + 1)


def _std_int(signed: bool, bits: int, order: ByteOrder) -> IntegerType:
    return IntegerType(f"STD_{'I' if signed else 'U'}{bits}{order.name}", bits // 8, signed, order)


STD_I8BE = _std_int(True, 8, ByteOrder.BE)
STD_I8LE = _std_int(True, 8, ByteOrder.LE)
STD_I16BE = _std_int(True, 16, ByteOrder.BE)
STD_I16LE = _std_int(True, 16, ByteOrder.LE)
STD_I32BE = _std_int(True, 32, ByteOrder.BE)
STD_I32LE = _std_int(True, 32, ByteOrder.LE)
STD_I64BE = _std_int(True, 64, ByteOrder.BE)
STD_I64LE = _std_int(True, 64, ByteOrder.LE)
STD_U8BE = _std_int(False, 8, ByteOrder.BE)
STD_U8LE = _std_int(False, 8, ByteOrder.LE)
STD_U16BE = _std_int(False, 16, ByteOrder.BE)
STD_U16LE = _std_int(False, 16, ByteOrder.LE)
STD_U32BE = _std_int(False, 32, ByteOrder.BE)
STD_U32LE = _std_int(False, 32, ByteOrder.LE)
STD_U64BE = _std_int(False, 64, ByteOrder.BE)
STD_U64LE = _std_int(False, 64, ByteOrder.LE)

INTEGER_TYPES = (
    STD_I8BE, STD_I8LE, STD_I16BE, STD_I16LE, STD_I32BE, STD_I32LE, STD_I64BE, STD_I64LE,
    STD_U8BE, STD_U8LE, STD_U16BE, STD_U16LE, STD_U32BE, STD_U32LE, STD_U64BE, STD_U64LE
)

IEEE_F32BE = FloatType("IEEE_F32BE", 4, ByteOrder.BE)
IEEE_F32LE = FloatType("IEEE_F32LE", 4, ByteOrder.LE)
IEEE_F64BE = FloatType("IEEE_F64BE", 8, ByteOrder.BE)
IEEE_F64LE = FloatType("IEEE_F64LE", 8, ByteOrder.LE)

FLOAT_TYPES = (IEEE_F32BE, IEEE_F32LE, IEEE_F64BE, IEEE_F64LE)

NATIVE_INT = IntegerType("NATIVE_INT", 4, True, ByteOrder.native())

STD_REF_OBJ = ReferenceType(ReferenceKind.OBJECT)
STD_REF_DSETREG = ReferenceType(ReferenceKind.DATASET_REGION)

for _predefined in INTEGER_TYPES + FLOAT_TYPES + (NATIVE_INT, STD_REF_OBJ, STD_REF_DSETREG):
    _predefined.predefined = True
del _predefined


__all__ = [
    "TypeKind", "ByteOrder", "StringPad", "CharSet", "ReferenceKind", "VARIABLE",
    "TypeDescriptor", "IntegerType", "FloatType", "StringType", "ReferenceType",
    "EnumMember", "EnumType", "CompoundMember", "CompoundType", "ArrayType", "walk",
    "INTEGER_TYPES", "FLOAT_TYPES", "NATIVE_INT", "STD_REF_OBJ", "STD_REF_DSETREG",
] + [t.name for t in INTEGER_TYPES + FLOAT_TYPES]
