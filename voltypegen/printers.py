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

import io
from typing import Any, Union

from .shape import ShapeDescriptor, UNLIMITED
from .types import (
    TypeDescriptor, IntegerType, FloatType, StringType, ReferenceType,
    EnumType, CompoundType, ArrayType, ReferenceKind
)


class Stream:
    """Text buffer that keeps track of indentation, fed with ``<<``."""

    def __init__(self):
        self._indent = 0
        self._string = io.StringIO()
        self._do_indent = False

    def _write(self, data: str):
        self._string.write(data)

    def __lshift__(self, element: Any):
        if element is Stream.endl:
            self._write("\n")
            self._do_indent = True
        elif element is Stream.indent:
            self._indent += 3
        elif element is Stream.dedent:
            self._indent -= 3
        else:
            if self._do_indent:
                self._write(' ' * self._indent)
                self._do_indent = False
            self._write(str(element))

        return self

    @property
    def string(self):
        return self._string.getvalue()

    endl = object()
    indent = object()
    dedent = object()


def print_type(stream: Stream, datatype: TypeDescriptor):
    if isinstance(datatype, (IntegerType, FloatType)):
        stream << "H5T_" << datatype.name
    elif isinstance(datatype, StringType):
        stream << "H5T_STRING {" << stream.endl << stream.indent
        stream << "STRSIZE " << ("H5T_VARIABLE" if datatype.is_variable_length else datatype.length) << ";" << stream.endl
        stream << "STRPAD H5T_STR_" << datatype.pad.name << ";" << stream.endl
        stream << "CSET H5T_CSET_" << datatype.cset.name << ";" << stream.endl
        stream << "CTYPE H5T_C_S1;" << stream.endl
        stream << stream.dedent << "}"
    elif isinstance(datatype, ReferenceType):
        if datatype.ref_kind == ReferenceKind.OBJECT:
            stream << "H5T_REFERENCE { H5T_STD_REF_OBJECT }"
        else:
            stream << "H5T_REFERENCE { H5T_STD_REF_DSETREG }"
    elif isinstance(datatype, EnumType):
        stream << "H5T_ENUM {" << stream.endl << stream.indent
        print_type(stream, datatype.base)
        stream << ";" << stream.endl
        for member in datatype.members:
            stream << '"' << member.name << '" ' << member.value << ";" << stream.endl
        stream << stream.dedent << "}"
    elif isinstance(datatype, CompoundType):
        stream << "H5T_COMPOUND {" << stream.endl << stream.indent
        for member in datatype.members:
            print_type(stream, member.type)
            stream << ' "' << member.name << '" : ' << member.offset << ";" << stream.endl
        stream << stream.dedent << "}"
    elif isinstance(datatype, ArrayType):
        stream << "H5T_ARRAY { "
        for dim in datatype.dims:
            stream << "[" << dim << "]"
        stream << " "
        print_type(stream, datatype.element)
        stream << " }"
    else:
        raise Exception(f"{datatype} is not a datatype I can print")


def print_shape(stream: Stream, shape: ShapeDescriptor):
    if shape.is_scalar:
        stream << "SCALAR"
        return

    def dims(values):
        return ", ".join("H5S_UNLIMITED" if v is UNLIMITED else str(v) for v in values)

    stream << "SIMPLE { ( " << dims(shape.extents) << " ) / ( " << dims(shape.max_extents) << " ) }"


def to_ddl(descriptor: Union[TypeDescriptor, ShapeDescriptor]) -> str:
    """Render a datatype or dataspace in the data description language used by h5dump."""
    stream = Stream()
    if isinstance(descriptor, ShapeDescriptor):
        stream << "DATASPACE "
        print_shape(stream, descriptor)
    else:
        stream << "DATATYPE "
        print_type(stream, descriptor)
    stream << stream.endl
    return stream.string
