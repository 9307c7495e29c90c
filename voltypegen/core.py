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

from typing import Any


class TypeGenException(Exception):
    """This exception is thrown when generating a datatype or dataspace cannot complete.
    Print the exception directly or convert it to string for a detailed description.

    Attributes
    ----------
    code: int
        One of the ``RETCODE_`` constants that indicates the type of error.
    msg: str
        A human readable description of where the error occurred
    """

    RETCODE_OK = 0  # Success
    RETCODE_ERROR = -1  # Non specific error
    RETCODE_UNSUPPORTED = -2  # Feature unsupported
    RETCODE_BAD_PARAMETER = -3  # Bad parameter value
    RETCODE_OUT_OF_RESOURCES = -5  # Allocation failed
    RETCODE_ALREADY_DELETED = (
        -9
    )  # When an attempt is made to use something that was released

    error_message_mapping = {
        RETCODE_OK: ("RETCODE_OK", "Success"),
        RETCODE_ERROR: ("RETCODE_ERROR", "Non specific error"),
        RETCODE_UNSUPPORTED: ("RETCODE_UNSUPPORTED", "Feature unsupported"),
        RETCODE_BAD_PARAMETER: ("RETCODE_BAD_PARAMETER", "Bad parameter value"),
        RETCODE_OUT_OF_RESOURCES: (
            "RETCODE_OUT_OF_RESOURCES",
            "Operation failed because of a lack of resources",
        ),
        RETCODE_ALREADY_DELETED: (
            "RETCODE_ALREADY_DELETED",
            "An attempt was made to use a released descriptor",
        ),
    }

    def __init__(self, code: int, msg: str = None) -> None:
        """Initialize a TypeGenException. Code should be one of the RETCODE_* constants."""
        self.code = code
        self.msg = msg or ""
        super().__init__(code, self.msg)

    def __str__(self) -> str:
        if self.code in self.error_message_mapping:
            msg = self.error_message_mapping[self.code]
            return f"[{msg[0]}] {msg[1]}. {self.msg}"
        return f"[TypeGenException] Got an unexpected error code '{self.code}'. {self.msg}"

    def __repr__(self) -> str:
        return str(self)


class InvalidArgument(TypeGenException):
    """Raised when a generator is called with malformed input, such as a negative rank."""

    def __init__(self, msg: str = None) -> None:
        super().__init__(TypeGenException.RETCODE_BAD_PARAMETER, msg)


class GenerationError(TypeGenException):
    """Raised when constructing a datatype or dataspace failed. Everything built
    during the failing call has been released by the time this reaches the caller."""

    def __init__(self, msg: str = None, code: int = TypeGenException.RETCODE_ERROR) -> None:
        super().__init__(code, msg)


def release(handle: Any) -> None:
    """Release a type or shape descriptor, and everything it owns.

    Releasing ``None`` or an already released descriptor does nothing.
    """
    if handle is None:
        return
    handle.close()
