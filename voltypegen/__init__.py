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

from . import core, config, types, shape, generator, printers
from .core import TypeGenException, InvalidArgument, GenerationError, release
from .config import GeneratorConfig
from .types import TypeKind, TypeDescriptor
from .shape import ShapeDescriptor, UNLIMITED
from .generator import TypeGenerator, configure, seed, generate_random_type, generate_random_shape

__all__ = [
    "core",
    "config",
    "types",
    "shape",
    "generator",
    "printers",
    "TypeGenException",
    "InvalidArgument",
    "GenerationError",
    "release",
    "GeneratorConfig",
    "TypeKind",
    "TypeDescriptor",
    "ShapeDescriptor",
    "UNLIMITED",
    "TypeGenerator",
    "configure",
    "seed",
    "generate_random_type",
    "generate_random_shape",
]
