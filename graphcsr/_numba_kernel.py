# Copyright 2026 BrainX Ecosystem Limited. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

# -*- coding: utf-8 -*-

from typing import Callable, Dict, Hashable, Tuple

import numba

from ._config import numba_environ

__all__ = [
    'NumbaKernelGenerator',
    'numba_kernel_generator',
    'jit_fn',
    'pjit_fn',
]


def jit_fn(fn: Callable) -> Callable:
    """Compile ``fn`` with the current Numba settings, serially."""
    return numba.njit(**numba_environ.setting)(fn)


def pjit_fn(fn: Callable) -> Callable:
    """Compile ``fn`` with the current Numba settings; ``prange`` loops run in
    parallel when parallel mode is enabled."""
    return numba.njit(**numba_environ.setting, parallel=numba_environ.parallel)(fn)


class NumbaKernelGenerator:
    """
    The Numba kernel generator.

    Wraps a function that builds a Numba-jitted kernel from static keyword
    arguments. Built kernels are cached per combination of static arguments
    and Numba environment, so switching parallel mode recompiles once and
    then reuses the compiled kernel.

    Args:
        generator: Callable. Receives the static keyword arguments and returns
            a jitted function operating on host arrays.
    """
    __module__ = 'graphcsr'

    def __init__(self, generator: Callable[..., Callable]):
        self.generator = generator
        self.__name__ = getattr(generator, '__name__', 'kernel')
        self.__doc__ = generator.__doc__
        self._cache: Dict[Tuple[Hashable, ...], Callable] = {}

    def generate_kernel(self, **kwargs) -> Callable:
        key = (numba_environ.key(), tuple(sorted(kwargs.items())))
        kernel = self._cache.get(key)
        if kernel is None:
            kernel = self.generator(**kwargs)
            self._cache[key] = kernel
        return kernel

    def __call__(self, **kwargs) -> Callable:
        return self.generate_kernel(**kwargs)

    def __repr__(self):
        return f"<NumbaKernelGenerator({self.__name__})>"


def numba_kernel_generator(fn: Callable[..., Callable]) -> NumbaKernelGenerator:
    """Decorator form of :class:`NumbaKernelGenerator`."""
    return NumbaKernelGenerator(fn)
