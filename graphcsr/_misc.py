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

from typing import Tuple, Union

import brainstate.environ
import brainunit as u
import jax
import jax.numpy as jnp
import numpy as np

from ._error import CSRValidityError
from ._typing import IdArrayLike, FloatArrayLike

__all__ = [
    'as_index_buffer',
    'check_input_dtypes',
    'as_host_ids',
    'as_host_weights',
    'to_device',
    'device_of',
    'exclusive_cumsum',
    'broadcast_pairs',
    'check_ids_in_range',
    'csr_to_coo_index',
]


def as_index_buffer(x: IdArrayLike) -> jax.Array:
    """Turn ``x`` into a one-dimensional JAX index buffer.

    JAX arrays are returned as they are. NumPy arrays are converted with
    ``jnp.asarray``, which canonicalizes their dtype (``int64`` becomes
    ``int32`` unless JAX x64 is enabled); use :func:`check_input_dtypes`
    first to reject mixed input dtypes. Python sequences use the default
    integer type of the environment (``brainstate.environ.ditype()``).
    """
    if isinstance(x, jax.Array):
        return x
    if isinstance(x, np.ndarray):
        return jnp.asarray(x)
    return jnp.asarray(x, dtype=brainstate.environ.ditype())


def check_input_dtypes(owner: str, **buffers):
    """Raise :class:`CSRValidityError` if array inputs disagree on their dtype.

    Runs on the raw inputs, before JAX canonicalizes NumPy dtypes. ``None``
    and Python sequences carry no dtype and are skipped.
    """
    first_name, first_dtype = None, None
    for name, x in buffers.items():
        if x is None or not isinstance(x, (jax.Array, np.ndarray)):
            continue
        if first_dtype is None:
            first_name, first_dtype = name, x.dtype
        elif x.dtype != first_dtype:
            raise CSRValidityError(
                f'{owner} {name} has dtype {x.dtype} but {first_name} has dtype {first_dtype}.'
            )


def as_host_ids(x: IdArrayLike) -> np.ndarray:
    """Return ``x`` as a one-dimensional ``int64`` host array."""
    arr = np.asarray(x)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    if arr.ndim != 1:
        raise ValueError(f'Expected a one-dimensional id array, got shape {arr.shape}.')
    if arr.size and not np.issubdtype(arr.dtype, np.integer):
        raise ValueError(f'Id arrays must have an integer dtype, got {arr.dtype}.')
    return arr.astype(np.int64, copy=False)


def as_host_weights(
    x: FloatArrayLike,
    length: int,
    name: str = 'weight',
    non_negative: bool = True,
) -> np.ndarray:
    """Return a ``float64`` host copy of an entry-aligned weight array.

    ``None`` or an empty array yields an empty array, which the sampling
    kernels read as uniform weights. Units carried by a
    ``brainunit.Quantity`` are dropped: only relative magnitudes matter.
    """
    if x is None:
        return np.zeros(0, dtype=np.float64)
    arr = np.asarray(u.get_mantissa(x), dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f'{name} must be one-dimensional, got shape {arr.shape}.')
    if arr.size == 0:
        return arr
    if arr.size < length:
        raise ValueError(f'{name} must cover every entry id, expected at least {length} values, got {arr.size}.')
    if np.any(np.isnan(arr)):
        raise ValueError(f'{name} must not contain NaN.')
    if non_negative and np.any(arr < 0):
        raise ValueError(f'{name} must be non-negative.')
    return arr


def device_of(x: jax.Array):
    """Return the single device holding ``x``."""
    devices = x.devices()
    if len(devices) != 1:
        return frozenset(devices)
    return next(iter(devices))


def to_device(x: np.ndarray, device, dtype=None) -> jax.Array:
    """Place a host result on ``device`` with the requested dtype."""
    if dtype is not None:
        x = np.asarray(x, dtype=dtype)
    return jax.device_put(x, device)


def exclusive_cumsum(counts: np.ndarray, dtype=np.int64) -> np.ndarray:
    """Prefix sum of ``counts`` with a leading zero; length ``len(counts) + 1``."""
    out = np.zeros(counts.shape[0] + 1, dtype=dtype)
    np.cumsum(counts, out=out[1:])
    return out


def broadcast_pairs(rows: np.ndarray, cols: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Broadcast a length-1 row or column query against the other sequence."""
    if rows.shape[0] == cols.shape[0]:
        return rows, cols
    if rows.shape[0] == 1:
        return np.full(cols.shape[0], rows[0], dtype=rows.dtype), cols
    if cols.shape[0] == 1:
        return rows, np.full(rows.shape[0], cols[0], dtype=cols.dtype)
    raise ValueError(
        f'Row and column queries must have the same length or length 1, '
        f'got {rows.shape[0]} and {cols.shape[0]}.'
    )


def check_ids_in_range(ids: np.ndarray, bound: int, name: str):
    """Raise ``IndexError`` unless every id lies in ``[0, bound)``."""
    if ids.size and (ids.min() < 0 or ids.max() >= bound):
        raise IndexError(f'{name} ids must lie in [0, {bound}), got range [{ids.min()}, {ids.max()}].')


def csr_to_coo_index(
    indptr: Union[jax.Array, np.ndarray],
    indices: Union[jax.Array, np.ndarray],
):
    """Convert CSR index arrays to COO ``(row, col)`` arrays.

    Examples
    --------
    .. code-block:: python

        >>> import numpy as np
        >>> from graphcsr._misc import csr_to_coo_index
        >>> indptr = np.array([0, 2, 3, 5])
        >>> indices = np.array([0, 2, 1, 0, 3])
        >>> row_ids, col_ids = csr_to_coo_index(indptr, indices)
        >>> print(row_ids)
        [0 0 1 2 2]
    """
    indptr = np.asarray(indptr)
    indices = np.asarray(indices)
    row_ids = np.repeat(np.arange(indptr.shape[0] - 1, dtype=indptr.dtype), np.diff(indptr))
    return row_ids, indices
