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

from typing import Union

import jax
import numba
import numpy as np

from graphcsr._misc import as_host_ids, broadcast_pairs, check_ids_in_range, to_device
from graphcsr._numba_kernel import numba_kernel_generator, pjit_fn
from graphcsr._typing import IdArrayLike
from .main import CSRMatrix, host_arrays

__all__ = [
    'csr_is_nonzero',
    'csr_get_row_nnz',
    'csr_get_row_column_indices',
    'csr_get_row_data',
    'csr_is_sorted',
    'csr_has_data',
]


@numba.njit(inline='always')
def search_row(indices, start, end, col, row_sorted):
    """Position of the first entry of ``indices[start:end]`` equal to ``col``, or -1.

    Sorted rows are searched for the lower bound, which is also the first
    matching position.
    """
    if row_sorted:
        lo = start
        hi = end
        while lo < hi:
            mid = (lo + hi) // 2
            if indices[mid] < col:
                lo = mid + 1
            else:
                hi = mid
        if lo < end and indices[lo] == col:
            return lo
        return -1
    for j in range(start, end):
        if indices[j] == col:
            return j
    return -1


@numba.njit(inline='always')
def count_in_row(indices, start, end, col, row_sorted):
    """Number of entries of ``indices[start:end]`` equal to ``col``."""
    if row_sorted:
        first = search_row(indices, start, end, col, True)
        if first < 0:
            return 0
        j = first
        while j < end and indices[j] == col:
            j += 1
        return j - first
    n = 0
    for j in range(start, end):
        if indices[j] == col:
            n += 1
    return n


def _is_scalar(x) -> bool:
    return np.ndim(x) == 0


def _check_row(csr: CSRMatrix, row: int):
    if not 0 <= row < csr.num_rows:
        raise IndexError(f'Row id {row} is out of range for a matrix with {csr.num_rows} rows.')


def _check_col(csr: CSRMatrix, col: int):
    if not 0 <= col < csr.num_cols:
        raise IndexError(f'Column id {col} is out of range for a matrix with {csr.num_cols} columns.')


def _row_bounds(csr: CSRMatrix, row: int):
    start, end = np.asarray(csr.indptr[row:row + 2])
    return int(start), int(end)


@numba_kernel_generator
def _csr_is_nonzero_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, indices, rows, cols, row_sorted, out):
        for i in numba.prange(rows.shape[0]):
            r = rows[i]
            out[i] = search_row(indices, indptr[r], indptr[r + 1], cols[i], row_sorted) >= 0

    return kernel


def csr_is_nonzero(
    csr: CSRMatrix,
    row: Union[int, IdArrayLike],
    col: Union[int, IdArrayLike],
):
    """Test whether ``(row, col)`` holds at least one stored entry.

    Parameters
    ----------
    csr : CSRMatrix
        The matrix to query.
    row, col : int or array_like
        Scalar ids return a Python ``bool``. Id arrays return a boolean
        ``jax.Array`` on the matrix device; a length-1 array on either side
        is broadcast against the other.

    Raises
    ------
    IndexError
        If a row or column id is out of range.
    ValueError
        If the query arrays cannot be broadcast against each other.
    """
    if _is_scalar(row) and _is_scalar(col):
        row, col = int(row), int(col)
        _check_row(csr, row)
        _check_col(csr, col)
        start, end = _row_bounds(csr, row)
        cols = np.asarray(csr.indices[start:end])
        return bool(np.any(cols == col))

    rows, cols = broadcast_pairs(as_host_ids(row), as_host_ids(col))
    check_ids_in_range(rows, csr.num_rows, 'Row')
    check_ids_in_range(cols, csr.num_cols, 'Column')
    indptr, indices, _ = host_arrays(csr)
    out = np.zeros(rows.shape[0], dtype=np.bool_)
    _csr_is_nonzero_numba_kernel_generator()(indptr, indices, rows, cols, csr.sorted, out)
    return to_device(out, csr.device)


def csr_get_row_nnz(csr: CSRMatrix, row: Union[int, IdArrayLike]):
    """Number of entries stored in ``row``; an id array yields one count per id."""
    if _is_scalar(row):
        row = int(row)
        _check_row(csr, row)
        start, end = _row_bounds(csr, row)
        return end - start
    rows = as_host_ids(row)
    check_ids_in_range(rows, csr.num_rows, 'Row')
    indptr = np.asarray(csr.indptr)
    return to_device(indptr[rows + 1] - indptr[rows], csr.device, csr.dtype)


def csr_get_row_column_indices(csr: CSRMatrix, row: int) -> jax.Array:
    """Column ids stored in ``row``, in storage order."""
    row = int(row)
    _check_row(csr, row)
    start, end = _row_bounds(csr, row)
    return csr.indices[start:end]


def csr_get_row_data(csr: CSRMatrix, row: int) -> jax.Array:
    """Entry ids stored in ``row``; positions when the matrix has no data."""
    row = int(row)
    _check_row(csr, row)
    start, end = _row_bounds(csr, row)
    if csr.data is None:
        return to_device(np.arange(start, end), csr.device, csr.dtype)
    return csr.data[start:end]


@numba_kernel_generator
def _csr_is_sorted_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, indices, out):
        for r in numba.prange(indptr.shape[0] - 1):
            ok = True
            for j in range(indptr[r] + 1, indptr[r + 1]):
                if indices[j - 1] > indices[j]:
                    ok = False
                    break
            out[r] = ok

    return kernel


def csr_is_sorted(csr: CSRMatrix) -> bool:
    """Scan every row and report whether its column ids are non-decreasing.

    Unlike the ``sorted`` attribute, which is a trusted hint, this looks at
    the stored column ids.
    """
    indptr, indices, _ = host_arrays(csr)
    out = np.ones(csr.num_rows, dtype=np.bool_)
    _csr_is_sorted_numba_kernel_generator()(indptr, indices, out)
    return bool(np.all(out))


def csr_has_data(csr: CSRMatrix) -> bool:
    """Whether an explicit data array is stored."""
    return csr.data is not None

