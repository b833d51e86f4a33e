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

from typing import Optional, Union

import numba
import numpy as np

from graphcsr._misc import as_host_ids, check_ids_in_range, exclusive_cumsum, to_device
from graphcsr._numba_kernel import numba_kernel_generator, pjit_fn
from graphcsr._typing import IdArrayLike
from .main import CSRMatrix, csr_from_host, host_arrays, host_entry_ids

__all__ = [
    'csr_slice_rows',
    'csr_slice_matrix',
]


def csr_slice_rows(
    csr: CSRMatrix,
    start: Union[int, IdArrayLike],
    end: Optional[int] = None,
) -> CSRMatrix:
    """
    Extract rows of a matrix.

    ``csr_slice_rows(csr, start, end)`` takes the contiguous rows
    ``start..end-1``; ``csr_slice_rows(csr, rows)`` takes the listed rows, in
    the listed order, repeats allowed. The selected rows are renumbered
    ``0..k-1``. Column ids and entry ids are kept (entry positions become an
    explicit data array) and so is the ``sorted`` flag.

    Parameters
    ----------
    csr : CSRMatrix
        The matrix to slice.
    start : int or array_like
        First row of the range, or the row ids to take when ``end`` is
        ``None``.
    end : int, optional
        One past the last row of the range.

    Returns
    -------
    CSRMatrix
        Matrix of shape ``(k, num_cols)``.

    Examples
    --------
    .. code-block:: python

        >>> csr = graphcsr.CSRMatrix(4, 4, [0, 2, 3, 3, 5], [1, 0, 2, 3, 1])
        >>> sub = graphcsr.csr_slice_rows(csr, 1, 3)
        >>> sub.indptr, sub.indices, sub.data
        (Array([0, 1, 1], dtype=int32), Array([2], dtype=int32), Array([2], dtype=int32))
    """
    if end is None:
        return _csr_slice_row_ids(csr, start)

    start, end = int(start), int(end)
    if not 0 <= start <= end <= csr.num_rows:
        raise IndexError(f'Invalid row range [{start}, {end}) for a matrix with {csr.num_rows} rows.')
    lo, hi = int(csr.indptr[start]), int(csr.indptr[end])
    indptr = csr.indptr[start:end + 1] - csr.indptr[start]
    indices = csr.indices[lo:hi]
    if csr.data is None:
        data = to_device(np.arange(lo, hi), csr.device, csr.dtype)
    else:
        data = csr.data[lo:hi]
    return CSRMatrix(end - start, csr.num_cols, indptr, indices, data, sorted=csr.sorted)


@numba_kernel_generator
def _csr_gather_rows_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, indices, eids, rows, out_indptr, out_indices, out_data):
        for i in numba.prange(rows.shape[0]):
            r = rows[i]
            k = out_indptr[i]
            for j in range(indptr[r], indptr[r + 1]):
                out_indices[k] = indices[j]
                out_data[k] = eids[j]
                k += 1

    return kernel


def _csr_slice_row_ids(csr: CSRMatrix, rows: IdArrayLike) -> CSRMatrix:
    rows = as_host_ids(rows)
    check_ids_in_range(rows, csr.num_rows, 'Row')
    indptr, indices, _ = host_arrays(csr)
    eids = host_entry_ids(csr)
    out_indptr = exclusive_cumsum(indptr[rows + 1] - indptr[rows])
    total = int(out_indptr[-1])
    out_indices = np.empty(total, dtype=np.int64)
    out_data = np.empty(total, dtype=np.int64)
    _csr_gather_rows_numba_kernel_generator()(indptr, indices, eids, rows, out_indptr, out_indices, out_data)
    return csr_from_host(csr, rows.shape[0], csr.num_cols, out_indptr, out_indices, out_data, sorted=csr.sorted)


@numba_kernel_generator
def _csr_count_submatrix_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, indices, rows, col_map, counts):
        for i in numba.prange(rows.shape[0]):
            r = rows[i]
            n = 0
            for j in range(indptr[r], indptr[r + 1]):
                if col_map[indices[j]] >= 0:
                    n += 1
            counts[i] = n

    return kernel


@numba_kernel_generator
def _csr_write_submatrix_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, indices, eids, rows, col_map, out_indptr, out_indices, out_data):
        for i in numba.prange(rows.shape[0]):
            r = rows[i]
            k = out_indptr[i]
            for j in range(indptr[r], indptr[r + 1]):
                c = col_map[indices[j]]
                if c >= 0:
                    out_indices[k] = c
                    out_data[k] = eids[j]
                    k += 1

    return kernel


def csr_slice_matrix(csr: CSRMatrix, rows: IdArrayLike, cols: IdArrayLike) -> CSRMatrix:
    """
    Induced submatrix on ``rows`` x ``cols``.

    Both axes are renumbered ``0..k-1`` in the order the ids are given.
    Entries keep their order inside a row and their entry ids; duplicate
    entries stay duplicated. Rows may repeat; columns may not.

    The result is flagged ``sorted`` when ``csr`` is sorted and ``cols`` is
    increasing, since the relabeling then keeps the column order.

    Raises
    ------
    IndexError
        If a row or column id is out of range.
    ValueError
        If ``cols`` lists a column twice.
    """
    rows = as_host_ids(rows)
    cols = as_host_ids(cols)
    check_ids_in_range(rows, csr.num_rows, 'Row')
    check_ids_in_range(cols, csr.num_cols, 'Column')
    if np.unique(cols).shape[0] != cols.shape[0]:
        raise ValueError('Column ids of a submatrix must be unique.')

    col_map = np.full(csr.num_cols, -1, dtype=np.int64)
    col_map[cols] = np.arange(cols.shape[0], dtype=np.int64)

    indptr, indices, _ = host_arrays(csr)
    eids = host_entry_ids(csr)
    counts = np.zeros(rows.shape[0], dtype=np.int64)
    _csr_count_submatrix_numba_kernel_generator()(indptr, indices, rows, col_map, counts)
    out_indptr = exclusive_cumsum(counts)
    total = int(out_indptr[-1])
    out_indices = np.empty(total, dtype=np.int64)
    out_data = np.empty(total, dtype=np.int64)
    _csr_write_submatrix_numba_kernel_generator()(
        indptr, indices, eids, rows, col_map, out_indptr, out_indices, out_data
    )
    keeps_order = csr.sorted and bool(np.all(np.diff(cols) > 0))
    return csr_from_host(
        csr, rows.shape[0], cols.shape[0], out_indptr, out_indices, out_data, sorted=keeps_order
    )
