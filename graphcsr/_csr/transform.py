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

from typing import Tuple

import jax
import numba
import numpy as np

from graphcsr._coo import COOMatrix
from graphcsr._misc import as_host_ids, check_ids_in_range, csr_to_coo_index, exclusive_cumsum, to_device
from graphcsr._numba_kernel import jit_fn, numba_kernel_generator, pjit_fn
from graphcsr._typing import IdArrayLike
from .main import CSRMatrix, csr_from_host, host_arrays, host_entry_ids

__all__ = [
    'csr_transpose',
    'csr_to_coo',
    'csr_reorder',
    'csr_remove',
]


@numba_kernel_generator
def _csr_transpose_numba_kernel_generator():
    # Scattering into column buckets crosses rows, so this pass stays serial.
    @jit_fn
    def kernel(indptr, indices, eids, out_indptr, out_indices, out_data):
        num_rows = indptr.shape[0] - 1
        num_cols = out_indptr.shape[0] - 1
        for j in range(indices.shape[0]):
            out_indptr[indices[j] + 1] += 1
        for c in range(num_cols):
            out_indptr[c + 1] += out_indptr[c]
        cursor = out_indptr[:-1].copy()
        for r in range(num_rows):
            for j in range(indptr[r], indptr[r + 1]):
                c = indices[j]
                k = cursor[c]
                out_indices[k] = r
                out_data[k] = eids[j]
                cursor[c] = k + 1

    return kernel


def csr_transpose(csr: CSRMatrix) -> CSRMatrix:
    """
    Transpose a matrix with a counting sort over its column ids.

    The column histogram, turned into a prefix sum, gives the ``indptr`` of
    the result; each entry is then scattered into the bucket of its column.
    This costs ``O(nnz + num_rows + num_cols)`` and needs no comparison sort.

    Rows are visited in order, so every row of the result lists its column
    ids (the old row ids) in ascending order and the result is ``sorted``.
    Its data array holds the entry id of every entry in ``csr``.

    Parameters
    ----------
    csr : CSRMatrix
        Matrix of shape ``(num_rows, num_cols)``.

    Returns
    -------
    CSRMatrix
        Matrix of shape ``(num_cols, num_rows)``.
    """
    indptr, indices, _ = host_arrays(csr)
    eids = host_entry_ids(csr)
    out_indptr = np.zeros(csr.num_cols + 1, dtype=np.int64)
    out_indices = np.empty(csr.nnz, dtype=np.int64)
    out_data = np.empty(csr.nnz, dtype=np.int64)
    _csr_transpose_numba_kernel_generator()(indptr, indices, eids, out_indptr, out_indices, out_data)
    return csr_from_host(
        csr, csr.num_cols, csr.num_rows, out_indptr, out_indices, out_data, sorted=True
    )


def csr_to_coo(csr: CSRMatrix, data_as_order: bool = False) -> COOMatrix:
    """
    Convert a matrix to coordinate format.

    Parameters
    ----------
    csr : CSRMatrix
        The matrix to convert.
    data_as_order : bool, optional
        ``False`` (default): rows are re-expanded from ``indptr``, columns are
        ``indices`` and the COO data is the CSR data (``None`` stays
        ``None``). The result is row-sorted, and column-sorted when ``csr``
        is sorted.

        ``True``: the CSR data array is read as the output position of every
        entry, so entry ``i`` lands at ``data[i]``. The result has no data
        array and no sortedness guarantee.

    Returns
    -------
    COOMatrix

    Raises
    ------
    IndexError
        With ``data_as_order=True``, if a position is outside ``[0, nnz)``.
    ValueError
        With ``data_as_order=True``, if ``data`` is not a permutation of
        ``0 .. nnz - 1``.

    Examples
    --------
    .. code-block:: python

        >>> csr = graphcsr.CSRMatrix(2, 3, [0, 2, 3], [2, 0, 1], [1, 2, 0])
        >>> coo = graphcsr.csr_to_coo(csr, data_as_order=True)
        >>> coo.row, coo.col
        (Array([1, 0, 0], dtype=int32), Array([1, 2, 0], dtype=int32))
    """
    indptr, indices, data = host_arrays(csr)
    rows, cols = csr_to_coo_index(indptr, indices)
    device, dtype = csr.device, csr.dtype

    if not data_as_order or data is None:
        return COOMatrix(
            csr.num_rows,
            csr.num_cols,
            to_device(rows, device, dtype),
            csr.indices,
            csr.data,
            row_sorted=True,
            col_sorted=csr.sorted,
        )

    check_ids_in_range(data, csr.nnz, 'Order')
    if np.unique(data).shape[0] != csr.nnz:
        raise ValueError('data_as_order requires data to be a permutation of 0..nnz-1.')
    out_rows = np.empty_like(rows)
    out_cols = np.empty_like(cols)
    out_rows[data] = rows
    out_cols[data] = cols
    return COOMatrix(
        csr.num_rows,
        csr.num_cols,
        to_device(out_rows, device, dtype),
        to_device(out_cols, device, dtype),
    )


def _check_relabeling(ids: np.ndarray, size: int, name: str):
    if ids.shape[0] != size:
        raise ValueError(f'{name} must hold one new id per old id, expected {size}, got {ids.shape[0]}.')
    check_ids_in_range(ids, size, name)
    if np.unique(ids).shape[0] != size:
        raise ValueError(f'{name} must be a permutation of 0..{size - 1}.')


@numba_kernel_generator
def _csr_reorder_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, indices, eids, new_row_ids, new_col_ids, out_indptr, out_indices, out_data):
        for r in numba.prange(indptr.shape[0] - 1):
            k = out_indptr[new_row_ids[r]]
            for j in range(indptr[r], indptr[r + 1]):
                out_indices[k] = new_col_ids[indices[j]]
                out_data[k] = eids[j]
                k += 1

    return kernel


def csr_reorder(csr: CSRMatrix, new_row_ids: IdArrayLike, new_col_ids: IdArrayLike) -> CSRMatrix:
    """
    Relabel rows and columns.

    Row ``r`` of ``csr`` becomes row ``new_row_ids[r]`` of the result and
    column ``c`` becomes column ``new_col_ids[c]``. Entries keep their order
    inside a row and the result data holds their entry ids in ``csr``.

    Raises
    ------
    ValueError
        If either relabeling is not a permutation of its id space.
    """
    new_row_ids = as_host_ids(new_row_ids)
    new_col_ids = as_host_ids(new_col_ids)
    _check_relabeling(new_row_ids, csr.num_rows, 'new_row_ids')
    _check_relabeling(new_col_ids, csr.num_cols, 'new_col_ids')

    indptr, indices, _ = host_arrays(csr)
    eids = host_entry_ids(csr)
    degrees = np.zeros(csr.num_rows, dtype=np.int64)
    degrees[new_row_ids] = np.diff(indptr)
    out_indptr = exclusive_cumsum(degrees)
    out_indices = np.empty(csr.nnz, dtype=np.int64)
    out_data = np.empty(csr.nnz, dtype=np.int64)
    _csr_reorder_numba_kernel_generator()(
        indptr, indices, eids, new_row_ids, new_col_ids, out_indptr, out_indices, out_data
    )
    return csr_from_host(csr, csr.num_rows, csr.num_cols, out_indptr, out_indices, out_data)


@numba_kernel_generator
def _csr_count_kept_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, keep, counts):
        for r in numba.prange(indptr.shape[0] - 1):
            n = 0
            for j in range(indptr[r], indptr[r + 1]):
                if keep[j]:
                    n += 1
            counts[r] = n

    return kernel


@numba_kernel_generator
def _csr_write_kept_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, indices, eids, keep, out_indptr, out_indices, out_eids):
        for r in numba.prange(indptr.shape[0] - 1):
            k = out_indptr[r]
            for j in range(indptr[r], indptr[r + 1]):
                if keep[j]:
                    out_indices[k] = indices[j]
                    out_eids[k] = eids[j]
                    k += 1

    return kernel


def csr_remove(csr: CSRMatrix, entries: IdArrayLike) -> Tuple[CSRMatrix, jax.Array]:
    """
    Drop the entries whose entry id is listed in ``entries``.

    Parameters
    ----------
    csr : CSRMatrix
        The matrix to shrink.
    entries : array_like
        Entry ids to remove. Ids that match no entry are ignored.

    Returns
    -------
    new_csr : CSRMatrix
        The remaining entries, in their original order. It has no data
        array: its entries are numbered ``0..k-1``.
    induced_entry_ids : jax.Array
        ``induced_entry_ids[i]`` is the entry id in ``csr`` of entry ``i``
        of ``new_csr``. Use it to carry per-entry state, such as edge
        features, over to the new matrix.

    Examples
    --------
    .. code-block:: python

        >>> csr = graphcsr.CSRMatrix(2, 3, [0, 2, 3], [0, 2, 1])
        >>> new_csr, induced = graphcsr.csr_remove(csr, [1])
        >>> new_csr.indices, induced
        (Array([0, 1], dtype=int32), Array([0, 2], dtype=int32))
    """
    entries = as_host_ids(entries)
    indptr, indices, _ = host_arrays(csr)
    eids = host_entry_ids(csr)
    keep = ~np.isin(eids, entries)

    counts = np.zeros(csr.num_rows, dtype=np.int64)
    _csr_count_kept_numba_kernel_generator()(indptr, keep, counts)
    out_indptr = exclusive_cumsum(counts)
    total = int(out_indptr[-1])
    out_indices = np.empty(total, dtype=np.int64)
    out_eids = np.empty(total, dtype=np.int64)
    _csr_write_kept_numba_kernel_generator()(indptr, indices, eids, keep, out_indptr, out_indices, out_eids)

    new_csr = csr_from_host(csr, csr.num_rows, csr.num_cols, out_indptr, out_indices, sorted=csr.sorted)
    return new_csr, to_device(out_eids, csr.device, csr.dtype)
