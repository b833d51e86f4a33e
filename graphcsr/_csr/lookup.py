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

from typing import List

import jax
import numba
import numpy as np

from graphcsr._misc import as_host_ids, broadcast_pairs, check_ids_in_range, exclusive_cumsum, to_device
from graphcsr._numba_kernel import numba_kernel_generator, pjit_fn
from graphcsr._typing import IdArrayLike
from .main import CSRMatrix, host_arrays, host_entry_ids
from .query import count_in_row, search_row

__all__ = [
    'csr_get_data_and_indices',
    'csr_get_all_data',
    'csr_get_data',
]


def _host_queries(csr: CSRMatrix, rows: IdArrayLike, cols: IdArrayLike):
    rows, cols = broadcast_pairs(as_host_ids(rows), as_host_ids(cols))
    check_ids_in_range(rows, csr.num_rows, 'Row')
    check_ids_in_range(cols, csr.num_cols, 'Column')
    return rows, cols


@numba_kernel_generator
def _csr_count_matches_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, indices, rows, cols, row_sorted, counts):
        for i in numba.prange(rows.shape[0]):
            r = rows[i]
            counts[i] = count_in_row(indices, indptr[r], indptr[r + 1], cols[i], row_sorted)

    return kernel


@numba_kernel_generator
def _csr_write_matches_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, indices, eids, rows, cols, row_sorted, offsets, out_rows, out_cols, out_data):
        for i in numba.prange(rows.shape[0]):
            r = rows[i]
            c = cols[i]
            end = indptr[r + 1]
            j = indptr[r]
            if row_sorted and offsets[i] < offsets[i + 1]:
                j = search_row(indices, j, end, c, True)
            k = offsets[i]
            while j < end and k < offsets[i + 1]:
                if indices[j] == c:
                    out_rows[k] = r
                    out_cols[k] = c
                    out_data[k] = eids[j]
                    k += 1
                j += 1

    return kernel


def csr_get_data_and_indices(csr: CSRMatrix, rows: IdArrayLike, cols: IdArrayLike) -> List[jax.Array]:
    """
    Find every stored entry matching the query pairs.

    The query pairs ``zip(rows, cols)`` must not repeat, but the matrix may
    hold several entries for one pair: each of them produces one output.
    Pairs without a match are left out, so the outputs may be shorter than
    the queries. A length-1 ``rows`` or ``cols`` is broadcast.

    The lookup runs in two passes: the first counts the matches of every
    pair, an exclusive prefix sum turns the counts into output offsets, and
    the second writes every pair's matches into its own range.

    Parameters
    ----------
    csr : CSRMatrix
        The matrix to search.
    rows, cols : array_like
        Query row and column ids.

    Returns
    -------
    list of jax.Array
        ``[matched_rows, matched_cols, matched_entry_ids]``.

    Examples
    --------
    .. code-block:: python

        >>> csr = graphcsr.CSRMatrix(3, 3, [0, 2, 3, 3], [1, 1, 0], [7, 8, 9])
        >>> graphcsr.csr_get_data_and_indices(csr, [0, 1, 2], [1, 0, 0])
        [Array([0, 0, 1], dtype=int32), Array([1, 1, 0], dtype=int32), Array([7, 8, 9], dtype=int32)]
    """
    rows, cols = _host_queries(csr, rows, cols)
    indptr, indices, _ = host_arrays(csr)
    eids = host_entry_ids(csr)

    counts = np.zeros(rows.shape[0], dtype=np.int64)
    _csr_count_matches_numba_kernel_generator()(indptr, indices, rows, cols, csr.sorted, counts)
    offsets = exclusive_cumsum(counts)

    total = int(offsets[-1])
    out_rows = np.empty(total, dtype=np.int64)
    out_cols = np.empty(total, dtype=np.int64)
    out_data = np.empty(total, dtype=np.int64)
    _csr_write_matches_numba_kernel_generator()(
        indptr, indices, eids, rows, cols, csr.sorted, offsets, out_rows, out_cols, out_data
    )
    return [to_device(x, csr.device, csr.dtype) for x in (out_rows, out_cols, out_data)]


def csr_get_all_data(csr: CSRMatrix, row: int, col: int) -> jax.Array:
    """All entry ids stored at ``(row, col)``, in storage order."""
    _, _, data = csr_get_data_and_indices(csr, [int(row)], [int(col)])
    return data


@numba_kernel_generator
def _csr_get_data_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, indices, eids, rows, cols, row_sorted, out):
        for i in numba.prange(rows.shape[0]):
            r = rows[i]
            j = search_row(indices, indptr[r], indptr[r + 1], cols[i], row_sorted)
            out[i] = eids[j] if j >= 0 else -1

    return kernel


def csr_get_data(csr: CSRMatrix, rows: IdArrayLike, cols: IdArrayLike) -> jax.Array:
    """
    Return one entry id per query pair, ``-1`` where the pair is absent.

    Query pairs may repeat. When the matrix stores several entries for a
    pair, the one with the smallest position inside its row is returned.
    For a sorted matrix this is the lower bound of a binary search, i.e.
    the same entry, because sorting is stable.

    Parameters
    ----------
    csr : CSRMatrix
        The matrix to search.
    rows, cols : array_like
        Query row and column ids; a length-1 side is broadcast.

    Returns
    -------
    jax.Array
        Entry ids with the dtype and device of ``csr``.
    """
    rows, cols = _host_queries(csr, rows, cols)
    indptr, indices, _ = host_arrays(csr)
    eids = host_entry_ids(csr)
    out = np.empty(rows.shape[0], dtype=np.int64)
    _csr_get_data_numba_kernel_generator()(indptr, indices, eids, rows, cols, csr.sorted, out)
    return to_device(out, csr.device, csr.dtype)
