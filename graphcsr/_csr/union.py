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

from typing import List, Sequence, Tuple

import jax
import numba
import numpy as np

from graphcsr._misc import as_host_ids, exclusive_cumsum, to_device
from graphcsr._numba_kernel import numba_kernel_generator, pjit_fn
from .main import CSRMatrix, csr_from_host, host_arrays, host_entry_ids
from .sort import csr_sort, csr_sort_

__all__ = [
    'union_csr',
    'disjoint_union_csr',
    'csr_to_simple',
    'disjoint_partition_csr_by_sizes',
]


def _check_inputs(csrs: Sequence[CSRMatrix]) -> List[CSRMatrix]:
    csrs = list(csrs)
    if not csrs:
        raise ValueError('Expected at least one matrix.')
    device = csrs[0].device
    for csr in csrs[1:]:
        if csr.device != device:
            raise ValueError(f'All matrices must live on one device, got {device} and {csr.device}.')
    return csrs


@numba_kernel_generator
def _union_csr_numba_kernel_generator():
    @pjit_fn
    def kernel(indptrs, bases, indices, eids, out_indptr, out_indices, out_data):
        for r in numba.prange(out_indptr.shape[0] - 1):
            k = out_indptr[r]
            for m in range(indptrs.shape[0]):
                for j in range(bases[m] + indptrs[m, r], bases[m] + indptrs[m, r + 1]):
                    out_indices[k] = indices[j]
                    out_data[k] = eids[j]
                    k += 1

    return kernel


def union_csr(csrs: Sequence[CSRMatrix]) -> CSRMatrix:
    """
    Multiset union of matrices of one shape.

    Row ``r`` of the result holds the entries of row ``r`` of every input,
    input after input. Duplicates are kept, not merged. The entry ids of
    input ``i`` are offset by the total ``nnz`` of the inputs before it, so
    the result data indexes the concatenation of the inputs' entries. When
    every input is sorted the rows are stably sorted, which merges them and
    keeps entries of earlier inputs first among equal columns.

    Raises
    ------
    ValueError
        If no matrix is given or the shapes differ.

    Examples
    --------
    .. code-block:: python

        >>> a = graphcsr.CSRMatrix(2, 3, [0, 1, 2], [0, 2])
        >>> b = graphcsr.CSRMatrix(2, 3, [0, 2, 2], [0, 1])
        >>> c = graphcsr.union_csr([a, b])
        >>> c.indptr, c.indices, c.data
        (Array([0, 3, 4], dtype=int32), Array([0, 0, 1, 2], dtype=int32), Array([0, 2, 3, 1], dtype=int32))
    """
    csrs = _check_inputs(csrs)
    shape = csrs[0].shape
    for csr in csrs[1:]:
        if csr.shape != shape:
            raise ValueError(f'union_csr requires matrices of one shape, got {shape} and {csr.shape}.')

    host = [host_arrays(csr) for csr in csrs]
    indptrs = np.stack([h[0] for h in host])
    nnzs = indptrs[:, -1]
    bases = exclusive_cumsum(nnzs)[:-1]
    indices = np.concatenate([h[1] for h in host])
    eids = np.concatenate([host_entry_ids(csr) + base for csr, base in zip(csrs, bases)])

    out_indptr = indptrs.sum(axis=0)
    out_indices = np.empty(indices.shape[0], dtype=np.int64)
    out_data = np.empty(indices.shape[0], dtype=np.int64)
    _union_csr_numba_kernel_generator()(indptrs, bases, indices, eids, out_indptr, out_indices, out_data)

    out = csr_from_host(csrs[0], shape[0], shape[1], out_indptr, out_indices, out_data)
    if all(csr.sorted for csr in csrs):
        csr_sort_(out)
    return out


def disjoint_union_csr(csrs: Sequence[CSRMatrix]) -> CSRMatrix:
    """
    Batch matrices into one block-diagonal matrix.

    The rows, columns and entry ids of input ``i`` are offset by the total
    number of rows, columns and entries of the inputs before it. The result
    has a data array unless no input has one, and is sorted when every input
    is sorted.

    Examples
    --------
    .. code-block:: python

        >>> a = graphcsr.CSRMatrix(2, 2, [0, 1, 2], [1, 0])
        >>> b = graphcsr.CSRMatrix(1, 3, [0, 2], [0, 2])
        >>> c = graphcsr.disjoint_union_csr([a, b])
        >>> c.shape, c.indptr, c.indices
        ((3, 5), Array([0, 1, 2, 4], dtype=int32), Array([1, 0, 2, 4], dtype=int32))
    """
    csrs = _check_inputs(csrs)
    row_offsets = exclusive_cumsum(np.array([csr.num_rows for csr in csrs], dtype=np.int64))
    col_offsets = exclusive_cumsum(np.array([csr.num_cols for csr in csrs], dtype=np.int64))
    nnz_offsets = exclusive_cumsum(np.array([csr.nnz for csr in csrs], dtype=np.int64))

    indptr_parts = [np.zeros(1, dtype=np.int64)]
    indices_parts = []
    data_parts = []
    for i, csr in enumerate(csrs):
        indptr, indices, _ = host_arrays(csr)
        indptr_parts.append(indptr[1:] + nnz_offsets[i])
        indices_parts.append(indices + col_offsets[i])
        data_parts.append(host_entry_ids(csr) + nnz_offsets[i])

    has_data = any(csr.data is not None for csr in csrs)
    return csr_from_host(
        csrs[0],
        int(row_offsets[-1]),
        int(col_offsets[-1]),
        np.concatenate(indptr_parts),
        np.concatenate(indices_parts),
        np.concatenate(data_parts) if has_data else None,
        sorted=all(csr.sorted for csr in csrs),
    )


@numba_kernel_generator
def _csr_count_unique_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, indices, counts):
        for r in numba.prange(indptr.shape[0] - 1):
            n = 0
            for j in range(indptr[r], indptr[r + 1]):
                if j == indptr[r] or indices[j] != indices[j - 1]:
                    n += 1
            counts[r] = n

    return kernel


@numba_kernel_generator
def _csr_write_unique_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, indices, eids, out_indptr, out_indices, out_count, edge_map):
        for r in numba.prange(indptr.shape[0] - 1):
            k = out_indptr[r] - 1
            for j in range(indptr[r], indptr[r + 1]):
                if j == indptr[r] or indices[j] != indices[j - 1]:
                    k += 1
                    out_indices[k] = indices[j]
                    out_count[k] = 0
                out_count[k] += 1
                edge_map[eids[j]] = k

    return kernel


def csr_to_simple(csr: CSRMatrix) -> Tuple[CSRMatrix, jax.Array, jax.Array]:
    """
    Collapse parallel entries into one.

    Parameters
    ----------
    csr : CSRMatrix
        A (multi)graph. Its entry ids must lie in ``[0, nnz)``.

    Returns
    -------
    simple : CSRMatrix
        Sorted matrix without duplicate entries and without data array.
    count : jax.Array
        ``count[k]`` is the number of entries of ``csr`` merged into entry
        ``k`` of ``simple``.
    edge_map : jax.Array
        ``edge_map[e]`` is the entry of ``simple`` that entry id ``e`` of
        ``csr`` was merged into.

    Examples
    --------
    .. code-block:: python

        >>> csr = graphcsr.CSRMatrix(2, 3, [0, 3, 4], [2, 2, 2, 0])
        >>> simple, count, edge_map = graphcsr.csr_to_simple(csr)
        >>> simple.indptr, simple.indices, count, edge_map
        (Array([0, 1, 2], dtype=int32), Array([2, 0], dtype=int32),
         Array([3, 1], dtype=int32), Array([0, 0, 0, 1], dtype=int32))
    """
    eids = host_entry_ids(csr)
    if eids.size and (eids.min() < 0 or eids.max() >= csr.nnz):
        raise ValueError('csr_to_simple requires entry ids in [0, nnz).')
    sorted_csr = csr_sort(csr)
    indptr, indices, _ = host_arrays(sorted_csr)
    eids = host_entry_ids(sorted_csr)

    counts = np.zeros(csr.num_rows, dtype=np.int64)
    _csr_count_unique_numba_kernel_generator()(indptr, indices, counts)
    out_indptr = exclusive_cumsum(counts)
    total = int(out_indptr[-1])
    out_indices = np.empty(total, dtype=np.int64)
    out_count = np.empty(total, dtype=np.int64)
    edge_map = np.empty(csr.nnz, dtype=np.int64)
    _csr_write_unique_numba_kernel_generator()(indptr, indices, eids, out_indptr, out_indices, out_count, edge_map)

    simple = csr_from_host(csr, csr.num_rows, csr.num_cols, out_indptr, out_indices, sorted=True)
    return simple, to_device(out_count, csr.device, csr.dtype), to_device(edge_map, csr.device, csr.dtype)


def _check_boundaries(cumsum: np.ndarray, batch_size: int, total: int, name: str):
    if cumsum.shape[0] != batch_size + 1:
        raise ValueError(f'{name} must have batch_size + 1 = {batch_size + 1} elements, got {cumsum.shape[0]}.')
    if cumsum[0] != 0 or cumsum[-1] != total:
        raise ValueError(f'{name} must start at 0 and end at {total}, got {cumsum[0]} and {cumsum[-1]}.')
    if np.any(np.diff(cumsum) < 0):
        raise ValueError(f'{name} must be non-decreasing.')


def disjoint_partition_csr_by_sizes(
    csr: CSRMatrix,
    batch_size: int,
    edge_cumsum,
    src_vertex_cumsum,
    dst_vertex_cumsum,
) -> List[CSRMatrix]:
    """
    Split a block-diagonal batch back into its matrices.

    Matrix ``i`` takes rows ``src_vertex_cumsum[i]:src_vertex_cumsum[i+1]``,
    columns ``dst_vertex_cumsum[i]:dst_vertex_cumsum[i+1]`` and entries
    ``edge_cumsum[i]:edge_cumsum[i+1]`` of ``csr``; row, column and entry
    ids are rebased to zero. This inverts :func:`disjoint_union_csr`.

    Parameters
    ----------
    csr : CSRMatrix
        The batched matrix.
    batch_size : int
        Number of matrices in the batch.
    edge_cumsum, src_vertex_cumsum, dst_vertex_cumsum : array_like
        Prefix sums, with a leading zero, of the entry, row and column
        counts of the matrices.

    Raises
    ------
    ValueError
        If a prefix sum has the wrong length, does not cover ``csr``,
        decreases, or cuts through a row or block.
    """
    edge_cumsum = as_host_ids(edge_cumsum)
    src_vertex_cumsum = as_host_ids(src_vertex_cumsum)
    dst_vertex_cumsum = as_host_ids(dst_vertex_cumsum)
    _check_boundaries(edge_cumsum, batch_size, csr.nnz, 'edge_cumsum')
    _check_boundaries(src_vertex_cumsum, batch_size, csr.num_rows, 'src_vertex_cumsum')
    _check_boundaries(dst_vertex_cumsum, batch_size, csr.num_cols, 'dst_vertex_cumsum')

    indptr, indices, data = host_arrays(csr)
    if not np.array_equal(indptr[src_vertex_cumsum], edge_cumsum):
        raise ValueError('edge_cumsum does not match the row boundaries given by src_vertex_cumsum.')

    out = []
    for i in range(batch_size):
        r0, r1 = src_vertex_cumsum[i], src_vertex_cumsum[i + 1]
        c0, c1 = dst_vertex_cumsum[i], dst_vertex_cumsum[i + 1]
        e0, e1 = edge_cumsum[i], edge_cumsum[i + 1]
        sub_indices = indices[e0:e1] - c0
        if sub_indices.size and (sub_indices.min() < 0 or sub_indices.max() >= c1 - c0):
            raise ValueError(f'Entries of matrix {i} fall outside its columns [{c0}, {c1}).')
        sub_data = None if data is None else data[e0:e1] - e0
        out.append(
            csr_from_host(
                csr, int(r1 - r0), int(c1 - c0), indptr[r0:r1 + 1] - e0, sub_indices, sub_data, sorted=csr.sorted
            )
        )
    return out
