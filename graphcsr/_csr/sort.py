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

import numba
import numpy as np

from graphcsr._misc import to_device
from graphcsr._numba_kernel import numba_kernel_generator, pjit_fn
from .main import CSRMatrix, host_arrays, host_entry_ids

__all__ = [
    'csr_sort_',
    'csr_sort',
    'csr_has_duplicate',
]


@numba_kernel_generator
def _csr_sort_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, indices, eids):
        for r in numba.prange(indptr.shape[0] - 1):
            start = indptr[r]
            end = indptr[r + 1]
            if end - start > 1:
                order = np.argsort(indices[start:end], kind='mergesort')
                row_cols = indices[start:end][order]
                row_eids = eids[start:end][order]
                indices[start:end] = row_cols
                eids[start:end] = row_eids

    return kernel


def csr_sort_(csr: CSRMatrix) -> None:
    """
    Sort the column ids of every row, in place.

    The sort is stable: entries with equal column ids keep their relative
    order. Entry ids follow their entries; when ``csr`` has no data array,
    one holding the original positions is created first so that the ids
    survive the permutation. ``indptr`` is left untouched and ``sorted`` is
    set to ``True``.

    ``csr_sort_`` replaces the ``indices`` and ``data`` of ``csr``. It must
    not run while another thread reads the same matrix; use
    :func:`csr_sort` to leave the input alone.

    Examples
    --------
    .. code-block:: python

        >>> csr = graphcsr.CSRMatrix(4, 4, [0, 2, 3, 3, 5], [1, 0, 2, 3, 1])
        >>> graphcsr.csr_sort_(csr)
        >>> csr.indices, csr.data
        (Array([0, 1, 2, 1, 3], dtype=int32), Array([1, 0, 2, 4, 3], dtype=int32))
    """
    if csr.sorted:
        return
    indptr, indices, _ = host_arrays(csr)
    eids = host_entry_ids(csr)
    _csr_sort_numba_kernel_generator()(indptr, indices, eids)
    csr.indices = to_device(indices, csr.device, csr.dtype)
    csr.data = to_device(eids, csr.device, csr.dtype)
    csr.sorted = True


def csr_sort(csr: CSRMatrix) -> CSRMatrix:
    """Return a row-sorted version of ``csr``.

    ``csr`` itself is returned when it is flagged ``sorted``; otherwise a
    copy is sorted with :func:`csr_sort_`.
    """
    if csr.sorted:
        return csr
    out = CSRMatrix(csr.num_rows, csr.num_cols, csr.indptr, csr.indices, csr.data, sorted=False)
    csr_sort_(out)
    return out


@numba_kernel_generator
def _csr_has_duplicate_numba_kernel_generator():
    @pjit_fn
    def kernel(indptr, indices, row_sorted, out):
        for r in numba.prange(indptr.shape[0] - 1):
            start = indptr[r]
            end = indptr[r + 1]
            if end - start > 1:
                if row_sorted:
                    for j in range(start + 1, end):
                        if indices[j] == indices[j - 1]:
                            out[r] = True
                            break
                else:
                    cols = np.sort(indices[start:end])
                    for j in range(1, cols.shape[0]):
                        if cols[j] == cols[j - 1]:
                            out[r] = True
                            break

    return kernel


def csr_has_duplicate(csr: CSRMatrix) -> bool:
    """Whether some row stores the same column id more than once."""
    indptr, indices, _ = host_arrays(csr)
    out = np.zeros(csr.num_rows, dtype=np.bool_)
    _csr_has_duplicate_numba_kernel_generator()(indptr, indices, csr.sorted, out)
    return bool(np.any(out))
