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

import enum
from typing import NamedTuple, Optional, Tuple, Union

import jax

from ._coo import COOMatrix
from ._csr.main import CSRMatrix

__all__ = [
    'SparseFormat',
    'SparseMatrix',
    'to_sparse_matrix',
    'from_sparse_matrix',
]


class SparseFormat(enum.IntEnum):
    """Layout tag of a :class:`SparseMatrix` envelope."""
    ANY = 0
    COO = 1
    CSR = 2
    CSC = 3


class SparseMatrix(NamedTuple):
    """
    Format-tagged envelope used to hand sparse matrices across an API boundary.

    The buffer and flag layout depends on ``format``:

    =========  ============================  ==========================
    format     indices                       flags
    =========  ============================  ==========================
    ``COO``    ``(row, col, data)``          ``(row_sorted, col_sorted)``
    ``CSR``    ``(indptr, indices, data)``   ``(sorted,)``
    ``CSC``    ``(indptr, indices, data)``   ``(sorted,)``
    =========  ============================  ==========================

    ``data`` is ``None`` when the matrix has no data array. A ``CSC``
    envelope of shape ``(num_rows, num_cols)`` compresses columns: its
    ``indptr`` has ``num_cols + 1`` elements and its ``indices`` hold row
    ids, which is the CSR layout of the transposed matrix.
    """
    format: SparseFormat
    num_rows: int
    num_cols: int
    indices: Tuple[Optional[jax.Array], ...]
    flags: Tuple[bool, ...]


def to_sparse_matrix(
    mat: Union[CSRMatrix, COOMatrix],
    format: Optional[SparseFormat] = None,
) -> SparseMatrix:
    """
    Wrap a matrix into a :class:`SparseMatrix` envelope.

    Parameters
    ----------
    mat : CSRMatrix or COOMatrix
        The matrix to wrap. Buffers are shared, not copied.
    format : SparseFormat, optional
        ``CSR`` (default for a ``CSRMatrix``) or ``CSC`` for a
        ``CSRMatrix``, in which case ``mat`` is read as the compressed
        columns of a ``(mat.num_cols, mat.num_rows)`` matrix; ``COO`` for a
        ``COOMatrix``.

    Raises
    ------
    ValueError
        If ``format`` does not describe ``mat``.
    """
    if isinstance(mat, CSRMatrix):
        format = SparseFormat.CSR if format is None else SparseFormat(format)
        if format == SparseFormat.CSR:
            num_rows, num_cols = mat.num_rows, mat.num_cols
        elif format == SparseFormat.CSC:
            num_rows, num_cols = mat.num_cols, mat.num_rows
        else:
            raise ValueError(f'A CSRMatrix cannot be wrapped as {format.name}.')
        return SparseMatrix(format, num_rows, num_cols, (mat.indptr, mat.indices, mat.data), (mat.sorted,))

    if isinstance(mat, COOMatrix):
        format = SparseFormat.COO if format is None else SparseFormat(format)
        if format != SparseFormat.COO:
            raise ValueError(f'A COOMatrix cannot be wrapped as {format.name}.')
        return SparseMatrix(
            format, mat.num_rows, mat.num_cols, (mat.row, mat.col, mat.data), (mat.row_sorted, mat.col_sorted)
        )

    raise TypeError(f'Expected a CSRMatrix or COOMatrix, got {type(mat).__name__}.')


def from_sparse_matrix(spmat: SparseMatrix) -> Union[CSRMatrix, COOMatrix]:
    """
    Unwrap a :class:`SparseMatrix` envelope.

    ``CSR`` envelopes give a ``CSRMatrix``, ``CSC`` envelopes the
    ``CSRMatrix`` of the transposed matrix, ``COO`` envelopes a
    ``COOMatrix``. The only checks are those of the matrix constructors.

    Raises
    ------
    ValueError
        For an ``ANY`` envelope or a malformed buffer or flag list.
    """
    fmt = SparseFormat(spmat.format)
    if fmt == SparseFormat.ANY:
        raise ValueError('An envelope with format ANY does not describe a concrete layout.')
    if len(spmat.indices) != 3:
        raise ValueError(f'A {fmt.name} envelope holds 3 buffers, got {len(spmat.indices)}.')

    if fmt == SparseFormat.COO:
        if len(spmat.flags) != 2:
            raise ValueError(f'A COO envelope holds 2 flags, got {len(spmat.flags)}.')
        row, col, data = spmat.indices
        row_sorted, col_sorted = spmat.flags
        return COOMatrix(spmat.num_rows, spmat.num_cols, row, col, data, row_sorted=row_sorted, col_sorted=col_sorted)

    if len(spmat.flags) != 1:
        raise ValueError(f'A {fmt.name} envelope holds 1 flag, got {len(spmat.flags)}.')
    indptr, indices, data = spmat.indices
    sorted_, = spmat.flags
    if fmt == SparseFormat.CSR:
        return CSRMatrix(spmat.num_rows, spmat.num_cols, indptr, indices, data, sorted=sorted_)
    return CSRMatrix(spmat.num_cols, spmat.num_rows, indptr, indices, data, sorted=sorted_)
