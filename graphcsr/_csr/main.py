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

from typing import Optional, Tuple

import jax
import jax.numpy as jnp
import numpy as np

from graphcsr._error import CSRValidityError
from graphcsr._misc import as_index_buffer, check_input_dtypes, device_of, to_device
from graphcsr._typing import Indptr, Index, IdArrayLike, MatrixShape

__all__ = [
    'CSRMatrix',
]


@jax.tree_util.register_pytree_node_class
class CSRMatrix:
    """
    Compressed Sparse Row (CSR) adjacency matrix.

    ``CSRMatrix`` stores the structure of a (multi)graph: row ``r`` owns the
    entries ``indptr[r]:indptr[r + 1]`` of ``indices`` (column ids) and of
    ``data`` (entry ids, e.g. edge ids). Duplicate ``(row, col)`` pairs are
    allowed. All buffers are ``jax.Array`` values on one device.

    The constructor validates the matrix and raises :class:`CSRValidityError`
    when

    * ``indptr``, ``indices`` and ``data`` differ in dtype or device,
    * the dtype is not an integer type able to hold ``max(num_rows, num_cols)``,
    * ``len(indptr) != num_rows + 1`` or a buffer is not one-dimensional.

    ``len(indices) == len(data) == indptr[-1]`` is relied upon but not checked.

    Parameters
    ----------
    num_rows : int
        Number of rows.
    num_cols : int
        Number of columns.
    indptr : array_like
        Row pointer array of shape ``(num_rows + 1,)``.
    indices : array_like
        Column id of every stored entry.
    data : array_like, optional
        Entry id of every stored entry. ``None`` (the default) means the
        identity ``0, 1, ..., nnz - 1``.
    sorted : bool, optional
        Whether the column ids of every row are ascending. A hint that is
        trusted, not verified; see :func:`csr_is_sorted`.

    Examples
    --------
    .. code-block:: python

        >>> import graphcsr
        >>> csr = graphcsr.CSRMatrix(4, 4, [0, 2, 3, 3, 5], [1, 0, 2, 3, 1])
        >>> csr.shape, csr.nnz
        ((4, 4), 5)
        >>> csr.sort().indices
        Array([0, 1, 2, 1, 3], dtype=int32)
    """
    __module__ = 'graphcsr'

    num_rows: int
    num_cols: int
    indptr: Indptr
    indices: Index
    data: Optional[Index]
    sorted: bool

    def __init__(
        self,
        num_rows: int,
        num_cols: int,
        indptr: IdArrayLike,
        indices: IdArrayLike,
        data: Optional[IdArrayLike] = None,
        sorted: bool = False,
    ):
        self.num_rows = int(num_rows)
        self.num_cols = int(num_cols)
        check_input_dtypes(self.__class__.__name__, indptr=indptr, indices=indices, data=data)
        self.indptr = as_index_buffer(indptr)
        self.indices = as_index_buffer(indices)
        self.data = None if data is None else as_index_buffer(data)
        self.sorted = bool(sorted)
        self.check_validity()

    def check_validity(self):
        """Raise :class:`CSRValidityError` if the matrix breaks an invariant."""
        if self.num_rows < 0 or self.num_cols < 0:
            raise CSRValidityError(f'Invalid shape {self.shape}: dimensions must be non-negative.')
        buffers = [('indptr', self.indptr), ('indices', self.indices)]
        if self.data is not None:
            buffers.append(('data', self.data))
        dtype = self.indptr.dtype
        device = device_of(self.indptr)
        for name, buf in buffers:
            if buf.ndim != 1:
                raise CSRValidityError(f'{name} must be one-dimensional, got shape {buf.shape}.')
            if buf.dtype != dtype:
                raise CSRValidityError(f'{name} has dtype {buf.dtype} but indptr has dtype {dtype}.')
            if device_of(buf) != device:
                raise CSRValidityError(f'{name} lives on {device_of(buf)} but indptr lives on {device}.')
        if not jnp.issubdtype(dtype, jnp.integer):
            raise CSRValidityError(f'CSR index buffers must have an integer dtype, got {dtype}.')
        if jnp.iinfo(dtype).max < max(self.num_rows, self.num_cols):
            raise CSRValidityError(
                f'dtype {dtype} cannot represent ids of a matrix with shape {self.shape}.'
            )
        if self.indptr.shape[0] != self.num_rows + 1:
            raise CSRValidityError(
                f'indptr must have num_rows + 1 = {self.num_rows + 1} elements, got {self.indptr.shape[0]}.'
            )

    @property
    def shape(self) -> MatrixShape:
        return self.num_rows, self.num_cols

    @property
    def nnz(self) -> int:
        """Number of stored entries, duplicates included."""
        return self.indices.shape[0]

    @property
    def dtype(self):
        return self.indptr.dtype

    @property
    def device(self):
        return device_of(self.indptr)

    def copy_to(self, device) -> 'CSRMatrix':
        """Return this matrix placed on ``device``.

        The matrix itself is returned when it already lives on ``device``;
        otherwise every buffer is copied with ``jax.device_put`` into a new,
        independent matrix.
        """
        if device == self.device:
            return self
        return CSRMatrix(
            self.num_rows,
            self.num_cols,
            jax.device_put(self.indptr, device),
            jax.device_put(self.indices, device),
            None if self.data is None else jax.device_put(self.data, device),
            sorted=self.sorted,
        )

    def todense(self) -> np.ndarray:
        """Count matrix: entry ``(i, j)`` is the number of stored ``(i, j)`` entries."""
        indptr, indices, _ = host_arrays(self)
        out = np.zeros(self.shape, dtype=np.int64)
        rows = np.repeat(np.arange(self.num_rows), np.diff(indptr))
        np.add.at(out, (rows, indices), 1)
        return out

    # ----- queries ----- #

    def has_data(self) -> bool:
        return self.data is not None

    def is_sorted(self) -> bool:
        from .query import csr_is_sorted
        return csr_is_sorted(self)

    def is_nonzero(self, row, col):
        from .query import csr_is_nonzero
        return csr_is_nonzero(self, row, col)

    def get_row_nnz(self, row):
        from .query import csr_get_row_nnz
        return csr_get_row_nnz(self, row)

    def get_data(self, rows, cols):
        from .lookup import csr_get_data
        return csr_get_data(self, rows, cols)

    def has_duplicate(self) -> bool:
        from .sort import csr_has_duplicate
        return csr_has_duplicate(self)

    # ----- transforms ----- #

    @property
    def T(self) -> 'CSRMatrix':
        from .transform import csr_transpose
        return csr_transpose(self)

    def transpose(self) -> 'CSRMatrix':
        return self.T

    def tocoo(self, data_as_order: bool = False):
        from .transform import csr_to_coo
        return csr_to_coo(self, data_as_order=data_as_order)

    def sort(self) -> 'CSRMatrix':
        from .sort import csr_sort
        return csr_sort(self)

    def sort_(self) -> 'CSRMatrix':
        from .sort import csr_sort_
        csr_sort_(self)
        return self

    def slice_rows(self, start, end=None) -> 'CSRMatrix':
        from .slice import csr_slice_rows
        return csr_slice_rows(self, start, end)

    def slice_matrix(self, rows, cols) -> 'CSRMatrix':
        from .slice import csr_slice_matrix
        return csr_slice_matrix(self, rows, cols)

    def reorder(self, new_row_ids, new_col_ids) -> 'CSRMatrix':
        from .transform import csr_reorder
        return csr_reorder(self, new_row_ids, new_col_ids)

    def remove(self, entries):
        from .transform import csr_remove
        return csr_remove(self, entries)

    # ----- persistence and interchange ----- #

    def save(self, fs):
        """Write the binary CSR record of this matrix to the file object ``fs``."""
        from graphcsr._io import save
        save(fs, self)

    @classmethod
    def load(cls, fs) -> 'CSRMatrix':
        """Read a matrix written by :meth:`save` from the file object ``fs``."""
        from graphcsr._io import load
        return load(fs, cls)

    def to_sparse_matrix(self, format=None):
        from graphcsr._sparse_format import SparseFormat, to_sparse_matrix
        return to_sparse_matrix(self, SparseFormat.CSR if format is None else format)

    @classmethod
    def from_sparse_matrix(cls, spmat) -> 'CSRMatrix':
        from graphcsr._sparse_format import SparseFormat, from_sparse_matrix
        if spmat.format not in (SparseFormat.CSR, SparseFormat.CSC):
            raise ValueError(f'Cannot build a CSRMatrix from a {spmat.format.name} envelope.')
        return from_sparse_matrix(spmat)

    # ----- pytree ----- #

    def tree_flatten(self):
        aux = {
            'num_rows': self.num_rows,
            'num_cols': self.num_cols,
            'sorted': self.sorted,
        }
        return (self.indptr, self.indices, self.data), aux

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        obj = object.__new__(cls)
        obj.indptr, obj.indices, obj.data = children
        for k, v in aux_data.items():
            setattr(obj, k, v)
        return obj

    def __repr__(self):
        return (
            f'CSRMatrix(shape={self.shape}, nnz={self.nnz}, dtype={self.dtype}, '
            f'has_data={self.has_data()}, sorted={self.sorted})'
        )


def host_arrays(csr: CSRMatrix) -> Tuple[np.ndarray, np.ndarray, Optional[np.ndarray]]:
    """Copy ``indptr``, ``indices`` and ``data`` to the host as ``int64``."""
    indptr = np.asarray(csr.indptr).astype(np.int64)
    indices = np.asarray(csr.indices).astype(np.int64)
    data = None if csr.data is None else np.asarray(csr.data).astype(np.int64)
    return indptr, indices, data


def host_entry_ids(csr: CSRMatrix) -> np.ndarray:
    """Entry ids on the host: ``data`` when present, else positions."""
    if csr.data is None:
        return np.arange(csr.nnz, dtype=np.int64)
    return np.asarray(csr.data).astype(np.int64)


def csr_from_host(
    like: CSRMatrix,
    num_rows: int,
    num_cols: int,
    indptr: np.ndarray,
    indices: np.ndarray,
    data: Optional[np.ndarray] = None,
    sorted: bool = False,
) -> CSRMatrix:
    """Build a matrix from host arrays with the dtype and device of ``like``."""
    device = like.device
    dtype = like.dtype
    return CSRMatrix(
        num_rows,
        num_cols,
        to_device(indptr, device, dtype),
        to_device(indices, device, dtype),
        None if data is None else to_device(data, device, dtype),
        sorted=sorted,
    )
