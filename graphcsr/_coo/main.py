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

from typing import Optional

import jax
import jax.numpy as jnp
import numpy as np

from graphcsr._error import CSRValidityError
from graphcsr._misc import as_index_buffer, check_input_dtypes, device_of
from graphcsr._typing import IdArrayLike, MatrixShape

__all__ = [
    'COOMatrix',
]


@jax.tree_util.register_pytree_node_class
class COOMatrix:
    """
    Coordinate Format (COO) sparse matrix of entry ids.

    A thin container for the ``(row, col[, data])`` triples produced by the
    CSR routines (conversion, sampling, top-k). It only checks that its
    buffers agree with each other; it does not implement COO algorithms.

    Attributes
    ----------
    num_rows, num_cols : int
        Logical shape.
    row, col : jax.Array
        Row and column id of every stored entry.
    data : jax.Array or None
        Entry id of every stored entry. ``None`` stands for ``0..nnz-1``.
    row_sorted : bool
        Whether ``row`` is non-decreasing.
    col_sorted : bool
        Whether ``col`` is non-decreasing within every row. Only meaningful
        when ``row_sorted`` is true.
    """
    __module__ = 'graphcsr'

    def __init__(
        self,
        num_rows: int,
        num_cols: int,
        row: IdArrayLike,
        col: IdArrayLike,
        data: Optional[IdArrayLike] = None,
        row_sorted: bool = False,
        col_sorted: bool = False,
    ):
        self.num_rows = int(num_rows)
        self.num_cols = int(num_cols)
        check_input_dtypes(self.__class__.__name__, row=row, col=col, data=data)
        self.row = as_index_buffer(row)
        self.col = as_index_buffer(col)
        self.data = None if data is None else as_index_buffer(data)
        self.row_sorted = bool(row_sorted)
        self.col_sorted = bool(col_sorted)
        self.check_validity()

    def check_validity(self):
        buffers = [('row', self.row), ('col', self.col)]
        if self.data is not None:
            buffers.append(('data', self.data))
        for name, buf in buffers:
            if buf.ndim != 1:
                raise CSRValidityError(f'COO {name} must be one-dimensional, got shape {buf.shape}.')
            if buf.dtype != self.row.dtype:
                raise CSRValidityError(f'COO {name} has dtype {buf.dtype}, expected {self.row.dtype}.')
            if device_of(buf) != device_of(self.row):
                raise CSRValidityError(f'COO {name} lives on {device_of(buf)}, expected {device_of(self.row)}.')
        if not jnp.issubdtype(self.row.dtype, jnp.integer):
            raise CSRValidityError(f'COO index buffers must be integers, got {self.row.dtype}.')
        if self.row.shape[0] != self.col.shape[0]:
            raise CSRValidityError(
                f'COO row and col must have the same length, got {self.row.shape[0]} and {self.col.shape[0]}.'
            )
        if self.data is not None and self.data.shape[0] != self.row.shape[0]:
            raise CSRValidityError(
                f'COO data must have one id per entry, got {self.data.shape[0]} for {self.row.shape[0]} entries.'
            )

    @property
    def shape(self) -> MatrixShape:
        return self.num_rows, self.num_cols

    @property
    def nnz(self) -> int:
        return self.row.shape[0]

    @property
    def dtype(self):
        return self.row.dtype

    @property
    def device(self):
        return device_of(self.row)

    def has_data(self) -> bool:
        return self.data is not None

    def copy_to(self, device) -> 'COOMatrix':
        """Return the matrix on ``device``; ``self`` when it already lives there."""
        if device == self.device:
            return self
        return COOMatrix(
            self.num_rows,
            self.num_cols,
            jax.device_put(self.row, device),
            jax.device_put(self.col, device),
            None if self.data is None else jax.device_put(self.data, device),
            row_sorted=self.row_sorted,
            col_sorted=self.col_sorted,
        )

    def todense(self) -> np.ndarray:
        """Count matrix: entry ``(i, j)`` is the number of stored ``(i, j)`` pairs."""
        out = np.zeros(self.shape, dtype=np.int64)
        np.add.at(out, (np.asarray(self.row), np.asarray(self.col)), 1)
        return out

    def tree_flatten(self):
        aux = {
            'num_rows': self.num_rows,
            'num_cols': self.num_cols,
            'row_sorted': self.row_sorted,
            'col_sorted': self.col_sorted,
        }
        return (self.row, self.col, self.data), aux

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        obj = object.__new__(cls)
        obj.row, obj.col, obj.data = children
        for k, v in aux_data.items():
            setattr(obj, k, v)
        return obj

    def __repr__(self):
        return (
            f'COOMatrix(shape={self.shape}, nnz={self.nnz}, dtype={self.dtype}, '
            f'has_data={self.has_data()}, row_sorted={self.row_sorted}, col_sorted={self.col_sorted})'
        )
