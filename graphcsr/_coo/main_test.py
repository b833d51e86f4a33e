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

import jax
import jax.numpy as jnp
import numpy as np
import pytest

import graphcsr
from graphcsr._coo import COOMatrix


class TestCOOMatrix:
    def test_construct(self):
        coo = COOMatrix(3, 4, [0, 2, 2], [1, 3, 3])
        assert coo.shape == (3, 4)
        assert coo.nnz == 3
        assert not coo.has_data()
        assert not coo.row_sorted
        np.testing.assert_array_equal(coo.todense()[2], [0, 0, 0, 2])

    def test_length_mismatch(self):
        with pytest.raises(graphcsr.CSRValidityError):
            COOMatrix(2, 2, [0, 1], [1])
        with pytest.raises(graphcsr.CSRValidityError):
            COOMatrix(2, 2, [0, 1], [1, 0], [0])

    def test_dtype_mismatch(self):
        with pytest.raises(graphcsr.CSRValidityError):
            COOMatrix(2, 2, jnp.array([0, 1], dtype=jnp.int32), jnp.array([1, 0], dtype=jnp.uint32))

    def test_int32_int64_mismatch(self):
        with pytest.raises(graphcsr.CSRValidityError, match='dtype'):
            COOMatrix(2, 2, np.array([0, 1], dtype=np.int32), np.array([1, 0], dtype=np.int64))
        with pytest.raises(graphcsr.CSRValidityError, match='dtype'):
            COOMatrix(
                2, 2,
                np.array([0, 1], dtype=np.int32),
                np.array([1, 0], dtype=np.int32),
                np.array([0, 1], dtype=np.int64),
            )

    def test_float_buffers(self):
        with pytest.raises(graphcsr.CSRValidityError):
            COOMatrix(2, 2, jnp.array([0., 1.]), jnp.array([1., 0.]))

    def test_copy_to_same_device(self):
        coo = COOMatrix(1, 1, [0], [0])
        assert coo.copy_to(coo.device) is coo

    def test_pytree(self):
        coo = COOMatrix(2, 3, [0, 1], [2, 0], [1, 0], row_sorted=True)
        leaves, treedef = jax.tree_util.tree_flatten(coo)
        assert len(leaves) == 3
        out = jax.tree_util.tree_unflatten(treedef, leaves)
        assert out.shape == (2, 3)
        assert out.row_sorted and not out.col_sorted
        np.testing.assert_array_equal(np.asarray(out.data), [1, 0])

    def test_repr(self):
        assert 'nnz=2' in repr(COOMatrix(2, 3, [0, 1], [2, 0]))
