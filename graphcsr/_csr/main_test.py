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

from graphcsr._csr.main import CSRMatrix, csr_from_host, host_arrays, host_entry_ids
from graphcsr._csr.test_util import dense_count, example_csr, get_csr
from graphcsr._error import CSRValidityError


class TestConstruction:
    def test_from_lists(self):
        csr = CSRMatrix(3, 4, [0, 1, 1, 3], [2, 0, 3])
        assert csr.shape == (3, 4)
        assert csr.nnz == 3
        assert csr.data is None
        assert not csr.sorted
        assert isinstance(csr.indptr, jax.Array)

    def test_from_numpy_keeps_dtype(self):
        csr = example_csr()
        assert csr.dtype == jnp.int32
        assert csr.indices.dtype == jnp.int32

    def test_validity_properties(self):
        for seed in range(5):
            csr = get_csr(20, 15, seed=seed, with_data=seed % 2 == 0)
            indptr = np.asarray(csr.indptr)
            assert indptr.shape[0] == csr.num_rows + 1
            assert indptr[0] == 0
            assert np.all(np.diff(indptr) >= 0)
            assert indptr[-1] == csr.nnz
            if csr.data is not None:
                assert csr.data.shape[0] == csr.nnz

    def test_empty_matrix(self):
        csr = CSRMatrix(0, 0, [0], [])
        assert csr.shape == (0, 0)
        assert csr.nnz == 0


class TestValidity:
    def test_indptr_length(self):
        with pytest.raises(CSRValidityError, match='indptr'):
            CSRMatrix(3, 3, np.array([0, 1], dtype=np.int32), np.array([0], dtype=np.int32))

    def test_dtype_mismatch(self):
        with pytest.raises(CSRValidityError, match='dtype'):
            CSRMatrix(2, 2, np.array([0, 1, 1], dtype=np.int32), np.array([0], dtype=np.int16))

    def test_data_dtype_mismatch(self):
        with pytest.raises(CSRValidityError, match='dtype'):
            CSRMatrix(
                2, 2,
                np.array([0, 1, 1], dtype=np.int32),
                np.array([0], dtype=np.int32),
                np.array([0], dtype=np.int16),
            )

    def test_int32_int64_indices_mismatch(self):
        with pytest.raises(CSRValidityError, match='dtype'):
            CSRMatrix(2, 2, np.array([0, 1, 1], dtype=np.int32), np.array([0], dtype=np.int64))

    def test_int32_int64_data_mismatch(self):
        with pytest.raises(CSRValidityError, match='dtype'):
            CSRMatrix(
                2, 2,
                np.array([0, 1, 1], dtype=np.int32),
                np.array([0], dtype=np.int32),
                np.array([0], dtype=np.int64),
            )

    def test_int64_inputs_agree(self):
        csr = CSRMatrix(2, 2, np.array([0, 1, 1], dtype=np.int64), np.array([0], dtype=np.int64))
        assert csr.nnz == 1

    def test_non_integer_dtype(self):
        with pytest.raises(CSRValidityError, match='integer'):
            CSRMatrix(2, 2, np.array([0., 1., 1.], dtype=np.float32), np.array([0.], dtype=np.float32))

    def test_dtype_overflow(self):
        indptr = np.zeros(201, dtype=np.int8)
        with pytest.raises(CSRValidityError, match='cannot represent'):
            CSRMatrix(200, 3, indptr, np.zeros(0, dtype=np.int8))

    def test_two_dimensional_buffer(self):
        with pytest.raises(CSRValidityError, match='one-dimensional'):
            CSRMatrix(1, 2, np.array([0, 2], dtype=np.int32), np.array([[0, 1]], dtype=np.int32))

    def test_negative_shape(self):
        with pytest.raises(CSRValidityError):
            CSRMatrix(-1, 2, np.array([0], dtype=np.int32), np.array([], dtype=np.int32))


class TestDevice:
    def test_copy_to_same_device_aliases(self):
        csr = example_csr()
        assert csr.copy_to(csr.device) is csr

    def test_copy_to_other_device(self):
        devices = jax.devices()
        if len(devices) < 2:
            pytest.skip('Requires at least two devices.')
        csr = example_csr(with_data=True)
        moved = csr.copy_to(devices[1])
        assert moved is not csr
        assert moved.device == devices[1]
        np.testing.assert_array_equal(np.asarray(moved.indices), np.asarray(csr.indices))

    def test_device_of_buffers(self):
        csr = example_csr()
        assert csr.device in jax.devices()


class TestPytree:
    def test_flatten_roundtrip(self):
        csr = example_csr(with_data=True, sorted=True)
        leaves, treedef = jax.tree_util.tree_flatten(csr)
        assert len(leaves) == 3
        rebuilt = jax.tree_util.tree_unflatten(treedef, leaves)
        assert isinstance(rebuilt, CSRMatrix)
        assert rebuilt.shape == csr.shape
        assert rebuilt.sorted
        np.testing.assert_array_equal(np.asarray(rebuilt.data), np.asarray(csr.data))

    def test_no_data_leaf(self):
        csr = example_csr()
        leaves = jax.tree_util.tree_leaves(csr)
        assert len(leaves) == 2

    def test_tree_map(self):
        csr = example_csr()
        shifted = jax.tree_util.tree_map(lambda x: x + 0, csr)
        np.testing.assert_array_equal(np.asarray(shifted.indices), np.asarray(csr.indices))


class TestHostHelpers:
    def test_host_arrays(self):
        csr = example_csr()
        indptr, indices, data = host_arrays(csr)
        assert indptr.dtype == np.int64
        assert data is None
        np.testing.assert_array_equal(indices, [1, 0, 2, 3, 1])

    def test_host_entry_ids(self):
        np.testing.assert_array_equal(host_entry_ids(example_csr()), np.arange(5))
        csr = CSRMatrix(1, 2, [0, 2], [1, 0], [5, 3])
        np.testing.assert_array_equal(host_entry_ids(csr), [5, 3])

    def test_csr_from_host(self):
        like = example_csr()
        out = csr_from_host(like, 1, 4, np.array([0, 2]), np.array([3, 1]), np.array([1, 0]), sorted=False)
        assert out.dtype == like.dtype
        assert out.device == like.device
        assert out.shape == (1, 4)


class TestMethods:
    def test_todense(self):
        csr = CSRMatrix(2, 3, [0, 3, 4], [2, 2, 0, 1])
        np.testing.assert_array_equal(csr.todense(), [[1, 0, 2], [0, 1, 0]])
        np.testing.assert_array_equal(csr.todense(), dense_count(csr))

    def test_delegates(self):
        csr = example_csr()
        assert not csr.has_data()
        assert not csr.is_sorted()
        assert csr.is_nonzero(0, 1)
        assert csr.get_row_nnz(0) == 2
        assert csr.T.shape == (4, 4)
        assert csr.tocoo().nnz == 5
        assert csr.sort().sorted
        assert csr.slice_rows(1, 3).num_rows == 2
        assert not csr.has_duplicate()
        np.testing.assert_array_equal(np.asarray(csr.get_data([0], [0])), [1])

    def test_sort_method_mutates(self):
        csr = example_csr()
        assert csr.sort_() is csr
        assert csr.sorted
        np.testing.assert_array_equal(np.asarray(csr.indices), [0, 1, 2, 1, 3])

    def test_repr(self):
        text = repr(example_csr())
        assert 'CSRMatrix' in text
        assert 'nnz=5' in text
