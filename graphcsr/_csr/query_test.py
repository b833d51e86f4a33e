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

import numpy as np
import pytest

from graphcsr._csr.query import (
    csr_is_nonzero,
    csr_get_row_nnz,
    csr_get_row_column_indices,
    csr_get_row_data,
    csr_is_sorted,
    csr_has_data,
)
from graphcsr._csr.main import CSRMatrix
from graphcsr._csr.sort import csr_sort
from graphcsr._csr.test_util import dense_count, example_csr, get_csr


class TestIsNonzero:
    def test_scalar(self):
        csr = example_csr()
        assert csr_is_nonzero(csr, 0, 1) is True
        assert csr_is_nonzero(csr, 0, 2) is False
        assert csr_is_nonzero(csr, 2, 0) is False

    @pytest.mark.parametrize('sorted_', [False, True])
    def test_batch_matches_dense(self, sorted_):
        csr = get_csr(12, 9, seed=3)
        if sorted_:
            csr = csr_sort(csr)
        dense = dense_count(csr) > 0
        rows, cols = np.meshgrid(np.arange(12), np.arange(9), indexing='ij')
        out = np.asarray(csr_is_nonzero(csr, rows.ravel(), cols.ravel()))
        np.testing.assert_array_equal(out, dense.ravel())

    def test_broadcast_row(self):
        csr = example_csr()
        out = csr_is_nonzero(csr, [0], [0, 1, 2, 3])
        np.testing.assert_array_equal(np.asarray(out), [True, True, False, False])

    def test_broadcast_col(self):
        csr = example_csr()
        out = csr_is_nonzero(csr, [0, 1, 2, 3], [1])
        np.testing.assert_array_equal(np.asarray(out), [True, False, False, True])

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            csr_is_nonzero(example_csr(), [0, 1], [0, 1, 2])

    def test_out_of_range(self):
        csr = example_csr()
        with pytest.raises(IndexError):
            csr_is_nonzero(csr, 4, 0)
        with pytest.raises(IndexError):
            csr_is_nonzero(csr, [0, 1], [0, 7])


class TestRowNnz:
    def test_scalar(self):
        csr = example_csr()
        assert [csr_get_row_nnz(csr, r) for r in range(4)] == [2, 1, 0, 2]

    def test_batch(self):
        csr = example_csr()
        out = csr_get_row_nnz(csr, np.array([3, 0, 2, 3]))
        np.testing.assert_array_equal(np.asarray(out), [2, 2, 0, 2])
        assert out.dtype == csr.dtype

    def test_out_of_range(self):
        with pytest.raises(IndexError):
            csr_get_row_nnz(example_csr(), -1)


class TestRowExtraction:
    def test_column_indices(self):
        csr = example_csr()
        np.testing.assert_array_equal(np.asarray(csr_get_row_column_indices(csr, 0)), [1, 0])
        assert csr_get_row_column_indices(csr, 2).shape == (0,)

    def test_row_data_without_data(self):
        csr = example_csr()
        np.testing.assert_array_equal(np.asarray(csr_get_row_data(csr, 3)), [3, 4])

    def test_row_data_with_data(self):
        csr = CSRMatrix(2, 3, [0, 1, 3], [2, 0, 1], [9, 7, 8])
        np.testing.assert_array_equal(np.asarray(csr_get_row_data(csr, 1)), [7, 8])


class TestFlags:
    def test_is_sorted(self):
        assert not csr_is_sorted(example_csr())
        assert csr_is_sorted(example_csr(sorted=True))
        assert csr_is_sorted(CSRMatrix(2, 2, [0, 2, 2], [1, 1]))

    def test_is_sorted_ignores_flag(self):
        csr = CSRMatrix(1, 3, [0, 2], [2, 0], sorted=True)
        assert not csr_is_sorted(csr)

    def test_has_data(self):
        assert not csr_has_data(example_csr())
        assert csr_has_data(example_csr(with_data=True))
        assert csr_has_data(CSRMatrix(1, 1, [0, 0], [], []))
