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

from graphcsr._csr.lookup import csr_get_data_and_indices, csr_get_all_data, csr_get_data
from graphcsr._csr.main import CSRMatrix
from graphcsr._csr.sort import csr_sort
from graphcsr._csr.test_util import entries, example_csr, get_csr


def _multigraph():
    # row 0: (0,1)x2 with ids 7, 8; row 1: (1,0) id 9; row 2 empty
    return CSRMatrix(3, 3, [0, 3, 4, 4], [1, 2, 1, 0], [7, 5, 8, 9])


class TestGetDataAndIndices:
    def test_duplicates_produce_one_output_each(self):
        rows, cols, data = csr_get_data_and_indices(_multigraph(), [0, 1, 2], [1, 0, 0])
        np.testing.assert_array_equal(np.asarray(rows), [0, 0, 1])
        np.testing.assert_array_equal(np.asarray(cols), [1, 1, 0])
        np.testing.assert_array_equal(np.asarray(data), [7, 8, 9])

    def test_unmatched_are_omitted(self):
        rows, cols, data = csr_get_data_and_indices(_multigraph(), [2, 0], [2, 0])
        assert rows.shape == (0,)
        assert cols.shape == (0,)
        assert data.shape == (0,)

    def test_broadcast(self):
        rows, cols, data = csr_get_data_and_indices(_multigraph(), [0], [0, 1, 2])
        np.testing.assert_array_equal(np.asarray(cols), [1, 1, 2])
        np.testing.assert_array_equal(np.asarray(data), [7, 8, 5])

    @pytest.mark.parametrize('sorted_', [False, True])
    def test_matches_reference(self, sorted_):
        csr = get_csr(10, 6, max_degree=6, with_data=True, seed=1)
        if sorted_:
            csr = csr_sort(csr)
        rows, cols = np.meshgrid(np.arange(10), np.arange(6), indexing='ij')
        out_rows, out_cols, out_data = csr_get_data_and_indices(csr, rows.ravel(), cols.ravel())
        got = sorted(zip(np.asarray(out_rows).tolist(), np.asarray(out_cols).tolist(), np.asarray(out_data).tolist()))
        assert got == sorted(entries(csr))

    def test_output_dtype(self):
        csr = example_csr()
        rows, cols, data = csr_get_data_and_indices(csr, [0], [1])
        assert data.dtype == csr.dtype


class TestGetAllData:
    def test_all_duplicates(self):
        np.testing.assert_array_equal(np.asarray(csr_get_all_data(_multigraph(), 0, 1)), [7, 8])
        assert csr_get_all_data(_multigraph(), 2, 2).shape == (0,)


class TestGetData:
    def test_sentinel(self):
        out = csr_get_data(_multigraph(), [0, 2, 1], [0, 2, 0])
        np.testing.assert_array_equal(np.asarray(out), [-1, -1, 9])

    def test_first_duplicate_wins(self):
        out = csr_get_data(_multigraph(), [0], [1])
        np.testing.assert_array_equal(np.asarray(out), [7])

    def test_first_duplicate_wins_sorted(self):
        csr = csr_sort(_multigraph())
        np.testing.assert_array_equal(np.asarray(csr_get_data(csr, [0], [1])), [7])

    def test_repeated_queries(self):
        out = csr_get_data(_multigraph(), [1, 1, 1], [0, 0, 0])
        np.testing.assert_array_equal(np.asarray(out), [9, 9, 9])

    def test_positions_without_data(self):
        out = csr_get_data(example_csr(), [0, 0, 3], [0, 1, 1])
        np.testing.assert_array_equal(np.asarray(out), [1, 0, 4])

    @pytest.mark.parametrize('seed', [0, 1, 2])
    def test_absent_pairs_always_minus_one(self, seed):
        csr = get_csr(8, 8, seed=seed, with_data=True)
        present = {(r, c) for r, c, _ in entries(csr)}
        rows, cols = np.meshgrid(np.arange(8), np.arange(8), indexing='ij')
        out = np.asarray(csr_get_data(csr, rows.ravel(), cols.ravel()))
        for r, c, v in zip(rows.ravel(), cols.ravel(), out):
            if (r, c) in present:
                assert v >= 0
            else:
                assert v == -1

    def test_out_of_range(self):
        with pytest.raises(IndexError):
            csr_get_data(example_csr(), [0], [4])
