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

import brainunit as u
import jax.numpy as jnp
import numba
import numpy as np
import pytest

from graphcsr._config import numba_environ, numba_environ_context
from graphcsr._error import CSRValidityError
from graphcsr._misc import (
    as_host_ids,
    as_host_weights,
    as_index_buffer,
    broadcast_pairs,
    check_ids_in_range,
    check_input_dtypes,
    csr_to_coo_index,
    exclusive_cumsum,
)
from graphcsr._numba_kernel import numba_kernel_generator, pjit_fn


class TestHostIds:
    def test_scalar(self):
        np.testing.assert_array_equal(as_host_ids(3), [3])

    def test_dtype(self):
        assert as_host_ids(jnp.array([1, 2], dtype=jnp.int32)).dtype == np.int64
        assert as_host_ids([]).shape == (0,)

    def test_rejects(self):
        with pytest.raises(ValueError):
            as_host_ids([[0, 1]])
        with pytest.raises(ValueError):
            as_host_ids([0.5])

    def test_range(self):
        check_ids_in_range(np.array([0, 2]), 3, 'Row')
        with pytest.raises(IndexError):
            check_ids_in_range(np.array([0, 3]), 3, 'Row')
        with pytest.raises(IndexError):
            check_ids_in_range(np.array([-1]), 3, 'Row')


class TestHostWeights:
    def test_none_and_empty(self):
        assert as_host_weights(None, 4).size == 0
        assert as_host_weights([], 4).size == 0

    def test_quantity(self):
        out = as_host_weights(jnp.array([1., 2.]) * u.mS, 2)
        np.testing.assert_allclose(out, [1., 2.])

    def test_invalid(self):
        with pytest.raises(ValueError):
            as_host_weights([1.], 2)
        with pytest.raises(ValueError):
            as_host_weights([1., np.nan], 2)
        with pytest.raises(ValueError):
            as_host_weights([1., -1.], 2)
        np.testing.assert_array_equal(as_host_weights([1., -1.], 2, non_negative=False), [1., -1.])


class TestHelpers:
    def test_index_buffer_keeps_arrays(self):
        x = jnp.array([0, 1], dtype=jnp.int32)
        assert as_index_buffer(x) is x

    def test_exclusive_cumsum(self):
        np.testing.assert_array_equal(exclusive_cumsum(np.array([2, 0, 3])), [0, 2, 2, 5])
        np.testing.assert_array_equal(exclusive_cumsum(np.zeros(0, dtype=np.int64)), [0])

    def test_broadcast_pairs(self):
        rows, cols = broadcast_pairs(np.array([1]), np.array([0, 1, 2]))
        np.testing.assert_array_equal(rows, [1, 1, 1])
        with pytest.raises(ValueError):
            broadcast_pairs(np.array([0, 1]), np.array([0, 1, 2]))

    def test_csr_to_coo_index(self):
        row_ids, col_ids = csr_to_coo_index(np.array([0, 2, 3, 5]), np.array([0, 2, 1, 0, 3]))
        np.testing.assert_array_equal(row_ids, [0, 0, 1, 2, 2])
        np.testing.assert_array_equal(col_ids, [0, 2, 1, 0, 3])


@numba_kernel_generator
def _scale_kernel_generator(factor: int):
    @pjit_fn
    def kernel(x, out):
        for i in numba.prange(x.shape[0]):
            out[i] = x[i] * factor

    return kernel


class TestNumbaKernelGenerator:
    def test_cached_per_kwargs(self):
        k2 = _scale_kernel_generator(factor=2)
        assert _scale_kernel_generator(factor=2) is k2
        assert _scale_kernel_generator(factor=3) is not k2

    def test_cached_per_environment(self):
        serial = _scale_kernel_generator(factor=2)
        with numba_environ_context(parallel_if_possible=not numba_environ.parallel):
            other = _scale_kernel_generator(factor=2)
        assert other is not serial
        assert _scale_kernel_generator(factor=2) is serial

    def test_runs(self):
        x = np.arange(4, dtype=np.int64)
        out = np.empty_like(x)
        _scale_kernel_generator(factor=3)(x, out)
        np.testing.assert_array_equal(out, [0, 3, 6, 9])

    def test_repr(self):
        assert '_scale_kernel_generator' in repr(_scale_kernel_generator)


class TestInputDtypes:
    def test_mixed_numpy_widths(self):
        with pytest.raises(CSRValidityError, match='indices'):
            check_input_dtypes(
                'CSRMatrix',
                indptr=np.zeros(2, dtype=np.int32),
                indices=np.zeros(1, dtype=np.int64),
            )

    def test_sequences_and_none_skipped(self):
        check_input_dtypes('CSRMatrix', indptr=[0, 1], indices=np.zeros(1, dtype=np.int64), data=None)
