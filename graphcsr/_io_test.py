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

import io
import struct

import jax
import numpy as np
import pytest

import graphcsr
from graphcsr._coo import COOMatrix
from graphcsr._csr.main import CSRMatrix
from graphcsr._csr.test_util import example_csr, get_csr
from graphcsr._error import DeserializationError
from graphcsr._io import CSR_MAGIC, COO_MAGIC, NDARRAY_MAGIC, load, read_array, save, write_array


def _dump(obj) -> bytes:
    fs = io.BytesIO()
    save(fs, obj)
    return fs.getvalue()


def _assert_same_csr(a, b):
    assert a.shape == b.shape
    assert a.sorted == b.sorted
    np.testing.assert_array_equal(np.asarray(a.indptr), np.asarray(b.indptr))
    np.testing.assert_array_equal(np.asarray(a.indices), np.asarray(b.indices))
    if b.data is None:
        assert a.data is None
    else:
        np.testing.assert_array_equal(np.asarray(a.data), np.asarray(b.data))


class TestArrayRecord:
    @pytest.mark.parametrize('arr', [
        np.arange(5, dtype=np.int32),
        np.arange(6, dtype=np.int64).reshape(2, 3),
        np.array([1.5, -2.], dtype=np.float32),
        np.array([True, False]),
        np.zeros(0, dtype=np.uint8),
    ])
    def test_round_trip(self, arr):
        fs = io.BytesIO()
        write_array(fs, arr)
        fs.seek(0)
        out = read_array(fs)
        assert out.dtype == arr.dtype
        np.testing.assert_array_equal(out, arr)

    def test_header_layout(self):
        fs = io.BytesIO()
        write_array(fs, np.array([1, 2, 3], dtype=np.int32))
        buf = fs.getvalue()
        magic, reserved, dev_type, dev_id, ndim, code, bits, lanes = struct.unpack_from('<QQiiiBBH', buf)
        assert magic == NDARRAY_MAGIC
        assert (reserved, dev_type, dev_id, ndim, code, bits, lanes) == (0, 1, 0, 1, 0, 32, 1)
        shape, nbytes = struct.unpack_from('<qq', buf, 32)
        assert (shape, nbytes) == (3, 12)
        assert buf[48:] == np.array([1, 2, 3], dtype='<i4').tobytes()

    def test_unsupported_dtype(self):
        with pytest.raises(TypeError):
            write_array(io.BytesIO(), np.array([1 + 2j]))

    def test_bad_byte_size(self):
        fs = io.BytesIO()
        write_array(fs, np.arange(3, dtype=np.int64))
        buf = bytearray(fs.getvalue())
        struct.pack_into('<q', buf, 40, 16)
        with pytest.raises(DeserializationError):
            read_array(io.BytesIO(bytes(buf)))

    def test_bad_dtype_code(self):
        fs = io.BytesIO()
        write_array(fs, np.arange(3, dtype=np.int64))
        buf = bytearray(fs.getvalue())
        buf[28] = 9
        with pytest.raises(DeserializationError):
            read_array(io.BytesIO(bytes(buf)))


class TestCSRRecord:
    @pytest.mark.parametrize('with_data', [False, True])
    @pytest.mark.parametrize('sorted_', [False, True])
    def test_round_trip(self, with_data, sorted_):
        csr = example_csr(with_data=with_data, sorted=sorted_)
        out = load(io.BytesIO(_dump(csr)), CSRMatrix)
        _assert_same_csr(out, csr)
        assert out.dtype == csr.dtype
        assert out.device == jax.devices('cpu')[0]

    def test_random(self):
        csr = get_csr(30, 17, seed=3, with_data=True)
        _assert_same_csr(load(io.BytesIO(_dump(csr)), CSRMatrix), csr)

    def test_methods(self):
        csr = example_csr(with_data=True)
        fs = io.BytesIO()
        csr.save(fs)
        fs.seek(0)
        _assert_same_csr(CSRMatrix.load(fs), csr)

    def test_layout(self):
        buf = _dump(CSRMatrix(2, 5, [0, 1, 1], [4]))
        magic, num_cols, num_rows = struct.unpack_from('<Qqq', buf)
        assert magic == CSR_MAGIC
        assert (num_cols, num_rows) == (5, 2)
        # trailing sorted flag
        assert buf[-1:] == b'\x00'

    def test_several_records_in_one_stream(self):
        a = example_csr()
        b = get_csr(4, 4, seed=5, with_data=True)
        fs = io.BytesIO()
        save(fs, a)
        save(fs, b)
        fs.seek(0)
        _assert_same_csr(load(fs, CSRMatrix), a)
        _assert_same_csr(load(fs, CSRMatrix), b)

    def test_bad_magic(self):
        buf = bytearray(_dump(example_csr()))
        buf[0] ^= 0xFF
        with pytest.raises(DeserializationError):
            load(io.BytesIO(bytes(buf)), CSRMatrix)

    def test_coo_record_is_not_csr(self):
        coo = COOMatrix(2, 2, [0, 1], [1, 0])
        with pytest.raises(DeserializationError):
            load(io.BytesIO(_dump(coo)), CSRMatrix)

    @pytest.mark.parametrize('cut', [1, 10, 40])
    def test_truncated(self, cut):
        buf = _dump(example_csr(with_data=True))
        with pytest.raises(DeserializationError):
            load(io.BytesIO(buf[:-cut]), CSRMatrix)

    def test_invalid_matrix(self):
        # decodes fine, but indptr does not match num_rows
        fs = io.BytesIO()
        fs.write(struct.pack('<Qqq', CSR_MAGIC, 3, 3))
        write_array(fs, np.array([0, 1], dtype=np.int64))
        write_array(fs, np.array([0], dtype=np.int64))
        write_array(fs, np.zeros(0, dtype=np.int64))
        fs.write(struct.pack('<?', False))
        fs.seek(0)
        with pytest.raises(graphcsr.CSRValidityError):
            load(fs, CSRMatrix)


class TestCOORecord:
    def test_round_trip(self):
        coo = COOMatrix(3, 4, [0, 0, 2], [3, 1, 0], [2, 0, 1], row_sorted=True)
        buf = _dump(coo)
        magic, num_rows, num_cols = struct.unpack_from('<Qqq', buf)
        assert magic == COO_MAGIC
        assert (num_rows, num_cols) == (3, 4)
        out = load(io.BytesIO(buf), COOMatrix)
        assert out.shape == (3, 4)
        assert out.row_sorted and not out.col_sorted
        np.testing.assert_array_equal(np.asarray(out.row), [0, 0, 2])
        np.testing.assert_array_equal(np.asarray(out.col), [3, 1, 0])
        np.testing.assert_array_equal(np.asarray(out.data), [2, 0, 1])

    def test_without_data(self):
        out = load(io.BytesIO(_dump(COOMatrix(1, 1, [0], [0]))), COOMatrix)
        assert out.data is None


class TestRegistry:
    def test_unknown_type(self):
        with pytest.raises(TypeError):
            save(io.BytesIO(), np.arange(3))
        with pytest.raises(TypeError):
            load(io.BytesIO(), dict)
