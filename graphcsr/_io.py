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

"""
Binary records for sparse matrices.

All integers are little-endian. A CSR record is laid out as::

    u64   magic  0xDD6CD31205DFF127
    i64   num_cols
    i64   num_rows
    array indptr
    array indices
    array data        (an empty int64 vector when the matrix has no data)
    u8    sorted

and a COO record as::

    u64   magic  0xDD61FFD305DFF127
    i64   num_rows
    i64   num_cols
    array row
    array col
    array data        (same convention as above)
    u8    row_sorted
    u8    col_sorted

where every ``array`` is an n-dimensional array record::

    u64   magic  0xDD5E40F096B4A13F
    u64   reserved
    i32   device type (1 = CPU)
    i32   device id
    i32   ndim
    u8    dtype code (0 = int, 1 = uint, 2 = float, 6 = bool)
    u8    dtype bits
    u16   dtype lanes
    i64   shape[ndim]
    i64   byte size
    bytes payload

Arrays are always written from a host copy and read back onto the CPU
device; use :meth:`CSRMatrix.copy_to` to move a loaded matrix elsewhere.
"""

import struct
from typing import BinaryIO, Callable, Dict, Optional, Tuple, Type, TypeVar

import jax
import numpy as np

from ._coo import COOMatrix
from ._csr.main import CSRMatrix
from ._error import DeserializationError

__all__ = [
    'save',
    'load',
]

CSR_MAGIC = 0xDD6CD31205DFF127
COO_MAGIC = 0xDD61FFD305DFF127
NDARRAY_MAGIC = 0xDD5E40F096B4A13F

_CPU_DEVICE_TYPE = 1

_KIND_TO_CODE = {'i': 0, 'u': 1, 'f': 2, 'b': 6}
_CODE_TO_KIND = {0: 'i', 1: 'u', 2: 'f', 6: 'b'}

_ARRAY_HEADER = struct.Struct('<QQiiiBBH')

T = TypeVar('T')


def _read_exact(fs: BinaryIO, n: int) -> bytes:
    buf = fs.read(n)
    if buf is None or len(buf) != n:
        got = 0 if buf is None else len(buf)
        raise DeserializationError(f'Unexpected end of stream: expected {n} bytes, got {got}.')
    return buf


def _read_struct(fs: BinaryIO, fmt: str):
    st = struct.Struct(fmt)
    return st.unpack(_read_exact(fs, st.size))


def _write_magic(fs: BinaryIO, magic: int):
    fs.write(struct.pack('<Q', magic))


def _check_magic(fs: BinaryIO, magic: int, what: str):
    got, = _read_struct(fs, '<Q')
    if got != magic:
        raise DeserializationError(f'Invalid {what} magic number: expected {magic:#x}, got {got:#x}.')


def write_array(fs: BinaryIO, arr) -> None:
    """Write one n-dimensional array record."""
    arr = np.ascontiguousarray(np.asarray(arr))
    code = _KIND_TO_CODE.get(arr.dtype.kind)
    if code is None:
        raise TypeError(f'Cannot serialize arrays of dtype {arr.dtype}.')
    fs.write(_ARRAY_HEADER.pack(
        NDARRAY_MAGIC, 0, _CPU_DEVICE_TYPE, 0, arr.ndim, code, arr.dtype.itemsize * 8, 1
    ))
    fs.write(struct.pack(f'<{arr.ndim}q', *arr.shape))
    payload = arr.astype(arr.dtype.newbyteorder('<'), copy=False).tobytes()
    fs.write(struct.pack('<q', len(payload)))
    fs.write(payload)


def read_array(fs: BinaryIO) -> np.ndarray:
    """Read one n-dimensional array record into a host array."""
    header = _read_exact(fs, _ARRAY_HEADER.size)
    magic, _, _, _, ndim, code, bits, lanes = _ARRAY_HEADER.unpack(header)
    if magic != NDARRAY_MAGIC:
        raise DeserializationError(f'Invalid array magic number: expected {NDARRAY_MAGIC:#x}, got {magic:#x}.')
    if ndim < 0:
        raise DeserializationError(f'Invalid array rank {ndim}.')
    kind = _CODE_TO_KIND.get(code)
    if kind is None or lanes != 1 or bits % 8 != 0:
        raise DeserializationError(f'Unsupported array dtype (code={code}, bits={bits}, lanes={lanes}).')
    try:
        dtype = np.dtype('?') if kind == 'b' else np.dtype(f'<{kind}{bits // 8}')
    except TypeError as e:
        raise DeserializationError(f'Unsupported array dtype (code={code}, bits={bits}).') from e
    shape = _read_struct(fs, f'<{ndim}q')
    nbytes, = _read_struct(fs, '<q')
    expected = int(np.prod(shape, dtype=np.int64)) * dtype.itemsize
    if nbytes != expected:
        raise DeserializationError(f'Array of shape {shape} and dtype {dtype} needs {expected} bytes, got {nbytes}.')
    return np.frombuffer(_read_exact(fs, nbytes), dtype=dtype).reshape(shape).astype(dtype.newbyteorder('='))


def _write_data(fs: BinaryIO, data):
    write_array(fs, np.zeros(0, dtype=np.int64) if data is None else data)


def _read_data(fs: BinaryIO) -> Optional[np.ndarray]:
    data = read_array(fs)
    return None if data.size == 0 else data


def _read_flag(fs: BinaryIO) -> bool:
    flag, = _read_struct(fs, '<?')
    return flag


def _cpu(arr: Optional[np.ndarray]):
    if arr is None:
        return None
    return jax.device_put(arr, jax.devices('cpu')[0])


def _write_csr(fs: BinaryIO, csr: CSRMatrix):
    _write_magic(fs, CSR_MAGIC)
    fs.write(struct.pack('<qq', csr.num_cols, csr.num_rows))
    write_array(fs, csr.indptr)
    write_array(fs, csr.indices)
    _write_data(fs, csr.data)
    fs.write(struct.pack('<?', csr.sorted))


def _read_csr(fs: BinaryIO) -> CSRMatrix:
    _check_magic(fs, CSR_MAGIC, 'CSR matrix')
    num_cols, num_rows = _read_struct(fs, '<qq')
    indptr = read_array(fs)
    indices = read_array(fs)
    data = _read_data(fs)
    sorted_ = _read_flag(fs)
    return CSRMatrix(num_rows, num_cols, _cpu(indptr), _cpu(indices), _cpu(data), sorted=sorted_)


def _write_coo(fs: BinaryIO, coo: COOMatrix):
    _write_magic(fs, COO_MAGIC)
    fs.write(struct.pack('<qq', coo.num_rows, coo.num_cols))
    write_array(fs, coo.row)
    write_array(fs, coo.col)
    _write_data(fs, coo.data)
    fs.write(struct.pack('<??', coo.row_sorted, coo.col_sorted))


def _read_coo(fs: BinaryIO) -> COOMatrix:
    _check_magic(fs, COO_MAGIC, 'COO matrix')
    num_rows, num_cols = _read_struct(fs, '<qq')
    row = read_array(fs)
    col = read_array(fs)
    data = _read_data(fs)
    row_sorted, col_sorted = _read_struct(fs, '<??')
    return COOMatrix(
        num_rows, num_cols, _cpu(row), _cpu(col), _cpu(data),
        row_sorted=row_sorted, col_sorted=col_sorted,
    )


# type -> (reader, writer)
SERIALIZERS: Dict[type, Tuple[Callable[[BinaryIO], object], Callable[[BinaryIO, object], None]]] = {
    CSRMatrix: (_read_csr, _write_csr),
    COOMatrix: (_read_coo, _write_coo),
}


def save(fs: BinaryIO, obj) -> None:
    """Write the binary record of ``obj`` to the writable binary stream ``fs``.

    Raises
    ------
    TypeError
        If no record layout is registered for ``type(obj)``.
    """
    try:
        _, writer = SERIALIZERS[type(obj)]
    except KeyError:
        raise TypeError(f'No binary record is defined for {type(obj).__name__}.') from None
    writer(fs, obj)


def load(fs: BinaryIO, cls: Type[T]) -> T:
    """Read a record of type ``cls`` from the readable binary stream ``fs``.

    The matrix is validated after reading: a record that decodes but breaks
    a matrix invariant raises :class:`graphcsr.CSRValidityError`.

    Raises
    ------
    DeserializationError
        If the magic number is wrong or the stream ends early.
    TypeError
        If no record layout is registered for ``cls``.
    """
    try:
        reader, _ = SERIALIZERS[cls]
    except KeyError:
        raise TypeError(f'No binary record is defined for {cls.__name__}.') from None
    return reader(fs)
