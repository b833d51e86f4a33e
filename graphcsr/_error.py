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


__all__ = [
    'CSRValidityError',
    'DeserializationError',
]


class CSRValidityError(Exception):
    """Raised when a sparse matrix violates one of its structural invariants.

    A matrix is rejected when its index arrays disagree on dtype or device,
    when the index dtype cannot hold the largest row/column id, or when
    ``indptr`` does not have ``num_rows + 1`` elements. These are caller
    errors: the offending matrix is never coerced into a valid one.

    Parameters
    ----------
    message : str
        A human-readable description of the violated invariant.

    See Also
    --------
    DeserializationError : Raised when a persisted record cannot be read.

    Examples
    --------
    .. code-block:: python

        >>> import jax.numpy as jnp
        >>> from graphcsr import CSRMatrix
        >>> CSRMatrix(3, 3, jnp.array([0, 1]), jnp.array([0]))  # doctest: +SKIP
        Traceback (most recent call last):
            ...
        graphcsr.CSRValidityError: indptr must have num_rows + 1 = 4 elements, got 2.
    """
    __module__ = 'graphcsr'


class DeserializationError(Exception):
    """Raised when a binary record cannot be decoded.

    The reader checks the magic constant of each record before trusting the
    rest of the stream, and raises this exception on a mismatch or when the
    stream ends before a field could be read.

    Parameters
    ----------
    message : str
        A human-readable description naming the field that failed.

    See Also
    --------
    CSRValidityError : Raised when the decoded matrix is structurally invalid.
    """
    __module__ = 'graphcsr'
