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

import brainstate
import numba
import numpy as np

from graphcsr._coo import COOMatrix
from graphcsr._misc import as_host_ids, as_host_weights, check_ids_in_range, exclusive_cumsum, to_device
from graphcsr._numba_kernel import numba_kernel_generator, pjit_fn
from graphcsr._numba_random import get_numba_lfsr_funcs, stream_seed
from graphcsr._typing import FloatArrayLike, IdArrayLike
from graphcsr.config import get_lfsr_algorithm
from .main import CSRMatrix, host_arrays, host_entry_ids

__all__ = [
    'csr_row_wise_sampling',
    'csr_row_wise_topk',
]


def _host_rows(csr: CSRMatrix, rows: IdArrayLike) -> np.ndarray:
    rows = as_host_ids(rows)
    check_ids_in_range(rows, csr.num_rows, 'Row')
    return rows


def _entry_weights(eids: np.ndarray, weight, name: str, non_negative: bool) -> np.ndarray:
    length = int(eids.max()) + 1 if eids.size else 0
    return as_host_weights(weight, length, name=name, non_negative=non_negative)


def _to_coo(csr: CSRMatrix, out_rows, out_cols, out_data) -> COOMatrix:
    device, dtype = csr.device, csr.dtype
    return COOMatrix(
        csr.num_rows,
        csr.num_cols,
        to_device(out_rows, device, dtype),
        to_device(out_cols, device, dtype),
        to_device(out_data, device, dtype),
    )


@numba_kernel_generator
def _csr_count_samples_numba_kernel_generator(replace: bool, weighted: bool):
    @pjit_fn
    def kernel(indptr, eids, weights, rows, num_samples, counts):
        for i in numba.prange(rows.shape[0]):
            r = rows[i]
            if weighted:
                n_cand = 0
                for j in range(indptr[r], indptr[r + 1]):
                    if weights[eids[j]] > 0.:
                        n_cand += 1
            else:
                n_cand = indptr[r + 1] - indptr[r]
            if replace:
                counts[i] = num_samples if n_cand > 0 else 0
            else:
                counts[i] = min(num_samples, n_cand)

    return kernel


@numba_kernel_generator
def _csr_row_wise_sampling_numba_kernel_generator(algorithm: str, replace: bool, weighted: bool):
    lfsr = get_numba_lfsr_funcs(algorithm)
    seed_fn = lfsr['seed']
    rand = lfsr['rand']
    random_integers = lfsr['random_integers']

    if weighted and replace:
        # Inverse transform sampling over the running sum of the row weights.
        @pjit_fn
        def kernel(indptr, indices, eids, weights, rows, seed, offsets, out_rows, out_cols, out_data):
            for i in numba.prange(rows.shape[0]):
                base = offsets[i]
                n_out = offsets[i + 1] - base
                if n_out > 0:
                    r = rows[i]
                    start = indptr[r]
                    deg = indptr[r + 1] - start
                    state = seed_fn(stream_seed(seed, i))
                    cum = np.empty(deg, dtype=np.float64)
                    total = 0.
                    for t in range(deg):
                        total += weights[eids[start + t]]
                        cum[t] = total
                    for s in range(n_out):
                        t = np.searchsorted(cum, rand(state) * total, side='right')
                        if t >= deg:
                            t = deg - 1
                        while t > 0 and weights[eids[start + t]] == 0.:
                            t -= 1
                        out_rows[base + s] = r
                        out_cols[base + s] = indices[start + t]
                        out_data[base + s] = eids[start + t]

    elif weighted:
        # Efraimidis-Spirakis: keep the candidates with the smallest -log(u) / w.
        @pjit_fn
        def kernel(indptr, indices, eids, weights, rows, seed, offsets, out_rows, out_cols, out_data):
            for i in numba.prange(rows.shape[0]):
                base = offsets[i]
                n_out = offsets[i + 1] - base
                if n_out > 0:
                    r = rows[i]
                    start = indptr[r]
                    end = indptr[r + 1]
                    state = seed_fn(stream_seed(seed, i))
                    cand = np.empty(end - start, dtype=np.int64)
                    keys = np.empty(end - start, dtype=np.float64)
                    n_cand = 0
                    for j in range(start, end):
                        w = weights[eids[j]]
                        if w > 0.:
                            u = rand(state)
                            if u < 1e-12:
                                u = 1e-12
                            cand[n_cand] = j
                            keys[n_cand] = -np.log(u) / w
                            n_cand += 1
                    order = np.argsort(keys[:n_cand], kind='mergesort')
                    for s in range(n_out):
                        j = cand[order[s]]
                        out_rows[base + s] = r
                        out_cols[base + s] = indices[j]
                        out_data[base + s] = eids[j]

    elif replace:
        @pjit_fn
        def kernel(indptr, indices, eids, weights, rows, seed, offsets, out_rows, out_cols, out_data):
            for i in numba.prange(rows.shape[0]):
                base = offsets[i]
                n_out = offsets[i + 1] - base
                if n_out > 0:
                    r = rows[i]
                    start = indptr[r]
                    deg = indptr[r + 1] - start
                    state = seed_fn(stream_seed(seed, i))
                    for s in range(n_out):
                        j = start + random_integers(state, 0, deg - 1)
                        out_rows[base + s] = r
                        out_cols[base + s] = indices[j]
                        out_data[base + s] = eids[j]

    else:
        # Partial Fisher-Yates shuffle of the row positions.
        @pjit_fn
        def kernel(indptr, indices, eids, weights, rows, seed, offsets, out_rows, out_cols, out_data):
            for i in numba.prange(rows.shape[0]):
                base = offsets[i]
                n_out = offsets[i + 1] - base
                if n_out > 0:
                    r = rows[i]
                    start = indptr[r]
                    deg = indptr[r + 1] - start
                    state = seed_fn(stream_seed(seed, i))
                    perm = np.arange(deg)
                    for s in range(n_out):
                        if n_out < deg:
                            t = random_integers(state, s, deg - 1)
                            tmp = perm[s]
                            perm[s] = perm[t]
                            perm[t] = tmp
                        j = start + perm[s]
                        out_rows[base + s] = r
                        out_cols[base + s] = indices[j]
                        out_data[base + s] = eids[j]

    return kernel


def csr_row_wise_sampling(
    csr: CSRMatrix,
    rows: IdArrayLike,
    num_samples: int,
    prob: Optional[FloatArrayLike] = None,
    replace: bool = True,
    seed: Optional[int] = None,
) -> COOMatrix:
    """
    Sample entries from each of the given rows.

    For every row id ``rows[i]``, entries of that row are drawn with
    probability proportional to ``prob[entry_id]``. With replacement a row
    yields ``num_samples`` entries when it has at least one entry of positive
    weight and none otherwise. Without replacement it yields
    ``min(num_samples, #entries of positive weight)`` entries, so rows with a
    small degree come back whole and output groups may differ in size.

    Every requested row draws from its own random stream, seeded from
    ``(seed, i)``, so the result does not depend on how rows are scheduled
    across threads. The stream generator is the one selected with
    :func:`graphcsr.config.set_lfsr_algorithm`.

    Parameters
    ----------
    csr : CSRMatrix
        The matrix to sample from.
    rows : array_like
        Row ids to sample; repeats are sampled independently.
    num_samples : int
        Number of entries requested per row.
    prob : array_like, optional
        Unnormalized, non-negative weights indexed by entry id. ``None`` or
        an empty array means uniform weights. Entries of weight zero are
        never drawn. ``brainunit`` quantities are accepted.
    replace : bool, optional
        Sample with replacement. Default is ``True``.
    seed : int, optional
        Non-negative random seed. Drawn from ``brainstate.random`` when
        ``None``.

    Returns
    -------
    COOMatrix
        Matrix with the shape of ``csr``. ``row`` repeats the requested row
        id once per sample, ``col`` holds the sampled column ids and
        ``data`` the sampled entry ids.

    Raises
    ------
    ValueError
        If ``num_samples`` or ``seed`` is negative, or ``prob`` is shorter
        than the entry id space, negative or NaN.
    IndexError
        If a row id is out of range.
    """
    if num_samples < 0:
        raise ValueError(f'num_samples must be non-negative, got {num_samples}.')
    if seed is None:
        seed = int(brainstate.random.randint(0, 2 ** 31 - 1))
    elif seed < 0:
        raise ValueError(f'seed must be non-negative, got {seed}.')

    rows = _host_rows(csr, rows)
    indptr, indices, _ = host_arrays(csr)
    eids = host_entry_ids(csr)
    weights = _entry_weights(eids, prob, 'prob', non_negative=True)
    weighted = weights.size > 0

    counts = np.zeros(rows.shape[0], dtype=np.int64)
    _csr_count_samples_numba_kernel_generator(replace=bool(replace), weighted=weighted)(
        indptr, eids, weights, rows, int(num_samples), counts
    )
    offsets = exclusive_cumsum(counts)
    total = int(offsets[-1])
    out_rows = np.empty(total, dtype=np.int64)
    out_cols = np.empty(total, dtype=np.int64)
    out_data = np.empty(total, dtype=np.int64)
    kernel = _csr_row_wise_sampling_numba_kernel_generator(
        algorithm=get_lfsr_algorithm(), replace=bool(replace), weighted=weighted,
    )
    kernel(indptr, indices, eids, weights, rows, int(seed), offsets, out_rows, out_cols, out_data)
    return _to_coo(csr, out_rows, out_cols, out_data)


@numba_kernel_generator
def _csr_row_wise_topk_numba_kernel_generator(ascending: bool, weighted: bool):
    @pjit_fn
    def kernel(indptr, indices, eids, weights, rows, offsets, out_rows, out_cols, out_data):
        for i in numba.prange(rows.shape[0]):
            base = offsets[i]
            n_out = offsets[i + 1] - base
            if n_out > 0:
                r = rows[i]
                start = indptr[r]
                deg = indptr[r + 1] - start
                keys = np.zeros(deg, dtype=np.float64)
                if weighted:
                    for t in range(deg):
                        w = weights[eids[start + t]]
                        keys[t] = w if ascending else -w
                order = np.argsort(keys, kind='mergesort')
                for s in range(n_out):
                    j = start + order[s]
                    out_rows[base + s] = r
                    out_cols[base + s] = indices[j]
                    out_data[base + s] = eids[j]

    return kernel


def csr_row_wise_topk(
    csr: CSRMatrix,
    rows: IdArrayLike,
    k: int,
    weight: Optional[FloatArrayLike] = None,
    ascending: bool = False,
) -> COOMatrix:
    """
    Select the ``k`` entries of largest weight from each of the given rows.

    Rows with fewer than ``k`` entries return all of them. Entries are
    ranked with a stable sort on ``weight[entry_id]``, so equal weights are
    ordered by their position inside the row; the entries of each row come
    out in ranking order. Without ``weight`` all entries tie and the first
    ``k`` entries of each row are taken.

    Parameters
    ----------
    csr : CSRMatrix
        The matrix to select from.
    rows : array_like
        Row ids to select from.
    k : int
        Number of entries per row.
    weight : array_like, optional
        Weights indexed by entry id.
    ascending : bool, optional
        Select the smallest weights instead. Default is ``False``.

    Returns
    -------
    COOMatrix
        Matrix with the shape of ``csr``; ``data`` holds the entry id of
        every selected entry, i.e. its index into ``weight``.

    Examples
    --------
    .. code-block:: python

        >>> csr = graphcsr.CSRMatrix(2, 4, [0, 3, 4], [0, 1, 3, 2])
        >>> coo = graphcsr.csr_row_wise_topk(csr, [0, 1], 2, weight=[0.1, 0.5, 0.3, 0.2])
        >>> coo.row, coo.col, coo.data
        (Array([0, 0, 1], dtype=int32), Array([1, 3, 2], dtype=int32), Array([1, 2, 3], dtype=int32))
    """
    if k < 0:
        raise ValueError(f'k must be non-negative, got {k}.')
    rows = _host_rows(csr, rows)
    indptr, indices, _ = host_arrays(csr)
    eids = host_entry_ids(csr)
    weights = _entry_weights(eids, weight, 'weight', non_negative=False)
    weighted = weights.size > 0

    offsets = exclusive_cumsum(np.minimum(indptr[rows + 1] - indptr[rows], int(k)))
    total = int(offsets[-1])
    out_rows = np.empty(total, dtype=np.int64)
    out_cols = np.empty(total, dtype=np.int64)
    out_data = np.empty(total, dtype=np.int64)
    kernel = _csr_row_wise_topk_numba_kernel_generator(ascending=bool(ascending), weighted=weighted)
    kernel(indptr, indices, eids, weights, rows, offsets, out_rows, out_cols, out_data)
    return _to_coo(csr, out_rows, out_cols, out_data)
