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
Numba-compatible LFSR random number generators.

State is represented as ``np.array([s1, s2, s3, s4], dtype=np.uint32)`` and
mutated in-place. Every sampled row owns one state, seeded from the user
seed and the row's position in the request through :func:`stream_seed`, so
the draws of a row never depend on which thread handled the other rows.

Three algorithm families are provided:

* **LFSR88**: Combined LFSR with period ~2^88 (3-component).
* **LFSR113**: Combined LFSR with period ~2^113 (4-component).
* **LFSR128**: Combined LFSR with period ~2^128 (4-component).
"""

import numba
import numpy as np

from .config import get_lfsr_algorithm

__all__ = [
    'stream_seed',
    # LFSR88
    'lfsr88_seed',
    'lfsr88_next_key',
    'lfsr88_rand',
    'lfsr88_randint',
    'lfsr88_random_integers',
    # LFSR113
    'lfsr113_seed',
    'lfsr113_next_key',
    'lfsr113_rand',
    'lfsr113_randint',
    'lfsr113_random_integers',
    # LFSR128
    'lfsr128_seed',
    'lfsr128_next_key',
    'lfsr128_rand',
    'lfsr128_randint',
    'lfsr128_random_integers',
    # Dispatch helpers (for kernel generators)
    'get_numba_lfsr_funcs',
]


@numba.njit(inline='always')
def stream_seed(seed, stream):
    """Derive a 31-bit seed for sub-stream ``stream`` of the user seed ``seed``
    with a SplitMix-style finalizer."""
    x = np.uint64(seed) * np.uint64(0x5851F42D4C957F2D) + np.uint64(stream) * np.uint64(0x14057B7EF767814F)
    x = x ^ (x >> np.uint64(31))
    x = x * np.uint64(0x2545F4914F6CDD1D)
    x = x ^ (x >> np.uint64(29))
    return np.int64(x & np.uint64(0x7FFFFFFF))


# ──────────────────────────────────────────────────────────────────────
#  LFSR88
# ──────────────────────────────────────────────────────────────────────

@numba.njit(inline='always')
def lfsr88_seed(seed):
    """Create an LFSR88 state array from an integer seed.

    Parameters
    ----------
    seed : int
        Integer seed value in ``[0, 2**31)``.

    Returns
    -------
    state : np.ndarray
        A ``(4,)`` ``uint32`` array ``[s1, s2, s3, 0]``.
    """
    state = np.empty(4, dtype=np.uint32)
    state[0] = np.uint32(seed + 2)
    state[1] = np.uint32(seed + 8)
    state[2] = np.uint32(seed + 16)
    state[3] = np.uint32(0)
    return state


@numba.njit(inline='always')
def lfsr88_next_key(state):
    """Advance the LFSR88 state in-place by one step."""
    s1 = state[0]
    s2 = state[1]
    s3 = state[2]

    b = ((s1 << np.uint32(13)) ^ s1) >> np.uint32(19)
    s1 = ((s1 & np.uint32(0xFFFFFFFE)) << np.uint32(12)) ^ b

    b = ((s2 << np.uint32(2)) ^ s2) >> np.uint32(25)
    s2 = ((s2 & np.uint32(0xFFFFFFF8)) << np.uint32(4)) ^ b

    b = ((s3 << np.uint32(3)) ^ s3) >> np.uint32(11)
    s3 = ((s3 & np.uint32(0xFFFFFFF0)) << np.uint32(17)) ^ b

    state[0] = s1
    state[1] = s2
    state[2] = s3
    state[3] = b


@numba.njit(inline='always')
def lfsr88_randint(state):
    """Generate a random ``uint32`` value and advance the LFSR88 state."""
    lfsr88_next_key(state)
    return state[0] ^ state[1] ^ state[2]


@numba.njit(inline='always')
def lfsr88_rand(state):
    """Generate a uniform random float in [0, 1) and advance the LFSR88 state."""
    lfsr88_next_key(state)
    return np.float64(state[0] ^ state[1] ^ state[2]) * 2.3283064365386963e-10


@numba.njit(inline='always')
def lfsr88_random_integers(state, low, high):
    """Generate a random integer in [low, high] (inclusive) and advance the LFSR88 state."""
    val = lfsr88_randint(state)
    return np.int64(val % np.uint32(high + 1 - low)) + low


# ──────────────────────────────────────────────────────────────────────
#  LFSR113
# ──────────────────────────────────────────────────────────────────────

@numba.njit(inline='always')
def lfsr113_seed(seed):
    """Create an LFSR113 state array ``[s1, s2, s3, s4]`` from an integer seed."""
    state = np.empty(4, dtype=np.uint32)
    state[0] = np.uint32(seed + 2)
    state[1] = np.uint32(seed + 8)
    state[2] = np.uint32(seed + 16)
    state[3] = np.uint32(seed + 128)
    return state


@numba.njit(inline='always')
def lfsr113_next_key(state):
    """Advance the LFSR113 state in-place by one step."""
    z1 = state[0]
    z2 = state[1]
    z3 = state[2]
    z4 = state[3]

    b1 = ((z1 << np.uint32(6)) ^ z1) >> np.uint32(13)
    z1 = ((z1 & np.uint32(0xFFFFFFFE)) << np.uint32(18)) ^ b1

    b2 = ((z2 << np.uint32(2)) ^ z2) >> np.uint32(27)
    z2 = ((z2 & np.uint32(0xFFFFFFF8)) << np.uint32(2)) ^ b2

    b3 = ((z3 << np.uint32(13)) ^ z3) >> np.uint32(21)
    z3 = ((z3 & np.uint32(0xFFFFFFF0)) << np.uint32(7)) ^ b3

    b4 = ((z4 << np.uint32(3)) ^ z4) >> np.uint32(12)
    z4 = ((z4 & np.uint32(0xFFFFFF80)) << np.uint32(13)) ^ b4

    state[0] = z1
    state[1] = z2
    state[2] = z3
    state[3] = z4


@numba.njit(inline='always')
def lfsr113_randint(state):
    """Generate a random ``uint32`` value and advance the LFSR113 state."""
    lfsr113_next_key(state)
    return state[0] ^ state[1] ^ state[2] ^ state[3]


@numba.njit(inline='always')
def lfsr113_rand(state):
    """Generate a uniform random float in [0, 1) and advance the LFSR113 state."""
    lfsr113_next_key(state)
    return np.float64(state[0] ^ state[1] ^ state[2] ^ state[3]) * 2.3283064365386963e-10


@numba.njit(inline='always')
def lfsr113_random_integers(state, low, high):
    """Generate a random integer in [low, high] (inclusive) and advance the LFSR113 state."""
    val = lfsr113_randint(state)
    return np.int64(val % np.uint32(high + 1 - low)) + low


# ──────────────────────────────────────────────────────────────────────
#  LFSR128
# ──────────────────────────────────────────────────────────────────────

@numba.njit(inline='always')
def lfsr128_seed(seed):
    """Create an LFSR128 state array ``[s1, s2, s3, s4]`` from an integer seed."""
    s = np.uint32(seed)
    state = np.empty(4, dtype=np.uint32)
    state[0] = s + np.uint32(123)
    state[1] = s ^ np.uint32(0xFEDC7890)
    state[2] = (s << np.uint32(3)) + np.uint32(0x1A2B3C4D)
    state[3] = ~(s + np.uint32(0x5F6E7D8C))
    return state


@numba.njit(inline='always')
def lfsr128_next_key(state):
    """Advance the LFSR128 state in-place by one step."""
    z1 = state[0]
    z2 = state[1]
    z3 = state[2]
    z4 = state[3]

    b1 = ((z1 << np.uint32(7)) ^ z1) >> np.uint32(9)
    z1 = ((z1 & np.uint32(0xFFFFFFFE)) << np.uint32(15)) ^ b1

    b2 = ((z2 << np.uint32(5)) ^ z2) >> np.uint32(23)
    z2 = ((z2 & np.uint32(0xFFFFFFF0)) << np.uint32(6)) ^ b2

    b3 = ((z3 << np.uint32(11)) ^ z3) >> np.uint32(17)
    z3 = ((z3 & np.uint32(0xFFFFFF80)) << np.uint32(8)) ^ b3

    b4 = ((z4 << np.uint32(13)) ^ z4) >> np.uint32(7)
    z4 = ((z4 & np.uint32(0xFFFFFFE0)) << np.uint32(10)) ^ b4

    state[0] = z1
    state[1] = z2
    state[2] = z3
    state[3] = z4


@numba.njit(inline='always')
def lfsr128_randint(state):
    """Generate a random ``uint32`` value and advance the LFSR128 state."""
    lfsr128_next_key(state)
    return state[0] ^ state[1] ^ state[2] ^ state[3]


@numba.njit(inline='always')
def lfsr128_rand(state):
    """Generate a uniform random float in [0, 1) and advance the LFSR128 state."""
    lfsr128_next_key(state)
    return np.float64(state[0] ^ state[1] ^ state[2] ^ state[3]) * 2.3283064365386963e-10


@numba.njit(inline='always')
def lfsr128_random_integers(state, low, high):
    """Generate a random integer in [low, high] (inclusive) and advance the LFSR128 state."""
    val = lfsr128_randint(state)
    return np.int64(val % np.uint32(high + 1 - low)) + low


# ──────────────────────────────────────────────────────────────────────
#  Dispatch tables and helpers
# ──────────────────────────────────────────────────────────────────────

_NUMBA_LFSR_SEED = {
    'lfsr88': lfsr88_seed,
    'lfsr113': lfsr113_seed,
    'lfsr128': lfsr128_seed,
}

_NUMBA_LFSR_RAND = {
    'lfsr88': lfsr88_rand,
    'lfsr113': lfsr113_rand,
    'lfsr128': lfsr128_rand,
}

_NUMBA_LFSR_RANDOM_INTEGERS = {
    'lfsr88': lfsr88_random_integers,
    'lfsr113': lfsr113_random_integers,
    'lfsr128': lfsr128_random_integers,
}


def get_numba_lfsr_funcs(algorithm=None):
    """Return the Numba LFSR functions of one algorithm.

    Parameters
    ----------
    algorithm : str or None
        ``'lfsr88'``, ``'lfsr113'`` or ``'lfsr128'``; ``None`` uses
        :func:`graphcsr.config.get_lfsr_algorithm`.

    Returns
    -------
    dict
        Keys: ``'seed'``, ``'rand'``, ``'random_integers'``.
    """
    alg = get_lfsr_algorithm() if algorithm is None else algorithm
    return {
        'seed': _NUMBA_LFSR_SEED[alg],
        'rand': _NUMBA_LFSR_RAND[alg],
        'random_integers': _NUMBA_LFSR_RANDOM_INTEGERS[alg],
    }
