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

from typing import Sequence, Tuple, Union

import brainunit as u
import jax
import numpy as np

__all__ = [
    'IdArray',
    'IdArrayLike',
    'Indptr',
    'Index',
    'FloatArrayLike',
    'MatrixShape',
]

IdArray = jax.Array
IdArrayLike = Union[jax.Array, np.ndarray, Sequence[int], int]
Indptr = jax.Array
Index = jax.Array
FloatArrayLike = Union[jax.Array, np.ndarray, u.Quantity, Sequence[float], None]
MatrixShape = Tuple[int, int]
