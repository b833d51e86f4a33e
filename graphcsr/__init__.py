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

__version__ = "0.0.1"

from . import config
from ._coo import COOMatrix
from ._csr import (
    CSRMatrix,
    csr_is_nonzero, csr_get_row_nnz, csr_get_row_column_indices,
    csr_get_row_data, csr_is_sorted, csr_has_data,
    csr_get_data_and_indices, csr_get_all_data, csr_get_data,
    csr_transpose, csr_to_coo, csr_reorder, csr_remove,
    csr_slice_rows, csr_slice_matrix,
    csr_sort_, csr_sort, csr_has_duplicate,
    csr_row_wise_sampling, csr_row_wise_topk,
    union_csr, disjoint_union_csr, csr_to_simple, disjoint_partition_csr_by_sizes,
)
from ._error import CSRValidityError, DeserializationError
from ._io import save, load
from ._numba_kernel import NumbaKernelGenerator
from ._sparse_format import SparseFormat, SparseMatrix, to_sparse_matrix, from_sparse_matrix

__all__ = [

    # --- data structures --- #
    'CSRMatrix',
    'COOMatrix',

    # --- queries --- #
    'csr_is_nonzero',
    'csr_get_row_nnz',
    'csr_get_row_column_indices',
    'csr_get_row_data',
    'csr_is_sorted',
    'csr_has_data',
    'csr_get_data_and_indices',
    'csr_get_all_data',
    'csr_get_data',

    # --- structural transforms --- #
    'csr_transpose',
    'csr_to_coo',
    'csr_reorder',
    'csr_remove',
    'csr_slice_rows',
    'csr_slice_matrix',
    'csr_sort_',
    'csr_sort',
    'csr_has_duplicate',

    # --- sampling and selection --- #
    'csr_row_wise_sampling',
    'csr_row_wise_topk',

    # --- set algebra and batching --- #
    'union_csr',
    'disjoint_union_csr',
    'csr_to_simple',
    'disjoint_partition_csr_by_sizes',

    # --- persistence and interchange --- #
    'save',
    'load',
    'SparseFormat',
    'SparseMatrix',
    'to_sparse_matrix',
    'from_sparse_matrix',

    # --- errors --- #
    'CSRValidityError',
    'DeserializationError',

    # --- configuration --- #
    'config',
    'NumbaKernelGenerator',

]
