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


import threading
from contextlib import contextmanager
from typing import Union

__all__ = [
    'numba_environ',
    'numba_environ_context',
]


class NumbaEnvironment(threading.local):
    def __init__(self, *args, **kwargs):
        # default environment settings
        super().__init__(*args, **kwargs)
        self.parallel: bool = False
        self.setting: dict = dict(nogil=True, fastmath=True)

    def key(self):
        """Hashable snapshot of the settings a kernel is compiled with."""
        return self.parallel, tuple(sorted(self.setting.items()))


numba_environ = NumbaEnvironment()


@contextmanager
def numba_environ_context(
    parallel_if_possible: Union[int, bool] = None,
    **kwargs
):
    """
    Temporarily change the Numba settings used to compile CSR kernels.
    """
    old_parallel = numba_environ.parallel
    old_setting = numba_environ.setting.copy()

    try:
        numba_environ.setting.update(kwargs)
        if parallel_if_possible is not None:
            if isinstance(parallel_if_possible, bool):
                numba_environ.parallel = parallel_if_possible
            elif isinstance(parallel_if_possible, int):
                if parallel_if_possible <= 0:
                    raise ValueError('The number of threads must be a positive integer.')
                numba_environ.parallel = True
                import numba  # pylint: disable=import-outside-toplevel
                numba.set_num_threads(parallel_if_possible)
            else:
                raise ValueError('The argument `parallel_if_possible` must be a boolean or an integer.')
        yield numba_environ.setting.copy()
    finally:
        numba_environ.parallel = old_parallel
        numba_environ.setting = old_setting
