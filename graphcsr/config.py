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

"""User-level configuration for graphcsr.

Stores user defaults (for example the random number generator used by
row-wise sampling) in a JSON file at a platform-appropriate location.
Supports atomic writes, schema versioning, and cached loading.

Config locations:
    - Linux:   ~/.config/graphcsr/defaults.json
    - macOS:   ~/Library/Application Support/graphcsr/defaults.json
    - Windows: %APPDATA%/graphcsr/defaults.json
"""

import json
import os
import platform
import tempfile
import warnings
from typing import Any, Dict, Optional

from ._config import numba_environ

__all__ = [
    'load_user_defaults',
    'save_user_defaults',
    'get_user_default',
    'set_user_default',
    'clear_user_defaults',
    'get_config_path',
    'invalidate_cache',
    'set_numba_parallel',
    'get_numba_parallel',
    'get_numba_num_threads',
    'set_lfsr_algorithm',
    'get_lfsr_algorithm',
    'LFSR_ALGORITHMS',
]

_SCHEMA_VERSION = 1
_SUPPORTED_SCHEMA_VERSIONS = {1}
_cache: Optional[Dict[str, Any]] = None

LFSR_ALGORITHMS = ('lfsr88', 'lfsr113', 'lfsr128')
_DEFAULT_LFSR_ALGORITHM = 'lfsr88'


def get_config_path() -> str:
    """Return the platform-appropriate path for the graphcsr config file.

    Returns
    -------
    str
        Absolute path to the ``defaults.json`` configuration file.

    Notes
    -----
    The platform-specific base directories are:

    - **Windows**: ``%APPDATA%/graphcsr/defaults.json`` (falls back to
      ``~/graphcsr/defaults.json`` if ``APPDATA`` is not set).
    - **macOS**: ``~/Library/Application Support/graphcsr/defaults.json``.
    - **Linux / other**: ``$XDG_CONFIG_HOME/graphcsr/defaults.json`` (falls
      back to ``~/.config/graphcsr/defaults.json``).
    """
    system = platform.system()
    if system == 'Windows':
        base = os.environ.get('APPDATA', os.path.expanduser('~'))
    elif system == 'Darwin':
        base = os.path.join(os.path.expanduser('~'), 'Library', 'Application Support')
    else:
        base = os.environ.get('XDG_CONFIG_HOME', os.path.join(os.path.expanduser('~'), '.config'))
    return os.path.join(base, 'graphcsr', 'defaults.json')


def _empty_config() -> Dict[str, Any]:
    return {'schema_version': _SCHEMA_VERSION, 'defaults': {}}


def _read_config_file(path: str) -> Dict[str, Any]:
    """Read and validate the JSON configuration file.

    Returns an empty default structure if the file is missing, corrupted,
    or has an unsupported schema version.
    """
    if not os.path.isfile(path):
        return _empty_config()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        warnings.warn(
            f"graphcsr: Corrupted config file at {path}: {e}. Using built-in defaults.",
            stacklevel=3,
        )
        return _empty_config()

    schema_ver = data.get('schema_version', 0) if isinstance(data, dict) else 0
    if schema_ver not in _SUPPORTED_SCHEMA_VERSIONS:
        warnings.warn(
            f"graphcsr: Config file schema version {schema_ver} is not supported "
            f"(supported: {_SUPPORTED_SCHEMA_VERSIONS}). Ignoring user defaults.",
            stacklevel=3,
        )
        return _empty_config()

    return data


def _write_config_file(path: str, data: Dict[str, Any]):
    """Atomically write the configuration dictionary to a JSON file.

    Uses a temporary file and ``os.replace`` so the config file is never
    left in a partially written state.
    """
    config_dir = os.path.dirname(path)
    try:
        os.makedirs(config_dir, exist_ok=True)
    except OSError as e:
        warnings.warn(
            f"graphcsr: Cannot create config directory {config_dir}: {e}. "
            f"Default persistence skipped.",
            stacklevel=3,
        )
        return

    try:
        fd, tmp_path = tempfile.mkstemp(dir=config_dir, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, sort_keys=True)
                f.write('\n')
            os.replace(tmp_path, path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
    except OSError as e:
        warnings.warn(
            f"graphcsr: Cannot write config file {path}: {e}. "
            f"Default persistence skipped.",
            stacklevel=3,
        )


def invalidate_cache():
    """Clear the in-memory configuration cache, forcing a re-read on next access."""
    global _cache
    _cache = None


def load_user_defaults() -> Dict[str, Any]:
    """Load user-configured defaults from the config file.

    Results are cached in memory; subsequent calls return the cached copy
    unless :func:`invalidate_cache` has been called.

    Returns
    -------
    dict of str to any
        A dictionary mapping option names (e.g. ``"lfsr_algorithm"``) to
        their persisted values. Empty if nothing has been configured.

    Examples
    --------
    .. code-block:: python

        >>> import graphcsr
        >>> graphcsr.config.load_user_defaults()  # doctest: +SKIP
        {'lfsr_algorithm': 'lfsr113'}
    """
    global _cache
    if _cache is not None:
        return _cache.get('defaults', {})

    _cache = _read_config_file(get_config_path())
    return _cache.get('defaults', {})


def save_user_defaults(defaults: Dict[str, Any]):
    """Merge ``defaults`` into the persisted user defaults and write them atomically.

    Parameters
    ----------
    defaults : dict of str to any
        Option names mapped to JSON-serializable values. Existing options
        with the same name are overwritten.
    """
    global _cache
    path = get_config_path()
    existing = _read_config_file(path)
    merged = dict(existing.get('defaults', {}))
    merged.update(defaults)
    existing['defaults'] = merged
    existing['schema_version'] = _SCHEMA_VERSION
    _write_config_file(path, existing)
    _cache = existing


def get_user_default(name: str, default: Any = None) -> Any:
    """Return the persisted value of option ``name``, or ``default`` if unset."""
    return load_user_defaults().get(name, default)


def set_user_default(name: str, value: Any):
    """Persist a single option. Convenience wrapper around :func:`save_user_defaults`."""
    save_user_defaults({name: value})


def clear_user_defaults():
    """Remove all user defaults and delete the config file.

    A ``UserWarning`` is issued if the file cannot be deleted; the in-memory
    cache is cleared in any case.
    """
    global _cache
    path = get_config_path()
    try:
        if os.path.isfile(path):
            os.unlink(path)
    except OSError as e:
        warnings.warn(
            f"graphcsr: Cannot delete config file {path}: {e}.",
            stacklevel=3,
        )
    _cache = None


_numba_num_threads: Optional[int] = None


def set_numba_parallel(parallel: bool = True, num_threads: Optional[int] = None):
    """Enable or disable parallel row loops in the CSR kernels.

    Kernels are compiled with ``numba.prange`` row loops; when parallel mode
    is off they run serially. The setting applies to the calling thread.

    Parameters
    ----------
    parallel : bool, optional
        Whether kernels compiled from now on run their row loops in parallel.
    num_threads : int or None, optional
        Size of Numba's thread pool. ``None`` keeps Numba's default.

    Examples
    --------
    .. code-block:: python

        >>> import graphcsr
        >>> graphcsr.config.set_numba_parallel(True, num_threads=4)
        >>> graphcsr.config.get_numba_parallel()
        True
    """
    global _numba_num_threads
    numba_environ.parallel = parallel
    _numba_num_threads = num_threads
    if num_threads is not None:
        import numba
        numba.set_num_threads(num_threads)


def get_numba_parallel() -> bool:
    """Return whether parallel row loops are enabled for the calling thread."""
    return numba_environ.parallel


def get_numba_num_threads() -> Optional[int]:
    """Return the configured Numba thread count, or ``None`` if never set."""
    return _numba_num_threads


_lfsr_algorithm: Optional[str] = None


def set_lfsr_algorithm(name: str, persist: bool = False):
    """Select the LFSR generator used by :func:`graphcsr.csr_row_wise_sampling`.

    Parameters
    ----------
    name : str
        One of ``'lfsr88'``, ``'lfsr113'`` or ``'lfsr128'``.
    persist : bool, optional
        Also store the choice in the user config file.
    """
    global _lfsr_algorithm
    if name not in LFSR_ALGORITHMS:
        raise ValueError(f'Unknown LFSR algorithm {name!r}. Expected one of {LFSR_ALGORITHMS}.')
    _lfsr_algorithm = name
    if persist:
        set_user_default('lfsr_algorithm', name)


def get_lfsr_algorithm() -> str:
    """Return the active LFSR algorithm.

    The value set through :func:`set_lfsr_algorithm` wins; otherwise the
    persisted user default is used, falling back to ``'lfsr88'``.
    """
    if _lfsr_algorithm is not None:
        return _lfsr_algorithm
    name = get_user_default('lfsr_algorithm', _DEFAULT_LFSR_ALGORITHM)
    if name not in LFSR_ALGORITHMS:
        warnings.warn(
            f"graphcsr: Ignoring unknown lfsr_algorithm {name!r} in user defaults.",
            stacklevel=2,
        )
        return _DEFAULT_LFSR_ALGORITHM
    return name
