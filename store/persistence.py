"""
Whole-file persistence helpers shared by the stores.

Every save rewrites the complete file through a temporary sibling and an
atomic rename, so a crash mid-write leaves the previous copy intact.
"""

import logging
import os
import pickle
import tempfile
from typing import Any, Callable

logger = logging.getLogger(__name__)


def _atomic_write(path: str, data: bytes) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.tmp-', suffix=os.path.basename(path))
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def load_pickle(path: str, expected_type: type, default_factory: Callable[[], Any]) -> Any:
    """
    Load a pickled structure, falling back to a fresh default.

    Missing, empty, unreadable or corrupt files all yield ``default_factory()``;
    the failure is logged, never raised.
    """
    if not os.path.exists(path) or os.path.getsize(path) == 0:
        logger.info(f"{path} not found or empty, starting fresh")
        return default_factory()

    try:
        with open(path, 'rb') as f:
            data = pickle.load(f)
    except (OSError, EOFError, pickle.UnpicklingError, AttributeError, ImportError, ValueError) as e:
        logger.error(f"Error loading {path}: {e}")
        return default_factory()

    if not isinstance(data, expected_type):
        logger.error(f"Unexpected content in {path}: {type(data).__name__}")
        return default_factory()
    return data


def save_pickle(path: str, data: Any) -> bool:
    """Pickle ``data`` over ``path``. Returns False (and logs) on failure."""
    try:
        _atomic_write(path, pickle.dumps(data, protocol=pickle.HIGHEST_PROTOCOL))
        return True
    except (OSError, pickle.PicklingError) as e:
        logger.error(f"Error saving {path}: {e}")
        return False


def save_text(path: str, text: str) -> bool:
    """Write UTF-8 text over ``path``. Returns False (and logs) on failure."""
    try:
        _atomic_write(path, text.encode('utf-8'))
        return True
    except OSError as e:
        logger.error(f"Error saving {path}: {e}")
        return False
