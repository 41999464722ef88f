"""
Scoped input tensor for a single forward pass.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np


class TransientTensor:
    """
    Owns the float32 input buffer for exactly one forward pass.

    Use as a context manager; the buffer is released on exit whether the
    run succeeded or raised. After release ``array`` raises RuntimeError.

    Example:
        with TransientTensor(data, dims) as t:
            outputs = session.run({"images": t.array})
    """

    def __init__(self, data: np.ndarray, dims: Sequence[int]):
        self._dims = tuple(int(d) for d in dims)
        self._array: Optional[np.ndarray] = np.asarray(data, dtype=np.float32).reshape(self._dims)
        self.disposed = False

    @property
    def dims(self):
        return self._dims

    @property
    def array(self) -> np.ndarray:
        if self._array is None:
            raise RuntimeError("Tensor already disposed")
        return self._array

    def dispose(self) -> None:
        if self.disposed:
            return
        self._array = None
        self.disposed = True
        logging.debug(f"Disposed input tensor {self._dims}")

    def __enter__(self) -> "TransientTensor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()
