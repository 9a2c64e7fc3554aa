# models/SAE/helpers/Backend.py
import os
import numpy as np

USE_GPU = os.environ.get("SAE_USE_GPU", "0") == "1"
VERBOSE_STARTUP = os.environ.get("SAE_VERBOSE", "0") == "1"

try:
    import cupy as cp
    # Quick runtime check
    try:
        _ = (cp.array([1, 2, 3]) + 1).sum()
        CUPY_AVAILABLE = True
        if VERBOSE_STARTUP:
            print("CuPy:", cp.__version__)
            print("GPU count:", cp.cuda.runtime.getDeviceCount())
    except Exception as e:
        if VERBOSE_STARTUP:
            print(f"CuPy installed but CUDA runtime error: {e}")
            print("Falling back to CPU (NumPy)")
        cp = None
        CUPY_AVAILABLE = False
except ImportError:
    cp = None
    CUPY_AVAILABLE = False


class Backend:
    """Backend abstraction for NumPy/CuPy compatibility.

    Layers in this package keep their buffers as ``xp.ndarray`` of the active
    backend; everything that enters a layer goes through ``ensure_array``.
    """

    def __init__(self, use_gpu=False, default_float=np.float32, verbose=False):
        self.use_gpu = bool(use_gpu and CUPY_AVAILABLE)
        self.default_float = default_float
        self.xp = cp if self.use_gpu else np
        if verbose:
            name = "GPU backend (CuPy)" if self.use_gpu else "CPU backend (NumPy)"
            print(f"Using {name}")

    # -------- device transfer --------
    def to_cpu(self, x):
        """Move array to CPU (NumPy)."""
        if self.use_gpu and x is not None:
            return cp.asnumpy(x)
        return x

    def ensure_array(self, x, dtype=None):
        """
        Ensure 'x' is an array of the current backend.
        Accepts list/tuple/np/cp arrays; returns xp.ndarray.
        """
        if isinstance(x, self.xp.ndarray):
            if dtype is not None and x.dtype != dtype:
                return x.astype(dtype)
            return x
        if (not self.use_gpu) and (cp is not None) and isinstance(x, cp.ndarray):
            x = cp.asnumpy(x)
        arr = self.xp.asarray(x)
        if dtype is not None and arr.dtype != dtype:
            arr = arr.astype(dtype)
        return arr

    # -------- array creation --------
    def zeros(self, shape, dtype=None):
        return self.xp.zeros(shape, dtype=dtype or self.default_float)

    def empty_buffer(self, dtype=None):
        """A (0, 0) placeholder for buffers no operation has written yet."""
        return self.xp.empty((0, 0), dtype=dtype or self.default_float)

    def full(self, shape, value, dtype=None):
        return self.xp.full(shape, value, dtype=dtype or self.default_float)

    # -------- math (thin wrappers) --------
    def sqrt(self, x):      return self.xp.sqrt(x)
    def sum(self, x, axis=None, keepdims=False):  return self.xp.sum(x, axis=axis, keepdims=keepdims)

    # -------- randomness --------
    @property
    def random(self):
        return self.xp.random

    def seed(self, seed=42):
        """Seed RNG for reproducibility."""
        if self.use_gpu:
            cp.random.seed(seed)
        np.random.seed(seed)


# Global backend instance - can be overridden
backend = Backend(use_gpu=USE_GPU, verbose=VERBOSE_STARTUP)
