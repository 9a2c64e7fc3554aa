import numpy as np
from ..helpers.Backend import backend


class HeInitialization:
    def initialize(self, rows, cols, dtype=None):
        # He initialization, fan-in taken as the number of rows
        dtype = dtype or backend.default_float
        weights_cpu = np.random.randn(rows, cols) * np.sqrt(2.0 / rows)
        return backend.ensure_array(weights_cpu.astype(dtype))
