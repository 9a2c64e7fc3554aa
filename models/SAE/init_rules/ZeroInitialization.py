from ..helpers.Backend import backend


class ZeroInitialization:
    """Fill the weights with zeros. Default rule for bias layers."""

    def initialize(self, rows, cols, dtype=None):
        return backend.zeros((rows, cols), dtype=dtype)
