from ..helpers.Backend import backend
from ..helpers.errors import InvalidConfigurationError


class RandomInitialization:
    def __init__(self, lower=-1.0, upper=1.0):
        # uniform samples in [lower, upper)
        if lower >= upper:
            raise InvalidConfigurationError(
                f"lower bound {lower} must be below upper bound {upper}"
            )
        self.lower = float(lower)
        self.upper = float(upper)

    def initialize(self, rows, cols, dtype=None):
        dtype = dtype or backend.default_float
        w = backend.random.uniform(self.lower, self.upper, size=(rows, cols))
        return w.astype(dtype)
