class ShapeMismatchError(ValueError):
    """An array does not conform to the layer's configured number of units."""


class InvalidConfigurationError(ValueError):
    """A layer or init rule was constructed with unusable parameters."""


class OwnershipViolationError(RuntimeError):
    """Optimizer ownership bookkeeping was used inconsistently.

    Raised when a moved-from layer is used for computation, when an optimizer
    is released twice, or when an optimizer outlives the layer it is bound to.
    """


def check_rows(name, x, rows):
    if x.ndim != 2:
        raise ShapeMismatchError(
            f"{name} must be a 2-D (units, samples) array, got shape {tuple(x.shape)}"
        )
    if x.shape[0] != rows:
        raise ShapeMismatchError(
            f"{name} has {x.shape[0]} rows, expected {rows}"
        )
