import numpy as np

from .Layer import Layer
from .LayerTraits import LayerTraits
from ..helpers.Backend import backend
from ..helpers.OptimizerHandle import OptimizerHandle
from ..helpers.errors import (
    InvalidConfigurationError,
    OwnershipViolationError,
    ShapeMismatchError,
    check_rows,
)
from ..init_rules.ZeroInitialization import ZeroInitialization
from ..optimizer.RMSPropOptimizer import RMSPropOptimizer


def _check_size(name, value):
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidConfigurationError(f"{name} must be positive, got {value}")
    return int(value)


class SparseBiasLayer(Layer):
    """
    Bias part of a sparse autoencoder: adds a learned per-unit offset to every
    sample of a (units, samples) batch.

    The layer owns its buffers (weights, grad, delta, input_parameter,
    output_parameter) and, by default, the optimizer it creates at
    construction. ``optimizer`` is a factory called with the new layer, so
    ``functools.partial(SGDOptimizer, lr=0.1)`` works as well as a class.

    Layers are move-only: ``move()`` / ``take()`` hand the optimizer and the
    buffers over and leave the source as an empty husk, while ``copy.copy``
    and ``copy.deepcopy`` raise TypeError. ``close()`` releases an owned
    optimizer exactly once.
    """

    traits = LayerTraits(is_bias_layer=True, is_connection=True)

    def __init__(
        self,
        out_size,
        sample_size,
        weight_init_rule=None,
        optimizer=RMSPropOptimizer,
        dtype=None,
    ):
        self._handle = OptimizerHandle.empty()
        self._moved_from = False
        self._out_size = _check_size("out_size", out_size)
        self._sample_size = _check_size("sample_size", sample_size)

        dtype = dtype or backend.default_float
        if weight_init_rule is None:
            weight_init_rule = ZeroInitialization()
        weights = backend.ensure_array(
            weight_init_rule.initialize(self._out_size, 1, dtype=dtype)
        )
        if weights.shape != (self._out_size, 1):
            raise InvalidConfigurationError(
                f"{type(weight_init_rule).__name__} produced shape "
                f"{tuple(weights.shape)}, expected ({self._out_size}, 1)"
            )
        self._weights = weights
        self._grad = backend.empty_buffer(dtype)
        self._delta = backend.empty_buffer(dtype)
        self._input_parameter = backend.empty_buffer(dtype)
        self._output_parameter = backend.empty_buffer(dtype)

        self._handle = OptimizerHandle.owned(optimizer(self))

    # ------------------------------------------------------------------
    # numeric contract
    # ------------------------------------------------------------------
    def forward(self, x):
        # x shape: (out_size, batch)
        self._check_live()
        x = backend.ensure_array(x)
        check_rows("input", x, self._out_size)
        return x + self._weights

    def backward(self, x, gy):
        # identity Jacobian: x is unused
        self._check_live()
        gy = backend.ensure_array(gy)
        check_rows("error", gy, self._out_size)
        return gy

    def gradient(self, d):
        """
        Mean error per unit: sum over samples divided by ``sample_size``.

        The divisor is the configured sample size, not d's column count, so
        gradients of partial batches can be accumulated by the optimizer
        before one update. The result is kept as the layer's ``grad``.
        """
        self._check_live()
        d = backend.ensure_array(d)
        check_rows("error", d, self._out_size)
        g = backend.sum(d, axis=1, keepdims=True) / self._sample_size
        self._grad = g.astype(self._weights.dtype, copy=False)
        return self._grad

    def params(self):
        return [self._weights]

    def grads(self):
        return [self._grad]

    # ------------------------------------------------------------------
    # move-only lifecycle
    # ------------------------------------------------------------------
    def move(self):
        """Return a new layer holding this layer's optimizer and buffers."""
        dest = type(self).__new__(type(self))
        dest._handle = OptimizerHandle.empty()
        dest._moved_from = True
        return dest.take(self)

    def take(self, other):
        """Move-assign ``other`` into this layer.

        Whatever optimizer this layer owned is released first. The moved
        optimizer is rebound to this layer.
        """
        if other is self:
            return self
        other._check_live()
        self._handle.release()
        self._handle = other._handle.take()
        if not self._handle.is_empty:
            self._handle.optimizer.bind(self)

        self._out_size = other._out_size
        self._sample_size = other._sample_size
        dtype = other._weights.dtype
        self._weights, other._weights = other._weights, backend.empty_buffer(dtype)
        self._grad, other._grad = other._grad, backend.empty_buffer(dtype)
        self._delta, other._delta = other._delta, backend.empty_buffer(dtype)
        self._input_parameter, other._input_parameter = (
            other._input_parameter,
            backend.empty_buffer(dtype),
        )
        self._output_parameter, other._output_parameter = (
            other._output_parameter,
            backend.empty_buffer(dtype),
        )
        self._moved_from = False
        other._moved_from = True
        return self

    def close(self):
        """Release the optimizer if this layer owns it. Safe to call twice."""
        self._handle.release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __del__(self):
        handle = getattr(self, "_handle", None)
        if handle is not None:
            handle.release()

    def __copy__(self):
        raise TypeError(f"{type(self).__name__} is move-only; use move()")

    def __deepcopy__(self, memo):
        raise TypeError(f"{type(self).__name__} is move-only; use move()")

    def _check_live(self):
        if self._moved_from:
            raise OwnershipViolationError(
                f"{type(self).__name__} was moved from and holds no state"
            )

    # ------------------------------------------------------------------
    # accessors
    # ------------------------------------------------------------------
    @property
    def out_size(self):
        return self._out_size

    @property
    def sample_size(self):
        return self._sample_size

    @property
    def moved_from(self):
        return self._moved_from

    @property
    def optimizer(self):
        return self._handle.optimizer

    @property
    def owns_optimizer(self):
        return self._handle.owns

    def set_optimizer(self, optimizer, owned=False):
        """Attach ``optimizer`` to this layer, owned or borrowed.

        The optimizer must already be bound to this layer or to no live
        layer, and may only be taken as owned when nobody else owns it.
        """
        name = type(optimizer).__name__
        if optimizer.released:
            raise OwnershipViolationError(f"cannot attach a released {name}")
        bound = optimizer.bound_layer
        if bound is not None and bound is not self:
            raise OwnershipViolationError(f"{name} is bound to another layer")
        current = optimizer is self._handle.optimizer
        if owned and optimizer.owned and not (current and self._handle.owns):
            raise OwnershipViolationError(f"{name} already has an owner")

        if current:
            self._handle.forget()
        else:
            self._handle.release()
        optimizer.bind(self)
        self._handle = OptimizerHandle(optimizer, owns=owned)

    @property
    def weights(self):
        return self._weights

    @weights.setter
    def weights(self, value):
        w = backend.ensure_array(value)
        if w.ndim == 1:
            w = w.reshape(-1, 1)
        if w.shape != (self._out_size, 1):
            raise ShapeMismatchError(
                f"weights have shape {tuple(w.shape)}, expected ({self._out_size}, 1)"
            )
        self._weights = w

    @property
    def grad(self):
        return self._grad

    @grad.setter
    def grad(self, value):
        self._grad = backend.ensure_array(value)

    @property
    def delta(self):
        return self._delta

    @delta.setter
    def delta(self, value):
        self._delta = backend.ensure_array(value)

    @property
    def input_parameter(self):
        return self._input_parameter

    @input_parameter.setter
    def input_parameter(self, value):
        self._input_parameter = backend.ensure_array(value)

    @property
    def output_parameter(self):
        return self._output_parameter

    @output_parameter.setter
    def output_parameter(self, value):
        self._output_parameter = backend.ensure_array(value)

    def __repr__(self):
        return (
            f"{type(self).__name__}(out_size={self._out_size}, "
            f"sample_size={self._sample_size}, optimizer={self._handle!r})"
        )
