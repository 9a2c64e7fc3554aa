import weakref

from ..helpers.errors import OwnershipViolationError


class Optimizer:
    """Update rule bound to exactly one layer.

    The optimizer keeps a weak back-reference to its layer: it reads
    ``layer.weights`` and ``layer.grad`` and writes the weights in place, but
    never keeps the layer alive. Subclasses implement ``_apply(weights, grad)``.

    Protocol, driven by the orchestrator:
        update()    accumulate the layer's current gradient
        optimize()  apply the accumulated gradient, then clear it
        step()      update() followed by optimize()
    """

    def __init__(self, layer, lr=0.01):
        self.lr = lr
        self._layer_ref = None
        self._accumulated = None
        self.released = False
        # set by an owning OptimizerHandle
        self.owned = False
        self.bind(layer)

    def bind(self, layer):
        """Point the back-reference at ``layer`` (used when a layer is moved)."""
        if self.released:
            raise OwnershipViolationError("cannot bind a released optimizer")
        self._layer_ref = weakref.ref(layer)

    @property
    def bound_layer(self):
        """The layer this optimizer updates, or None once that layer is gone."""
        return self._layer_ref() if self._layer_ref is not None else None

    @property
    def layer(self):
        layer = self.bound_layer
        if layer is None:
            raise OwnershipViolationError(
                f"{type(self).__name__} is not bound to a live layer"
            )
        return layer

    def update(self):
        g = self.layer.grad
        if self._accumulated is None:
            self._accumulated = g.copy()
        else:
            self._accumulated += g

    def optimize(self):
        if self._accumulated is None:
            return
        self._apply(self.layer.weights, self._accumulated)
        self._accumulated = None

    def step(self):
        self.update()
        self.optimize()

    def zero_grad(self):
        self.layer.grad[...] = 0.0

    def reset(self):
        """Forget accumulated gradients and any per-rule state."""
        self._accumulated = None

    def release(self):
        if self.released:
            raise OwnershipViolationError(
                f"{type(self).__name__} released more than once"
            )
        self.reset()
        self._layer_ref = None
        self.released = True

    def _apply(self, weights, grad):
        raise NotImplementedError
