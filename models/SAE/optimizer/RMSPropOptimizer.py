from .Optimizer import Optimizer
from ..helpers.Backend import backend


class RMSPropOptimizer(Optimizer):
    def __init__(self, layer, lr=0.01, alpha=0.99, eps=1e-8):
        super().__init__(layer, lr=lr)
        self.alpha = alpha
        self.eps = eps
        self._mean_squared = None

    def _apply(self, weights, grad):
        if self._mean_squared is None or self._mean_squared.shape != grad.shape:
            self._mean_squared = backend.xp.zeros_like(grad)
        ms = self._mean_squared
        ms *= self.alpha
        ms += (1.0 - self.alpha) * (grad * grad)
        weights -= self.lr * grad / (backend.sqrt(ms) + self.eps)

    def reset(self):
        super().reset()
        self._mean_squared = None
