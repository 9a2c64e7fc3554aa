from .Optimizer import Optimizer
from ..helpers.Backend import backend


class AdamWOptimizer(Optimizer):
    def __init__(
        self, layer, lr=1e-3, weight_decay=0.0, beta1=0.9, beta2=0.999, eps=1e-8
    ):
        super().__init__(layer, lr=lr)
        self.weight_decay = weight_decay
        self.beta1 = beta1
        self.beta2 = beta2
        self.eps = eps
        self.t = 0
        self._m = None
        self._v = None

    def _apply(self, weights, grad):
        self.t += 1
        b1t = 1.0 - self.beta1**self.t
        b2t = 1.0 - self.beta2**self.t
        if self._m is None:
            self._m = backend.xp.zeros_like(weights)
            self._v = backend.xp.zeros_like(weights)
        m, v = self._m, self._v
        # Adam moments (in-place)
        m[...] = self.beta1 * m + (1.0 - self.beta1) * grad
        v[...] = self.beta2 * v + (1.0 - self.beta2) * (grad * grad)
        m_hat = m / b1t
        v_hat = v / b2t
        # decoupled weight decay
        if self.weight_decay != 0.0:
            weights -= self.lr * self.weight_decay * weights
        weights -= self.lr * (m_hat / (backend.sqrt(v_hat) + self.eps))

    def reset(self):
        super().reset()
        self.t = 0
        self._m = None
        self._v = None
