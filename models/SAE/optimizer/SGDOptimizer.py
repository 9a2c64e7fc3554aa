from .Optimizer import Optimizer


class SGDOptimizer(Optimizer):
    def __init__(self, layer, lr=1e-2, weight_decay=0.0):
        super().__init__(layer, lr=lr)
        self.wd = weight_decay

    def _apply(self, weights, grad):
        if self.wd != 0.0:
            weights -= self.lr * (grad + self.wd * weights)  # L2 weight decay
        else:
            weights -= self.lr * grad
