from ..helpers.Backend import backend
from ..helpers.errors import ShapeMismatchError


class MeanSquaredError:
    def __init__(self):
        # cache from forward
        self.diff = None
        self.m = None

    def forward(self, output, target):
        """
        output: (units, batch)
        target: (units, batch)
        returns: loss_scalar = 0.5 * sum((output - target)^2) / batch
        """
        output = backend.ensure_array(output)
        target = backend.ensure_array(target)
        if output.shape != target.shape:
            raise ShapeMismatchError(
                f"output shape {tuple(output.shape)} != target shape {tuple(target.shape)}"
            )

        self.m = output.shape[1]
        self.diff = output - target
        loss = 0.5 * backend.sum(self.diff * self.diff) / self.m

        if backend.use_gpu:
            return backend.to_cpu(loss).item()
        return float(loss)

    def backward(self):
        """
        Per-sample error (output - target). Batch normalization is left to the
        layers, which divide by their configured sample size.
        """
        if self.diff is None:
            raise ValueError("Must call forward() before backward()")
        return self.diff
