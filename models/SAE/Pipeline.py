import time
import numpy as np

from .layers.LayerTraits import layer_traits
from .loss.MeanSquaredError import MeanSquaredError
from .helpers.logger import RunLogger
from .helpers.Backend import backend


class LayerPipeline:
    """
    Sequences layers through forward -> backward -> gradient -> optimizer
    update, dispatching on each layer's traits rather than its type.

    Batches are (units, samples): every column is one sample.
    """

    def __init__(
        self,
        layers,
        loss=None,
        weight_decay=0.0,
        epochs=10,
        batch_size=128,
        shuffle=True,
        seed=None,
        verbose=1,
    ):
        self.layers = list(layers)
        self.loss_fn = loss if loss is not None else MeanSquaredError()
        self.weight_decay = weight_decay
        self.epochs = epochs
        self.batch_size = batch_size
        self.shuffle = shuffle
        self.seed = seed
        self.verbose = verbose

    def forward(self, x):
        x = backend.ensure_array(x)
        for layer in self.layers:
            layer.input_parameter = x
            x = layer.forward(x)
            layer.output_parameter = x
        return x

    def backward(self, error):
        error = backend.ensure_array(error)
        for layer in reversed(self.layers):
            if layer_traits(layer).is_connection:
                layer.gradient(error)
            error = layer.backward(layer.input_parameter, error)
            layer.delta = error
        return error

    def update(self):
        for layer in self.layers:
            traits = layer_traits(layer)
            if not traits.is_connection:
                continue
            # bias layers are not regularized
            if self.weight_decay != 0.0 and not traits.is_bias_layer:
                for p, g in zip(layer.params(), layer.grads()):
                    g += self.weight_decay * p
            layer.optimizer.step()

    def train_step(self, x, target):
        output = self.forward(x)
        loss = self.loss_fn.forward(output, target)
        self.backward(self.loss_fn.backward())
        self.update()
        return loss

    def evaluate(self, x, target):
        return self.loss_fn.forward(self.forward(x), target)

    def fit(self, x, target, tag="run", runs_root="runs"):
        """
        Train for ``self.epochs`` epochs over column mini-batches.
        Returns {"loss": [...]} with the end-of-epoch loss on the full data.
        When runs_root is None nothing is written to disk.
        """
        if self.seed is not None:
            backend.seed(self.seed)

        x = backend.ensure_array(x)
        target = backend.ensure_array(target)
        history = {"loss": []}
        logger = RunLogger(root=runs_root, tag=tag) if runs_root is not None else None

        if self.verbose > 0:
            print(f"Starting training for {self.epochs} epochs...")
        for ep in range(1, self.epochs + 1):
            t0 = time.time()
            idx = np.arange(x.shape[1])
            if self.shuffle:
                np.random.shuffle(idx)
            idx = backend.ensure_array(idx)
            Xs = x[:, idx]
            Ts = target[:, idx]

            for xb, tb in self._batchify(Xs, Ts, self.batch_size):
                self.train_step(xb, tb)

            epoch_loss = self.evaluate(Xs, Ts)
            history["loss"].append(epoch_loss)

            if self.verbose > 0:
                log_interval = max(1, self.epochs // 10)
                if ep % log_interval == 0 or ep == 1 or ep == self.epochs:
                    print(f"Epoch {ep}/{self.epochs} - loss: {epoch_loss:.6f}")

            if logger is not None:
                logger.log_epoch(ep, time_s=time.time() - t0, loss=epoch_loss)

        if logger is not None:
            logger.save_json()
            logger.plot_history(history, key="loss", tag=tag)
        return history

    def close(self):
        for layer in self.layers:
            layer.close()

    # ================== helpers ==================
    def _batchify(self, X, T, batch_size):
        N = X.shape[1]
        start = 0
        while start < N:
            end = min(start + batch_size, N)
            yield X[:, start:end], T[:, start:end]
            start = end
