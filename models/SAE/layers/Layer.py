from .LayerTraits import LayerTraits


class Layer:
    # Subclasses override as needed
    traits = LayerTraits()

    def forward(self, x):
        raise NotImplementedError

    def backward(self, x, gy):
        # Return error signal wrt input
        raise NotImplementedError

    def gradient(self, d):
        # Return gradient wrt the layer's parameters
        raise NotImplementedError

    def params(self):
        # Return list of parameter ndarrays (e.g., [W, b])
        return []

    def grads(self):
        # Return list of gradient ndarrays matching params()
        return []

    def close(self):
        pass
