from dataclasses import dataclass


@dataclass(frozen=True)
class LayerTraits:
    """Capability descriptor the orchestrator dispatches on.

    is_connection layers carry trainable weights between layers and get their
    gradient computed and optimizer stepped; is_bias_layer layers are left out
    of weight-decay regularization.
    """

    is_binary: bool = False
    is_output_layer: bool = False
    is_bias_layer: bool = False
    is_lstm_layer: bool = False
    is_connection: bool = False


def layer_traits(layer):
    """Traits of a layer instance or layer class."""
    return getattr(layer, "traits", LayerTraits())
