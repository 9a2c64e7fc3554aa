from .Layer import Layer
from .LayerTraits import LayerTraits, layer_traits
from .SparseBiasLayer import SparseBiasLayer

__all__ = [
    "Layer",
    "LayerTraits",
    "layer_traits",
    "SparseBiasLayer",
]
