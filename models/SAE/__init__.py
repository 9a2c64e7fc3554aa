from .layers import Layer, LayerTraits, layer_traits, SparseBiasLayer
from .optimizer import Optimizer, RMSPropOptimizer, SGDOptimizer, AdamWOptimizer
from .init_rules import ZeroInitialization, RandomInitialization, HeInitialization
from .loss import MeanSquaredError
from .helpers.errors import (
    InvalidConfigurationError,
    OwnershipViolationError,
    ShapeMismatchError,
)
from .Pipeline import LayerPipeline

__all__ = [
    "Layer",
    "LayerTraits",
    "layer_traits",
    "SparseBiasLayer",
    "Optimizer",
    "RMSPropOptimizer",
    "SGDOptimizer",
    "AdamWOptimizer",
    "ZeroInitialization",
    "RandomInitialization",
    "HeInitialization",
    "MeanSquaredError",
    "InvalidConfigurationError",
    "OwnershipViolationError",
    "ShapeMismatchError",
    "LayerPipeline",
]
