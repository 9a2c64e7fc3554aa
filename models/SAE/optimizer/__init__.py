from .Optimizer import Optimizer
from .RMSPropOptimizer import RMSPropOptimizer
from .SGDOptimizer import SGDOptimizer
from .AdamWOptimizer import AdamWOptimizer

__all__ = [
    "Optimizer",
    "RMSPropOptimizer",
    "SGDOptimizer",
    "AdamWOptimizer",
]
