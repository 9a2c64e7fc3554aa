from .ZeroInitialization import ZeroInitialization
from .RandomInitialization import RandomInitialization
from .HeInitialization import HeInitialization

__all__ = [
    "ZeroInitialization",
    "RandomInitialization",
    "HeInitialization",
]
