from .MeanSquaredError import MeanSquaredError

__all__ = ["MeanSquaredError"]
