from .Backend import Backend, backend
from .errors import (
    InvalidConfigurationError,
    OwnershipViolationError,
    ShapeMismatchError,
)
from .OptimizerHandle import OptimizerHandle
from .logger import RunLogger

__all__ = [
    "Backend",
    "backend",
    "InvalidConfigurationError",
    "OwnershipViolationError",
    "ShapeMismatchError",
    "OptimizerHandle",
    "RunLogger",
]
