from partbom.exceptions.handlers import (
    ConfigurationError,
    ConflictError,
    CycleError,
    LimitExceededError,
    NotFoundError,
    PartBOMException,
    ValidationError,
)

__all__ = [
    "PartBOMException",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "CycleError",
    "LimitExceededError",
    "ConfigurationError",
]
