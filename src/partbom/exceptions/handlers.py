from __future__ import annotations

from typing import Any, Dict, Optional


class PartBOMException(Exception):
    """
    Base exception for the part/BOM engine.

    Every subclass carries:
    - attributes: message/code/status_code/details/user_message
    - method: to_dict()

    The request layer surfaces `message` verbatim and maps `status_code`.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "PARTBOM_ERROR",
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details: Dict[str, Any] = details or {}
        self.user_message = user_message or message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "user_message": self.user_message,
            "details": self.details,
        }

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class ValidationError(PartBOMException):
    def __init__(self, message: str, field: Optional[str] = None, **kwargs: Any):
        details: Dict[str, Any] = {"field": field} if field else {}
        details.update(kwargs)
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details=details,
        )


class NotFoundError(PartBOMException):
    def __init__(self, message: str, resource: Optional[str] = None, **kwargs: Any):
        details: Dict[str, Any] = {"resource": resource} if resource else {}
        details.update(kwargs)
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404,
            details=details,
        )


class ConflictError(PartBOMException):
    # Reported as 400, not 409.
    def __init__(self, message: str, **kwargs: Any):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=400,
            details=dict(kwargs),
        )


class CycleError(PartBOMException):
    """Raised when a new BOM link would close a cycle."""

    def __init__(self, parent_id: str, child_id: str, **kwargs: Any):
        self.parent_id = parent_id
        self.child_id = child_id
        details: Dict[str, Any] = {"parent_id": parent_id, "child_id": child_id}
        details.update(kwargs)
        super().__init__(
            message="BOM link creation failed because it would introduce a cycle.",
            code="CYCLE_DETECTED",
            status_code=400,
            details=details,
        )


class LimitExceededError(PartBOMException):
    def __init__(self, node_limit: int, **kwargs: Any):
        self.node_limit = node_limit
        details: Dict[str, Any] = {"node_limit": node_limit}
        details.update(kwargs)
        super().__init__(
            message=(
                f"BOM expansion exceeded node limit of {node_limit}. "
                "Reduce depth or load incrementally."
            ),
            code="LIMIT_EXCEEDED",
            status_code=400,
            details=details,
        )


class ConfigurationError(PartBOMException):
    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs: Any):
        details: Dict[str, Any] = {"config_key": config_key} if config_key else {}
        details.update(kwargs)
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            status_code=500,
            details=details,
            user_message="System configuration error",
        )
