from chatfiles.shared.schemas.base import (
    BaseSchema,
    SuccessResponse,
    ErrorResponse,
    ErrorDetail,
)

__all__ = [
    "BaseSchema",
    "SuccessResponse",
    "ErrorResponse",
    "ErrorDetail",
]
