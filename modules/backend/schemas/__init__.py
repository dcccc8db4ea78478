# Pydantic schemas package
from modules.backend.schemas.base import (
    ApiResponse,
    CamelModel,
    ErrorResponse,
    MessageResponse,
)

__all__ = [
    "ApiResponse",
    "CamelModel",
    "ErrorResponse",
    "MessageResponse",
]
