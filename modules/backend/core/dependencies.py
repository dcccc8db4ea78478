"""
FastAPI Dependencies.

Shared dependencies for request handling.
"""

import uuid
from typing import Annotated, Any, TypeVar

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.config import get_app_config
from modules.backend.core.config_schema import StorageSchema
from modules.backend.core.database import get_db_session
from modules.backend.core.exception_handlers import validation_details
from modules.backend.core.exceptions import AuthenticationError, ValidationError
from modules.backend.core.logging import get_logger
from modules.backend.core.storage import FileStorage
from modules.backend.models.user import User

logger = get_logger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """
    Extract or generate request ID from headers.

    Used for request tracing and correlation.
    """
    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


def get_file_storage(request: Request) -> FileStorage:
    """Attachment storage owned by the running app."""
    return request.app.state.file_storage


def get_storage_limits() -> StorageSchema:
    """Upload limits from storage.yaml."""
    return get_app_config().storage


Storage = Annotated[FileStorage, Depends(get_file_storage)]
StorageLimits = Annotated[StorageSchema, Depends(get_storage_limits)]


async def parse_body(request: Request, schema: type[SchemaT]) -> SchemaT:
    """
    Validate a JSON or form-encoded body against a schema.

    The browser client posts URL-encoded forms while other clients send
    JSON; both shapes produce the same model.

    Raises:
        ValidationError: If the body is unreadable or fails validation
    """
    content_type = request.headers.get("content-type", "")
    data: Any
    try:
        if "application/json" in content_type:
            data = await request.json()
        else:
            form = await request.form()
            data = dict(form)
    except ValueError as e:
        raise ValidationError("Malformed request body") from e

    if not isinstance(data, dict):
        raise ValidationError("Request body must be an object")

    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError("Validation failed", details=validation_details(e.errors())) from e


_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    db: DbSession,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> User:
    """
    Get the authenticated user from the bearer token.

    Raises:
        AuthenticationError: If the token is missing, invalid or the account is inactive
    """
    from modules.backend.services.auth import AuthService

    if credentials is None:
        raise AuthenticationError("Authentication required")
    return await AuthService(db).get_user_from_token(credentials.credentials)


CurrentUser = Annotated[User, Depends(get_current_user)]
