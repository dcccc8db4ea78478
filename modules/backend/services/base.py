"""
Base Service.

Shared plumbing for the note, file and auth services: the request's
database session, a per-service logger, and translation of SQLAlchemy
failures into application errors so endpoints never see driver
exceptions.
"""

from collections.abc import Awaitable
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.exceptions import ConflictError, StorageError
from modules.backend.core.logging import get_logger

T = TypeVar("T")

_UNIQUE_MARKERS = ("unique", "duplicate")


class BaseService:
    """Base class for services bound to one request's session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._logger = get_logger(self.__class__.__module__)

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def _execute_db_operation(self, operation: str, coro: Awaitable[T]) -> T:
        """
        Await a repository call, mapping database failures.

        Args:
            operation: Short name used in logs and error messages
            coro: Repository coroutine

        Raises:
            ConflictError: On a unique constraint violation (two saves racing
                for the same slug, a duplicate email)
            StorageError: On any other database failure
        """
        try:
            return await coro
        except IntegrityError as e:
            detail = str(e.orig if e.orig is not None else e)
            self._logger.warning(
                "Integrity error",
                extra={"operation": operation, "error": detail},
            )
            if any(marker in detail.lower() for marker in _UNIQUE_MARKERS):
                raise ConflictError("Resource already exists") from e
            raise StorageError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            self._logger.error(
                "Database operation failed",
                extra={"operation": operation, "error": str(e)},
            )
            raise StorageError(f"Database operation failed: {operation}") from e

    def _log_operation(self, operation: str, **context: Any) -> None:
        self._logger.info(operation, extra={"service": self.__class__.__name__, **context})

    def _log_debug(self, message: str, **context: Any) -> None:
        self._logger.debug(message, extra={"service": self.__class__.__name__, **context})
