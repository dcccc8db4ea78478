"""
Base Repository.

Primary-key lookups and writes shared by the note, file and user
repositories. Repositories flush but never commit; the request's session
dependency owns the transaction.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.exceptions import NotFoundError
from modules.backend.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Repository over one model keyed by a string ``id``.

    Subclasses set the model and the label used in not-found messages:

        class FileRepository(BaseRepository[FileAttachment]):
            model = FileAttachment
            label = "File"
    """

    model: type[ModelType]
    label: str = "Resource"

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, id: str) -> ModelType:
        """
        Raises:
            NotFoundError: If no row has this id
        """
        instance = await self.get_by_id_or_none(id)
        if instance is None:
            raise NotFoundError(f"{self.label} not found")
        return instance

    async def get_by_id_or_none(self, id: str) -> ModelType | None:
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def create(self, **fields: Any) -> ModelType:
        instance = self.model(**fields)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update(self, id: str, **fields: Any) -> ModelType:
        """
        Set the given columns on an existing row. Unknown names are ignored.

        Raises:
            NotFoundError: If no row has this id
        """
        instance = await self.get_by_id(id)
        for name, value in fields.items():
            if hasattr(instance, name):
                setattr(instance, name, value)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, id: str) -> None:
        """
        Raises:
            NotFoundError: If no row has this id
        """
        instance = await self.get_by_id(id)
        await self.session.delete(instance)
        await self.session.flush()

    async def exists(self, id: str) -> bool:
        result = await self.session.execute(select(self.model.id).where(self.model.id == id))
        return result.scalar_one_or_none() is not None
