"""
Auth Service.

Account overlay: registration, login, profile updates and soft deletion.
Accounts are independent of notes; a note never requires an owner.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.concurrency import run_blocking
from modules.backend.core.exceptions import AuthenticationError, ConflictError
from modules.backend.core.security import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from modules.backend.models.user import User
from modules.backend.repositories.user import UserRepository
from modules.backend.schemas.user import ProfileUpdateRequest, RegisterRequest
from modules.backend.services.base import BaseService


class AuthService(BaseService):
    """Service for user accounts and bearer tokens."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = UserRepository(session)

    async def register(self, data: RegisterRequest) -> tuple[User, str]:
        """
        Create an account.

        Returns:
            Tuple of (user, access token)

        Raises:
            ConflictError: If the email or username is already registered
        """
        if await self.repo.is_taken(email=data.email):
            raise ConflictError("Email already registered")
        if await self.repo.is_taken(username=data.username):
            raise ConflictError("Username already taken")

        password_hash = await run_blocking(hash_password, data.password)
        user = await self._execute_db_operation(
            "register",
            self.repo.create(
                email=data.email,
                username=data.username,
                password_hash=password_hash,
                first_name=data.first_name,
                last_name=data.last_name,
            ),
        )

        self._log_operation("User registered", user_id=user.id)
        return user, self.issue_token(user)

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """
        Check credentials of an active account.

        Raises:
            AuthenticationError: On unknown email, inactive account or wrong password
        """
        user = await self.repo.get_active_by_email(email)
        if user is None or not await run_blocking(verify_password, password, user.password_hash):
            self._logger.warning("Login failed", extra={"email": email})
            raise AuthenticationError("Invalid email or password")

        self._log_operation("User logged in", user_id=user.id)
        return user, self.issue_token(user)

    async def get_user_from_token(self, token: str) -> User:
        """
        Resolve the active user a bearer token was issued for.

        Raises:
            AuthenticationError: If the token is invalid or the account is gone
        """
        payload = decode_token(token)
        user = await self.repo.get_active_by_id(payload["sub"])
        if user is None:
            raise AuthenticationError("User not found or inactive")
        return user

    async def update_profile(self, user: User, data: ProfileUpdateRequest) -> User:
        """
        Apply the provided profile fields.

        Raises:
            ConflictError: If the new email or username belongs to another account
        """
        changes = data.model_dump(exclude_unset=True, by_alias=False)
        # email and username are required columns; null means "leave unchanged"
        for required in ("email", "username"):
            if changes.get(required, "") is None:
                del changes[required]
        if not changes:
            return user

        if "email" in changes and await self.repo.is_taken(email=changes["email"], exclude_id=user.id):
            raise ConflictError("Email already registered")
        if "username" in changes and await self.repo.is_taken(
            username=changes["username"], exclude_id=user.id
        ):
            raise ConflictError("Username already taken")

        self._log_operation("Updating profile", user_id=user.id, fields=list(changes))
        return await self._execute_db_operation(
            "update_profile",
            self.repo.update(user.id, **changes),
        )

    async def deactivate(self, user: User) -> None:
        """Soft delete the account."""
        self._log_operation("Deactivating user", user_id=user.id)
        await self._execute_db_operation("deactivate_user", self.repo.deactivate(user.id))

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token({"sub": user.id, "email": user.email})
