"""
K12 Tutor - Authentication Service
Business logic for registration, login and token issuing
"""
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import create_access_token, hash_password, verify_password
from app.models.user import User, UserRole
from app.schemas.user import TokenResponse, UserCreate

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Base authentication error."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Invalid email or password."""
    pass


class InactiveAccountError(AuthenticationError):
    """Account has been deactivated."""
    pass


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register_user(self, user_data: UserCreate) -> User:
        """
        Register a new account.

        Students must give a grade; a student may name a parent account by
        email, which must already exist with the parent role.

        Raises:
            ValueError: If the email is taken or the parent link is invalid
        """
        if await self.get_user_by_email(user_data.email):
            raise ValueError("Email already registered")

        parent_id = None
        if user_data.parent_email:
            parent = await self.get_user_by_email(user_data.parent_email)
            if parent is None or parent.role != UserRole.PARENT:
                raise ValueError("Parent account not found")
            parent_id = parent.id

        user = User(
            email=user_data.email,
            hashed_password=hash_password(user_data.password),
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            role=user_data.role.value,
            grade=user_data.grade,
            subjects=[s.value for s in user_data.subjects] if user_data.subjects else None,
            parent_id=parent_id,
        )
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)

        logger.info("Registered %s account %s", user.role, user.id)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """
        Check credentials.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
            InactiveAccountError: Account deactivated
        """
        user = await self.get_user_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError("Invalid email or password")
        if not user.is_active:
            raise InactiveAccountError("Account is deactivated")
        return user

    def create_token(self, user: User) -> TokenResponse:
        role_value = user.role.value if hasattr(user.role, "value") else user.role
        return TokenResponse(
            access_token=create_access_token(str(user.id), role_value),
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: str | uuid.UUID) -> User | None:
        if isinstance(user_id, str):
            try:
                user_id = uuid.UUID(user_id)
            except ValueError:
                return None
        return await self.db.get(User, user_id)

    # =========================================================================
    # Account lookups
    # =========================================================================

    async def get_students(self, grade: int | None = None) -> list[User]:
        """Active student accounts, optionally within one grade."""
        query = select(User).where(User.role == UserRole.STUDENT.value, User.is_active.is_(True))
        if grade is not None:
            query = query.where(User.grade == grade)
        result = await self.db.execute(query.order_by(User.created_at, User.id))
        return list(result.scalars().all())

    async def get_child(self, parent: User, student_id: uuid.UUID) -> User | None:
        """A student linked to ``parent``, or None when there is no such link."""
        student = await self.db.get(User, student_id)
        if student is None or student.role != UserRole.STUDENT or student.parent_id != parent.id:
            return None
        return student
