"""Auth service - user registration and credential checks."""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from techfeed.models import User
from techfeed.security import hash_password, verify_password


class EmailAlreadyRegisteredError(Exception):
    """Raised when registering an email that already has an account."""


class InvalidCredentialsError(Exception):
    """Raised when the email/password pair does not match an account."""


class AuthService:
    """Service for user accounts."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def register(self, email: str, password: str, nickname: str) -> User:
        """Create a new account."""
        email = email.strip().lower()
        if await self.get_user_by_email(email) is not None:
            raise EmailAlreadyRegisteredError(email)

        user = User(email=email, nickname=nickname.strip(), password_hash=hash_password(password))
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Get the user for valid credentials."""
        user = await self.get_user_by_email(email.strip().lower())
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError(email)
        return user

    async def get_user(self, user_id: int) -> User | None:
        """Get a user by ID."""
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()
