"""Account service — credential storage for registration and login.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database.

Username uniqueness is owned by the database: the lookup before insert
only gives a friendly error in the common case. Two concurrent
registrations can both pass the lookup, and then the unique constraint
rejects the second insert, which we translate to the same error.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from itemvault.auth.password import (
    DEFAULT_ROUNDS,
    hash_password_async,
    verify_password_async,
)
from itemvault.db.models import Account
from itemvault.errors import (
    AuthenticationError,
    DuplicateUsernameError,
    StoreError,
    ValidationError,
)

logger = structlog.get_logger()

MIN_PASSWORD_LENGTH = 6
MAX_USERNAME_LENGTH = 100


class AccountService:
    """Register accounts and check credentials."""

    def __init__(self, db: AsyncSession, bcrypt_rounds: int = DEFAULT_ROUNDS):
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    async def register(self, username: str | None, password: str | None) -> Account:
        """Create an account with a hashed password.

        Raises ValidationError for empty input or a short password,
        DuplicateUsernameError if the username is taken.
        """
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Username and password are required")
        if len(username) > MAX_USERNAME_LENGTH:
            raise ValidationError(
                f"Username must be at most {MAX_USERNAME_LENGTH} characters"
            )
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        if await self.find_by_username(username):
            raise DuplicateUsernameError()

        account = Account(
            username=username,
            password_hash=await hash_password_async(password, self.bcrypt_rounds),
        )
        self.db.add(account)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name
            await self.db.rollback()
            raise DuplicateUsernameError()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("account.register_failed", username=username, error=str(e))
            raise StoreError("Error registering user")

        logger.info("account.registered", account_id=str(account.id), username=username)
        return account

    async def find_by_username(self, username: str) -> Account | None:
        try:
            result = await self.db.execute(
                select(Account).where(Account.username == username.strip())
            )
        except SQLAlchemyError as e:
            logger.error("account.lookup_failed", username=username, error=str(e))
            raise StoreError()
        return result.scalars().first()

    async def authenticate(self, username: str | None, password: str | None) -> Account:
        """Return the account for valid credentials.

        Unknown usernames and wrong passwords get the same error so the
        response does not reveal which usernames exist.
        """
        if not username or not password:
            raise AuthenticationError()

        account = await self.find_by_username(username)
        if not account:
            raise AuthenticationError()
        if not await verify_password_async(password, account.password_hash):
            logger.info("account.login_rejected", username=account.username)
            raise AuthenticationError()
        return account
