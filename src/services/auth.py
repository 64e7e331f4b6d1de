"""Authentication service for password hashing, bearer tokens and accounts."""

import hashlib
import hmac
import logging
import secrets
from datetime import UTC, datetime
from typing import Any, Protocol

from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.database import is_row_id
from src.exceptions import CredentialsError, ValidationError, format_validation_errors
from src.models.personal_access_token import PersonalAccessToken
from src.models.user import User
from src.schemas.auth import PASSWORD_MAX_BYTES, UserRegister, normalize_email

logger = logging.getLogger(__name__)

settings = get_settings()

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds
)

EMAIL_TAKEN = "The email has already been taken."
USERNAME_TAKEN = "The username has already been taken."


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...

    def verify(self, password: str, hashed: str) -> bool: ...

    def dummy_verify(self) -> None: ...


class TokenService(Protocol):
    def mint(self, user: User) -> str: ...

    def resolve(self, plain_token: str) -> PersonalAccessToken | None: ...

    def revoke(self, token: PersonalAccessToken) -> None: ...


class BcryptPasswordHasher:
    """One-way bcrypt hashing backed by passlib."""

    def __init__(self, context: CryptContext = pwd_context):
        self.context = context

    def hash(self, password: str) -> str:
        if len(password.encode()) > PASSWORD_MAX_BYTES:
            raise ValueError(f"Passwords longer than {PASSWORD_MAX_BYTES} bytes cannot be hashed")
        return self.context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        # bcrypt would compare only the first 72 bytes, which no stored password exceeds
        if len(password.encode()) > PASSWORD_MAX_BYTES:
            self.context.dummy_verify()
            return False
        return self.context.verify(password, hashed)

    def dummy_verify(self) -> None:
        # Spend the same time as a real comparison when no user matched
        self.context.dummy_verify()


def hash_token(secret: str) -> str:
    """Digest stored in place of the token secret."""
    return hashlib.sha256(secret.encode()).hexdigest()


class DatabaseTokenService:
    """Issue, look up and revoke opaque bearer tokens.

    Plain tokens have the form ``<id>|<secret>``. Only the SHA-256 digest of the
    secret is persisted, so a leaked table cannot be replayed.
    """

    def __init__(self, db: Session, name: str | None = None):
        self.db = db
        self.name = name or settings.token_name

    def mint(self, user: User) -> str:
        """Create a token for ``user`` and commit it. Returns the plain token."""
        secret = secrets.token_hex(20)
        token = PersonalAccessToken(user=user, name=self.name, token=hash_token(secret))
        self.db.add(token)
        self.db.commit()
        self.db.refresh(token)
        return f"{token.id}|{secret}"

    def resolve(self, plain_token: str) -> PersonalAccessToken | None:
        """Find the live token matching ``plain_token`` and stamp its last use."""
        if "|" in plain_token:
            token_id, secret = plain_token.split("|", 1)
            if not token_id.isdigit() or not is_row_id(int(token_id)):
                return None
            token = self.db.get(PersonalAccessToken, int(token_id))
        else:
            secret = plain_token
            token = (
                self.db.query(PersonalAccessToken)
                .filter(PersonalAccessToken.token == hash_token(secret))
                .first()
            )

        if token is None or not hmac.compare_digest(token.token, hash_token(secret)):
            return None

        token.last_used_at = datetime.now(UTC)
        self.db.commit()
        return token

    def revoke(self, token: PersonalAccessToken) -> None:
        """Delete a single token. Other tokens of the same user stay valid."""
        self.db.delete(token)
        self.db.commit()


class AccountService:
    """Registration and credential checks."""

    def __init__(self, db: Session, hasher: PasswordHasher, tokens: TokenService):
        self.db = db
        self.hasher = hasher
        self.tokens = tokens

    def validate_registration(self, payload: dict[str, Any]) -> UserRegister:
        """Validate a registration body, reporting format errors and taken fields together."""
        errors: dict[str, list[str]] = {}
        user_data = None
        try:
            user_data = UserRegister.model_validate(payload)
        except PydanticValidationError as exc:
            errors = format_validation_errors(exc.errors())

        if user_data is not None:
            email, username = user_data.email, user_data.username
        else:
            raw_email, raw_username = payload.get("email"), payload.get("username")
            email = normalize_email(raw_email) if isinstance(raw_email, str) else None
            username = raw_username.strip() if isinstance(raw_username, str) else None

        for field, messages in self._taken_fields(email, username).items():
            errors.setdefault(field, []).extend(messages)

        if errors:
            raise ValidationError(errors)
        return user_data

    def register(self, name: str, email: str, username: str, password: str) -> tuple[User, str]:
        """Create a user and its first token. Returns ``(user, plain_token)``."""
        errors = self._taken_fields(email, username)
        if errors:
            raise ValidationError(errors)

        user = User(
            name=name,
            email=email,
            username=username,
            password_hash=self.hasher.hash(password),
        )
        self.db.add(user)
        try:
            self.db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration
            self.db.rollback()
            raise ValidationError(
                self._taken_fields(email, username) or {"email": [EMAIL_TAKEN]}
            ) from None

        # mint() commits the user together with the token
        token = self.tokens.mint(user)
        self.db.refresh(user)
        logger.info(f"Registered user {user.id} ({user.username})")
        return user, token

    def login(self, identity: str, password: str) -> tuple[User, str]:
        """Check credentials and issue a new token. Returns ``(user, plain_token)``."""
        user = self.find_by_identity(identity)

        if user is None:
            self.hasher.dummy_verify()
            logger.warning("Failed login attempt: unknown identity")
            raise CredentialsError()
        if not self.hasher.verify(password, user.password_hash):
            logger.warning(f"Failed login attempt for user {user.id}")
            raise CredentialsError()

        token = self.tokens.mint(user)
        logger.info(f"User {user.id} logged in")
        return user, token

    def logout(self, token: PersonalAccessToken) -> None:
        user_id = token.user_id
        self.tokens.revoke(token)
        logger.info(f"User {user_id} logged out")

    def find_by_identity(self, identity: str) -> User | None:
        """Look a user up by email if ``identity`` is an email address, else by username."""
        email = normalize_email(identity)
        if email is not None:
            return self.db.query(User).filter(User.email == email).first()
        return self.db.query(User).filter(User.username == identity).first()

    def _taken_fields(self, email: str | None, username: str | None) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}
        conditions = []
        if email:
            conditions.append(User.email == email)
        if username:
            conditions.append(User.username == username)
        if not conditions:
            return errors

        existing = self.db.query(User).filter(or_(*conditions)).all()
        for user in existing:
            if user.email == email:
                errors["email"] = [EMAIL_TAKEN]
            if user.username == username:
                errors["username"] = [USERNAME_TAKEN]
        return errors
