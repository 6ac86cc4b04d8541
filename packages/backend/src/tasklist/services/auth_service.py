"""Auth service — registration and login.

Learn: This is the composition root of the auth core. It owns input
validation and normalization, calls the password hasher, persists the
account through the Storage, and mints a session token with the
TokenCodec. It never stores tokens.

Failure modes, in the order they are checked:
1. InvalidInput — bad email/password, detected before touching the store
2. DuplicateEmail — raised by the store's uniqueness constraint
3. InvalidCredentials — unknown email or wrong password (indistinguishable)
4. ServerError — the store itself failed (logged, details withheld)
"""

import uuid
from dataclasses import dataclass

import structlog

from tasklist.auth.jwt import TokenCodec
from tasklist.auth.password import generate_salt, hash_password, verify_password
from tasklist.errors import InvalidCredentials, InvalidInput, store_errors
from tasklist.storage.base import Account, Storage

logger = structlog.get_logger()

MIN_PASSWORD_LENGTH = 6


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _is_utf8(value: str) -> bool:
    """False for strings such as lone surrogates that have no UTF-8 form."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


@dataclass(frozen=True)
class AuthResult:
    account: Account
    token: str


class AuthService:
    """Register and log in accounts, issuing a fresh token each time."""

    def __init__(self, storage: Storage, tokens: TokenCodec):
        self.storage = storage
        self.tokens = tokens

    async def register(self, email: str, password: str) -> AuthResult:
        """Create a new account and return it with a session token.

        Raises InvalidInput, DuplicateEmail or ServerError.
        """
        email = normalize_email(email)
        if not email or not password or len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInput("Email and a password of at least 6 characters are required")
        if not (_is_utf8(email) and _is_utf8(password)):
            raise InvalidInput("Email and password must be valid text")

        salt = generate_salt()
        with store_errors("register"):
            account = await self.storage.insert_account(
                id=str(uuid.uuid4()),
                email=email,
                password_hash=hash_password(password, salt),
                password_salt=salt,
            )

        logger.info("auth.registered", account_id=account.id)
        return AuthResult(account=account, token=self._issue(account))

    async def login(self, email: str, password: str) -> AuthResult:
        """Check credentials and return the account with a fresh token.

        Raises InvalidInput, InvalidCredentials or ServerError.
        """
        email = normalize_email(email)
        if not email or not password:
            raise InvalidInput("Email and password are required")
        if not (_is_utf8(email) and _is_utf8(password)):
            raise InvalidInput("Email and password must be valid text")

        with store_errors("login"):
            account = await self.storage.find_account_by_email(email)

        if account is None or not verify_password(
            password, account.password_salt, account.password_hash
        ):
            logger.info("auth.login_failed")
            raise InvalidCredentials("Invalid credentials")

        logger.info("auth.logged_in", account_id=account.id)
        return AuthResult(account=account, token=self._issue(account))

    def _issue(self, account: Account) -> str:
        return self.tokens.issue(subject=account.id, email=account.email)
