"""Access gate and FastAPI auth dependencies.

Learn: The gate reads "Authorization: Bearer <token>", verifies the token
with the TokenCodec and yields a CurrentIdentity for the rest of the
request. It performs no store lookup: claims are trusted as of issuance,
so a deleted account keeps working until its token expires. That is the
accepted cost of stateless sessions.

Route handlers use get_current_user as a Depends(); the gate itself is a
plain class so it can be exercised without an HTTP request.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Header, Request

from tasklist.auth.jwt import TokenCodec, TokenInvalid
from tasklist.errors import Unauthorized

logger = structlog.get_logger()


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated caller. Every task query is scoped by account_id."""

    account_id: str
    email: str


class AccessGate:
    """Turns a raw Authorization header value into a CurrentIdentity."""

    def __init__(self, tokens: TokenCodec):
        self.tokens = tokens

    def authenticate(self, authorization: Optional[str]) -> CurrentIdentity:
        """Return the caller's identity or raise Unauthorized."""
        token = _bearer_token(authorization)
        if token is None:
            raise Unauthorized("Missing bearer token")

        result = self.tokens.verify(token)
        if isinstance(result, TokenInvalid):
            logger.info("auth.token_rejected", reason=result.reason)
            raise Unauthorized("Invalid token")

        if not result.claims.subject:
            logger.info("auth.token_rejected", reason="missing_subject")
            raise Unauthorized("Invalid token")

        return CurrentIdentity(
            account_id=result.claims.subject,
            email=result.claims.email,
        )


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from "Bearer <token>" (scheme is case-insensitive)."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def get_access_gate(request: Request) -> AccessGate:
    return request.app.state.gate


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if no valid token)."""
    return get_access_gate(request).authenticate(authorization)
