"""JWT session token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
The server signs {"sub", "email", "exp"} with a shared secret (HS256)
and later trusts any token whose signature matches and whose exp has
not passed. Nothing is stored server-side, so there is no revocation:
a token stays valid until it expires (7 days by default).

Wire format (three base64url segments, no padding):
    header.payload.signature
    header    = {"alg":"HS256","typ":"JWT"}
    payload   = {"sub": <account id>, "email": <email>, "exp": <unix seconds>}
    signature = HMAC-SHA256(secret, "<header>.<payload>")

verify_token() is total: whatever it is given, it returns TokenValid or
TokenInvalid and never raises.
"""

import time
from dataclasses import dataclass
from typing import Optional, Union

import jwt

ALGORITHM = "HS256"
DEFAULT_TTL_SECONDS = 7 * 24 * 60 * 60
EXPIRY_LEEWAY_SECONDS = 1


@dataclass(frozen=True)
class SessionClaims:
    """The claims embedded in a session token."""

    subject: str
    email: str
    expires_at: int


@dataclass(frozen=True)
class TokenValid:
    claims: SessionClaims
    ok = True


@dataclass(frozen=True)
class TokenInvalid:
    """Why a token was rejected. For logs only, never shown to callers."""

    reason: str
    ok = False


TokenResult = Union[TokenValid, TokenInvalid]


def issue_token(
    subject: str,
    email: str,
    secret: str,
    ttl_seconds: int = DEFAULT_TTL_SECONDS,
    now: Optional[float] = None,
) -> str:
    """Create a signed token expiring ttl_seconds after now."""
    issued_at = int(time.time() if now is None else now)
    payload = {
        "sub": subject,
        "email": email,
        "exp": issued_at + ttl_seconds,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_token(token: Union[str, bytes], secret: str) -> TokenResult:
    """Verify signature and expiry and return the embedded claims."""
    if isinstance(token, str):
        separators = token.count(".")
    elif isinstance(token, bytes):
        separators = token.count(b".")
    else:
        return TokenInvalid("malformed")
    if separators != 2:
        return TokenInvalid("malformed")

    # A token is still valid during its exp second: PyJWT rejects
    # exp <= now - leeway, so leeway=1 rejects only exp < floor(now).
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"require": ["exp"]},
            leeway=EXPIRY_LEEWAY_SECONDS,
        )
    except jwt.ExpiredSignatureError:
        return TokenInvalid("expired")
    except jwt.InvalidSignatureError:
        return TokenInvalid("bad_signature")
    except jwt.MissingRequiredClaimError:
        return TokenInvalid("missing_claims")
    except jwt.PyJWTError:
        return TokenInvalid("malformed")

    # PyJWT accepts numeric strings for exp; the wire format wants a number.
    exp = payload.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return TokenInvalid("malformed")

    subject = payload.get("sub")
    email = payload.get("email")
    return TokenValid(
        SessionClaims(
            subject=subject if isinstance(subject, str) else "",
            email=email if isinstance(email, str) else "",
            expires_at=int(exp),
        )
    )


class TokenCodec:
    """Binds the shared secret and default expiry for issue/verify."""

    def __init__(self, secret: str, default_ttl_seconds: int = DEFAULT_TTL_SECONDS):
        if not secret:
            raise ValueError("secret must be set")
        self._secret = secret
        self.default_ttl_seconds = default_ttl_seconds

    def issue(
        self,
        subject: str,
        email: str,
        ttl_seconds: Optional[int] = None,
        now: Optional[float] = None,
    ) -> str:
        return issue_token(
            subject,
            email,
            self._secret,
            ttl_seconds=(
                self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
            ),
            now=now,
        )

    def verify(self, token: Union[str, bytes]) -> TokenResult:
        return verify_token(token, self._secret)
