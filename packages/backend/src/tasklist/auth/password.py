"""Password hashing utilities.

Learn: PBKDF2-HMAC-SHA256 with 100,000 iterations and a 32-byte output.
Each account gets its own random 16-byte salt, stored hex-encoded next
to the hex digest. The stored hex text itself is the salt input to the
KDF, so a row written by any earlier deployment of this service stays
verifiable.

Verification re-hashes with the stored salt and compares in constant time.
"""

import hashlib
import secrets
from typing import Union

PBKDF2_ALGORITHM = "sha256"
PBKDF2_ITERATIONS = 100_000
PBKDF2_KEY_LENGTH = 32
SALT_BYTES = 16


def generate_salt() -> str:
    """Return a fresh random salt as hex text (32 characters)."""
    return secrets.token_hex(SALT_BYTES)


def hash_password(password: str, salt: Union[str, bytes]) -> str:
    """Derive the hex digest for a password and salt.

    Deterministic for a fixed (password, salt) pair. A text salt is used
    as its UTF-8 bytes.
    """
    salt_bytes = salt.encode("utf-8") if isinstance(salt, str) else salt
    digest = hashlib.pbkdf2_hmac(
        PBKDF2_ALGORITHM,
        password.encode("utf-8"),
        salt_bytes,
        PBKDF2_ITERATIONS,
        dklen=PBKDF2_KEY_LENGTH,
    )
    return digest.hex()


def verify_password(password: str, salt: Union[str, bytes], password_hash: str) -> bool:
    """Check a plaintext password against a stored salt and digest."""
    expected = hash_password(password, salt)
    return secrets.compare_digest(expected, password_hash)
