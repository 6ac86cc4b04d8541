"""Credential hasher tests — PBKDF2-HMAC-SHA256 with per-account salt."""

import hashlib

from tasklist.auth.password import (
    PBKDF2_ITERATIONS,
    generate_salt,
    hash_password,
    verify_password,
)


def test_generate_salt_is_16_random_bytes_hex():
    salt = generate_salt()
    assert len(salt) == 32
    assert bytes.fromhex(salt)
    assert generate_salt() != salt


def test_hash_is_deterministic():
    salt = generate_salt()
    assert hash_password("secret1", salt) == hash_password("secret1", salt)


def test_hash_is_32_byte_hex_digest():
    digest = hash_password("secret1", generate_salt())
    assert len(digest) == 64
    assert len(bytes.fromhex(digest)) == 32


def test_different_salts_give_different_hashes():
    assert hash_password("secret1", generate_salt()) != hash_password(
        "secret1", generate_salt()
    )


def test_different_passwords_give_different_hashes():
    salt = generate_salt()
    assert hash_password("secret1", salt) != hash_password("secret2", salt)


def test_text_salt_is_used_as_its_utf8_bytes():
    """The stored hex text is the KDF salt, not the bytes it encodes."""
    salt = "00112233445566778899aabbccddeeff"
    expected = hashlib.pbkdf2_hmac(
        "sha256", b"secret1", salt.encode("utf-8"), PBKDF2_ITERATIONS, dklen=32
    ).hex()
    assert hash_password("secret1", salt) == expected
    assert hash_password("secret1", salt.encode("utf-8")) == expected


def test_iteration_count_is_key_stretching_grade():
    assert PBKDF2_ITERATIONS >= 100_000


def test_verify_password():
    salt = generate_salt()
    stored = hash_password("correct horse", salt)
    assert verify_password("correct horse", salt, stored) is True
    assert verify_password("wrong horse", salt, stored) is False
    assert verify_password("correct horse", generate_salt(), stored) is False
    assert verify_password("", salt, stored) is False
