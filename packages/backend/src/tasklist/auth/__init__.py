"""Authentication core.

Three pieces, leaf to root:
1. password — salted PBKDF2 credential hashing
2. jwt — HS256 session tokens (issue / verify, never raises on bad input)
3. dependencies — the access gate that turns a Bearer header into an identity

The HTTP layer and the services only talk to these through their
public functions and classes.
"""
