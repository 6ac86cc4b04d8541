"""Auth API tests — register, login, /me over HTTP.

Learn: Runs once per storage backend (see the `app` fixture). Covers:
1. Registration + duplicate prevention (case-insensitive)
2. Login → token; wrong password and unknown email look identical
3. Input validation → 400 invalid_input
4. The access gate on /me: missing, invalid and valid tokens
"""

import pytest

from conftest import bearer, unique_email


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_user(client):
    """Register returns 201 with a token and the normalized account."""
    r = await client.post(
        "/api/auth/register",
        json={"email": "  New.User@Example.com ", "password": "secret1"},
    )
    assert r.status_code == 201
    body = r.json()
    assert body["token"].count(".") == 2
    assert body["user"]["email"] == "new.user@example.com"
    assert body["user"]["id"]
    assert set(body["user"]) == {"id", "email"}


@pytest.mark.asyncio
async def test_register_duplicate_email(client, register):
    """Same email twice, differing only in case → 409 email_exists."""
    email = unique_email("dup")
    await register(email=email)

    r = await client.post(
        "/api/auth/register", json={"email": email.upper(), "password": "secret1"}
    )
    assert r.status_code == 409
    assert r.json() == {"error": "email_exists"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"email": "short@example.com", "password": "12345"},
        {"email": "   ", "password": "secret1"},
        {"email": "nopass@example.com"},
        {"password": "secret1"},
        {"email": 42, "password": "secret1"},
        {"email": "typed@example.com", "password": 123456},
    ],
)
async def test_register_invalid_input(client, body):
    r = await client.post("/api/auth/register", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": "invalid_input"}


@pytest.mark.asyncio
async def test_register_non_json_body(client):
    r = await client.post(
        "/api/auth/register",
        content=b"email=a@b.c&password=secret1",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert r.status_code == 400
    assert r.json() == {"error": "invalid_input"}


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success_case_insensitive(client, register):
    """register user@test.com then login USER@test.com → same account id."""
    email = unique_email("login")
    registered = await register(email=email, password="secret1")

    r = await client.post(
        "/api/auth/login", json={"email": email.upper(), "password": "secret1"}
    )
    assert r.status_code == 200
    body = r.json()
    assert body["user"]["id"] == registered["user"]["id"]
    assert body["user"]["email"] == email
    assert body["token"].count(".") == 2


@pytest.mark.asyncio
async def test_login_wrong_password(client, register):
    email = unique_email("wrong")
    await register(email=email, password="secret1")

    r = await client.post("/api/auth/login", json={"email": email, "password": "wrong"})
    assert r.status_code == 401
    assert r.json() == {"error": "invalid_credentials"}


@pytest.mark.asyncio
async def test_login_nonexistent_user(client):
    """Unknown email gets exactly the same response as a wrong password."""
    r = await client.post(
        "/api/auth/login", json={"email": "nobody@example.com", "password": "whatever"}
    )
    assert r.status_code == 401
    assert r.json() == {"error": "invalid_credentials"}


@pytest.mark.asyncio
async def test_login_missing_fields(client):
    r = await client.post("/api/auth/login", json={"email": "", "password": ""})
    assert r.status_code == 400
    assert r.json() == {"error": "invalid_input"}


# ═══════════════════════════════════════════════════════════
# Protected endpoint (/me)
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_with_token(client, register):
    """The registration token resolves to the registered account."""
    email = unique_email("me")
    registered = await register(email=email)

    r = await client.get("/api/auth/me", headers=bearer(registered["token"]))
    assert r.status_code == 200
    assert r.json() == {"id": registered["user"]["id"], "email": email}


@pytest.mark.asyncio
async def test_me_with_login_token(client, register):
    email = unique_email("me-login")
    registered = await register(email=email)
    r = await client.post("/api/auth/login", json={"email": email, "password": "secret1"})

    r = await client.get("/api/auth/me", headers=bearer(r.json()["token"]))
    assert r.status_code == 200
    assert r.json()["id"] == registered["user"]["id"]


@pytest.mark.asyncio
async def test_me_without_token(client):
    r = await client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json() == {"error": "unauthorized"}
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "header",
    ["Bearer invalid_token_here", "Bearer ", "Basic dXNlcjpwYXNz", "a.b.c"],
)
async def test_me_with_invalid_header(client, header):
    r = await client.get("/api/auth/me", headers={"Authorization": header})
    assert r.status_code == 401
    assert r.json() == {"error": "unauthorized"}


@pytest.mark.asyncio
async def test_token_from_other_deployment_rejected(client, register):
    """A token signed with a different secret is not accepted."""
    from tasklist.auth.jwt import TokenCodec

    registered = await register()
    forged = TokenCodec("another-deployments-secret-0123456789").issue(
        registered["user"]["id"], registered["user"]["email"]
    )
    r = await client.get("/api/auth/me", headers=bearer(forged))
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_auth_responses_not_cached(client, register):
    r = await client.post(
        "/api/auth/register", json={"email": unique_email(), "password": "secret1"}
    )
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/api/auth/register", "/api/auth/login"])
async def test_lone_surrogate_password_is_invalid_input(client, path):
    """A lone surrogate is valid JSON text but has no UTF-8 encoding."""
    r = await client.post(
        path,
        content=b'{"email": "s@example.com", "password": "abcdef\\ud800"}',
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json() == {"error": "invalid_input"}
