"""Auth API — registration, login, current identity.

Learn: Routes for the stateless session flow:
- POST /auth/register → create an account, returns {token, user}
- POST /auth/login → email/password → {token, user}
- GET /auth/me → the identity carried by the bearer token

The handlers only translate HTTP to AuthService calls. Errors raised by
the service (InvalidInput, DuplicateEmail, InvalidCredentials,
ServerError) are rendered by the app's exception handlers.
"""

from fastapi import APIRouter, Depends, Request

from tasklist.auth.dependencies import CurrentIdentity, get_current_user
from tasklist.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserRead
from tasklist.services.auth_service import AuthResult, AuthService

router = APIRouter(prefix="/auth")


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def _response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        token=result.token,
        user=UserRead.model_validate(result.account),
    )


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    svc: AuthService = Depends(get_auth_service),
):
    """Create a new account and log it in."""
    return _response(await svc.register(body.email, body.password))


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    svc: AuthService = Depends(get_auth_service),
):
    """Login with email and password → fresh token."""
    return _response(await svc.login(body.email, body.password))


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(identity: CurrentIdentity = Depends(get_current_user)):
    """Who the bearer token says the caller is. No store lookup."""
    return UserRead(id=identity.account_id, email=identity.email)
