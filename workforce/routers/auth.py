"""
Authentication router — username/password sign-in + JWT cookie.

Endpoints:
    POST /api/register  → create an account and sign in
    POST /api/login     → check credentials, set the JWT cookie
    POST /api/logout    → clear the JWT cookie
    GET  /api/user      → the signed-in user (401 when anonymous)
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from workforce.config import settings
from workforce.database import get_db
from workforce.models.user import User
from workforce.schemas.user import UserLogin, UserOut, UserRegister
from workforce.services.store import WorkforceStore, get_store

router = APIRouter(prefix="/api", tags=["auth"])

COOKIE_KEY = "access_token"
PASSWORD_METHOD = "scrypt"


# ═══════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════

def hash_password(password: str) -> str:
    """Salted scrypt hash in werkzeug's ``scrypt:n:r:p$salt$digest`` form."""
    return generate_password_hash(password, method=PASSWORD_METHOD)


def verify_password(supplied: str, stored: str) -> bool:
    try:
        return check_password_hash(stored, supplied)
    except ValueError:
        # not a werkzeug hash at all
        return False


def create_access_token(data: dict) -> str:
    """Create a signed JWT with an expiry claim."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _set_auth_cookie(response: Response, user_id: int) -> Response:
    """Attach the JWT cookie to a response."""
    token = create_access_token({"sub": str(user_id)})
    response.set_cookie(
        key=COOKIE_KEY,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax",
    )
    return response


def _user_response(user: User, status_code: int) -> JSONResponse:
    body = jsonable_encoder(UserOut.model_validate(user).model_dump(by_alias=True))
    return JSONResponse(body, status_code=status_code)


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Extract the JWT from the cookie, decode it, and return the User.
    Returns None when no valid token is present.
    """
    token = request.cookies.get(COOKIE_KEY)
    if not token:
        return None
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        user_id: int = int(payload.get("sub", 0))
        if not user_id:
            return None
    except (JWTError, ValueError):
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


# ═══════════════════════════════════════════════════════════════
#  Routes
# ═══════════════════════════════════════════════════════════════

@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=UserOut)
async def register(
    payload: UserRegister,
    store: WorkforceStore = Depends(get_store),
):
    """Create an account and sign the new user in."""
    user = await store.create_user(
        username=payload.username,
        password_hash=hash_password(payload.password),
        name=payload.name,
        email=payload.email,
        role=payload.role,
    )
    return _set_auth_cookie(_user_response(user, status.HTTP_201_CREATED), user.id)


@router.post("/login", response_model=UserOut)
async def login(
    payload: UserLogin,
    store: WorkforceStore = Depends(get_store),
):
    """Check the credentials and set the JWT cookie."""
    user = await store.get_user_by_username(payload.username)
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return _set_auth_cookie(_user_response(user, status.HTTP_200_OK), user.id)


@router.post("/logout")
async def logout():
    """Clear the auth cookie."""
    response = JSONResponse({"message": "Logged out"})
    response.delete_cookie(key=COOKIE_KEY)
    return response


@router.get("/user", response_model=UserOut)
async def read_me(current_user: Optional[User] = Depends(get_current_user)):
    """Return the signed-in user."""
    if not current_user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return current_user
