import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, status
from jose import JWTError
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import get_db, store_operation
from ..exceptions import AuthenticationError, ValidationError
from ..models import User
from ..schemas.user import public_user
from ..security import create_access_token, decode_access_token, verify_password
from ..validation import normalize_email

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid email or password"


def _get_token_from_request(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user owning these credentials, or None."""
    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    """Resolve the bearer token on the request to a stored user.

    Every failure is reported to the client as the same 401; the reason
    only goes to the log.
    """
    token = _get_token_from_request(request)
    if not token:
        logger.info(f"Rejected {request.url.path}: missing or non-bearer Authorization header")
        raise AuthenticationError()

    try:
        payload = decode_access_token(token, settings)
    except JWTError as e:
        logger.info(f"Rejected {request.url.path}: {e}")
        raise AuthenticationError()

    user_id = payload.get("sub")
    if not user_id:
        logger.info(f"Rejected {request.url.path}: token has no subject")
        raise AuthenticationError()

    with store_operation(db, "resolving token subject"):
        user = db.get(User, str(user_id))
    if user is None:
        logger.info(f"Rejected {request.url.path}: token subject {user_id} no longer exists")
        raise AuthenticationError()
    return user


def _credential(value: Any) -> Optional[str]:
    """Screen one login field; None means it cannot match any account."""
    if isinstance(value, (dict, list)):
        return None
    if not isinstance(value, str):
        raise ValidationError("Invalid input format")
    return value


@router.post("/auth/login")
async def login(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Exchange email and password for a bearer token."""
    try:
        data = await request.json()
    except ValueError:
        raise ValidationError("Invalid input format")
    if not isinstance(data, dict):
        raise ValidationError("Invalid input format")

    email = data.get("email")
    password = data.get("password")
    if not email or not password:
        raise ValidationError("Email and password are required")

    email = _credential(email)
    password = _credential(password)
    if email is None or password is None:
        logger.warning("Login rejected: structured value in credential field")
        raise AuthenticationError(INVALID_CREDENTIALS)

    with store_operation(db, "looking up login credentials"):
        user = authenticate_user(db, email, password)
    if not user:
        logger.info("Login failed: invalid credentials")
        raise AuthenticationError(INVALID_CREDENTIALS)

    token = create_access_token(data={"sub": user.id, "name": user.name}, settings=settings)
    logger.info(f"User {user.id} logged in")
    return {
        "message": "Login successful",
        "token": token,
        "user": public_user(user),
    }


@router.get("/protected-route", status_code=status.HTTP_200_OK)
def protected_route(current_user: User = Depends(get_current_user)):
    return {"message": "Access granted"}
