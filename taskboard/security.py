from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
import bcrypt

from .config import Settings

ALGORITHM = "HS256"
BCRYPT_MAX_BYTES = 72


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    password_bytes = plain_password.encode('utf-8')[:BCRYPT_MAX_BYTES]
    hashed_bytes = hashed_password.encode('utf-8') if isinstance(hashed_password, str) else hashed_password
    try:
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str, rounds: int = 12) -> str:
    """Hash a password with a fresh bcrypt salt."""
    password_bytes = password.encode('utf-8')[:BCRYPT_MAX_BYTES]  # bcrypt limit
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def create_access_token(
    data: dict,
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed JWT carrying ``data`` plus issued-at and expiry claims."""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"iat": now, "exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> dict:
    """Verify signature and expiry; raises ``jose.JWTError`` otherwise."""
    return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
