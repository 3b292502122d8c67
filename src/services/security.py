from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from store.models import PublicUser
from utils.config import Settings, get_settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Constant time check of a clear password against a stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_session_token(user: PublicUser, settings: Optional[Settings] = None) -> str:
    """Signed, expiring session marker carrying the user id and role."""
    settings = settings or get_settings()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.token_ttl_minutes)
    claims = {"sub": str(user.uid), "role": user.role, "exp": expire}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.token_algorithm)


def decode_session_token(token: str, settings: Optional[Settings] = None) -> Optional[dict]:
    """Return the claims, or None if the token is malformed, forged or expired."""
    settings = settings or get_settings()
    try:
        return jwt.decode(
            token, settings.secret_key, algorithms=[settings.token_algorithm]
        )
    except JWTError:
        return None
