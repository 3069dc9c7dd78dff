from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from sketchtunes.config import get_settings

ALGORITHM = "HS256"


def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """Create a JWT whose subject is the user id"""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=settings.access_token_expire_hours))

    to_encode = {
        "sub": user_id,
        "exp": expire,
        "iat": now
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def verify_token(token: str) -> str | None:
    """
    Verify a JWT and return its user id.
    Returns None if the token is invalid or expired.
    """
    try:
        payload = jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    user_id = payload.get("sub")
    return str(user_id) if user_id else None
