import bcrypt
from sketchtunes.config import get_settings


def hash_password(password: str) -> str:
    """Hash a password with bcrypt using the configured cost factor"""
    salt = bcrypt.gensalt(rounds=get_settings().password_hash_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed_password: str | None) -> bool:
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False
