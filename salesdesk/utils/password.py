"""
Password hashing utilities.

PBKDF2-SHA256 through passlib; the pure-Python backend avoids the
bcrypt package version coupling.
"""

from passlib.context import CryptContext

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    """Hash a plain-text password for storage on the user row."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a login attempt against the stored hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False
