"""Password hashing utilities using bcrypt."""

import secrets

import bcrypt

# bcrypt only considers the first 72 bytes of input
MAX_PASSWORD_BYTES = 72
PLACEHOLDER_PASSWORD_BYTES = 32


def password_fits(password: str) -> bool:
    """Whether bcrypt can hash the password without truncation."""
    return 0 < len(password.encode("utf-8")) <= MAX_PASSWORD_BYTES


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash string
    """
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verify a password against a hash.

    Args:
        plain_password: Plain text password to check
        hashed_password: Bcrypt hash to check against, None for SSO users

    Returns:
        True if password matches hash
    """
    if not hashed_password or not password_fits(plain_password or ""):
        return False
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def unusable_password_hash() -> str:
    """Hash of a random password nobody is ever told.

    Pending invites get one so the record always carries a hash.
    """
    return hash_password(secrets.token_urlsafe(PLACEHOLDER_PASSWORD_BYTES))
