"""Password hashing (Argon2id) and login lockout policy."""

from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError

from ctrlaltvibe.app.config import get_settings

_hasher = PasswordHasher()
_security_config = get_settings().security

LOGIN_LOCKOUT_THRESHOLD = _security_config.lockout_threshold
LOGIN_LOCKOUT_BASE_SECONDS = _security_config.lockout_base
LOGIN_LOCKOUT_MAX_SECONDS = _security_config.lockout_max


def hash_password(password: str) -> str:
    """Hash a password using Argon2id."""
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        _hasher.verify(password_hash, password)
        return True
    except VerifyMismatchError:
        return False


def calculate_lockout_duration(failed_attempts: int) -> int:
    """Calculate lockout duration in seconds based on failed attempt count.

    Exponential backoff starting at LOGIN_LOCKOUT_THRESHOLD failures
    (defaults: 5 -> 30s, 6 -> 60s, 7 -> 120s ... capped at 1800s).

    Returns:
        Lockout duration in seconds (0 if below threshold)
    """
    if failed_attempts < LOGIN_LOCKOUT_THRESHOLD:
        return 0

    exponent = failed_attempts - LOGIN_LOCKOUT_THRESHOLD
    duration = LOGIN_LOCKOUT_BASE_SECONDS * (2**exponent)
    return int(min(duration, LOGIN_LOCKOUT_MAX_SECONDS))
