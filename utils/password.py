import bcrypt

# bcrypt ignores (or, in newer releases, rejects) input past 72 bytes
_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode()[:_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password with bcrypt (auto-salted, work factor 12)"""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=12)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash"""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode())
    except (ValueError, TypeError):
        return False
