import jwt
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Optional
from dotenv import load_dotenv

from schemas import Identity

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

SECRET_KEY = os.getenv("JWT_SECRET")

if not SECRET_KEY:
    raise ValueError("JWT_SECRET environment variable is not set")

ALGORITHM = "HS256"
TOKEN_TTL = timedelta(days=7)


def issue_token(user_id: str, email: str, secret: Optional[str] = None) -> str:
    """
    Create a signed identity token

    Args:
        user_id: Owning user ID, stored in the "sub" claim
        email: User email
        secret: Signing key, defaults to JWT_SECRET

    Returns:
        Encoded JWT that expires TOKEN_TTL after issuance
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "iat": now,
        "exp": now + TOKEN_TTL,
    }
    return jwt.encode(payload, secret or SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str, secret: Optional[str] = None) -> Optional[Identity]:
    """
    Verify JWT token and return the identity it carries

    Expired, tampered and malformed tokens are not told apart.

    Args:
        token: JWT token string
        secret: Verification key, defaults to JWT_SECRET

    Returns:
        Identity if valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            secret or SECRET_KEY,
            algorithms=[ALGORITHM],
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.InvalidTokenError as exc:
        logger.debug("Rejected token: %s", exc)
        return None

    user_id = payload.get("sub")
    email = payload.get("email")
    if not isinstance(user_id, str) or not isinstance(email, str):
        return None

    return Identity(user_id=user_id, email=email)
