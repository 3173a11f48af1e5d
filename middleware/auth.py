import logging
from typing import Optional

from fastapi import Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from database import get_session
from errors import AuthenticationError
from schemas import Identity
from stores.users import get_user_identity
from utils.cookies import SESSION_COOKIE
from utils.jwt import verify_token

logger = logging.getLogger(__name__)


def extract_token(request: Request) -> Optional[str]:
    """
    Find the identity token on a request

    The session cookie wins; an "Authorization: Bearer <token>" header
    is only consulted when the cookie is absent.
    """
    token = request.cookies.get(SESSION_COOKIE)
    if token:
        return token

    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def resolve_identity(request: Request, session: AsyncSession) -> Optional[Identity]:
    """
    Resolve the authenticated user for a request

    Args:
        request: FastAPI request object
        session: Database session, only used once a token has verified

    Returns:
        Identity of a user that still exists, None otherwise
    """
    token = extract_token(request)
    if not token:
        return None

    claims = verify_token(token)
    if claims is None:
        return None

    # The token may outlive the account it was issued for
    identity = await get_user_identity(session, claims.user_id)
    if identity is None:
        logger.debug("Token references unknown user %s", claims.user_id)
        return None

    return identity


async def require_identity(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> Identity:
    """
    Dependency for protected routes

    Raises:
        AuthenticationError: If the token is missing, invalid, or expired
    """
    identity = await resolve_identity(request, session)
    if identity is None:
        raise AuthenticationError()

    return identity
