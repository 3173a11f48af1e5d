import logging

from fastapi import APIRouter, Depends, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from database import get_session
from errors import AuthenticationError, NotFoundError
from middleware.auth import require_identity
from schemas import ApiResponse, Identity, LoginRequest, RegisterRequest, UserResponse
from stores.users import authenticate_user, create_user, get_user_by_id
from utils.cookies import clear_session_cookie, set_session_cookie
from utils.jwt import issue_token

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    user_data: RegisterRequest,
    response: Response,
    session: AsyncSession = Depends(get_session)
) -> ApiResponse:
    """
    Register a new account and start a session

    Args:
        user_data: Name, email and password
        response: Response used to set the session cookie
        session: Database session

    Returns:
        ApiResponse with the new user and its token
    """
    user = await create_user(session, user_data.name, user_data.email, user_data.password)

    token = issue_token(user.id, user.email)
    set_session_cookie(response, token)
    logger.info("Registered user %s", user.id)

    return ApiResponse(
        success=True,
        data={
            "message": "User registered successfully",
            "user": UserResponse.model_validate(user).model_dump(),
            "token": token,
        }
    )


@router.post("/login")
async def login(
    credentials: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_session)
) -> ApiResponse:
    """
    Log in with email and password

    Raises:
        AuthenticationError: If the email is unknown or the password is wrong
    """
    user = await authenticate_user(session, credentials.email, credentials.password)

    if user is None:
        logger.info("Failed login attempt")
        raise AuthenticationError("Invalid email or password")

    token = issue_token(user.id, user.email)
    set_session_cookie(response, token)
    logger.info("User %s logged in", user.id)

    return ApiResponse(
        success=True,
        data={
            "message": "Login successful",
            "user": UserResponse.model_validate(user).model_dump(),
            "token": token,
        }
    )


@router.post("/logout")
async def logout(response: Response) -> ApiResponse:
    """Clear the session cookie; the token itself stays valid until it expires"""
    clear_session_cookie(response)
    return ApiResponse(success=True, data={"message": "Logged out successfully"})


@router.get("/me")
async def me(
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session)
) -> ApiResponse:
    """Return the authenticated user"""
    user = await get_user_by_id(session, identity.user_id)

    if user is None:
        raise NotFoundError("User not found")

    return ApiResponse(
        success=True,
        data={"user": UserResponse.model_validate(user).model_dump()}
    )
