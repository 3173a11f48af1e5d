import os
from dotenv import load_dotenv
from fastapi import Response

from utils.jwt import TOKEN_TTL

# Load environment variables
load_dotenv()

SESSION_COOKIE = "token"
COOKIE_SECURE = os.getenv("ENVIRONMENT", "development").lower() == "production"


def set_session_cookie(response: Response, token: str) -> None:
    """Attach the identity token as an HTTP-only session cookie"""
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        max_age=int(TOKEN_TTL.total_seconds()),
        path="/",
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE,
        path="/",
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
    )
