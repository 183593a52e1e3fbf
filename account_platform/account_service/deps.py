"""
FastAPI dependencies: application-scoped collaborators and the bearer check.
"""
from typing import Optional

import jwt
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from .auth import decode_access_token
from .config import Settings
from .db import get_db
from .exceptions import AuthenticationError
from .mailer import Mailer
from .models import User


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> User:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise AuthenticationError("You are not logged in! Please log in to get access.")
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise AuthenticationError("You are not logged in! Please log in to get access.")

    try:
        user_id = decode_access_token(token, settings)
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("Invalid or expired token. Please log in again.") from exc

    user = db.get(User, user_id)
    if not user:
        raise AuthenticationError("The user belonging to this token no longer exists.")

    request.state.user = user
    return user
