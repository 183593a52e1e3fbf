"""
User account routes: signup, login, password reset and the current-user lookup.
"""
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import create_access_token, dummy_verify_password, hash_reset_token, utcnow
from ..config import Settings
from ..db import get_db
from ..deps import get_current_user, get_mailer, get_settings
from ..exceptions import AuthenticationError, DependencyError, ValidationError
from ..mailer import Mailer, MailDeliveryError, password_reset_message
from ..models import User
from ..rate_limit import api_rate_limit, limiter
from ..schemas import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    SignupRequest,
    UserResponse,
)
from ..utils.event_logger import log_auth_event
from ..validators import (
    FORGOT_PASSWORD_RULES,
    LOGIN_RULES,
    RESET_PASSWORD_RULES,
    SIGNUP_RULES,
    ensure_valid,
)

router = APIRouter(prefix="/api/v1/users", tags=["users"])
logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
# Same wording whether or not the email is registered
RESET_REQUESTED_MESSAGE = "If an account with that email exists, a reset token has been sent to it."


def _send_token(user: User, response: Response, settings: Settings) -> dict:
    token = create_access_token(user.id, settings)
    response.headers["Authorization"] = f"Bearer {token}"
    return {"status": "success", "token": token, "data": {"user": user.to_dict()}}


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(api_rate_limit)
def signup(
    payload: SignupRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    body = payload.to_payload()
    ensure_valid(SIGNUP_RULES, body)

    username = body["username"].strip()
    email = body["email"].strip().lower()

    # Check if email or username already exists
    errors = []
    if db.query(User).filter(User.username == username).first():
        errors.append({"field": "username", "message": "Username already exists"})
    if db.query(User).filter(User.email == email).first():
        errors.append({"field": "email", "message": "Email already exists"})
    if errors:
        raise ValidationError(errors)

    user = User(username=username, email=email)
    user.set_password(body["password"])
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # Lost a race against a concurrent signup; the unique constraint caught it
        db.rollback()
        raise ValidationError([{"field": "username", "message": "Username or email already exists"}]) from exc
    db.refresh(user)

    log_auth_event("signup", request, user)
    return _send_token(user, response, settings)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(api_rate_limit)
def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    body = payload.to_payload()
    ensure_valid(LOGIN_RULES, body)

    username = (body.get("username") or "").strip()
    if username:
        user = db.query(User).filter(User.username == username).first()
    else:
        email = body["email"].strip().lower()
        user = db.query(User).filter(User.email == email).first()

    if user is None:
        dummy_verify_password(body["password"])
        log_auth_event("login_failure", request, reason="unknown_identifier")
        raise AuthenticationError(INVALID_CREDENTIALS)

    if not user.check_password(body["password"]):
        log_auth_event("login_failure", request, user, reason="wrong_password")
        raise AuthenticationError(INVALID_CREDENTIALS)

    log_auth_event("login_success", request, user)
    return _send_token(user, response, settings)


@router.post("/forgotPassword", response_model=MessageResponse, response_model_exclude_none=True)
@limiter.limit(api_rate_limit)
def forgot_password(
    payload: ForgotPasswordRequest,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: Mailer = Depends(get_mailer),
):
    body = payload.to_payload()
    ensure_valid(FORGOT_PASSWORD_RULES, body)

    email = body["email"].strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user:
        log_auth_event("password_reset_requested", request, email_registered=False)
        return {"status": "success", "message": RESET_REQUESTED_MESSAGE}

    reset_token = user.create_password_reset_token(settings)
    db.commit()

    reset_url = str(request.url_for("reset_password", token=reset_token))
    subject, text, html = password_reset_message(reset_token, reset_url, settings.RESET_TOKEN_EXPIRE_MINUTES)
    try:
        mailer.send(user.email, subject, text, html)
    except MailDeliveryError as exc:
        logger.error("Password reset email failed for user_id=%s: %s", user.id, exc)
        user.clear_password_reset_token()
        db.commit()
        log_auth_event("password_reset_email_failed", request, user)
        raise DependencyError("There was an error sending the email. Try again later!") from exc

    log_auth_event("password_reset_requested", request, user, email_registered=True)
    result = {"status": "success", "message": RESET_REQUESTED_MESSAGE}
    if settings.EXPOSE_RESET_TOKEN:
        logger.debug("[DEV] Password reset token for %s: %s", user.email, reset_token)
        result["resetToken"] = reset_token
    return result


@router.patch("/resetPassword/{token}", response_model=AuthResponse, name="reset_password")
@limiter.limit(api_rate_limit)
def reset_password(
    token: str,
    payload: ResetPasswordRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    body = payload.to_payload()
    ensure_valid(RESET_PASSWORD_RULES, body)

    user = (
        db.query(User)
        .filter(
            User.reset_token == hash_reset_token(token, settings),
            User.reset_token_expires_at > utcnow(),
        )
        .first()
    )
    if not user:
        raise ValidationError([{"field": "token", "message": "Token is invalid or has expired"}])

    user.set_password(body["password"])
    user.clear_password_reset_token()
    db.commit()
    db.refresh(user)

    log_auth_event("password_reset", request, user)
    return _send_token(user, response, settings)


@router.get("/me", response_model=UserResponse)
@limiter.limit(api_rate_limit)
def get_me(request: Request, user: User = Depends(get_current_user)):
    return {"status": "success", "data": {"user": user.to_dict()}}
