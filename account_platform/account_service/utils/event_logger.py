"""
Event logger utility for authentication events.
"""
from typing import Optional
from fastapi import Request
import sys
import logging
import os

from ..config import Settings

logger = logging.getLogger(__name__)


ALLOWED_EVENT_TYPES = {
    "signup",
    "login_success",
    "login_failure",
    "password_reset_requested",
    "password_reset_email_failed",
    "password_reset",
}


def configure_logging(settings: Settings) -> None:
    """
    Configure root logging: stdout always, plus a file under LOG_DIR when set.
    Verbosity follows the environment (DEBUG in development, INFO in production)
    unless LOG_LEVEL overrides it.
    """
    handlers = [logging.StreamHandler(sys.stdout)]

    # Try to add file handler, but continue without it if directory creation fails
    if settings.LOG_DIR:
        try:
            os.makedirs(settings.LOG_DIR, exist_ok=True)
            handlers.append(logging.FileHandler(os.path.join(settings.LOG_DIR, "auth_events.log")))
        except OSError as e:
            print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def client_ip(request: Request) -> Optional[str]:
    """Client address, falling back to the first X-Forwarded-For entry."""
    if request.client and request.client.host:
        return request.client.host
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()
    return None


def log_auth_event(
    event_type: str,
    request: Request,
    user=None,
    **metadata
) -> None:
    """
    Log an authentication event.

    Args:
        event_type: One of ALLOWED_EVENT_TYPES
        request: FastAPI Request object
        user: User the event concerns, when one was resolved
        metadata: Additional key=value context appended to the line

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    extra = " ".join(f"{key}={value}" for key, value in sorted(metadata.items()))
    logger.info(
        "AUTH %s user_id=%s username=%s ip=%s user_agent=%s %s",
        event_type,
        user.id if user is not None else None,
        user.username if user is not None else None,
        client_ip(request),
        request.headers.get("user-agent"),
        extra,
    )
