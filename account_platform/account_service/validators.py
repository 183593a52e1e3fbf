"""
Request validators.

Each rule is a pure function taking the request payload (a dict) and
returning a list of field errors. A pipeline runs its rules in order and
collects every error into a ValidationResult; route handlers call
`ensure_valid` before touching any business logic.
"""
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from email_validator import EmailNotValidError, validate_email

from .exceptions import ValidationError

FieldError = Dict[str, str]
Rule = Callable[[dict], List[FieldError]]

USERNAME_PATTERN = re.compile(r"[a-zA-Z0-9_.]+")
PASSWORD_COMPLEXITY = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[@$!%*?&])")
# ASCII only: fullmatch so a trailing newline or a non-ASCII digit is rejected
PASSWORD_CHARSET = re.compile(r"[A-Za-z0-9@$!%*?&]+")


@dataclass
class ValidationResult:
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _error(field_name: str, message: str) -> FieldError:
    return {"field": field_name, "message": message}


def _present(payload: dict, key: str) -> Optional[str]:
    """Return the stripped string value, or None when missing/empty/not a string."""
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        return None
    return value


def is_valid_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def check_username(payload: dict) -> List[FieldError]:
    username = _present(payload, "username")
    if username is None:
        return [_error("username", "Username is required")]
    username = username.strip()
    errors = []
    if not 3 <= len(username) <= 30:
        errors.append(_error("username", "Username must be between 3 and 30 characters"))
    if not USERNAME_PATTERN.fullmatch(username):
        errors.append(_error("username", "Username can only contain letters, numbers, underscores, or dots"))
    elif re.fullmatch(r"[0-9]+", username):
        errors.append(_error("username", "Username cannot be only digits"))
    elif re.fullmatch(r"_+", username):
        errors.append(_error("username", "Username cannot be only underscores"))
    elif re.fullmatch(r"\.+", username):
        errors.append(_error("username", "Username cannot be only dots"))
    return errors


def check_email(payload: dict) -> List[FieldError]:
    email = _present(payload, "email")
    if email is None:
        return [_error("email", "Email is required")]
    if not is_valid_email(email.strip()):
        return [_error("email", "Please provide a valid email")]
    return []


def check_password(payload: dict) -> List[FieldError]:
    password = payload.get("password")
    if not isinstance(password, str) or not password:
        return [_error("password", "Password is required")]
    errors = []
    if not 8 <= len(password) <= 32:
        errors.append(_error("password", "Password must be 8-32 characters"))
    if not PASSWORD_COMPLEXITY.match(password):
        errors.append(_error("password", "Password must include uppercase, lowercase, number, and special character"))
    if not PASSWORD_CHARSET.fullmatch(password):
        errors.append(_error("password", "Password may only contain letters, numbers, and the characters @$!%*?&"))
    return errors


def check_password_confirm(payload: dict) -> List[FieldError]:
    confirm = payload.get("passwordConfirm")
    if not isinstance(confirm, str) or not confirm:
        return [_error("passwordConfirm", "Password confirmation is required")]
    if confirm != payload.get("password"):
        return [_error("passwordConfirm", "Passwords do not match")]
    return []


def check_login_identifier(payload: dict) -> List[FieldError]:
    """Either a username or a valid email must be supplied."""
    if _present(payload, "username") is not None:
        return []
    email = _present(payload, "email")
    if email is not None and is_valid_email(email.strip()):
        return []
    return [_error("username", "You must provide either a valid username or a valid email")]


def check_login_password(payload: dict) -> List[FieldError]:
    password = payload.get("password")
    if not isinstance(password, str) or not password:
        return [_error("password", "Password is required")]
    return []


SIGNUP_RULES: Sequence[Rule] = (check_username, check_email, check_password, check_password_confirm)
LOGIN_RULES: Sequence[Rule] = (check_login_identifier, check_login_password)
FORGOT_PASSWORD_RULES: Sequence[Rule] = (check_email,)
RESET_PASSWORD_RULES: Sequence[Rule] = (check_password, check_password_confirm)


def run_pipeline(rules: Sequence[Rule], payload: dict) -> ValidationResult:
    result = ValidationResult()
    for rule in rules:
        result.errors.extend(rule(payload))
    return result


def ensure_valid(rules: Sequence[Rule], payload: dict) -> None:
    """
    Raises:
        ValidationError: with every collected field error
    """
    result = run_pipeline(rules, payload)
    if not result.ok:
        raise ValidationError(result.errors)
