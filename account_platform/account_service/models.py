from sqlalchemy import Column, Integer, String, DateTime
from datetime import timedelta

from .auth import hash_password, verify_password, generate_reset_token, hash_reset_token, utcnow
from .config import Settings
from .db import Base


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(30), unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    # Always a hash; only written through set_password()
    password = Column(String, nullable=False)

    # Password reset (hash of the emailed code)
    reset_token = Column(String, nullable=True, index=True)
    reset_token_expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def set_password(self, plain_password: str) -> None:
        self.password = hash_password(plain_password)

    def check_password(self, plain_password: str) -> bool:
        return verify_password(plain_password, self.password)

    def create_password_reset_token(self, settings: Settings) -> str:
        """
        Generate a reset code and store its hash with an expiry.

        Returns:
            The plaintext code, which is never persisted
        """
        token = generate_reset_token(settings)
        self.reset_token = hash_reset_token(token, settings)
        self.reset_token_expires_at = utcnow() + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
        return token

    def clear_password_reset_token(self) -> None:
        self.reset_token = None
        self.reset_token_expires_at = None

    def to_dict(self) -> dict:
        """
        Serialize the user for API responses. The password hash and
        reset-token fields are never included.
        """
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
