from pydantic import BaseModel, ConfigDict, Field

from typing import Literal, Optional

# Request bodies keep every field optional: presence and format rules are
# enforced by the validator pipeline so they surface as field-level 400s.


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class SignupRequest(_Payload):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    password_confirm: Optional[str] = Field(default=None, alias="passwordConfirm")


class LoginRequest(_Payload):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(_Payload):
    email: Optional[str] = None


class ResetPasswordRequest(_Payload):
    password: Optional[str] = None
    password_confirm: Optional[str] = Field(default=None, alias="passwordConfirm")


# Responses

class UserOut(BaseModel):
    id: int
    username: str
    email: str
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class UserData(BaseModel):
    user: UserOut


class AuthResponse(BaseModel):
    status: Literal["success"] = "success"
    token: str
    data: UserData


class UserResponse(BaseModel):
    status: Literal["success"] = "success"
    data: UserData


class MessageResponse(BaseModel):
    status: Literal["success"] = "success"
    message: str
    resetToken: Optional[str] = None
