from pydantic import BaseModel, EmailStr, field_validator, ValidationInfo
from typing import Optional

from app.schemas.user import UserRead


# -------------------------------------------------------------------
# STUDENT SELF-SIGNUP (Public)
# -------------------------------------------------------------------
class SignupRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    confirm_password: Optional[str] = None

    @field_validator("confirm_password")
    def passwords_match(cls, v, info: ValidationInfo):
        """Missing confirm_password is treated as matching."""
        password = info.data.get("password")

        if v is None:
            return password

        if password and v != password:
            raise ValueError("Passwords do not match")

        return v


# -------------------------------------------------------------------
# LOGIN REQUEST
# -------------------------------------------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# -------------------------------------------------------------------
# TOKEN + USER DETAILS (Used for login / signup response)
# -------------------------------------------------------------------
class TokenWithUser(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: UserRead

    # Screen the client should open first
    landing_view: str


# -------------------------------------------------------------------
# SESSION (auth gate)
# -------------------------------------------------------------------
class SessionRead(BaseModel):
    user: UserRead
    landing_view: str
    has_registration: bool
    registration_status: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str
