from typing import Optional

from pydantic import EmailStr, Field

from invoicer.schemas.base import ApiModel


class SignupPayload(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone_number: str = Field(default="", max_length=30)
    name: str = Field(..., min_length=1, max_length=120)


class SignupResponse(ApiModel):
    message: str
    user_id: int


class LoginPayload(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(ApiModel):
    auth: bool
    token: Optional[str] = None
    user_id: Optional[int] = None
    challenge_token: Optional[str] = None
    message: Optional[str] = None


class VerifyTwoFactorPayload(ApiModel):
    user_id: int
    code: str = Field(..., pattern=r"^\d{6}$")
    # missing is rejected as 401 by the service, not as a validation error
    challenge_token: Optional[str] = None


class UserRead(ApiModel):
    id: int
    email: EmailStr
    name: str
    phone_number: str
