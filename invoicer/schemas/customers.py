from typing import Optional

from pydantic import Field

from invoicer.schemas.base import ApiModel


class CustomerCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=120)
    company_name: str = Field(default="", max_length=120)
    phone_number: str = Field(default="", max_length=30)
    email: str = Field(default="", max_length=255)
    address: str = ""


class CustomerUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    company_name: Optional[str] = Field(default=None, max_length=120)
    phone_number: Optional[str] = Field(default=None, max_length=30)
    email: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = None


class CustomerRead(ApiModel):
    id: int
    user_id: int
    name: str
    company_name: str
    phone_number: str
    email: str
    address: str
