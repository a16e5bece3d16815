from pydantic import EmailStr, Field, validator
from typing import Optional
import re

from src.schemas import CamelModel, PHONE_PATTERN

def _check_phone(v):
    if v is not None and not re.match(PHONE_PATTERN, v):
        raise ValueError('Invalid phone format')
    return v

# Admin User Management
class AdminUserCreate(CamelModel):
    """Admin user creation request"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    phone: str
    is_active: bool = True

    @validator('phone')
    def validate_phone(cls, v):
        return _check_phone(v)

class AdminUserUpdate(CamelModel):
    """Admin user update request"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8)
    phone: Optional[str] = None
    is_active: Optional[bool] = None

    @validator('phone')
    def validate_phone(cls, v):
        return _check_phone(v)
