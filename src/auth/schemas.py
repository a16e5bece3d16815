from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class UserProfile(BaseModel):
    id: str
    firstName: str
    lastName: str
    email: str
    phone: str
    isActive: bool
    createdAt: Optional[datetime] = None

class AuthResponse(BaseModel):
    token: str
    expiresAt: datetime
    user: UserProfile
