from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from src.database import get_db
from src.auth.service import AuthService
from src.config import settings
from src.models import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)

def get_bearer_token(token: Optional[str] = Depends(oauth2_scheme)) -> str:
    """Extract the bearer token from the Authorization header"""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token

def verify_admin(token: str = Depends(get_bearer_token), db: Session = Depends(get_db)) -> User:
    """Resolve the admin user behind a valid, unexpired session"""
    session = AuthService.get_active_session(db, token)
    if session is None or not session.user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session.user
