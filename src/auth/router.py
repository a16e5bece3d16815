from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from src.database import get_db
from src.auth.schemas import LoginRequest, AuthResponse
from src.auth.service import AuthService, serialize_user
from src.auth.dependencies import verify_admin, get_bearer_token
from src.models import User

router = APIRouter()

@router.post("/login", response_model=AuthResponse)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange admin credentials for a bearer session token"""
    user = AuthService.authenticate(db, login_data.email, login_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = AuthService.create_session(db, user)
    return {
        "token": session.token,
        "expiresAt": session.expires_at,
        "user": serialize_user(user)
    }

@router.get("/me")
def read_current_user(current_user: User = Depends(verify_admin)):
    """Get current admin profile"""
    return serialize_user(current_user)

@router.post("/logout")
def logout(
    token: str = Depends(get_bearer_token),
    current_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    """Revoke the session used for this request"""
    AuthService.revoke_session(db, token)
    return {"message": "Logged out successfully"}
