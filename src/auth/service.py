import logging
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime, timedelta, timezone

from src.models import User, Session as UserSession
from src.auth.utils import verify_password, generate_session_token
from src.config import settings

logger = logging.getLogger(__name__)

def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

class AuthService:
    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email"""
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> Optional[User]:
        """Return the active user matching the credentials, if any"""
        user = AuthService.get_user_by_email(db, email)
        if not user or not user.is_active:
            return None
        if not verify_password(password, user.password):
            return None
        return user

    @staticmethod
    def create_session(db: Session, user: User) -> UserSession:
        """Issue a new bearer session for the user"""
        session = UserSession(
            user_id=user.id,
            token=generate_session_token(),
            expires_at=datetime.now(timezone.utc) + timedelta(hours=settings.SESSION_EXPIRE_HOURS)
        )
        db.add(session)
        db.commit()
        db.refresh(session)
        logger.info("Session created for user %s", user.id)
        return session

    @staticmethod
    def get_active_session(db: Session, token: str) -> Optional[UserSession]:
        """Look up a session by token, ignoring expired ones"""
        session = db.query(UserSession).filter(UserSession.token == token).first()
        if session is None:
            return None
        if _as_utc(session.expires_at) < datetime.now(timezone.utc):
            return None
        return session

    @staticmethod
    def revoke_session(db: Session, token: str) -> bool:
        deleted = db.query(UserSession).filter(UserSession.token == token).delete()
        db.commit()
        return deleted > 0

def serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "phone": user.phone,
        "isActive": user.is_active,
        "createdAt": user.created_at,
        "createdBy": user.created_by,
        "modifiedBy": user.modified_by,
    }
