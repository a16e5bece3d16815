import logging
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from src.admin.schemas import AdminUserCreate, AdminUserUpdate
from src.auth.utils import get_password_hash
from src.exceptions import ConflictError
from src.models import User

logger = logging.getLogger(__name__)

class AdminManagementService:
    """Service for managing admin accounts"""

    def __init__(self, db: Session):
        self.db = db

    def list_users(self, limit: int = 10, offset: int = 0) -> Tuple[List[User], int]:
        query = self.db.query(User)
        total = query.count()
        users = query.order_by(User.created_at.desc()).offset(offset).limit(limit).all()
        return users, total

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def create_user(self, user_data: AdminUserCreate, created_by: User) -> User:
        """Create a new admin account"""

        existing = self.db.query(User).filter(User.email == user_data.email).first()
        if existing:
            raise ConflictError("User with this email already exists")

        user = User(
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            email=user_data.email,
            password=get_password_hash(user_data.password),
            phone=user_data.phone,
            is_active=user_data.is_active,
            created_by=created_by.email,
            modified_by=created_by.email
        )

        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("User with this email already exists")

        self.db.refresh(user)
        logger.info("Admin user %s created by %s", user.id, created_by.email)
        return user

    def update_user(self, user_id: str, update_data: AdminUserUpdate, modified_by: User) -> Optional[User]:
        """Update an existing admin account"""

        user = self.get_user(user_id)
        if not user:
            return None

        changes = update_data.dict(exclude_unset=True, exclude_none=True)
        if not changes:
            raise ValueError("No fields provided for update")

        if "email" in changes and changes["email"] != user.email:
            taken = self.db.query(User).filter(User.email == changes["email"], User.id != user.id).first()
            if taken:
                raise ConflictError("User with this email already exists")

        if "password" in changes:
            changes["password"] = get_password_hash(changes["password"])

        for field, value in changes.items():
            setattr(user, field, value)
        user.modified_by = modified_by.email

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("User with this email already exists")

        self.db.refresh(user)
        return user

    def delete_user(self, user_id: str, deleted_by: User) -> bool:
        """Delete an admin account; returns False if it does not exist"""

        user = self.get_user(user_id)
        if not user:
            return False

        if user.id == deleted_by.id:
            raise ConflictError("You cannot delete your own account")

        self.db.delete(user)
        self.db.commit()
        logger.info("Admin user %s deleted by %s", user_id, deleted_by.email)
        return True
