from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from .schemas import AdminUserCreate, AdminUserUpdate
from .admin_service import AdminManagementService
from ..database import get_db
from ..auth.dependencies import verify_admin
from ..auth.service import serialize_user
from ..exceptions import ConflictError, internal_error
from ..models import User

router = APIRouter()

@router.get("")
def list_users(
    limit: int = Query(10, ge=1, le=100, description="Maximum results"),
    offset: int = Query(0, ge=0, description="Number of users to skip"),
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    """List admin accounts, newest first"""
    users, total = AdminManagementService(db).list_users(limit=limit, offset=offset)
    return {
        "data": [serialize_user(user) for user in users],
        "total": total
    }

@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: AdminUserCreate,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    """Create an admin account"""
    try:
        user = AdminManagementService(db).create_user(user_data, created_by=admin_user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        raise internal_error("create user")

    return serialize_user(user)

@router.get("/{user_id}")
def get_user(
    user_id: str,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    """Get admin account details"""
    user = AdminManagementService(db).get_user(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return serialize_user(user)

@router.patch("/{user_id}")
def update_user(
    user_id: str,
    update_data: AdminUserUpdate,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    """Update an admin account"""
    try:
        user = AdminManagementService(db).update_user(user_id, update_data, modified_by=admin_user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        raise internal_error("update user")

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return serialize_user(user)

@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    """Delete an admin account"""
    try:
        deleted = AdminManagementService(db).delete_user(user_id, deleted_by=admin_user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception:
        raise internal_error("delete user")

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return {"message": "User deleted successfully"}
