from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from src.database import get_db
from src.auth.dependencies import verify_admin
from src.buses.schemas import BusTypeCreate, BusTypeUpdate, BusCreate, BusUpdate
from src.buses.service import BusTypeService, BusService, serialize_bus, serialize_bus_type
from src.exceptions import ConflictError, internal_error
from src.models import User

bus_types_router = APIRouter()
router = APIRouter()

# Bus Types
@bus_types_router.get("")
def list_bus_types(
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    """List bus types, newest first"""
    return {"data": [serialize_bus_type(bt) for bt in BusTypeService.get_bus_types(db)]}

@bus_types_router.post("", status_code=status.HTTP_201_CREATED)
def create_bus_type(
    data: BusTypeCreate,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    try:
        bus_type = BusTypeService.create_bus_type(db, data, admin_user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        raise internal_error("create bus type")
    return serialize_bus_type(bus_type)

@bus_types_router.patch("/{bus_type_id}")
def update_bus_type(
    bus_type_id: str,
    data: BusTypeUpdate,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    """Update a bus type; renames cascade to buses"""
    try:
        bus_type = BusTypeService.update_bus_type(db, bus_type_id, data, admin_user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        raise internal_error("update bus type")

    if not bus_type:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bus type not found")
    return serialize_bus_type(bus_type)

@bus_types_router.delete("/{bus_type_id}")
def delete_bus_type(
    bus_type_id: str,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    try:
        deleted = BusTypeService.delete_bus_type(db, bus_type_id)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception:
        raise internal_error("delete bus type")

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bus type not found")
    return {"message": "Bus type deleted"}

# Buses
@router.get("")
def list_buses(
    operator: Optional[str] = Query(None, description="Filter by operator name (substring)"),
    bus_type: Optional[str] = Query(None, alias="busType", description="Filter by bus type name"),
    limit: int = Query(10, ge=1, le=100, description="Number of buses to return"),
    offset: int = Query(0, ge=0, description="Number of buses to skip"),
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    """Get buses with their seats"""
    buses, total = BusService.get_buses(db, operator=operator, bus_type=bus_type, limit=limit, offset=offset)
    return {
        "data": [serialize_bus(bus) for bus in buses],
        "total": total
    }

@router.post("", status_code=status.HTTP_201_CREATED)
def create_bus(
    data: BusCreate,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    """Create a bus and its seats from a seat layout"""
    try:
        bus = BusService.create_bus(db, data, admin_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        raise internal_error("create bus")
    return serialize_bus(bus)

@router.get("/{bus_id}")
def get_bus(
    bus_id: str,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    bus = BusService.get_bus_by_id(db, bus_id)
    if not bus:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bus not found")
    return serialize_bus(bus)

@router.patch("/{bus_id}")
def update_bus(
    bus_id: str,
    data: BusUpdate,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    try:
        bus = BusService.update_bus(db, bus_id, data, admin_user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        raise internal_error("update bus")

    if not bus:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bus not found")
    return serialize_bus(bus)

@router.delete("/{bus_id}")
def delete_bus(
    bus_id: str,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    try:
        deleted = BusService.delete_bus(db, bus_id)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception:
        raise internal_error("delete bus")

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bus not found")
    return {"message": "Bus deleted"}
