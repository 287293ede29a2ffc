# api/regions/regions_routes.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.role_middleware import manager_only
from utils.schema_base import Message
from utils.database_utils import DatabaseUtils
from api.members.members_model import Member
from api.regions.regions_model import Region
from api.regions.residences_model import Residence
from api.regions.regions_schema import NamedCreate, RegionOut, ResidenceOut

router = APIRouter(tags=["regions"])


def _create(db: Session, model, name: str):
    obj = model(name=name.strip())
    db.add(obj)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"{model.__name__} already exists")
    db.refresh(obj)
    return obj


def _rename(db: Session, model, obj_id: int, name: str):
    obj = DatabaseUtils.get_or_404(db, model, id=obj_id)
    obj.name = name.strip()
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"{model.__name__} already exists")
    db.refresh(obj)
    return obj


def _delete(db: Session, model, obj_id: int, member_filter: dict):
    obj = DatabaseUtils.get_or_404(db, model, id=obj_id)
    if DatabaseUtils.exists(db, Member, is_deleted=False, **member_filter):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot delete a {model.__name__.lower()} with members",
        )
    db.delete(obj)
    db.commit()


# ─── Regions ────────────────────────────────────────────────────────────────
@router.get("/regions", response_model=List[RegionOut])
def list_regions(db: Session = Depends(get_db)):
    return db.query(Region).order_by(Region.name.asc()).all()


@router.post("/regions", response_model=RegionOut, status_code=status.HTTP_201_CREATED)
def create_region(payload: NamedCreate, db: Session = Depends(get_db), current_user: dict = Depends(manager_only)):
    return _create(db, Region, payload.name)


@router.put("/regions/{region_id}", response_model=RegionOut)
def rename_region(
    region_id: int,
    payload: NamedCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    return _rename(db, Region, region_id, payload.name)


@router.delete("/regions/{region_id}", response_model=Message)
def delete_region(region_id: int, db: Session = Depends(get_db), current_user: dict = Depends(manager_only)):
    _delete(db, Region, region_id, {"region_id": region_id})
    return {"message": "Region deleted successfully"}


# ─── Residences ─────────────────────────────────────────────────────────────
@router.get("/residences", response_model=List[ResidenceOut])
def list_residences(db: Session = Depends(get_db)):
    return db.query(Residence).order_by(Residence.name.asc()).all()


@router.post("/residences", response_model=ResidenceOut, status_code=status.HTTP_201_CREATED)
def create_residence(payload: NamedCreate, db: Session = Depends(get_db), current_user: dict = Depends(manager_only)):
    return _create(db, Residence, payload.name)


@router.put("/residences/{residence_id}", response_model=ResidenceOut)
def rename_residence(
    residence_id: int,
    payload: NamedCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    return _rename(db, Residence, residence_id, payload.name)


@router.delete("/residences/{residence_id}", response_model=Message)
def delete_residence(residence_id: int, db: Session = Depends(get_db), current_user: dict = Depends(manager_only)):
    _delete(db, Residence, residence_id, {"residence_id": residence_id})
    return {"message": "Residence deleted successfully"}
