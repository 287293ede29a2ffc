# api/academic/academic_routes.py

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from middlewares.role_middleware import manager_only
from utils.schema_base import Message
from utils.time_utils import Clock, get_clock
from api.academic.academic_schema import AcademicPeriodCreate, AcademicPeriodUpdate, AcademicPeriodOut
from api.academic.academic_service import AcademicService

router = APIRouter(prefix="/academic-periods", tags=["academic-periods"])


@router.get("", response_model=List[AcademicPeriodOut], summary="List academic periods")
def list_periods(
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
):
    return AcademicService(db).list_periods()


@router.get("/current", response_model=AcademicPeriodOut, summary="Currently running academic period")
def current_period(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(auth_middleware),
):
    return AcademicService(db, clock).get_current_period()


@router.post("", response_model=AcademicPeriodOut, status_code=status.HTTP_201_CREATED)
def create_period(
    payload: AcademicPeriodCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    return AcademicService(db).create_period(payload)


@router.put("/{period_id}", response_model=AcademicPeriodOut)
def update_period(
    period_id: int,
    payload: AcademicPeriodUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    return AcademicService(db).update_period(period_id, payload)


@router.delete("/{period_id}", response_model=Message)
def delete_period(
    period_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    AcademicService(db, clock).delete_period(period_id)
    return {"message": "Academic period deleted successfully"}
