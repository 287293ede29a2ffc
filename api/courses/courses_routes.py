# api/courses/courses_routes.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.role_middleware import manager_only
from utils.schema_base import Message
from utils.database_utils import DatabaseUtils
from api.courses.courses_model import Course
from api.courses.courses_schema import CourseCreate, CourseUpdate, CourseOut
from api.members.members_model import Member
from api.tags.tags_service import TagService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=List[CourseOut], summary="List courses (public, used by registration)")
def list_courses(db: Session = Depends(get_db)):
    return db.query(Course).order_by(Course.name.asc()).all()


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(payload: CourseCreate, db: Session = Depends(get_db), current_user: dict = Depends(manager_only)):
    course = Course(name=payload.name.strip(), code=payload.code.strip().upper(), duration_years=payload.duration_years)
    db.add(course)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Course name or code already exists")
    db.refresh(course)
    return course


@router.put("/{course_id}", response_model=CourseOut)
def update_course(
    course_id: int,
    payload: CourseUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    course = DatabaseUtils.get_or_404(db, Course, detail="Course not found", id=course_id)
    changes = payload.model_dump(exclude_unset=True)
    duration_changed = "duration_years" in changes and changes["duration_years"] != course.duration_years
    for field, value in changes.items():
        setattr(course, field, value.strip().upper() if field == "code" else value)

    try:
        db.flush()
        if duration_changed:
            # a new duration can move every enrolled member between FINALIST and ALUMNI
            tags = TagService(db)
            member_ids = [m.id for m in db.query(Member.id).filter_by(course_id=course.id, is_deleted=False)]
            for member_id in member_ids:
                tags.reconcile_academic_tags(member_id, current_user["id"])
            logger.info(f"Course {course.code} duration changed; reconciled {len(member_ids)} member(s)")
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Course name or code already exists")
    db.refresh(course)
    return course


@router.delete("/{course_id}", response_model=Message)
def delete_course(course_id: int, db: Session = Depends(get_db), current_user: dict = Depends(manager_only)):
    course = DatabaseUtils.get_or_404(db, Course, detail="Course not found", id=course_id)
    if DatabaseUtils.exists(db, Member, course_id=course.id, is_deleted=False):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete a course with members")
    db.delete(course)
    db.commit()
    return {"message": "Course deleted successfully"}
