# api/academic/academic_service.py

import enum
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from config.settings import settings
from utils.time_utils import Clock, system_clock, as_utc
from utils.database_utils import DatabaseUtils
from api.academic.academic_periods_model import AcademicPeriod

logger = logging.getLogger(__name__)


class AcademicStanding(enum.Enum):
    none     = "NONE"
    finalist = "FINALIST"
    alumni   = "ALUMNI"


@dataclass(frozen=True)
class AcademicStatus:
    current_year: int
    current_semester: int
    standing: AcademicStanding

    @property
    def is_finalist(self) -> bool:
        return self.standing is AcademicStanding.finalist

    @property
    def is_alumni(self) -> bool:
        return self.standing is AcademicStanding.alumni


# ---------------------------------------------------------------------------
# Pure calculator
# ---------------------------------------------------------------------------

def elapsed_periods(
    registration_date: datetime,
    now: datetime,
    periods: Iterable[Tuple[datetime, datetime]],
) -> int:
    """
    Number of periods whose [start, end] lies entirely inside
    (registration_date, now].
    """
    registered = as_utc(registration_date)
    now = as_utc(now)
    return sum(
        1 for start, end in periods
        if as_utc(start) > registered and as_utc(end) <= now
    )


def current_academic_status(
    initial_year: int,
    initial_semester: int,
    elapsed: int,
    semesters_per_year: int = None,
) -> Tuple[int, int]:
    """Advance (year, semester) by `elapsed` semesters."""
    per_year = semesters_per_year or settings.SEMESTERS_PER_YEAR
    total = (initial_year - 1) * per_year + initial_semester + elapsed
    current_year = math.ceil(total / per_year)
    current_semester = ((total - 1) % per_year) + 1
    return current_year, current_semester


def classify_standing(current_year: int, duration_years: int) -> AcademicStanding:
    if current_year > duration_years:
        return AcademicStanding.alumni
    if current_year == duration_years:
        return AcademicStanding.finalist
    return AcademicStanding.none


def compute_member_status(member, now: datetime, periods) -> Optional[AcademicStatus]:
    """
    Full status for a member, or None when course, registration date or the
    initial year/semester is missing.
    """
    course = member.course
    if (
        course is None
        or member.registration_date is None
        or not member.initial_year_of_study
        or not member.initial_semester
    ):
        return None

    elapsed = elapsed_periods(member.registration_date, now, periods)
    year, semester = current_academic_status(
        member.initial_year_of_study, member.initial_semester, elapsed
    )
    return AcademicStatus(year, semester, classify_standing(year, course.duration_years))


# ---------------------------------------------------------------------------
# Database-backed service
# ---------------------------------------------------------------------------

class AcademicService:
    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock

    def _period_bounds(self) -> List[Tuple[datetime, datetime]]:
        rows = (
            self.db.query(AcademicPeriod.start_date, AcademicPeriod.end_date)
            .order_by(AcademicPeriod.start_date.asc())
            .all()
        )
        return [(r.start_date, r.end_date) for r in rows]

    def member_status(self, member) -> Optional[AcademicStatus]:
        return compute_member_status(member, self.clock.now(), self._period_bounds())

    def is_finalist(self, member) -> bool:
        result = self.member_status(member)
        return bool(result and result.is_finalist)

    def is_alumni(self, member) -> bool:
        result = self.member_status(member)
        return bool(result and result.is_alumni)

    # -- academic periods ---------------------------------------------------

    def list_periods(self) -> List[AcademicPeriod]:
        return (
            self.db.query(AcademicPeriod)
            .order_by(AcademicPeriod.academic_year.desc(), AcademicPeriod.period_number.asc())
            .all()
        )

    def get_current_period(self) -> AcademicPeriod:
        now = self.clock.now()
        period = (
            self.db.query(AcademicPeriod)
            .filter(AcademicPeriod.start_date <= now, AcademicPeriod.end_date >= now)
            .order_by(AcademicPeriod.start_date.desc())
            .first()
        )
        if not period:
            raise HTTPException(status_code=404, detail="No active academic period found")
        return period

    def create_period(self, data) -> AcademicPeriod:
        existing = (
            self.db.query(AcademicPeriod)
            .filter_by(academic_year=data.academic_year, period_number=data.period_number)
            .first()
        )
        if existing:
            raise HTTPException(
                status_code=400,
                detail=f"Period {data.period_number} for {data.academic_year} already exists",
            )
        if as_utc(data.end_date) <= as_utc(data.start_date):
            raise HTTPException(status_code=400, detail="End date must be after start date")

        period = AcademicPeriod(
            academic_year=data.academic_year,
            period_number=data.period_number,
            period_name=data.period_name,
            start_date=as_utc(data.start_date),
            end_date=as_utc(data.end_date),
        )
        self.db.add(period)
        self.db.commit()
        self.db.refresh(period)
        logger.info(f"Academic period {period.academic_year} #{period.period_number} created")
        return period

    def update_period(self, period_id: int, data) -> AcademicPeriod:
        period = DatabaseUtils.get_or_404(
            self.db, AcademicPeriod, detail="Academic period not found", id=period_id
        )
        start = as_utc(data.start_date) if data.start_date else as_utc(period.start_date)
        end = as_utc(data.end_date) if data.end_date else as_utc(period.end_date)
        if end <= start:
            raise HTTPException(status_code=400, detail="End date must be after start date")

        if data.period_name:
            period.period_name = data.period_name
        period.start_date = start
        period.end_date = end
        self.db.commit()
        self.db.refresh(period)
        return period

    def delete_period(self, period_id: int) -> None:
        period = DatabaseUtils.get_or_404(
            self.db, AcademicPeriod, detail="Academic period not found", id=period_id
        )
        if as_utc(period.end_date) < self.clock.now():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete past academic periods",
            )
        self.db.delete(period)
        self.db.commit()
