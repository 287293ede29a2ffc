# api/tasks/scheduler.py

import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from config.database import SessionLocal
from config.settings import settings
from config.tag_config import SYSTEM_ACTOR
from utils.time_utils import Clock, system_clock
from api.members.members_model import Member
from api.tags.tags_service import TagService
from api.tasks.email_worker import process_email_queue

logger = logging.getLogger(__name__)

_scheduler: Optional[BackgroundScheduler] = None


def reconcile_all_academic_tags(db=None, clock: Clock = system_clock) -> int:
    """
    Nightly pass that moves members across FINALIST/ALUMNI as academic
    periods end. A failure on one member is logged and the pass continues.
    """
    own_session = db is None
    db = db or SessionLocal()
    processed = 0
    try:
        service = TagService(db, clock)
        member_ids = [
            row.id for row in db.query(Member.id).filter(
                Member.is_deleted.is_(False),
                Member.course_id.isnot(None),
            )
        ]
        for member_id in member_ids:
            try:
                service.reconcile_academic_tags(member_id, SYSTEM_ACTOR)
                db.commit()
                processed += 1
            except Exception:
                db.rollback()
                logger.exception(f"Academic tag reconcile failed for member {member_id}")
    finally:
        if own_session:
            db.close()
    logger.info(f"Academic tag reconcile: {processed} member(s) processed")
    return processed


def start_scheduler() -> BackgroundScheduler:
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        return _scheduler

    _scheduler = BackgroundScheduler(timezone=settings.org_timezone)
    if settings.EMAIL_QUEUE_ENABLED:
        _scheduler.add_job(
            process_email_queue,
            "interval",
            seconds=settings.EMAIL_QUEUE_INTERVAL_SECONDS,
            id="email_queue",
            max_instances=1,
            coalesce=True,
        )
    _scheduler.add_job(
        reconcile_all_academic_tags,
        CronTrigger(hour=settings.ACADEMIC_RECALC_HOUR, minute=0, timezone=settings.org_timezone),
        id="academic_reconcile",
        max_instances=1,
        coalesce=True,
    )
    _scheduler.start()
    logger.info("Background scheduler started")
    return _scheduler


def shutdown_scheduler() -> None:
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("Background scheduler stopped")
    _scheduler = None
