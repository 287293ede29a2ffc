# api/tasks/email_worker.py

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from config.database import SessionLocal
from config.settings import settings
from helpers.mail_helper import send_email
from api.email_queue.email_queue_model import EmailQueue, EmailStatus

logger = logging.getLogger(__name__)


def _claim_batch(db: Session, batch_size: int):
    # FAILED rows below the attempt limit are retried
    items = (
        db.query(EmailQueue)
        .filter(
            EmailQueue.status.in_([EmailStatus.pending, EmailStatus.failed]),
            EmailQueue.attempts < settings.EMAIL_MAX_ATTEMPTS,
        )
        .order_by(EmailQueue.created_at.asc(), EmailQueue.id.asc())
        .limit(batch_size)
        .all()
    )
    for item in items:
        item.status = EmailStatus.processing
    db.commit()
    return items


def process_email_queue(db: Session = None, sender=send_email, batch_size: int = None) -> dict:
    """
    Send one batch of queued emails. Each row is committed on its own, so a
    delivery failure only marks that row FAILED and the batch carries on.
    """
    own_session = db is None
    db = db or SessionLocal()
    sent = failed = 0
    try:
        for item in _claim_batch(db, batch_size or settings.EMAIL_QUEUE_BATCH_SIZE):
            item.attempts = (item.attempts or 0) + 1
            item.last_attempt = datetime.now(timezone.utc)
            try:
                sender(item.email, item.subject, item.text, item.html)
                item.status = EmailStatus.completed
                item.error = None
                sent += 1
            except Exception as e:
                item.status = EmailStatus.failed
                item.error = str(e)[:1000]
                failed += 1
                logger.warning(f"Email {item.id} to {item.email} failed (attempt {item.attempts}): {e}")
            db.commit()
    finally:
        if own_session:
            db.close()

    if sent or failed:
        logger.info(f"Email queue: {sent} sent, {failed} failed")
    return {"sent": sent, "failed": failed}
