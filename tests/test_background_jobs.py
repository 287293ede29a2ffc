from datetime import datetime, timezone

from api.academic.academic_periods_model import AcademicPeriod
from api.email_queue.email_queue_model import EmailQueue, EmailStatus
from api.tags.tags_service import TagService
from api.tasks.email_worker import process_email_queue
from api.tasks.scheduler import reconcile_all_academic_tags
from helpers.mail_helper import queue_email


class RecordingSender:
    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.sent = []

    def __call__(self, to_email, subject, body, html=None):
        if to_email in self.fail_for:
            raise RuntimeError('SMTP unavailable')
        self.sent.append((to_email, subject))


class TestEmailWorker:
    def test_sends_pending_and_marks_failures(self, db):
        queue_email(db, 'ok@example.com', 'Hello', 'body')
        queue_email(db, 'bad@example.com', 'Hello', 'body')
        db.commit()

        sender = RecordingSender(fail_for={'bad@example.com'})
        assert process_email_queue(db, sender=sender) == {'sent': 1, 'failed': 1}
        assert sender.sent == [('ok@example.com', 'Hello')]

        bad = db.query(EmailQueue).filter_by(email='bad@example.com').one()
        assert bad.status == EmailStatus.failed
        assert bad.attempts == 1
        assert 'SMTP unavailable' in bad.error

    def test_failed_rows_retry_until_limit(self, db):
        queue_email(db, 'bad@example.com', 'Hello', 'body')
        db.commit()
        sender = RecordingSender(fail_for={'bad@example.com'})

        for _ in range(3):
            process_email_queue(db, sender=sender)
        assert process_email_queue(db, sender=sender) == {'sent': 0, 'failed': 0}
        assert db.query(EmailQueue).one().attempts == 3

    def test_completed_rows_are_not_resent(self, db):
        queue_email(db, 'ok@example.com', 'Hello', 'body')
        db.commit()
        sender = RecordingSender()
        process_email_queue(db, sender=sender)
        process_email_queue(db, sender=sender)
        assert len(sender.sent) == 1


class TestAcademicReconcileJob:
    def test_promotes_members_after_period_ends(self, db, clock, course, make_member):
        db.add(AcademicPeriod(
            academic_year='2025/2026', period_number=2, period_name='Semester 2',
            start_date=datetime(2026, 1, 12, tzinfo=timezone.utc),
            end_date=datetime(2026, 2, 27, tzinfo=timezone.utc),
        ))
        db.commit()
        # year 3 semester 2 when registered; one finished period later they are in year 4
        student = make_member(course_id=course.id, initial_year_of_study=3, initial_semester=2,
                              registration_date=datetime(2025, 12, 20, tzinfo=timezone.utc))
        make_member()   # no course, skipped

        assert reconcile_all_academic_tags(db, clock) == 1
        assert TagService(db, clock).active_tag_names(student.id) == ['FINALIST']
