"""
Tag lifecycle: academic mutual exclusion, role tags with expiry, and the
manual /tags API.
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException

from config.tag_config import SystemTag
from api.academic.academic_service import AcademicStanding
from api.academic.academic_periods_model import AcademicPeriod
from api.tags.tags_model import Tag
from api.tags.member_tags_model import MemberTag
from api.tags.tags_service import TagService
from tests.conftest import auth_headers_for


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def periods(db):
    rows = [
        AcademicPeriod(academic_year='2024/2025', period_number=1, period_name='Semester 1',
                       start_date=utc(2024, 8, 5), end_date=utc(2024, 12, 13)),
        AcademicPeriod(academic_year='2024/2025', period_number=2, period_name='Semester 2',
                       start_date=utc(2025, 1, 13), end_date=utc(2025, 5, 30)),
        AcademicPeriod(academic_year='2025/2026', period_number=1, period_name='Semester 1',
                       start_date=utc(2025, 8, 4), end_date=utc(2025, 12, 12)),
        AcademicPeriod(academic_year='2025/2026', period_number=2, period_name='Semester 2',
                       start_date=utc(2026, 1, 12), end_date=utc(2026, 5, 29)),
    ]
    db.add_all(rows)
    db.commit()
    return rows


@pytest.fixture
def student(make_member, course):
    return make_member(
        course_id=course.id,
        initial_year_of_study=3,
        initial_semester=1,
        registration_date=utc(2024, 7, 1),
    )


def active_names(db, member_id):
    rows = (
        db.query(Tag.name)
        .join(MemberTag, MemberTag.tag_id == Tag.id)
        .filter(MemberTag.member_id == member_id, MemberTag.is_active.is_(True))
        .all()
    )
    return sorted(r.name for r in rows)


class TestAcademicReconcile:
    @pytest.mark.parametrize('now, standing, expected', [
        (utc(2024, 9, 1), AcademicStanding.none, []),
        (utc(2025, 6, 1), AcademicStanding.finalist, ['FINALIST']),
        (utc(2026, 6, 1), AcademicStanding.alumni, ['ALUMNI']),
    ])
    def test_standing_decides_tag(self, db, clock, periods, student, now, standing, expected):
        clock.instant = now
        assert TagService(db, clock).reconcile_academic_tags(student.id) is standing
        db.commit()
        assert active_names(db, student.id) == expected

    def test_finalist_to_alumni_never_overlaps(self, db, clock, periods, student):
        tags = TagService(db, clock)
        for now in (utc(2025, 6, 1), utc(2025, 12, 20), utc(2026, 6, 1), utc(2026, 7, 1)):
            clock.instant = now
            tags.reconcile_academic_tags(student.id)
            db.commit()
            assert not {'FINALIST', 'ALUMNI'} <= set(active_names(db, student.id))
        assert active_names(db, student.id) == ['ALUMNI']

        finalist = tags.get_tag_by_name(SystemTag.finalist)
        old = db.query(MemberTag).filter_by(member_id=student.id, tag_id=finalist.id).one()
        assert old.is_active is False
        assert old.notes == 'Auto-removed: Now alumni'

    def test_reconcile_is_idempotent(self, db, clock, periods, student):
        clock.instant = utc(2025, 6, 1)
        tags = TagService(db, clock)
        tags.reconcile_academic_tags(student.id)
        tags.reconcile_academic_tags(student.id)
        db.commit()
        assert db.query(MemberTag).filter_by(member_id=student.id).count() == 1

    def test_correcting_year_of_study_removes_tag(self, db, clock, periods, student):
        clock.instant = utc(2025, 6, 1)
        tags = TagService(db, clock)
        tags.reconcile_academic_tags(student.id)
        db.commit()

        student.initial_year_of_study = 1
        db.commit()
        assert tags.reconcile_academic_tags(student.id) is AcademicStanding.none
        db.commit()
        assert active_names(db, student.id) == []

    def test_member_without_course_gets_nothing(self, db, clock, periods, member):
        assert TagService(db, clock).reconcile_academic_tags(member.id) is AcademicStanding.none
        assert active_names(db, member.id) == []

    def test_unknown_member(self, db, clock):
        assert TagService(db, clock).reconcile_academic_tags(4242) is None


class TestRoleTags:
    def test_assign_twice_keeps_one_active_row(self, db, clock, member):
        tags = TagService(db, clock)
        first = tags.assign_role_tag(member.id, SystemTag.family_head, 'SYSTEM')
        second = tags.assign_role_tag(member.id, SystemTag.family_head, 'SYSTEM')
        db.commit()
        assert first.id == second.id
        assert db.query(MemberTag).filter_by(member_id=member.id, is_active=True).count() == 1

    def test_expired_assignment_is_replaced(self, db, clock, member):
        tags = TagService(db, clock)
        old = tags.assign_role_tag(member.id, SystemTag.check_in_volunteer, 'SYSTEM',
                                   expires_at=clock.now() - timedelta(hours=1))
        new = tags.assign_role_tag(member.id, SystemTag.check_in_volunteer, 'SYSTEM',
                                   expires_at=clock.now() + timedelta(hours=1))
        db.commit()
        assert old.id != new.id
        assert old.is_active is False
        assert old.notes == 'Auto-deactivated (expired)'
        assert new.is_active is True

    def test_has_active_tag_heals_expired_rows(self, db, clock, member):
        tags = TagService(db, clock)
        row = tags.assign_role_tag(member.id, SystemTag.check_in_volunteer, 'SYSTEM',
                                   expires_at=clock.now() - timedelta(minutes=5))
        db.commit()

        assert tags.has_active_tag(member.id, SystemTag.check_in_volunteer) is False
        db.commit()
        assert row.is_active is False
        assert row.removed_by == 'SYSTEM'
        removed_at = row.removed_at

        clock.instant = clock.now() + timedelta(hours=1)
        assert tags.has_active_tag(member.id, SystemTag.check_in_volunteer) is False
        assert row.removed_at == removed_at

    def test_tag_valid_until_its_expiry(self, db, clock, member):
        tags = TagService(db, clock)
        tags.assign_role_tag(member.id, SystemTag.check_in_volunteer, 'SYSTEM', expires_at=clock.now())
        assert tags.has_active_tag(member.id, SystemTag.check_in_volunteer) is True
        clock.instant = clock.now() + timedelta(seconds=1)
        assert tags.has_active_tag(member.id, SystemTag.check_in_volunteer) is False

    def test_remove_role_tag(self, db, clock, member):
        tags = TagService(db, clock)
        assert tags.remove_role_tag(member.id, SystemTag.family_head, member.id) is False
        tags.assign_role_tag(member.id, SystemTag.family_head, 'SYSTEM')
        assert tags.remove_role_tag(member.id, SystemTag.family_head, member.id, notes='Stepped down') is True
        assert tags.has_active_tag(member.id, SystemTag.family_head) is False

    def test_rename_keeps_the_same_row(self, db, clock, member):
        tags = TagService(db, clock)
        tag = tags.ensure_tag('CHOIR_LEADER', is_system=False)
        row = tags.assign_role_tag(member.id, 'CHOIR_LEADER', 'SYSTEM')
        renamed = tags.rename_tag('CHOIR_LEADER', 'PRAISE_LEADER')
        db.commit()
        assert renamed.id == tag.id
        assert row.tag_id == tag.id
        assert tags.has_active_tag(member.id, 'PRAISE_LEADER')

    def test_rename_onto_existing_name(self, db, clock):
        tags = TagService(db, clock)
        tags.ensure_tag('A_LEADER', is_system=False)
        tags.ensure_tag('B_LEADER', is_system=False)
        with pytest.raises(HTTPException) as exc:
            tags.rename_tag('A_LEADER', 'B_LEADER')
        assert exc.value.status_code == 400


class TestTagApi:
    def test_create_and_list(self, client, manager_headers):
        resp = client.post('/api/tags', json={'name': 'choir', 'color': '#123abc'}, headers=manager_headers)
        assert resp.status_code == 201
        assert resp.json()['name'] == 'CHOIR'
        assert resp.json()['isSystem'] is False

        names = [t['name'] for t in client.get('/api/tags', headers=manager_headers).json()]
        assert 'CHOIR' in names and 'FINALIST' in names

    def test_duplicate_name(self, client, manager_headers):
        client.post('/api/tags', json={'name': 'Choir'}, headers=manager_headers)
        resp = client.post('/api/tags', json={'name': 'CHOIR'}, headers=manager_headers)
        assert resp.status_code == 400

    def test_system_tag_cannot_be_deleted(self, client, db, manager_headers):
        finalist = db.query(Tag).filter_by(name='FINALIST').one()
        resp = client.delete(f'/api/tags/{finalist.id}', headers=manager_headers)
        assert resp.status_code == 403

    def test_assign_twice_is_rejected(self, client, db, member, manager_headers):
        tag_id = client.post('/api/tags', json={'name': 'Ushers'}, headers=manager_headers).json()['id']
        url = f'/api/tags/members/{member.id}/tags'
        assert client.post(url, json={'tagId': tag_id}, headers=manager_headers).status_code == 201
        resp = client.post(url, json={'tagId': tag_id}, headers=manager_headers)
        assert resp.status_code == 400
        assert resp.json()['detail'] == 'Member already has this tag'

    def test_bulk_assign_skips_existing(self, client, member, make_member, manager_headers):
        others = [make_member() for _ in range(2)]
        tag_id = client.post('/api/tags', json={'name': 'Ushers'}, headers=manager_headers).json()['id']
        client.post(f'/api/tags/members/{member.id}/tags', json={'tagId': tag_id}, headers=manager_headers)

        ids = [member.id] + [o.id for o in others]
        resp = client.post('/api/tags/members/bulk-assign', json={'memberIds': ids, 'tagId': tag_id},
                           headers=manager_headers)
        assert resp.status_code == 201
        assert resp.json()['count'] == 2
        assert resp.json()['skipped'] == 1

        members = client.get(f'/api/tags/{tag_id}/members', headers=manager_headers).json()
        assert len(members) == 3

        resp = client.post('/api/tags/members/bulk-remove', json={'memberIds': ids, 'tagId': tag_id},
                           headers=manager_headers)
        assert resp.json()['count'] == 3

    def test_history_keeps_removed_assignments(self, client, member, manager_headers):
        tag_id = client.post('/api/tags', json={'name': 'Ushers'}, headers=manager_headers).json()['id']
        client.post(f'/api/tags/members/{member.id}/tags', json={'tagId': tag_id}, headers=manager_headers)
        client.request('DELETE', f'/api/tags/members/{member.id}/tags/{tag_id}', headers=manager_headers)

        history = client.get(f'/api/tags/members/{member.id}/history', headers=manager_headers).json()
        assert len(history) == 1
        assert history[0]['isActive'] is False

    def test_members_cannot_manage_tags(self, client, member):
        assert client.get('/api/tags', headers=auth_headers_for(member)).status_code == 403
