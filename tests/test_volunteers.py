from datetime import datetime, timezone

from config.tag_config import SystemTag
from utils.time_utils import as_utc
from api.tags.tags_service import TagService
from api.tags.member_tags_model import MemberTag
from tests.conftest import auth_headers_for, local_time


def volunteer_rows(db, clock, member_id, active=True):
    tag = TagService(db, clock).get_tag_by_name(SystemTag.check_in_volunteer)
    return db.query(MemberTag).filter_by(member_id=member_id, tag_id=tag.id, is_active=active).all()


class TestAssignVolunteer:
    def test_tag_expires_at_event_end(self, client, db, clock, event, member, manager_headers):
        resp = client.post(f'/api/volunteers/{event.id}/volunteers', json={'memberId': member.id}, headers=manager_headers)
        assert resp.status_code == 201

        rows = volunteer_rows(db, clock, member.id)
        assert len(rows) == 1
        # 20:00 at UTC+3
        assert as_utc(rows[0].expires_at) == datetime(2026, 3, 3, 17, 0, tzinfo=timezone.utc)

    def test_reassigning_is_not_an_error(self, client, db, clock, event, member, manager_headers):
        url = f'/api/volunteers/{event.id}/volunteers'
        assert client.post(url, json={'memberId': member.id}, headers=manager_headers).status_code == 201
        assert client.post(url, json={'memberId': member.id}, headers=manager_headers).status_code == 200
        assert len(volunteer_rows(db, clock, member.id)) == 1

    def test_expiry_follows_latest_event(self, client, db, clock, event, make_event, member, manager_headers):
        late = make_event(name='Late Prayer', start='19:00', end='22:00')
        for e in (event, late):
            client.post(f'/api/volunteers/{e.id}/volunteers', json={'memberId': member.id}, headers=manager_headers)

        rows = volunteer_rows(db, clock, member.id)
        assert len(rows) == 1
        assert as_utc(rows[0].expires_at) == as_utc(local_time(22, 0))

    def test_only_managers_assign(self, client, event, member, make_member):
        other = make_member()
        resp = client.post(
            f'/api/volunteers/{event.id}/volunteers',
            json={'memberId': other.id},
            headers=auth_headers_for(member),
        )
        assert resp.status_code == 403

    def test_unknown_event(self, client, member, manager_headers):
        resp = client.post('/api/volunteers/999/volunteers', json={'memberId': member.id}, headers=manager_headers)
        assert resp.status_code == 404


class TestRemoveVolunteer:
    def test_remove_drops_tag(self, client, db, clock, event, member, manager_headers):
        client.post(f'/api/volunteers/{event.id}/volunteers', json={'memberId': member.id}, headers=manager_headers)
        resp = client.delete(f'/api/volunteers/{event.id}/volunteers/{member.id}', headers=manager_headers)
        assert resp.status_code == 200
        db.expire_all()
        assert volunteer_rows(db, clock, member.id) == []

    def test_remove_unknown(self, client, event, member, manager_headers):
        resp = client.delete(f'/api/volunteers/{event.id}/volunteers/{member.id}', headers=manager_headers)
        assert resp.status_code == 404


class TestCheckPermission:
    def test_manager_always_allowed(self, client, event, manager_headers):
        resp = client.get(f'/api/volunteers/{event.id}/check-permission', headers=manager_headers)
        assert resp.json() == {'hasPermission': True, 'role': 'MANAGER', 'reason': None}

    def test_volunteer_during_event(self, client, event, member, manager_headers):
        client.post(f'/api/volunteers/{event.id}/volunteers', json={'memberId': member.id}, headers=manager_headers)
        resp = client.get(f'/api/volunteers/{event.id}/check-permission', headers=auth_headers_for(member))
        assert resp.json()['hasPermission'] is True
        assert resp.json()['role'] == 'VOLUNTEER'

    def test_volunteer_after_event(self, client, clock, event, member, manager_headers):
        client.post(f'/api/volunteers/{event.id}/volunteers', json={'memberId': member.id}, headers=manager_headers)
        clock.instant = as_utc(local_time(21, 0))
        resp = client.get(f'/api/volunteers/{event.id}/check-permission', headers=auth_headers_for(member))
        assert resp.json()['hasPermission'] is False
        assert resp.json()['reason'] == 'Event has ended'

    def test_non_volunteer(self, client, event, member):
        resp = client.get(f'/api/volunteers/{event.id}/check-permission', headers=auth_headers_for(member))
        assert resp.json()['hasPermission'] is False
