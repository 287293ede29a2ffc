from datetime import datetime, timezone

from config.tag_config import SystemTag
from utils.time_utils import as_utc
from api.tags.tags_service import TagService
from api.tags.member_tags_model import MemberTag
from api.volunteers.volunteers_service import VolunteerService
from tests.conftest import auth_headers_for, local_time


def new_member_payload(region, **overrides):
    body = {
        'fullName': 'Brian Kiprono',
        'email': 'brian@example.com',
        'phoneNumber': '0722000111',
        'gender': 'MALE',
        'regionId': region.id,
    }
    body.update(overrides)
    return body


class TestMembers:
    def test_new_member_gets_number_and_first_timer_tag(self, client, db, clock, region, manager, manager_headers):
        resp = client.post('/api/members', json=new_member_payload(region), headers=manager_headers)
        assert resp.status_code == 201
        body = resp.json()
        assert len(body['fellowshipNumber']) == 6
        assert body['fellowshipNumber'] > manager.fellowship_number

        tags = client.get(f"/api/members/{body['id']}/tags", headers=manager_headers).json()
        assert tags == [SystemTag.pending_first_attendance.value]

    def test_readmission_has_no_first_timer_tag(self, client, region, manager_headers):
        resp = client.post('/api/members', json=new_member_payload(region, registrationMode='READMISSION'),
                           headers=manager_headers)
        tags = client.get(f"/api/members/{resp.json()['id']}/tags", headers=manager_headers).json()
        assert tags == []

    def test_duplicate_email(self, client, region, manager_headers):
        client.post('/api/members', json=new_member_payload(region), headers=manager_headers)
        resp = client.post('/api/members', json=new_member_payload(region, fullName='Someone Else'),
                           headers=manager_headers)
        assert resp.status_code == 409

    def test_academic_fields_trigger_reconcile(self, client, db, clock, region, course, manager_headers):
        member_id = client.post(
            '/api/members',
            json=new_member_payload(region, registrationMode='READMISSION', courseId=course.id,
                                    initialYearOfStudy=2, initialSemester=1),
            headers=manager_headers,
        ).json()['id']
        assert client.get(f'/api/members/{member_id}/tags', headers=manager_headers).json() == []

        client.put(f'/api/members/{member_id}', json={'initialYearOfStudy': 4}, headers=manager_headers)
        assert client.get(f'/api/members/{member_id}/tags', headers=manager_headers).json() == ['FINALIST']

        status = client.get(f'/api/members/{member_id}/academic-status', headers=manager_headers).json()
        assert status['currentYear'] == 4
        assert status['isFinalist'] is True

    def test_members_only_see_themselves(self, client, member, manager):
        headers = auth_headers_for(member)
        assert client.get(f'/api/members/{member.id}', headers=headers).status_code == 200
        assert client.get(f'/api/members/{manager.id}', headers=headers).status_code == 403

    def test_search(self, client, member, manager_headers):
        resp = client.get('/api/members', params={'search': member.fellowship_number}, headers=manager_headers)
        assert [m['id'] for m in resp.json()['items']] == [member.id]

    def test_soft_delete(self, client, member, manager_headers):
        assert client.delete(f'/api/members/{member.id}', headers=manager_headers).status_code == 200
        assert client.get(f'/api/members/{member.id}', headers=manager_headers).status_code == 404


class TestEvents:
    def event_payload(self, **overrides):
        body = {'name': 'Tuesday Fellowship', 'date': '2026-03-10', 'startTime': '18:00',
                'endTime': '20:00', 'type': 'TUESDAY_FELLOWSHIP'}
        body.update(overrides)
        return body

    def test_created_closed_and_toggled_open(self, client, manager_headers):
        event = client.post('/api/events', json=self.event_payload(), headers=manager_headers).json()
        assert event['isActive'] is False
        assert event['status'] == 'UPCOMING'

        resp = client.patch(f"/api/events/{event['id']}/toggle-active", headers=manager_headers)
        assert resp.json()['event']['isActive'] is True
        active = client.get('/api/events/active', headers=manager_headers).json()
        assert [e['id'] for e in active] == [event['id']]

    def test_bad_time_format(self, client, manager_headers):
        resp = client.post('/api/events', json=self.event_payload(startTime='6pm'), headers=manager_headers)
        assert resp.status_code == 422

    def test_status_follows_clock(self, client, clock, event, manager_headers):
        assert client.get(f'/api/events/{event.id}', headers=manager_headers).json()['status'] == 'ONGOING'
        clock.instant = as_utc(local_time(20, 30))
        assert client.get(f'/api/events/{event.id}', headers=manager_headers).json()['status'] == 'PAST'

    def test_moving_event_end_moves_volunteer_expiry(self, client, db, clock, event, member, manager, manager_headers):
        VolunteerService(db, clock).assign(event.id, member.id, manager.id)
        client.put(f'/api/events/{event.id}', json={'endTime': '21:30'}, headers=manager_headers)

        db.expire_all()
        tag = TagService(db, clock).get_tag_by_name(SystemTag.check_in_volunteer)
        row = db.query(MemberTag).filter_by(member_id=member.id, tag_id=tag.id, is_active=True).one()
        assert as_utc(row.expires_at) == datetime(2026, 3, 3, 18, 30, tzinfo=timezone.utc)

    def test_deleting_event_releases_volunteers(self, client, db, clock, event, member, manager, manager_headers):
        VolunteerService(db, clock).assign(event.id, member.id, manager.id)
        assert client.delete(f'/api/events/{event.id}', headers=manager_headers).status_code == 200

        db.expire_all()
        assert not TagService(db, clock).has_active_tag(member.id, SystemTag.check_in_volunteer)

    def test_guest_check_in_requires_flag(self, client, event, manager_headers):
        body = {'eventId': event.id, 'guestName': 'Visiting Pastor'}
        assert client.post('/api/attendance/guest-check-in', json=body, headers=manager_headers).status_code == 403

        client.patch(f'/api/events/{event.id}/toggle-guest-checkin', headers=manager_headers)
        assert client.post('/api/attendance/guest-check-in', json=body, headers=manager_headers).status_code == 201
        assert client.post('/api/attendance/guest-check-in', json=body, headers=manager_headers).status_code == 201
        guests = client.get(f'/api/attendance/{event.id}/guests', headers=manager_headers).json()
        assert len(guests) == 2
