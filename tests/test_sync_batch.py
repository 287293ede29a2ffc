"""
Server side of offline replay: POST /api/attendance/sync-batch.
"""
from datetime import datetime, timezone

from config.tag_config import SystemTag
from utils.time_utils import as_utc
from api.attendance.attendance_records_model import Attendance
from api.tags.tags_service import TagService
from tests.conftest import auth_headers_for

SYNC_URL = '/api/attendance/sync-batch'


def record(member, event, when=datetime(2026, 3, 3, 15, 30, tzinfo=timezone.utc), method='QR'):
    return {'memberId': member.id, 'eventId': event.id, 'method': method, 'timestamp': when.isoformat()}


class TestSyncBatch:
    def test_replaying_a_batch_is_idempotent(self, client, db, event, make_member, manager_headers):
        members = [make_member() for _ in range(3)]
        batch = [record(m, event) for m in members]

        first = client.post(SYNC_URL, json=batch, headers=manager_headers)
        assert first.status_code == 200
        assert first.json() == {'syncedCount': 3, 'totalReceived': 3, 'errors': []}

        second = client.post(SYNC_URL, json=batch, headers=manager_headers)
        assert second.json()['syncedCount'] == 0
        assert second.json()['totalReceived'] == 3
        assert db.query(Attendance).filter_by(event_id=event.id).count() == 3

    def test_existing_online_check_in_counts_as_synced(self, client, db, event, member, manager_headers):
        payload = {'eventId': event.id, 'qrCode': member.qr_code, 'method': 'QR'}
        assert client.post('/api/attendance/check-in', json=payload, headers=manager_headers).status_code == 201

        resp = client.post(SYNC_URL, json=[record(member, event)], headers=manager_headers)
        assert resp.json()['syncedCount'] == 0
        assert resp.json()['errors'] == []

    def test_client_timestamp_is_kept(self, client, db, event, member, manager_headers):
        scanned = datetime(2026, 3, 3, 15, 12, tzinfo=timezone.utc)
        client.post(SYNC_URL, json=[record(member, event, when=scanned)], headers=manager_headers)

        row = db.query(Attendance).filter_by(member_id=member.id, event_id=event.id).one()
        assert as_utc(row.checked_in_at) == scanned
        assert row.synced_offline is True

    def test_bad_records_do_not_block_the_batch(self, client, db, event, member, manager_headers):
        batch = [
            {'memberId': 9999, 'eventId': event.id, 'method': 'QR', 'timestamp': '2026-03-03T15:00:00Z'},
            record(member, event),
            {'memberId': member.id, 'eventId': 8888, 'method': 'QR', 'timestamp': '2026-03-03T15:00:00Z'},
        ]
        body = client.post(SYNC_URL, json=batch, headers=manager_headers).json()
        assert body['syncedCount'] == 1
        assert body['totalReceived'] == 3
        assert {e['error'] for e in body['errors']} == {'Member not found', 'Event not found'}

    def test_malformed_records_are_reported_individually(self, client, db, event, make_member, manager_headers):
        lower, bad_method, valid = make_member(), make_member(), make_member()
        batch = [
            record(lower, event, method='qr'),
            record(bad_method, event, method='SWIPE'),
            {'eventId': event.id, 'method': 'QR'},
            'not a record',
            record(valid, event),
        ]
        resp = client.post(SYNC_URL, json=batch, headers=manager_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body['syncedCount'] == 2
        assert body['totalReceived'] == 5

        errors = body['errors']
        assert [e['memberId'] for e in errors] == [bad_method.id, None, None]
        assert errors[0]['error'].startswith('Invalid record: method')
        assert errors[1]['eventId'] == event.id
        assert db.query(Attendance).filter_by(event_id=event.id).count() == 2

    def test_window_is_not_enforced_on_replay(self, client, db, event, member):
        late = datetime(2026, 3, 3, 23, 0, tzinfo=timezone.utc)
        resp = client.post(SYNC_URL, json=[record(member, event, when=late)])
        assert resp.json()['syncedCount'] == 1

    def test_works_without_authentication(self, client, db, event, member):
        resp = client.post(SYNC_URL, json=[record(member, event)])
        assert resp.status_code == 200
        row = db.query(Attendance).filter_by(member_id=member.id).one()
        assert row.recorded_by is None

    def test_recorder_is_taken_from_token(self, client, db, event, member, make_member):
        helper = make_member()
        client.post(SYNC_URL, json=[record(member, event)], headers=auth_headers_for(helper))
        row = db.query(Attendance).filter_by(member_id=member.id).one()
        assert row.recorded_by == helper.id

    def test_first_attendance_tag_cleared_on_replay(self, client, db, clock, event, member):
        tags = TagService(db, clock)
        tags.assign_role_tag(member.id, SystemTag.pending_first_attendance, 'SYSTEM')
        db.commit()

        client.post(SYNC_URL, json=[record(member, event)])
        db.expire_all()
        assert not TagService(db, clock).has_active_tag(member.id, SystemTag.pending_first_attendance)

    def test_empty_batch(self, client):
        assert client.post(SYNC_URL, json=[]).json() == {'syncedCount': 0, 'totalReceived': 0, 'errors': []}
