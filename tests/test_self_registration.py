from datetime import timedelta

import pytest

from config.tag_config import SystemTag
from api.email_queue.email_queue_model import EmailQueue
from api.members.members_model import Member
from api.self_registration.pending_members_model import PendingMember, PendingStatus
from api.self_registration.registration_tokens_model import RegistrationToken
from api.tags.tags_service import TagService


@pytest.fixture
def reg_token(client, clock, manager_headers):
    expires = (clock.now() + timedelta(days=30)).isoformat()
    resp = client.post('/api/reg-tokens', json={'label': 'Freshers week', 'expiresAt': expires, 'maxUses': 2},
                       headers=manager_headers)
    assert resp.status_code == 201
    return resp.json()


def submission(token, region, **overrides):
    body = {
        'token': token,
        'fullName': 'Achieng Otieno',
        'email': 'achieng@example.com',
        'phoneNumber': '0712345678',
        'gender': 'FEMALE',
        'regionId': region.id,
    }
    body.update(overrides)
    return body


class TestTokens:
    def test_created_token_has_link(self, reg_token):
        assert len(reg_token['token']) == 64
        assert reg_token['url'].endswith(f"/register?token={reg_token['token']}")
        assert reg_token['usedCount'] == 0

    def test_expiry_must_be_in_future(self, client, clock, manager_headers):
        past = (clock.now() - timedelta(days=1)).isoformat()
        resp = client.post('/api/reg-tokens', json={'expiresAt': past}, headers=manager_headers)
        assert resp.status_code == 400

    def test_validate(self, client, reg_token):
        resp = client.get('/api/register/validate', params={'token': reg_token['token']})
        assert resp.json() == {'valid': True, 'label': 'Freshers week', 'reason': None}

    def test_validate_unknown(self, client):
        assert client.get('/api/register/validate', params={'token': 'missing'}).status_code == 404

    def test_revoked_token_is_gone(self, client, reg_token, manager_headers):
        client.patch(f"/api/reg-tokens/{reg_token['id']}/revoke", headers=manager_headers)
        resp = client.get('/api/register/validate', params={'token': reg_token['token']})
        assert resp.status_code == 410

    def test_expired_token_is_gone(self, client, clock, reg_token):
        clock.instant = clock.now() + timedelta(days=31)
        assert client.get('/api/register/validate', params={'token': reg_token['token']}).status_code == 410


class TestSubmission:
    def test_submit_queues_acknowledgement(self, client, db, region, reg_token):
        resp = client.post('/api/register', json=submission(reg_token['token'], region))
        assert resp.status_code == 201

        pending = db.get(PendingMember, resp.json()['id'])
        assert pending.status == PendingStatus.pending
        assert db.query(RegistrationToken).one().used_count == 1
        assert db.query(EmailQueue).filter_by(email='achieng@example.com').count() == 1

    def test_duplicate_pending_email(self, client, region, reg_token):
        client.post('/api/register', json=submission(reg_token['token'], region))
        resp = client.post('/api/register', json=submission(reg_token['token'], region))
        assert resp.status_code == 409

    def test_existing_member_email(self, client, region, member, reg_token):
        resp = client.post('/api/register', json=submission(reg_token['token'], region, email=member.email))
        assert resp.status_code == 409

    def test_max_uses(self, client, region, reg_token):
        for i in range(2):
            body = submission(reg_token['token'], region, email=f'student{i}@example.com')
            assert client.post('/api/register', json=body).status_code == 201
        body = submission(reg_token['token'], region, email='late@example.com')
        assert client.post('/api/register', json=body).status_code == 410

    def test_invalid_token(self, client, region):
        assert client.post('/api/register', json=submission('bogus', region)).status_code == 410


class TestReview:
    def submit(self, client, region, reg_token):
        return client.post('/api/register', json=submission(reg_token['token'], region)).json()['id']

    def test_approve_creates_member(self, client, db, clock, region, reg_token, manager_headers):
        pending_id = self.submit(client, region, reg_token)
        resp = client.post(f'/api/pending-members/{pending_id}/approve', headers=manager_headers)
        assert resp.status_code == 200
        body = resp.json()

        member = db.get(Member, body['memberId'])
        assert member.fellowship_number == body['fellowshipNumber']
        assert member.email == 'achieng@example.com'
        assert TagService(db, clock).has_active_tag(member.id, SystemTag.pending_first_attendance)

        db.expire_all()
        assert db.get(PendingMember, pending_id).status == PendingStatus.approved
        # acknowledgement + welcome
        assert db.query(EmailQueue).filter_by(email='achieng@example.com').count() == 2

    def test_approved_member_can_log_in_with_fellowship_number(self, client, region, reg_token, manager_headers):
        pending_id = self.submit(client, region, reg_token)
        number = client.post(f'/api/pending-members/{pending_id}/approve', headers=manager_headers).json()['fellowshipNumber']
        resp = client.post('/api/auth/login', json={'identifier': number, 'password': number})
        assert resp.status_code == 200

    def test_cannot_review_twice(self, client, region, reg_token, manager_headers):
        pending_id = self.submit(client, region, reg_token)
        client.post(f'/api/pending-members/{pending_id}/approve', headers=manager_headers)
        resp = client.post(f'/api/pending-members/{pending_id}/approve', headers=manager_headers)
        assert resp.status_code == 400

    def test_reject(self, client, db, region, reg_token, manager_headers):
        pending_id = self.submit(client, region, reg_token)
        resp = client.post(f'/api/pending-members/{pending_id}/reject', json={'reviewNote': 'Duplicate'},
                           headers=manager_headers)
        assert resp.status_code == 200
        assert resp.json()['status'] == 'REJECTED'
        assert db.query(Member).filter_by(email='achieng@example.com').first() is None

        listed = client.get('/api/pending-members', params={'status': 'REJECTED'}, headers=manager_headers).json()
        assert [p['id'] for p in listed] == [pending_id]

    def test_edit_before_approval(self, client, region, reg_token, manager_headers):
        pending_id = self.submit(client, region, reg_token)
        resp = client.patch(f'/api/pending-members/{pending_id}', json={'fullName': 'Achieng A. Otieno'},
                            headers=manager_headers)
        assert resp.json()['fullName'] == 'Achieng A. Otieno'
