"""
Member profile edit requests: submit, list and manager review.
"""
import pytest

from api.email_queue.email_queue_model import EmailQueue
from api.profile_edits.profile_edit_requests_model import ProfileEditRequest, EditRequestStatus
from api.tags.tags_service import TagService
from tests.conftest import auth_headers_for

EDITS_URL = '/api/profile-edits'


@pytest.fixture
def student(make_member, course):
    return make_member(course_id=course.id, initial_year_of_study=2, initial_semester=1)


@pytest.fixture
def student_headers(student):
    return auth_headers_for(student)


def edit_request(*changes, reason='I moved to my final year this semester'):
    return {
        'changes': [{'field': field, 'newValue': value} for field, value in changes],
        'reason': reason,
    }


class TestSubmit:
    def test_old_values_are_recorded(self, client, student, student_headers):
        resp = client.post(EDITS_URL, json=edit_request(('initialYearOfStudy', '4'), ('hostelName', 'Mamlaka')),
                           headers=student_headers)
        assert resp.status_code == 201
        body = resp.json()
        assert body['status'] == 'PENDING'
        assert body['memberId'] == student.id
        assert body['changes'] == [
            {'field': 'initialYearOfStudy', 'oldValue': '2', 'newValue': '4'},
            {'field': 'hostelName', 'oldValue': '', 'newValue': 'Mamlaka'},
        ]

    def test_unchanged_values_are_dropped(self, client, student, student_headers):
        resp = client.post(EDITS_URL, json=edit_request(('fullName', student.full_name), ('initialSemester', '2')),
                           headers=student_headers)
        assert [c['field'] for c in resp.json()['changes']] == ['initialSemester']

    def test_no_op_request_is_rejected(self, client, student, student_headers):
        resp = client.post(EDITS_URL, json=edit_request(('initialYearOfStudy', '2')), headers=student_headers)
        assert resp.status_code == 400
        assert 'No actual changes' in resp.json()['detail']

    def test_one_pending_request_at_a_time(self, client, student_headers):
        assert client.post(EDITS_URL, json=edit_request(('hostelName', 'A')), headers=student_headers).status_code == 201
        resp = client.post(EDITS_URL, json=edit_request(('hostelName', 'B')), headers=student_headers)
        assert resp.status_code == 409

    def test_bad_values_are_caught_on_submit(self, client, student_headers):
        resp = client.post(EDITS_URL, json=edit_request(('initialYearOfStudy', 'fourth')), headers=student_headers)
        assert resp.status_code == 400
        resp = client.post(EDITS_URL, json=edit_request(('email', 'not-an-email')), headers=student_headers)
        assert resp.status_code == 400

    def test_short_reason_and_unknown_field(self, client, student_headers):
        assert client.post(EDITS_URL, json=edit_request(('hostelName', 'A'), reason='new'),
                           headers=student_headers).status_code == 422
        assert client.post(EDITS_URL, json=edit_request(('role', 'FELLOWSHIP_MANAGER')),
                           headers=student_headers).status_code == 422

    def test_own_requests(self, client, student_headers):
        client.post(EDITS_URL, json=edit_request(('hostelName', 'A')), headers=student_headers)
        mine = client.get(f'{EDITS_URL}/me', headers=student_headers).json()
        assert len(mine) == 1


class TestReview:
    @pytest.fixture
    def pending(self, client, student_headers):
        resp = client.post(EDITS_URL, json=edit_request(('initialYearOfStudy', '4')), headers=student_headers)
        return resp.json()

    def test_listing_is_manager_only(self, client, pending, student_headers, manager_headers):
        assert client.get(EDITS_URL, headers=student_headers).status_code == 403
        listed = client.get(EDITS_URL, headers=manager_headers).json()
        assert [r['id'] for r in listed] == [pending['id']]
        assert client.get(EDITS_URL, params={'status': 'APPROVED'}, headers=manager_headers).json() == []
        assert len(client.get(EDITS_URL, params={'status': 'ALL'}, headers=manager_headers).json()) == 1

    def test_approval_applies_changes_and_reconciles(self, client, db, student, pending, manager, manager_headers):
        resp = client.patch(f"{EDITS_URL}/{pending['id']}", json={'status': 'APPROVED', 'reviewNote': 'Confirmed'},
                            headers=manager_headers)
        assert resp.status_code == 200
        assert resp.json()['status'] == 'APPROVED'
        assert resp.json()['reviewedBy'] == manager.id

        db.refresh(student)
        assert student.initial_year_of_study == 4
        assert TagService(db).active_tag_names(student.id) == ['FINALIST']
        assert db.query(EmailQueue).filter_by(email=student.email).count() == 1

    def test_rejection_leaves_profile_alone(self, client, db, student, pending, manager_headers):
        resp = client.patch(f"{EDITS_URL}/{pending['id']}", json={'status': 'REJECTED', 'reviewNote': 'Not yet'},
                            headers=manager_headers)
        assert resp.json()['status'] == 'REJECTED'
        assert resp.json()['reviewNote'] == 'Not yet'

        db.refresh(student)
        assert student.initial_year_of_study == 2
        assert db.query(EmailQueue).filter_by(email=student.email).count() == 1

    def test_reviewed_only_once(self, client, pending, manager_headers):
        client.patch(f"{EDITS_URL}/{pending['id']}", json={'status': 'REJECTED'}, headers=manager_headers)
        resp = client.patch(f"{EDITS_URL}/{pending['id']}", json={'status': 'APPROVED'}, headers=manager_headers)
        assert resp.status_code == 409

    def test_managers_cannot_review_their_own(self, client, db, manager, manager_headers):
        client.post(EDITS_URL, json=edit_request(('hostelName', 'Office')), headers=manager_headers)
        request = db.query(ProfileEditRequest).filter_by(member_id=manager.id).one()
        resp = client.patch(f'{EDITS_URL}/{request.id}', json={'status': 'APPROVED'}, headers=manager_headers)
        assert resp.status_code == 403
        db.refresh(request)
        assert request.status == EditRequestStatus.pending

    def test_unknown_request(self, client, manager_headers):
        assert client.patch(f'{EDITS_URL}/999', json={'status': 'APPROVED'}, headers=manager_headers).status_code == 404

    def test_unknown_course_on_approval(self, client, db, student, student_headers, manager_headers):
        client.post(EDITS_URL, json=edit_request(('courseId', '999')), headers=student_headers)
        request = db.query(ProfileEditRequest).filter_by(member_id=student.id).one()
        resp = client.patch(f'{EDITS_URL}/{request.id}', json={'status': 'APPROVED'}, headers=manager_headers)
        assert resp.status_code == 404
