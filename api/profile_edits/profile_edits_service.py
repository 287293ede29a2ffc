# api/profile_edits/profile_edits_service.py

import logging
from typing import List, Optional

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from utils.time_utils import Clock, system_clock
from utils.database_utils import DatabaseUtils, get_member_or_404
from helpers.mail_helper import queue_profile_edit_decision_email
from api.members.members_schema import MemberUpdate
from api.members.members_service import MemberService
from api.profile_edits.profile_edit_requests_model import ProfileEditRequest, EditRequestStatus
from api.profile_edits.profile_edits_schema import EditableField

logger = logging.getLogger(__name__)

# stored as integers on the member, submitted as strings
INTEGER_FIELDS = {
    EditableField.course_id,
    EditableField.initial_year_of_study,
    EditableField.initial_semester,
    EditableField.residence_id,
}


def _current_value(member, field: EditableField) -> str:
    value = getattr(member, field.name)
    return "" if value is None else str(value)


class ProfileEditService:
    """
    Members ask for changes to their own profile; a fellowship manager
    approves or rejects them. Approved changes go through the same update
    path as a manager edit, so academic changes reconcile tags.
    """

    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock

    def submit(self, member_id: int, data) -> ProfileEditRequest:
        member = get_member_or_404(self.db, member_id)
        if DatabaseUtils.exists(self.db, ProfileEditRequest, member_id=member.id, status=EditRequestStatus.pending):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="You already have a pending edit request. Wait for it to be reviewed before submitting another.",
            )

        changes = []
        for change in data.changes:
            old_value = _current_value(member, change.field)
            new_value = change.new_value.strip()
            if old_value != new_value:
                changes.append({"field": change.field.value, "old_value": old_value, "new_value": new_value})
        if not changes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No actual changes detected. The new values are the same as the current values.",
            )
        self._as_update(changes)

        request = ProfileEditRequest(member_id=member.id, changes=changes, reason=data.reason.strip())
        self.db.add(request)
        self.db.commit()
        self.db.refresh(request)
        logger.info(f"Edit request {request.id} submitted by {member.fellowship_number}")
        return request

    def list_requests(self, status_filter: Optional[EditRequestStatus] = EditRequestStatus.pending) -> List[ProfileEditRequest]:
        query = self.db.query(ProfileEditRequest)
        if status_filter:
            query = query.filter(ProfileEditRequest.status == status_filter)
        return query.order_by(ProfileEditRequest.created_at.desc(), ProfileEditRequest.id.desc()).all()

    def list_for_member(self, member_id: int) -> List[ProfileEditRequest]:
        return (
            self.db.query(ProfileEditRequest)
            .filter(ProfileEditRequest.member_id == member_id)
            .order_by(ProfileEditRequest.id.desc())
            .all()
        )

    @staticmethod
    def _as_update(changes: List[dict]) -> MemberUpdate:
        fields = {}
        for change in changes:
            field = EditableField(change["field"])
            value = change["new_value"]
            if field in INTEGER_FIELDS:
                try:
                    value = int(value)
                except ValueError:
                    raise HTTPException(status_code=400, detail=f"{field.value} must be a whole number")
            fields[field.name] = value
        try:
            return MemberUpdate.model_validate(fields)
        except ValidationError as e:
            first = e.errors()[0]
            raise HTTPException(status_code=400, detail=f"Invalid value for {first['loc'][0]}: {first['msg']}")

    def review(self, request_id: int, reviewer_id: int, data) -> ProfileEditRequest:
        request = DatabaseUtils.get_or_404(self.db, ProfileEditRequest, detail="Edit request not found", id=request_id)
        if request.status != EditRequestStatus.pending:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"This request has already been {request.status.value.lower()}",
            )
        if request.member_id == reviewer_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You cannot review your own edit request")

        member = get_member_or_404(self.db, request.member_id)
        decision = EditRequestStatus(data.status)
        update = self._as_update(request.changes) if decision == EditRequestStatus.approved else None

        request.status = decision
        request.reviewed_by = reviewer_id
        request.reviewed_at = self.clock.now()
        request.review_note = data.review_note
        queue_profile_edit_decision_email(
            self.db, member.email, member.full_name, decision.value, request.changes, data.review_note
        )

        if update is not None:
            # commits the request and the decision email with the member update
            MemberService(self.db, self.clock).update_member(member.id, update, reviewer_id)
        else:
            self.db.commit()
        self.db.refresh(request)
        logger.info(f"Edit request {request.id} {decision.value} by member {reviewer_id}")
        return request
