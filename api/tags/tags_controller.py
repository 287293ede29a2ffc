# api/tags/tags_controller.py

from typing import List

from sqlalchemy.orm import Session

from api.tags.tags_service import TagService
from api.tags.tags_schema import (
    TagCreate,
    TagOut,
    TagWithCount,
    TagAssign,
    BulkTagRequest,
    BulkAssignResult,
    BulkRemoveResult,
    MemberTagOut,
    TaggedMemberOut,
)


class TagController:
    @staticmethod
    def list_tags(db: Session) -> List[TagWithCount]:
        return [TagWithCount.model_validate(t) for t in TagService(db).list_tags()]

    @staticmethod
    def create_tag(payload: TagCreate, db: Session, actor_id: int) -> TagOut:
        return TagOut.model_validate(TagService(db).create_tag(payload, actor_id))

    @staticmethod
    def members_with_tag(tag_id: int, db: Session) -> List[TaggedMemberOut]:
        rows = TagService(db).members_with_tag(tag_id)
        return [
            TaggedMemberOut.model_validate({
                "assignment_id": r.id,
                "assigned_at": r.assigned_at,
                "expires_at": r.expires_at,
                "notes": r.notes,
                "member": r.member,
            })
            for r in rows
        ]

    @staticmethod
    def assign(member_id: int, payload: TagAssign, db: Session, actor_id: int) -> MemberTagOut:
        row = TagService(db).assign_tag(member_id, payload.tag_id, actor_id, payload.notes)
        return MemberTagOut.model_validate(row)

    @staticmethod
    def bulk_assign(payload: BulkTagRequest, db: Session, actor_id: int) -> BulkAssignResult:
        result = TagService(db).bulk_assign(payload.member_ids, payload.tag_id, actor_id, payload.notes)
        return BulkAssignResult.model_validate(result)

    @staticmethod
    def bulk_remove(payload: BulkTagRequest, db: Session, actor_id: int) -> BulkRemoveResult:
        result = TagService(db).bulk_remove(payload.member_ids, payload.tag_id, actor_id, payload.notes)
        return BulkRemoveResult.model_validate(result)

    @staticmethod
    def history(member_id: int, db: Session) -> List[MemberTagOut]:
        return [MemberTagOut.model_validate(r) for r in TagService(db).member_history(member_id)]
