"""
Database utilities and common operations to reduce code duplication
"""
from typing import Type, TypeVar, List, Any, Dict
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

T = TypeVar('T')


class DatabaseUtils:
    """Utility class for common database operations"""

    @staticmethod
    def get_or_404(db: Session, model_class: Type[T], detail: str = None, **filters) -> T:
        """
        Get a single object by filters or raise 404 error

        Raises:
            HTTPException: 404 if object not found
        """
        obj = db.query(model_class).filter_by(**filters).first()
        if not obj:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=detail or f"{model_class.__name__} not found"
            )
        return obj

    @staticmethod
    def paginate_query(
        query,
        page: int = 1,
        per_page: int = 50,
        max_per_page: int = 200
    ) -> Dict[str, Any]:
        """
        Paginate a SQLAlchemy query

        Returns:
            Dictionary with pagination info and items
        """
        # Limit per_page to prevent abuse
        per_page = min(per_page, max_per_page)
        offset = (page - 1) * per_page

        total = query.count()
        items = query.offset(offset).limit(per_page).all()

        return {
            'items': items,
            'page': page,
            'per_page': per_page,
            'total': total,
            'has_next': offset + len(items) < total,
            'has_prev': page > 1
        }

    @staticmethod
    def exists(db: Session, model_class: Type[T], **filters) -> bool:
        """Check if object exists with given filters"""
        return db.query(
            db.query(model_class).filter_by(**filters).exists()
        ).scalar()


def get_member_or_404(db: Session, member_id: int):
    """Get a non-deleted member by ID or raise 404"""
    from api.members.members_model import Member
    return DatabaseUtils.get_or_404(db, Member, detail="Member not found", id=member_id, is_deleted=False)
