from datetime import datetime
from typing import Any, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.record import MealRecord
from app.models.share import ShareLink, ViewEvent


class CRUDShareLink(CRUDBase[ShareLink]):
    def get_by_code(
        self, db: Session, *, public_code: str, active_only: bool = False
    ) -> Optional[ShareLink]:
        query = db.query(ShareLink).filter(ShareLink.public_code == public_code)
        if active_only:
            query = query.filter(ShareLink.is_active.is_(True))
        return query.first()

    def get_active_for_record(
        self, db: Session, *, record_id: int, sharer_id: int
    ) -> Optional[ShareLink]:
        # Duplicates can exist after concurrent first shares; any of them is fine
        now = datetime.utcnow()
        return (
            db.query(ShareLink)
            .filter(
                ShareLink.record_id == record_id,
                ShareLink.sharer_id == sharer_id,
                ShareLink.is_active.is_(True),
                or_(ShareLink.expires_at.is_(None), ShareLink.expires_at > now),
            )
            .order_by(ShareLink.created_at.desc(), ShareLink.id.desc())
            .first()
        )

    def create_for_record(
        self,
        db: Session,
        *,
        record_id: int,
        sharer_id: int,
        public_code: str,
        expires_at: Optional[datetime],
    ) -> ShareLink:
        db_obj = ShareLink(
            public_code=public_code,
            record_id=record_id,
            sharer_id=sharer_id,
            view_count=0,
            expires_at=expires_at,
            is_active=True,
        )
        return self.save(db, db_obj=db_obj)

    def increment_view_count(self, db: Session, *, share_link: ShareLink) -> ShareLink:
        db.query(ShareLink).filter(ShareLink.id == share_link.id).update(
            {ShareLink.view_count: ShareLink.view_count + 1}, synchronize_session=False
        )
        db.commit()
        db.refresh(share_link)
        return share_link

    def deactivate(self, db: Session, *, share_link: ShareLink) -> ShareLink:
        share_link.is_active = False
        return self.save(db, db_obj=share_link)

    def stats_for_sharer(
        self, db: Session, *, sharer_id: int
    ) -> List[Tuple[ShareLink, str, int, int]]:
        """(link, record name, tracked views, conversions) for every active link."""
        rows: List[Any] = (
            db.query(
                ShareLink,
                MealRecord.name,
                func.count(ViewEvent.id),
                func.count(ViewEvent.converted_at),
            )
            .join(MealRecord, MealRecord.id == ShareLink.record_id)
            .outerjoin(ViewEvent, ViewEvent.share_link_id == ShareLink.id)
            .filter(ShareLink.sharer_id == sharer_id, ShareLink.is_active.is_(True))
            .group_by(ShareLink.id, MealRecord.name)
            .order_by(ShareLink.created_at.desc(), ShareLink.id.desc())
            .all()
        )
        return [tuple(row) for row in rows]


class CRUDViewEvent(CRUDBase[ViewEvent]):
    def get_by_session(
        self, db: Session, *, share_link_id: int, session_id: str
    ) -> Optional[ViewEvent]:
        return (
            db.query(ViewEvent)
            .filter(ViewEvent.share_link_id == share_link_id, ViewEvent.session_id == session_id)
            .order_by(ViewEvent.id)
            .first()
        )

    def create_for_view(
        self,
        db: Session,
        *,
        share_link_id: int,
        sharer_id: int,
        session_id: str,
        ip_address: Optional[str],
        user_agent: Optional[str],
    ) -> ViewEvent:
        now = datetime.utcnow()
        db_obj = ViewEvent(
            share_link_id=share_link_id,
            sharer_id=sharer_id,
            session_id=session_id,
            ip_address=ip_address,
            user_agent=user_agent,
            viewed_at=now,
            created_at=now,
        )
        return self.save(db, db_obj=db_obj)

    def touch(self, db: Session, *, event: ViewEvent) -> ViewEvent:
        event.viewed_at = datetime.utcnow()
        return self.save(db, db_obj=event)

    def latest_unattributed(
        self, db: Session, *, sharer_id: int, session_id: Optional[str] = None
    ) -> Optional[ViewEvent]:
        query = db.query(ViewEvent).filter(
            ViewEvent.sharer_id == sharer_id, ViewEvent.recipient_id.is_(None)
        )
        newest_first = (ViewEvent.created_at.desc(), ViewEvent.id.desc())
        if session_id:
            match = query.filter(ViewEvent.session_id == session_id).order_by(*newest_first).first()
            if match is not None:
                return match
        return query.order_by(*newest_first).first()

    def mark_converted(self, db: Session, *, event: ViewEvent, recipient_id: int) -> ViewEvent:
        event.recipient_id = recipient_id
        event.converted_at = datetime.utcnow()
        return self.save(db, db_obj=event)

    def mark_friend_link_created(self, db: Session, *, event: ViewEvent) -> ViewEvent:
        event.friend_link_created = True
        return self.save(db, db_obj=event)


share_link = CRUDShareLink(ShareLink)
view_event = CRUDViewEvent(ViewEvent)
