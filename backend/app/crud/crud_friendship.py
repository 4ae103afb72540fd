from typing import List, Tuple

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.friendship import Friendship, FRIENDSHIP_ACCEPTED


class CRUDFriendship(CRUDBase[Friendship]):
    def get_between(self, db: Session, *, user_id: int, other_id: int) -> List[Friendship]:
        """All edges between the two users, in either direction."""
        return (
            db.query(Friendship)
            .filter(
                or_(
                    and_(Friendship.user_id == user_id, Friendship.friend_id == other_id),
                    and_(Friendship.user_id == other_id, Friendship.friend_id == user_id),
                )
            )
            .all()
        )

    def create_accepted_pair(
        self, db: Session, *, user_id: int, friend_id: int
    ) -> Tuple[Friendship, Friendship]:
        forward = Friendship(
            user_id=user_id, friend_id=friend_id,
            status=FRIENDSHIP_ACCEPTED, notification_enabled=True,
        )
        backward = Friendship(
            user_id=friend_id, friend_id=user_id,
            status=FRIENDSHIP_ACCEPTED, notification_enabled=True,
        )
        # Both rows in one commit
        db.add_all([forward, backward])
        db.commit()
        db.refresh(forward)
        db.refresh(backward)
        return forward, backward


friendship = CRUDFriendship(Friendship)
