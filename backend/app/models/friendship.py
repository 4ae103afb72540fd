from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from app.db.base_class import Base
from datetime import datetime

FRIENDSHIP_PENDING = "pending"
FRIENDSHIP_ACCEPTED = "accepted"

class Friendship(Base):
    # Directed edge; an accepted friendship is stored as two rows
    __tablename__ = "friendship"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("sys_user.id"), nullable=False, index=True)
    friend_id = Column(Integer, ForeignKey("sys_user.id"), nullable=False, index=True)
    status = Column(String(16), default=FRIENDSHIP_PENDING, nullable=False)
    notification_enabled = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
