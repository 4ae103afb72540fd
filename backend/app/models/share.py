from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.db.base_class import Base
from datetime import datetime

class ShareLink(Base):
    __tablename__ = "share_link"

    id = Column(Integer, primary_key=True, index=True)
    public_code = Column(String(64), unique=True, index=True, nullable=False)
    record_id = Column(Integer, ForeignKey("meal_record.id", ondelete="CASCADE"), nullable=False, index=True)
    sharer_id = Column(Integer, ForeignKey("sys_user.id"), nullable=False, index=True)

    view_count = Column(Integer, default=0, nullable=False)
    expires_at = Column(DateTime, nullable=True)
    # No unique constraint on (record_id, sharer_id): reuse is lookup-then-create
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    record = relationship("MealRecord")
    sharer = relationship("User")

class ViewEvent(Base):
    __tablename__ = "share_view_event"

    id = Column(Integer, primary_key=True, index=True)
    share_link_id = Column(Integer, ForeignKey("share_link.id", ondelete="CASCADE"), nullable=False, index=True)
    sharer_id = Column(Integer, ForeignKey("sys_user.id"), nullable=False, index=True)
    recipient_id = Column(Integer, ForeignKey("sys_user.id"), nullable=True, index=True) # set on conversion

    session_id = Column(String(255), nullable=False, index=True) # browser-generated, not unique
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(500), nullable=True)

    viewed_at = Column(DateTime, default=datetime.utcnow)
    converted_at = Column(DateTime, nullable=True)
    friend_link_created = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    share_link = relationship("ShareLink")
