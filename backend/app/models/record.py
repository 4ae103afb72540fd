from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship
from app.db.base_class import Base
from datetime import datetime

class MealRecord(Base):
    __tablename__ = "meal_record"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("sys_user.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    photos = Column(JSON, nullable=True) # list of relative or absolute URLs
    location = Column(String(255), nullable=True)
    rating = Column(Integer, nullable=True)
    memo = Column(String(200), nullable=True)
    price = Column(Numeric(10, 2), nullable=True)
    category = Column(String(32), default="restaurant") # home / delivery / restaurant

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User")
