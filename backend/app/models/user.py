from sqlalchemy import Column, Integer, String, DateTime
from app.db.base_class import Base
from datetime import datetime

class User(Base):
    # Owned by the account service; read here for ownership checks and sharer display
    __tablename__ = "sys_user"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    profile_image = Column(String(512), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
