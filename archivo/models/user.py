from datetime import datetime

from sqlalchemy import Column, Integer, String, Date, DateTime, Text
from sqlalchemy.orm import relationship

from archivo.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    username = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)

    display_name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    bio = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    media_items = relationship("MediaItem", back_populates="user")
