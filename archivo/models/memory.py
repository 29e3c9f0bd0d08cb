from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from archivo.database import Base


class Memory(Base):
    __tablename__ = "memories"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)

    # When the remembered thing happened (created_at is when it was written)
    memory_date = Column(DateTime, nullable=True)

    # Optional photo/video the memory is about
    media_id = Column(
        Integer,
        ForeignKey("media_items.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User")
    media_item = relationship("MediaItem")
