from sqlalchemy import Column, Integer, String, ForeignKey, Text, DateTime, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
from archivo.database import Base


class Album(Base):
    __tablename__ = "albums"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_shared = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # --------------------------------------------------
    # Relationships
    # --------------------------------------------------

    creator = relationship("User", foreign_keys=[created_by])

    members = relationship(
        "AlbumMember",
        back_populates="album",
        cascade="all, delete-orphan",
    )

    # Media survives album deletion, it just loses its album_id
    media_items = relationship(
        "MediaItem",
        back_populates="album",
        passive_deletes=True,
    )
