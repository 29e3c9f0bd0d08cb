from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from archivo.database import Base


class MediaItem(Base):
    __tablename__ = "media_items"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    album_id = Column(
        Integer,
        ForeignKey("albums.id", ondelete="SET NULL"),
        nullable=True
    )

    # photo / video / audio / document / post
    type = Column(String, nullable=False)

    title = Column(String, nullable=True)
    description = Column(Text, nullable=True)

    # Empty for posts without an attachment
    url = Column(String, nullable=False, default="")

    # Post-only fields
    website_url = Column(String, nullable=True)
    content = Column(Text, nullable=True)

    # originalName / size / mimetype of the upload
    file_metadata = Column("metadata", JSON, nullable=True)

    media_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # -------------------------
    # RELATIONSHIPS
    # -------------------------

    user = relationship("User", back_populates="media_items")

    album = relationship("Album", back_populates="media_items")

    tags = relationship(
        "MediaTag",
        back_populates="media_item",
        cascade="all, delete-orphan",
    )
