from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from archivo.database import Base


class MediaTag(Base):
    """A user tagged in a media item."""

    __tablename__ = "media_tags"

    id = Column(Integer, primary_key=True, index=True)

    media_id = Column(
        Integer,
        ForeignKey("media_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    media_item = relationship("MediaItem", back_populates="tags")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("media_id", "user_id", name="uq_media_tags_media_user"),
    )
