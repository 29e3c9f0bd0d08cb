from sqlalchemy import Column, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from archivo.database import Base


class AlbumMember(Base):
    __tablename__ = "album_members"

    id = Column(Integer, primary_key=True)

    album_id = Column(
        Integer,
        ForeignKey("albums.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Editors may add/remove media, only the creator manages members
    can_edit = Column(Boolean, default=False, nullable=False)

    album = relationship("Album", back_populates="members")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("album_id", "user_id", name="uq_album_members_album_user"),
    )
