from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship

from archivo.database import Base


class FamilyRelation(Base):
    """
    One declared relationship between two users.

    Directed: relation_type is what *to_user* is to *from_user*
    ("A --parent--> B" reads "A's parent is B"). The inverse is
    derived on read and never stored.
    """

    __tablename__ = "family_relations"

    id = Column(Integer, primary_key=True, index=True)

    from_user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    to_user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # parent, child, sibling, spouse, grandparent, grandchild,
    # aunt/uncle, niece/nephew, cousin
    relation_type = Column(String, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    from_user = relationship("User", foreign_keys=[from_user_id])
    to_user = relationship("User", foreign_keys=[to_user_id])

    __table_args__ = (
        CheckConstraint(
            "from_user_id != to_user_id",
            name="ck_family_relations_not_self",
        ),
        Index(
            "ix_family_relations_pair",
            "from_user_id",
            "to_user_id",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<FamilyRelation {self.id}: "
            f"{self.from_user_id} --{self.relation_type}--> {self.to_user_id}>"
        )
