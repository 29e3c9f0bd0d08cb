from pydantic import BaseModel, EmailStr
from typing import Optional, List, Dict
from datetime import date, datetime

from archivo.schemas.ids import DbId
from archivo.schemas.user_schema import UserSummary


# --------------------------------------------------
# CREATE RELATION
# --------------------------------------------------
class FamilyRelationCreate(BaseModel):
    to_user_id: DbId
    # What to_user is to the source user, e.g. "parent"
    relation_type: str
    # Also create the edges this one implies (siblings share parents, ...)
    inherit_relations: bool = False
    # Act for a relative instead of yourself
    target_user_id: Optional[DbId] = None


# --------------------------------------------------
# RELATION OUT (one edge, viewer-specific label)
# --------------------------------------------------
class FamilyRelationOut(BaseModel):
    id: int
    from_user_id: int
    to_user_id: int
    relation_type: str

    # How the other end relates to the viewer
    label: Optional[str] = None

    from_user: UserSummary
    to_user: UserSummary
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class FamilyRelationCreateOut(FamilyRelationOut):
    derived: List[FamilyRelationOut] = []


# --------------------------------------------------
# CREATE NEW FAMILY MEMBER (+ optional relation)
# --------------------------------------------------
class FamilyMemberCreate(BaseModel):
    username: str
    password: str
    display_name: Optional[str] = None
    email: Optional[EmailStr] = None
    date_of_birth: Optional[date] = None

    relation_type: Optional[str] = None
    inherit_relations: bool = False


class FamilyMemberCreateOut(BaseModel):
    message: str
    user: UserSummary
    relation: Optional[FamilyRelationOut] = None
    derived: List[FamilyRelationOut] = []


# --------------------------------------------------
# TREE PROJECTION
# --------------------------------------------------
class TreeMember(BaseModel):
    id: int
    username: Optional[str] = None
    display_name: Optional[str] = None


class FamilyTreeOut(BaseModel):
    root: TreeMember
    buckets: Dict[str, List[TreeMember]]
    generations: Dict[str, int]
