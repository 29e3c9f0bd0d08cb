from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

from archivo.schemas.ids import DbId
from archivo.schemas.media_schema import MediaItemOut
from archivo.schemas.user_schema import UserSummary


# ------------------------------------------------------
# CREATE ALBUM
# ------------------------------------------------------
class AlbumCreate(BaseModel):
    name: str
    description: Optional[str] = None
    is_shared: bool = False


# ------------------------------------------------------
# MEMBERS
# ------------------------------------------------------
class AlbumMemberCreate(BaseModel):
    user_id: DbId
    can_edit: bool = False


class AlbumMemberOut(BaseModel):
    id: int
    album_id: int
    user_id: int
    can_edit: bool
    user: Optional[UserSummary] = None

    model_config = {"from_attributes": True}


# ------------------------------------------------------
# FULL ALBUM OUTPUT
# ------------------------------------------------------
class AlbumOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    created_by: int
    is_shared: bool
    created_at: Optional[datetime] = None

    members: List[AlbumMemberOut] = []
    media_items: List[MediaItemOut] = []

    model_config = {"from_attributes": True}
