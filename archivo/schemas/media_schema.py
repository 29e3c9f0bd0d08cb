# archivo/schemas/media_schema.py

from pydantic import AliasChoices, BaseModel, Field, field_serializer
from datetime import datetime
from typing import Optional, List

from archivo.schemas.ids import DbId
from archivo.schemas.user_schema import UserSummary
from archivo.utils.urls import absolute_media_url


# -----------------------------------------------------
# TAG (a user tagged in a media item)
# -----------------------------------------------------
class MediaTagOut(BaseModel):
    id: int
    media_id: int
    user_id: int
    user: Optional[UserSummary] = None

    model_config = {"from_attributes": True}


class MediaTagCreate(BaseModel):
    user_id: DbId


# -----------------------------------------------------
# MEDIA ITEM OUTPUT
# -----------------------------------------------------
class MediaItemOut(BaseModel):
    id: int
    user_id: int
    album_id: Optional[int] = None

    type: str
    title: Optional[str] = None
    description: Optional[str] = None
    url: str

    website_url: Optional[str] = None
    content: Optional[str] = None

    # Column attribute is file_metadata ("metadata" is reserved on models)
    metadata: Optional[dict] = Field(
        default=None,
        validation_alias=AliasChoices("file_metadata", "metadata"),
    )

    media_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    tags: List[MediaTagOut] = []
    user: Optional[UserSummary] = None

    @field_serializer("url")
    def absolutise_url(self, v):
        return absolute_media_url(v) or ""

    model_config = {"from_attributes": True}


# -----------------------------------------------------
# UPDATE MEDIA (title / description / date)
# -----------------------------------------------------
class MediaUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    media_date: Optional[datetime] = None
