import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session, joinedload

from archivo.auth import get_current_user
from archivo.core.errors import Forbidden, NotFound, ValidationError
from archivo.database import get_db
from archivo.models.album import Album
from archivo.models.media import MediaItem
from archivo.models.media_tag import MediaTag
from archivo.models.memory import Memory
from archivo.models.user import User
from archivo.routers.album_router import can_edit_album
from archivo.schemas.ids import IdForm, IdPath, IdQuery
from archivo.schemas.media_schema import (
    MediaItemOut,
    MediaTagCreate,
    MediaTagOut,
    MediaUpdate,
)
from archivo.storage import (
    delete_file,
    file_metadata,
    media_folder,
    save_file,
    validate_file_size,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/media", tags=["Media"])

MEDIA_TYPES = ("photo", "video", "audio", "document", "post")


# ==========================================================
# Helpers
# ==========================================================

def _clean(value: Optional[str]) -> Optional[str]:
    cleaned = (value or "").strip()
    return cleaned or None


def _get_media(db: Session, media_id: int) -> MediaItem:
    item = db.query(MediaItem).filter(MediaItem.id == media_id).first()
    if not item:
        raise NotFound("Media item not found")
    return item


def _get_own_media(db: Session, media_id: int, user_id: int) -> MediaItem:
    item = (
        db.query(MediaItem)
        .filter(MediaItem.id == media_id, MediaItem.user_id == user_id)
        .first()
    )
    if not item:
        raise NotFound("Media item not found or unauthorized")
    return item


def _newest_first(items):
    return sorted(items, key=lambda m: m.created_at or datetime.min, reverse=True)


# ==========================================================
# UPLOAD
# ==========================================================
@router.post("", response_model=MediaItemOut)
def upload_media(
    type: str = Form(...),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    website_url: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    album_id: IdForm = None,
    media_date: Optional[datetime] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    media_type = (type or "").strip().lower()
    if media_type not in MEDIA_TYPES:
        raise ValidationError("Invalid media type")

    # A post may be text only, everything else needs a file
    if file is not None and not file.filename:
        file = None
    if file is None and media_type != "post":
        raise ValidationError("No file uploaded")

    if album_id is not None:
        album = db.query(Album).filter(Album.id == album_id).first()
        if not album:
            raise NotFound("Album not found")
        if not can_edit_album(db, album, current_user.id):
            raise Forbidden("Not authorized to add media to this album")

    url = ""
    metadata = None
    if file is not None:
        ok, message = validate_file_size(file)
        if not ok:
            raise ValidationError(message)

        metadata = file_metadata(file)
        url = save_file(media_folder(current_user.id), file)

    item = MediaItem(
        user_id=current_user.id,
        album_id=album_id,
        type=media_type,
        title=_clean(title),
        description=_clean(description),
        url=url,
        website_url=_clean(website_url) if media_type == "post" else None,
        content=_clean(content) if media_type == "post" else None,
        file_metadata=metadata,
        media_date=media_date or datetime.utcnow(),
    )

    db.add(item)
    db.commit()
    db.refresh(item)

    logger.info("User %s uploaded %s media %s", current_user.id, media_type, item.id)
    return item


# ==========================================================
# LIST (uploaded + tagged)
# ==========================================================
@router.get("", response_model=list[MediaItemOut])
def list_media(
    user_id: IdQuery = None,
    album_id: IdQuery = None,
    uploaded: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    owner_id = user_id or current_user.id

    query = (
        db.query(MediaItem)
        .options(joinedload(MediaItem.tags))
        .filter(MediaItem.user_id == owner_id)
    )
    if album_id is not None:
        query = query.filter(MediaItem.album_id == album_id)

    owned = query.all()
    if uploaded:
        return _newest_first(owned)

    tagged = (
        db.query(MediaItem)
        .join(MediaTag, MediaTag.media_id == MediaItem.id)
        .options(joinedload(MediaItem.tags), joinedload(MediaItem.user))
        .filter(MediaTag.user_id == owner_id)
        .all()
    )

    unique = {item.id: item for item in owned + tagged}
    return _newest_first(unique.values())


@router.get("/tagged", response_model=list[MediaItemOut])
def list_tagged_media(
    user_id: IdQuery = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tagged_user_id = user_id or current_user.id

    items = (
        db.query(MediaItem)
        .join(MediaTag, MediaTag.media_id == MediaItem.id)
        .options(joinedload(MediaItem.user))
        .filter(MediaTag.user_id == tagged_user_id)
        .all()
    )
    return _newest_first(items)


# ==========================================================
# UPDATE / DELETE
# ==========================================================
@router.patch("/{media_id}", response_model=MediaItemOut)
def update_media(
    media_id: IdPath,
    payload: MediaUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = _get_own_media(db, media_id, current_user.id)

    changes = payload.model_dump(exclude_unset=True)
    if "title" in changes:
        item.title = _clean(changes["title"])
    if "description" in changes:
        item.description = _clean(changes["description"])
    if changes.get("media_date"):
        item.media_date = changes["media_date"]

    db.commit()
    db.refresh(item)
    return item


@router.delete("/{media_id}")
def delete_media(
    media_id: IdPath,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = _get_own_media(db, media_id, current_user.id)
    url = item.url

    # Memories keep their text when the photo goes
    (
        db.query(Memory)
        .filter(Memory.media_id == item.id)
        .update({Memory.media_id: None}, synchronize_session=False)
    )

    # Tags go with the item (delete-orphan)
    db.delete(item)
    db.commit()

    delete_file(url)
    logger.info("User %s deleted media %s", current_user.id, media_id)

    return {"message": "Media deleted successfully"}


# ==========================================================
# TAGS
# ==========================================================
@router.get("/{media_id}/tags", response_model=list[MediaTagOut])
def list_media_tags(
    media_id: IdPath,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _get_media(db, media_id)

    return (
        db.query(MediaTag)
        .options(joinedload(MediaTag.user))
        .filter(MediaTag.media_id == media_id)
        .order_by(MediaTag.id)
        .all()
    )


@router.post("/{media_id}/tags", response_model=MediaTagOut)
def add_media_tag(
    media_id: IdPath,
    payload: MediaTagCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _get_media(db, media_id)

    if not db.query(User).filter(User.id == payload.user_id).first():
        raise ValidationError("Tagged user does not exist")

    existing = (
        db.query(MediaTag)
        .filter(MediaTag.media_id == media_id, MediaTag.user_id == payload.user_id)
        .first()
    )
    if existing:
        raise ValidationError("User already tagged in this media")

    tag = MediaTag(media_id=media_id, user_id=payload.user_id)
    db.add(tag)
    db.commit()
    db.refresh(tag)
    return tag


@router.delete("/{media_id}/tags/{user_id}")
def remove_media_tag(
    media_id: IdPath,
    user_id: IdPath,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = _get_media(db, media_id)

    # The uploader can untag anyone, everyone else only themself
    if current_user.id not in (item.user_id, user_id):
        raise Forbidden("Not authorized to remove this tag")

    (
        db.query(MediaTag)
        .filter(MediaTag.media_id == media_id, MediaTag.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()

    return {"message": "Tag removed successfully"}
