import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, selectinload

from archivo.auth import get_current_user
from archivo.core.errors import Forbidden, NotFound, ValidationError
from archivo.database import get_db
from archivo.models.album import Album
from archivo.models.album_member import AlbumMember
from archivo.models.media import MediaItem
from archivo.models.user import User
from archivo.schemas.ids import IdPath
from archivo.schemas.album_schema import (
    AlbumCreate,
    AlbumMemberCreate,
    AlbumMemberOut,
    AlbumOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/albums", tags=["Albums"])


# ============================================================
# HELPERS
# ============================================================

def _get_album(db: Session, album_id: int) -> Album:
    album = db.query(Album).filter(Album.id == album_id).first()
    if not album:
        raise NotFound("Album not found")
    return album


def _require_creator(album: Album, user_id: int, action: str):
    if album.created_by != user_id:
        raise Forbidden(f"Not authorized to {action}")


def can_edit_album(db: Session, album: Album, user_id: int) -> bool:
    """Creator, or a member holding edit rights."""
    if album.created_by == user_id:
        return True

    member = (
        db.query(AlbumMember)
        .filter(
            AlbumMember.album_id == album.id,
            AlbumMember.user_id == user_id,
            AlbumMember.can_edit == True,  # noqa: E712
        )
        .first()
    )
    return member is not None


def _album_query(db: Session):
    return db.query(Album).options(
        selectinload(Album.members).joinedload(AlbumMember.user),
        selectinload(Album.media_items),
    )


# ============================================================
# MY ALBUMS (created + shared with me)
# ============================================================
@router.get("", response_model=list[AlbumOut])
def list_albums(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    created = (
        _album_query(db)
        .filter(Album.created_by == current_user.id)
        .order_by(Album.created_at.desc())
        .all()
    )

    shared = (
        _album_query(db)
        .join(AlbumMember, AlbumMember.album_id == Album.id)
        .filter(AlbumMember.user_id == current_user.id)
        .order_by(Album.created_at.desc())
        .all()
    )

    seen = set()
    albums = []
    for album in created + shared:
        if album.id in seen:
            continue
        seen.add(album.id)
        albums.append(album)
    return albums


# ============================================================
# CREATE
# ============================================================
@router.post("", response_model=AlbumOut)
def create_album(
    payload: AlbumCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    name = payload.name.strip()
    if not name:
        raise ValidationError("Album name cannot be empty")

    album = Album(
        name=name,
        description=payload.description,
        created_by=current_user.id,
        is_shared=payload.is_shared,
    )

    db.add(album)
    db.commit()
    db.refresh(album)

    logger.info("User %s created album %s", current_user.id, album.id)
    return album


# ============================================================
# MEMBERS (creator only)
# ============================================================
@router.post("/{album_id}/members", response_model=AlbumMemberOut)
def add_album_member(
    album_id: IdPath,
    payload: AlbumMemberCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    album = _get_album(db, album_id)
    _require_creator(album, current_user.id, "add members to this album")

    if payload.user_id == album.created_by:
        raise ValidationError("The album creator is already a member")

    if not db.query(User).filter(User.id == payload.user_id).first():
        raise ValidationError("User does not exist")

    existing = (
        db.query(AlbumMember)
        .filter(AlbumMember.album_id == album_id, AlbumMember.user_id == payload.user_id)
        .first()
    )
    if existing:
        raise ValidationError("User is already a member of this album")

    member = AlbumMember(
        album_id=album_id,
        user_id=payload.user_id,
        can_edit=payload.can_edit,
    )

    db.add(member)
    db.commit()
    db.refresh(member)
    return member


@router.delete("/{album_id}/members/{user_id}")
def remove_album_member(
    album_id: IdPath,
    user_id: IdPath,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    album = _get_album(db, album_id)
    _require_creator(album, current_user.id, "remove members from this album")

    (
        db.query(AlbumMember)
        .filter(AlbumMember.album_id == album_id, AlbumMember.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()

    return {"message": "Member removed successfully"}


# ============================================================
# MEDIA (creator or editors)
# ============================================================
@router.post("/{album_id}/media/{media_id}")
def add_media_to_album(
    album_id: IdPath,
    media_id: IdPath,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    album = _get_album(db, album_id)
    if not can_edit_album(db, album, current_user.id):
        raise Forbidden("Not authorized to add media to this album")

    # Only your own uploads can be filed into an album
    item = (
        db.query(MediaItem)
        .filter(MediaItem.id == media_id, MediaItem.user_id == current_user.id)
        .first()
    )
    if not item:
        raise NotFound("Media item not found or unauthorized")

    item.album_id = album_id
    db.commit()

    return {"message": "Media added to album successfully"}


@router.delete("/{album_id}/media/{media_id}")
def remove_media_from_album(
    album_id: IdPath,
    media_id: IdPath,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    album = _get_album(db, album_id)
    if not can_edit_album(db, album, current_user.id):
        raise Forbidden("Not authorized to remove media from this album")

    item = (
        db.query(MediaItem)
        .filter(MediaItem.id == media_id, MediaItem.album_id == album_id)
        .first()
    )
    if not item:
        raise NotFound("Media item not found in this album")

    item.album_id = None
    db.commit()

    return {"message": "Media removed from album successfully"}


# ============================================================
# DELETE ALBUM (creator only)
# ============================================================
@router.delete("/{album_id}")
def delete_album(
    album_id: IdPath,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    album = _get_album(db, album_id)
    _require_creator(album, current_user.id, "delete this album")

    # Media outlives the album
    (
        db.query(MediaItem)
        .filter(MediaItem.album_id == album_id)
        .update({MediaItem.album_id: None}, synchronize_session=False)
    )

    db.delete(album)
    db.commit()

    logger.info("User %s deleted album %s", current_user.id, album_id)
    return {"message": "Album deleted successfully"}
