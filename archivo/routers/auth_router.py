import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from archivo.auth import (
    authenticate_user,
    get_current_user,
    hash_password,
    register_user,
    session_token_for,
    validate_password,
)
from archivo.config import settings
from archivo.core import relation_store
from archivo.core.errors import Forbidden, NotAuthenticated
from archivo.database import get_db
from archivo.models.album import Album
from archivo.models.album_member import AlbumMember
from archivo.models.media import MediaItem
from archivo.models.media_tag import MediaTag
from archivo.models.memory import Memory
from archivo.models.user import User
from archivo.schemas.user_schema import (
    AuthResponse,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    ResetPasswordRequest,
    UserOut,
)
from archivo.storage import delete_file

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Authentication"])


def _start_session(response: Response, user: User, message: str) -> dict:
    token = session_token_for(user)

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

    return {
        "message": message,
        "user": user,
        "access_token": token,
        "token_type": "bearer",
    }


# ----------------- REGISTER ------------------

@router.post("/register", response_model=AuthResponse)
def register(payload: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    user = register_user(
        db,
        username=payload.username,
        password=payload.password,
        display_name=payload.display_name,
        email=payload.email,
        date_of_birth=payload.date_of_birth,
    )
    logger.info("Registered user %s (%s)", user.id, user.username)

    return _start_session(response, user, "Registration successful")


# ------------------- LOGIN -------------------

@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = authenticate_user(db, username=payload.username, password=payload.password)

    if not user:
        raise NotAuthenticated("Incorrect username or password")

    return _start_session(response, user, "Login successful")


# ------------------- LOGOUT -------------------

@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"message": "Logout successful"}


# -------------------- ME ---------------------

@router.get("/user", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user


# --------------------Profile edit---------------------

@router.patch("/user/profile", response_model=UserOut)
def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)

    # display_name is required on the model, ignore blanks
    if "display_name" in changes and not (changes["display_name"] or "").strip():
        changes.pop("display_name")

    for field, value in changes.items():
        setattr(current_user, field, value)

    db.commit()
    db.refresh(current_user)
    return current_user


# --------------------Reset Password---------------------

@router.post("/reset-password")
def reset_password(
    payload: ResetPasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # 🔒 only your own account
    if payload.username.strip() != current_user.username:
        raise Forbidden("Not authorized to reset this password")

    validate_password(payload.new_password)

    current_user.hashed_password = hash_password(payload.new_password)
    db.commit()

    return {"message": "Password has been reset successfully"}


# --------------------Delete account---------------------

@router.delete("/user")
def delete_account(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user_id = current_user.id

    relation_store.delete_relations_for_user(db, user_id)

    db.query(MediaTag).filter(MediaTag.user_id == user_id).delete(synchronize_session=False)
    db.query(AlbumMember).filter(AlbumMember.user_id == user_id).delete(synchronize_session=False)
    db.query(Memory).filter(Memory.user_id == user_id).delete(synchronize_session=False)

    # Albums I created: other people's media stays, it just leaves the album
    my_album_ids = [a.id for a in db.query(Album.id).filter(Album.created_by == user_id).all()]
    if my_album_ids:
        (
            db.query(MediaItem)
            .filter(MediaItem.album_id.in_(my_album_ids))
            .update({MediaItem.album_id: None}, synchronize_session=False)
        )
        for album in db.query(Album).filter(Album.id.in_(my_album_ids)).all():
            db.delete(album)

    my_media = db.query(MediaItem).filter(MediaItem.user_id == user_id).all()
    if my_media:
        (
            db.query(Memory)
            .filter(Memory.media_id.in_([m.id for m in my_media]))
            .update({Memory.media_id: None}, synchronize_session=False)
        )

    file_urls = []
    for item in my_media:
        file_urls.append(item.url)
        db.delete(item)

    db.delete(current_user)
    db.commit()

    for url in file_urls:
        delete_file(url)

    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    logger.info("Deleted account %s", user_id)

    return {"message": "Account deleted successfully"}
