from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from archivo.auth import get_current_user
from archivo.core.errors import NotFound
from archivo.database import get_db
from archivo.models.user import User
from archivo.schemas.ids import IdPath
from archivo.schemas.user_schema import UserOut, UserSummary

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=list[UserSummary])
def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return db.query(User).order_by(User.display_name, User.id).all()


@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: IdPath,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user
