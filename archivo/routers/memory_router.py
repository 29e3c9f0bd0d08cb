from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from archivo.auth import get_current_user
from archivo.core.errors import Forbidden, NotFound, ValidationError
from archivo.database import get_db
from archivo.models.media import MediaItem
from archivo.models.memory import Memory
from archivo.models.user import User
from archivo.schemas.ids import IdPath
from archivo.schemas.memory_schema import MemoryCreate, MemoryOut

router = APIRouter(prefix="/api/memories", tags=["Memories"])


# --------------------------------------------------
# A USER'S MEMORIES (newest first)
# --------------------------------------------------
@router.get("/{user_id}", response_model=list[MemoryOut])
def list_memories(
    user_id: IdPath,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not db.query(User).filter(User.id == user_id).first():
        raise NotFound("User not found")

    return (
        db.query(Memory)
        .filter(Memory.user_id == user_id)
        .order_by(Memory.created_at.desc(), Memory.id.desc())
        .all()
    )


# --------------------------------------------------
# WRITE A MEMORY
# --------------------------------------------------
@router.post("", response_model=MemoryOut)
def create_memory(
    payload: MemoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    title = payload.title.strip()
    content = payload.content.strip()
    if not title or not content:
        raise ValidationError("Title and content are required")

    if payload.media_id is not None:
        if not db.query(MediaItem).filter(MediaItem.id == payload.media_id).first():
            raise ValidationError("Media item does not exist")

    memory = Memory(
        user_id=current_user.id,
        title=title,
        content=content,
        memory_date=payload.memory_date,
        media_id=payload.media_id,
    )

    db.add(memory)
    db.commit()
    db.refresh(memory)
    return memory


# --------------------------------------------------
# DELETE (author only)
# --------------------------------------------------
@router.delete("/{memory_id}")
def delete_memory(
    memory_id: IdPath,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    memory = db.query(Memory).filter(Memory.id == memory_id).first()
    if not memory:
        raise NotFound("Memory not found")

    if memory.user_id != current_user.id:
        raise Forbidden("Not authorized to delete this memory")

    db.delete(memory)
    db.commit()

    return {"message": "Memory deleted successfully"}
