from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from archivo.schemas.ids import DbId


class MemoryCreate(BaseModel):
    title: str
    content: str
    memory_date: Optional[datetime] = None
    media_id: Optional[DbId] = None


class MemoryOut(BaseModel):
    id: int
    user_id: int
    title: str
    content: str
    memory_date: Optional[datetime] = None
    media_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
