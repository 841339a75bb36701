"""SQLModel tables backing the local todo store."""

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from datetime_utils import utc_now


class LocalRecordRow(SQLModel, table=True):
    """A locally known todo; ``seq`` keeps the save order."""

    __tablename__ = "local_todo"

    seq: Optional[int] = Field(default=None, primary_key=True)
    record_id: int = Field(index=True, unique=True)
    text: str
    completed: bool = False
    user_id: int = 1
    created_at: Optional[str] = None
    origin: str = Field(default="remote", index=True)
    saved_at: datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime] = None


class CreationDateRow(SQLModel, table=True):
    """Simulated creation timestamp assigned to a todo id."""

    __tablename__ = "creation_date"

    record_id: int = Field(primary_key=True)
    created_at: str


__all__ = ["CreationDateRow", "LocalRecordRow"]
