import uuid
from datetime import datetime
from sqlmodel import Field, SQLModel, DateTime
from sqlalchemy.ext.declarative import declared_attr
from src.api.common.utils.datetime import get_current_datetime


def generate_id() -> str:
    """Return a new random identifier for stored records"""
    return str(uuid.uuid4())


class TimestampMixin:
    """Creation and last-modification times, both timezone aware"""
    created_at: datetime = Field(
        default_factory=get_current_datetime,
        sa_type=DateTime(timezone=True), nullable=False)
    updated_at: datetime = Field(
        default_factory=get_current_datetime,
        sa_type=DateTime(timezone=True), nullable=False)

    def touch(self) -> None:
        """Mark the record as modified now"""
        self.updated_at = get_current_datetime()


class BaseModel(SQLModel):
    """Table base: table names are the lowercased class name (`Claim` -> `claim`)"""
    @declared_attr
    def __tablename__(cls) -> str:
        return cls.__name__.lower()
