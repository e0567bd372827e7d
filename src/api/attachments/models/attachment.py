from typing import Optional
from sqlalchemy import Column, LargeBinary
from sqlmodel import Field
from src.api.common.models.base import BaseModel, TimestampMixin, generate_id


class Attachment(BaseModel, TimestampMixin, table=True):
    """
    Supporting file stored against a claim.
    Removed together with its claim; backup imports leave these rows alone.
    """
    id: str = Field(default_factory=generate_id, primary_key=True)
    claim_id: str = Field(index=True)

    file_name: str
    mime_type: str = "application/octet-stream"
    size: int = 0
    content: Optional[bytes] = Field(default=None, sa_column=Column(LargeBinary))

    class Config:
        from_attributes = True
