from datetime import datetime
from pydantic import BaseModel, ConfigDict, field_validator


class AttachmentBase(BaseModel):
    """Base schema for attachment data"""
    file_name: str
    mime_type: str = "application/octet-stream"

    model_config = ConfigDict(from_attributes=True)

    @field_validator('file_name')
    def validate_file_name(cls, v):
        """Validate that the file name is not empty"""
        if not v or not v.strip():
            raise ValueError("File name cannot be empty")
        return v


class AttachmentCreate(AttachmentBase):
    """Schema for uploading an attachment; content is base64 encoded"""
    content: str


class AttachmentRead(AttachmentBase):
    """Attachment metadata, without the binary content"""
    id: str
    claim_id: str
    size: int
    created_at: datetime
