import base64
import binascii
from typing import List, Optional
from fastapi.logger import logger
from src.api.attachments.models.attachment import Attachment
from src.api.attachments.schemas.attachment import AttachmentCreate
from src.api.common.config import get_config
from src.api.common.errors import NotFoundError, ValidationFailedError
from src.api.storage.gateway import PersistenceGateway


class AttachmentService:
    def __init__(self, gateway: PersistenceGateway, max_size: Optional[int] = None):
        self.gateway = gateway
        self.max_size = max_size if max_size is not None else get_config().max_attachment_size

    def upload_attachment(self, claim_id: str, attachment_data: AttachmentCreate) -> Attachment:
        """Store a file against an existing claim"""
        if not self.gateway.get_claim(claim_id):
            raise NotFoundError("Claim", claim_id)

        try:
            content = base64.b64decode(attachment_data.content, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationFailedError(
                f"File {attachment_data.file_name} is not valid base64 content")

        if len(content) > self.max_size:
            raise ValidationFailedError(
                f"File {attachment_data.file_name} is too large "
                f"(max {self.max_size // (1024 * 1024)}MB)",
                {"size": len(content), "max_size": self.max_size})

        attachment = Attachment(
            claim_id=claim_id,
            file_name=attachment_data.file_name,
            mime_type=attachment_data.mime_type,
            size=len(content),
            content=content,
        )
        self.gateway.save_attachment(attachment)
        logger.info(f"Stored attachment {attachment.file_name} for claim {claim_id}")
        return attachment

    def get_attachments(self, claim_id: str) -> List[Attachment]:
        """Get all attachments for a claim"""
        if not self.gateway.get_claim(claim_id):
            raise NotFoundError("Claim", claim_id)
        return self.gateway.get_attachments_by_claim_id(claim_id)

    def get_attachment(self, attachment_id: str) -> Attachment:
        attachment = self.gateway.get_attachment(attachment_id)
        if not attachment:
            raise NotFoundError("Attachment", attachment_id)
        return attachment

    def delete_attachment(self, attachment_id: str) -> None:
        self.get_attachment(attachment_id)
        self.gateway.delete_attachment(attachment_id)
