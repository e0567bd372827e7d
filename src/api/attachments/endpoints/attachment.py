from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response
from src.api.attachments.schemas.attachment import AttachmentCreate, AttachmentRead
from src.api.attachments.services.attachment_service import AttachmentService
from src.api.common.errors import NotFoundError
from src.api.storage.dependencies import get_gateway
from src.api.storage.gateway import PersistenceGateway

router = APIRouter(tags=["attachments"])


def get_attachment_service(gateway: PersistenceGateway = Depends(get_gateway)):
    return AttachmentService(gateway)


@router.post("/claims/{claim_id}/attachments", response_model=AttachmentRead)
def upload_attachment(
    claim_id: str,
    attachment_data: AttachmentCreate,
    attachment_service: AttachmentService = Depends(get_attachment_service)
):
    """Upload a base64 encoded file against a claim"""
    try:
        attachment = attachment_service.upload_attachment(claim_id, attachment_data)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Claim not found")
    return AttachmentRead.model_validate(attachment)


@router.get("/claims/{claim_id}/attachments", response_model=List[AttachmentRead])
def get_attachments(
    claim_id: str,
    attachment_service: AttachmentService = Depends(get_attachment_service)
):
    """List the attachments of a claim"""
    try:
        attachments = attachment_service.get_attachments(claim_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Claim not found")
    return [AttachmentRead.model_validate(a) for a in attachments]


@router.get("/attachments/{attachment_id}")
def download_attachment(
    attachment_id: str,
    attachment_service: AttachmentService = Depends(get_attachment_service)
):
    """Download the raw content of an attachment"""
    try:
        attachment = attachment_service.get_attachment(attachment_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Attachment not found")
    return Response(
        content=attachment.content,
        media_type=attachment.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{attachment.file_name}"'},
    )


@router.delete("/attachments/{attachment_id}")
def delete_attachment(
    attachment_id: str,
    attachment_service: AttachmentService = Depends(get_attachment_service)
):
    """Delete an attachment"""
    try:
        attachment_service.delete_attachment(attachment_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Attachment not found")
    return {"message": "Attachment deleted successfully"}
