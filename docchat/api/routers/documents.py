"""
Document API endpoints.

Routes:
- POST /documents - Upload a document (multipart)
- GET /documents - List the caller's documents, newest first
- GET /documents/{doc_id} - Fetch one document
- DELETE /documents/{doc_id} - Delete bytes and metadata
- DELETE /documents/{doc_id}/metadata - Retry metadata removal after a partial delete

Dependencies: docchat.application.services, docchat.boundary.storage_gateway, docchat.models
System role: Document HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from fastapi.responses import JSONResponse

from docchat.api.deps import get_current_user_id, get_ingestion_coordinator, get_storage_gateway
from docchat.application.services.ingestion_service import IngestionCoordinator
from docchat.boundary.storage_gateway import StorageGateway
from docchat.core.exceptions import (
    DeleteFailed,
    DocumentNotFoundError,
    MetadataUnavailable,
)
from docchat.core.validation_policy import RejectionReason
from docchat.models.document import (
    DeleteErrorResponse,
    DocumentListResponse,
    DocumentResponse,
    UploadResponse,
)
from docchat.models.upload import IngestionResult, UploadOutcome

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])

_OUTCOME_STATUS = {
    UploadOutcome.ACCEPTED: 201,
    UploadOutcome.FAILED_STORAGE: 503,
    UploadOutcome.FAILED_METADATA: 502,
}

_REJECTION_STATUS = {
    RejectionReason.UNSUPPORTED_TYPE.value: 415,
    RejectionReason.TOO_LARGE.value: 413,
}


def _upload_status(result: IngestionResult) -> int:
    if result.outcome is UploadOutcome.REJECTED_VALIDATION:
        return _REJECTION_STATUS.get(result.reason, 400)
    return _OUTCOME_STATUS[result.outcome]


def _upload_response(result: IngestionResult) -> JSONResponse:
    body = UploadResponse(
        outcome=result.outcome.value,
        message=result.message,
        reason=result.reason,
        document=DocumentResponse.from_document(result.document) if result.document else None,
    )
    return JSONResponse(status_code=_upload_status(result), content=body.model_dump(mode="json"))


@router.post(
    "",
    response_model=UploadResponse,
    status_code=201,
    responses={413: {"model": UploadResponse}, 415: {"model": UploadResponse}},
)
async def upload_document(
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user_id),
    coordinator: IngestionCoordinator = Depends(get_ingestion_coordinator),
):
    """
    Upload one document.

    Oversized uploads are refused from the declared part size before the
    body is read.

    Args:
        file: Multipart file part; its content type is the declared media type
        user_id: Authenticated user identity
        coordinator: Injected IngestionCoordinator

    Returns:
        UploadResponse: Terminal outcome of the upload; the document on acceptance

    Raises:
        HTTPException(400): File part has no name
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="Uploaded file has no name")

    if file.size is not None:
        rejection = coordinator.precheck(user_id, file.filename, file.content_type, file.size)
        if rejection is not None:
            return _upload_response(rejection)

    # Never buffer more than one byte past the ceiling; ingest rejects the excess
    data = await file.read(coordinator.policy.max_bytes + 1)
    result = await coordinator.ingest(
        owner_id=user_id,
        file_name=file.filename,
        media_type=file.content_type,
        data=data,
    )
    return _upload_response(result)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    user_id: str = Depends(get_current_user_id),
    gateway: StorageGateway = Depends(get_storage_gateway),
) -> DocumentListResponse:
    """
    List the caller's documents, newest first.

    Raises:
        HTTPException(503): Metadata store unavailable
    """
    try:
        documents = await gateway.list_by_owner(user_id)
    except MetadataUnavailable as e:
        logger.error("Failed to list documents", extra={"owner_id": user_id, "error": str(e)})
        raise HTTPException(status_code=503, detail="Document list is temporarily unavailable")

    return DocumentListResponse(
        documents=[DocumentResponse.from_document(d) for d in documents],
        total=len(documents),
    )


@router.get("/{doc_id}", response_model=DocumentResponse)
async def get_document(
    doc_id: UUID,
    user_id: str = Depends(get_current_user_id),
    gateway: StorageGateway = Depends(get_storage_gateway),
) -> DocumentResponse:
    """
    Fetch one of the caller's documents.

    Raises:
        HTTPException(404): Document not found for this user
        HTTPException(503): Metadata store unavailable
    """
    try:
        document = await gateway.get_for_owner(user_id, doc_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found")
    except MetadataUnavailable:
        raise HTTPException(status_code=503, detail="Document store is temporarily unavailable")
    return DocumentResponse.from_document(document)


@router.delete(
    "/{doc_id}",
    status_code=204,
    responses={502: {"model": DeleteErrorResponse}},
)
async def delete_document(
    doc_id: UUID,
    user_id: str = Depends(get_current_user_id),
    gateway: StorageGateway = Depends(get_storage_gateway),
):
    """
    Delete a document's bytes, then its metadata.

    A 502 body with partial=true means the bytes are gone but the metadata
    row remains; retry with DELETE /documents/{doc_id}/metadata.

    Raises:
        HTTPException(404): Document not found for this user
        HTTPException(503): Metadata store unavailable
    """
    try:
        document = await gateway.get_for_owner(user_id, doc_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found")
    except MetadataUnavailable:
        raise HTTPException(status_code=503, detail="Document store is temporarily unavailable")

    try:
        await gateway.delete_pair(document)
    except DeleteFailed as e:
        logger.error(
            "Document deletion failed",
            extra={"owner_id": user_id, "document_id": str(doc_id), "partial": e.partial},
        )
        body = DeleteErrorResponse(detail=e.message, kind=e.kind, partial=e.partial)
        return JSONResponse(status_code=502, content=body.model_dump())

    logger.info("Document deleted", extra={"owner_id": user_id, "document_id": str(doc_id)})
    return Response(status_code=204)


@router.delete(
    "/{doc_id}/metadata",
    status_code=204,
    responses={502: {"model": DeleteErrorResponse}},
)
async def delete_document_metadata(
    doc_id: UUID,
    user_id: str = Depends(get_current_user_id),
    gateway: StorageGateway = Depends(get_storage_gateway),
):
    """
    Remove only the metadata row of a document whose bytes are already gone.

    Raises:
        HTTPException(404): Document not found for this user
        HTTPException(503): Metadata store unavailable
    """
    try:
        await gateway.get_for_owner(user_id, doc_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found")
    except MetadataUnavailable:
        raise HTTPException(status_code=503, detail="Document store is temporarily unavailable")

    try:
        await gateway.delete_metadata(doc_id)
    except DeleteFailed as e:
        body = DeleteErrorResponse(detail=e.message, kind=e.kind, partial=e.partial)
        return JSONResponse(status_code=502, content=body.model_dump())
    return Response(status_code=204)
