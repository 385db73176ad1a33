"""
PackTrack Backend — Packaging Route Handlers
=============================================

What:  HTTP surface of the packaging aggregate.
How:   Handlers parse the request, call PackagingService and wrap the result
       in the success envelope. Errors are raised as PackTrackError
       subclasses and rendered by the handlers in main.py.

Endpoints (prefix /api/v1):
    POST   /packaging                          create item (+ components)   auth
    GET    /packaging                          list items, newest first
    GET    /packaging/{item_id}                one item
    PUT    /packaging/{item_id}                full replacement             auth
    DELETE /packaging/{item_id}                item, documents, files       auth
    POST   /packaging/{item_id}/documents      multipart PDF upload         auth
    DELETE /packaging/documents/{document_id}  one document and its file    auth
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from packtrack.dependencies import get_current_user, get_packaging_service
from packtrack.models.packaging import DocumentType
from packtrack.models.user import User
from packtrack.schemas.common import ApiResponse, ErrorResponse
from packtrack.schemas.packaging import (
    PackagingDocumentResponse,
    PackagingItemCreate,
    PackagingItemResponse,
)
from packtrack.services.packaging_service import PackagingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/packaging", tags=["Packaging"])

_error_responses = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Authentication required", "model": ErrorResponse},
    404: {"description": "Not found", "model": ErrorResponse},
}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[PackagingItemResponse],
    responses=_error_responses,
    summary="Create a packaging item with its components",
)
async def create_packaging_item(
    payload: PackagingItemCreate,
    service: PackagingService = Depends(get_packaging_service),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[PackagingItemResponse]:
    item = await service.create_item(payload)
    return ApiResponse(message="Packaging item created successfully", data=item)


@router.get(
    "",
    response_model=ApiResponse[List[PackagingItemResponse]],
    summary="List packaging items (newest first)",
)
async def list_packaging_items(
    service: PackagingService = Depends(get_packaging_service),
) -> ApiResponse[List[PackagingItemResponse]]:
    items = await service.list_items()
    return ApiResponse(message="Packaging items retrieved successfully", data=items)


@router.delete(
    "/documents/{document_id}",
    response_model=ApiResponse[None],
    responses=_error_responses,
    summary="Delete a document and its stored file",
)
async def delete_packaging_document(
    document_id: UUID,
    service: PackagingService = Depends(get_packaging_service),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[None]:
    await service.delete_document(document_id)
    return ApiResponse(message="Document deleted successfully")


@router.get(
    "/{item_id}",
    response_model=ApiResponse[PackagingItemResponse],
    responses={404: _error_responses[404]},
    summary="Get one packaging item",
)
async def get_packaging_item(
    item_id: UUID,
    service: PackagingService = Depends(get_packaging_service),
) -> ApiResponse[PackagingItemResponse]:
    item = await service.get_item(item_id)
    return ApiResponse(message="Packaging item retrieved successfully", data=item)


@router.put(
    "/{item_id}",
    response_model=ApiResponse[PackagingItemResponse],
    responses=_error_responses,
    summary="Replace a packaging item and its component set",
)
async def update_packaging_item(
    item_id: UUID,
    payload: PackagingItemCreate,
    service: PackagingService = Depends(get_packaging_service),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[PackagingItemResponse]:
    item = await service.update_item(item_id, payload)
    return ApiResponse(message="Packaging item updated successfully", data=item)


@router.delete(
    "/{item_id}",
    response_model=ApiResponse[None],
    responses=_error_responses,
    summary="Delete a packaging item with its components and documents",
)
async def delete_packaging_item(
    item_id: UUID,
    service: PackagingService = Depends(get_packaging_service),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[None]:
    await service.delete_item(item_id)
    return ApiResponse(message="Packaging item deleted successfully")


@router.post(
    "/{item_id}/documents",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[PackagingDocumentResponse],
    responses=_error_responses,
    summary="Upload a compliance document (PDF) for an item",
)
async def upload_packaging_document(
    item_id: UUID,
    type: DocumentType = Form(..., description="CONFORMITY_DECLARATION or TECHNICAL_DOCUMENTATION"),
    name: Optional[str] = Form(None, description="Display name (defaults to the file name)"),
    file: Optional[UploadFile] = File(None, description="PDF document, max 3MB"),
    service: PackagingService = Depends(get_packaging_service),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[PackagingDocumentResponse]:
    # One byte past the limit is enough for the size check to reject it
    limit = service.document_constraints.max_size_bytes + 1
    content = await file.read(limit) if file is not None else None
    document = await service.upload_document(
        item_id=item_id,
        document_type=type,
        content=content,
        mimetype=(file.content_type if file is not None else None) or "application/octet-stream",
        filename=(file.filename if file is not None else None) or "",
        name=name or None,
    )
    return ApiResponse(message="Document uploaded successfully", data=document)
