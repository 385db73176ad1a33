"""
PackTrack Backend — Packaging Service (Aggregate Orchestrator)
==============================================================

What:  Business logic for the packaging aggregate: items, their components
       and their compliance documents, including the file lifecycle.
How:   Receives the request's AsyncSession and the FileStore explicitly.
       Mutations only flush; the session dependency commits once the route
       returns, or rolls everything back if anything raised. Each public
       method is therefore one all-or-nothing unit from the caller's view.
Who:   Packaging route handlers.

Operation Ordering:
    update_item:      drop components → overwrite fields → insert new components
    delete_item:      delete files (best effort) → delete document rows
                      → check item → delete item (components cascade)
    upload_document:  store file → insert row (file removed if insert fails)
    delete_document:  delete file (must succeed) → delete row

    Files are always removed before their rows. A crash in between leaves
    an orphaned file on disk, never a row pointing at a missing file.

File-error policy:
    delete_item logs and skips documents whose file cannot be removed, so a
    bulk cleanup always makes progress. delete_document reports the failure
    and keeps the row, since the caller asked for that one file to go.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from packtrack.config import settings
from packtrack.exceptions import DatabaseError, NotFoundError, StorageError, ValidationError
from packtrack.models.packaging import (
    DocumentType,
    PackagingComponent,
    PackagingDocument,
    PackagingItem,
    utcnow,
)
from packtrack.schemas.packaging import (
    PackagingComponentCreate,
    PackagingComponentResponse,
    PackagingDocumentResponse,
    PackagingItemCreate,
    PackagingItemResponse,
)
from packtrack.services.file_store import FileStore, UploadConstraints

logger = logging.getLogger(__name__)


def default_document_constraints() -> UploadConstraints:
    """Compliance documents: PDF only, 3MB by default."""
    return UploadConstraints(
        max_size_bytes=settings.max_document_size,
        allowed_mime_types=tuple(settings.allowed_document_types_list),
    )


class PackagingService:
    """
    Packaging aggregate operations.

    Responsibilities:
        - create_item / update_item / delete_item
        - list_items / get_item
        - upload_document / delete_document
    """

    def __init__(
        self,
        db: AsyncSession,
        file_store: FileStore,
        document_constraints: Optional[UploadConstraints] = None,
    ):
        self.db = db
        self.file_store = file_store
        self.document_constraints = document_constraints or default_document_constraints()

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _flush(self, operation: str) -> None:
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save packaging data. Please try again.",
                context={"operation": operation, "error_type": type(e).__name__},
            )

    async def _load_item(self, item_id: uuid.UUID) -> Optional[PackagingItem]:
        # populate_existing: reload collections even if the item is already
        # in the identity map (children may have been deleted in this session)
        result = await self.db.execute(
            select(PackagingItem)
            .where(PackagingItem.id == item_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _require_item(self, item_id: uuid.UUID) -> PackagingItem:
        item = await self._load_item(item_id)
        if item is None:
            raise NotFoundError(resource="packaging item", resource_id=str(item_id))
        return item

    @staticmethod
    def _build_component(component: PackagingComponentCreate) -> PackagingComponent:
        return PackagingComponent(
            name=component.name,
            format=component.format,
            weight=component.weight,
            volume=component.volume,
            ppwr_category=component.ppwr_category,
            ppwr_level=component.ppwr_level,
            quantity=component.quantity,
            supplier=component.supplier,
            manufacturing_process=component.manufacturing_process,
            color=component.color,
        )

    @staticmethod
    def _apply_fields(item: PackagingItem, data: PackagingItemCreate) -> None:
        item.name = data.name
        item.internal_code = data.internal_code
        item.materials = list(data.materials)
        item.status = data.status
        item.weight = data.weight
        item.ppwr_level = data.ppwr_level

    def _document_response(self, document: PackagingDocument) -> PackagingDocumentResponse:
        return PackagingDocumentResponse(
            id=document.id,
            packaging_item_id=document.packaging_item_id,
            type=document.type,
            name=document.name,
            file_url=self.file_store.url_for_path(document.file_path),
            file_size=document.file_size,
            created_at=document.created_at,
            updated_at=document.updated_at,
        )

    def _item_response(self, item: PackagingItem) -> PackagingItemResponse:
        return PackagingItemResponse(
            id=item.id,
            name=item.name,
            internal_code=item.internal_code,
            materials=list(item.materials or []),
            status=item.status,
            weight=item.weight,
            ppwr_level=item.ppwr_level,
            created_at=item.created_at,
            updated_at=item.updated_at,
            components=[
                PackagingComponentResponse.model_validate(component)
                for component in item.components
            ],
            documents=[self._document_response(doc) for doc in item.documents],
        )

    # ── Items ─────────────────────────────────────────────────────────────

    async def create_item(self, data: PackagingItemCreate) -> PackagingItemResponse:
        """
        Persist one item and one component per submitted entry.

        Returns:
            The created item with its components (documents always empty).
        """
        item = PackagingItem(components=[], documents=[])
        self._apply_fields(item, data)
        item.components.extend(
            self._build_component(component) for component in data.components or []
        )

        self.db.add(item)
        await self._flush("create_item")

        logger.info(
            "Packaging item created: %s (%s) with %d components",
            item.id,
            item.internal_code,
            len(item.components),
        )
        return self._item_response(item)

    async def list_items(self) -> List[PackagingItemResponse]:
        """All items, newest first, with components and documents."""
        result = await self.db.execute(
            select(PackagingItem)
            .order_by(PackagingItem.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return [self._item_response(item) for item in result.scalars().all()]

    async def get_item(self, item_id: uuid.UUID) -> PackagingItemResponse:
        """
        Raises:
            NotFoundError: no item with this id (→ 404)
        """
        return self._item_response(await self._require_item(item_id))

    async def update_item(
        self, item_id: uuid.UUID, data: PackagingItemCreate
    ) -> PackagingItemResponse:
        """
        Full replacement of an item's fields and component set.

        Steps:
            1. Delete every existing component of the item
            2. Overwrite the item's scalar fields
            3. Insert one component per submitted entry (none if omitted)

        Documents are not touched. A failure in any step propagates and the
        request transaction is rolled back, so the old component set stays.

        Raises:
            NotFoundError: no item with this id (→ 404)
            DatabaseError: flush failed (→ 500)
        """
        item = await self._require_item(item_id)
        removed = len(item.components)

        # Step 1: delete-orphan cascade turns the cleared collection into DELETEs
        item.components.clear()
        await self._flush("update_item.delete_components")

        # Step 2: unchanged fields would not trigger onupdate on their own
        self._apply_fields(item, data)
        item.updated_at = utcnow()

        # Step 3
        item.components.extend(
            self._build_component(component) for component in data.components or []
        )
        await self._flush("update_item.create_components")

        logger.info(
            "Packaging item updated: %s (components replaced: %d → %d)",
            item.id,
            removed,
            len(item.components),
        )
        return self._item_response(item)

    async def delete_item(self, item_id: uuid.UUID) -> None:
        """
        Remove an item with all of its documents (and their files) and components.

        Steps:
            1. List the item's documents
            2. Delete each backing file; failures are logged and skipped
            3. Delete the document rows
            4. Verify the item exists
            5. Delete the item (components removed by the ORM cascade)

        Raises:
            NotFoundError: no item with this id (→ 404; nothing is committed)
        """
        result = await self.db.execute(
            select(PackagingDocument).where(PackagingDocument.packaging_item_id == item_id)
        )
        documents = list(result.scalars().all())

        for document in documents:
            try:
                await self.file_store.delete(document.file_path)
            except StorageError as e:
                logger.error(
                    "Failed to delete file %s for document %s: %s | Context: %s",
                    document.file_path,
                    document.id,
                    e.message,
                    e.context,
                )

        for document in documents:
            await self.db.delete(document)
        await self._flush("delete_item.delete_documents")

        item = await self._require_item(item_id)
        component_count = len(item.components)
        await self.db.delete(item)
        await self._flush("delete_item")

        logger.info(
            "Packaging item deleted: %s (%d documents, %d components)",
            item_id,
            len(documents),
            component_count,
        )

    # ── Documents ─────────────────────────────────────────────────────────

    async def upload_document(
        self,
        item_id: uuid.UUID,
        document_type: DocumentType,
        content: Optional[bytes],
        mimetype: str,
        filename: str,
        name: Optional[str] = None,
    ) -> PackagingDocumentResponse:
        """
        Store a compliance document and attach it to an item.

        Args:
            item_id:       owning packaging item
            document_type: CONFORMITY_DECLARATION or TECHNICAL_DOCUMENTATION
            content:       raw file bytes (None/empty means nothing was uploaded)
            mimetype:      declared content type of the upload
            filename:      original filename (extension is kept on disk)
            name:          display name; defaults to the original filename

        Raises:
            ValidationError:      no file bytes (→ 400)
            SizeExceededError:    over the size limit (→ 400), no row created
            UnsupportedTypeError: not an allowed type (→ 400), no row created
            NotFoundError:        unknown item (→ 404)
        """
        if not content:
            raise ValidationError(message="No file uploaded", field="file")

        exists = await self.db.scalar(
            select(PackagingItem.id).where(PackagingItem.id == item_id)
        )
        if exists is None:
            raise NotFoundError(resource="packaging item", resource_id=str(item_id))

        handle = await self.file_store.store(
            content=content,
            mimetype=mimetype,
            original_name=filename,
            constraints=self.document_constraints,
        )

        document = PackagingDocument(
            packaging_item_id=item_id,
            type=document_type,
            name=name or filename,
            file_path=handle.storage_path,
            file_size=handle.size,
        )
        self.db.add(document)
        try:
            await self._flush("upload_document")
        except DatabaseError:
            # The row never made it; do not leave the file behind
            await self.file_store.delete(handle.storage_path)
            raise

        logger.info(
            "Document %s uploaded for item %s: %s (%d bytes)",
            document.id,
            item_id,
            handle.storage_path,
            handle.size,
        )
        return self._document_response(document)

    async def delete_document(self, document_id: uuid.UUID) -> None:
        """
        Delete one document: backing file first, then the row.

        Raises:
            NotFoundError: unknown document (→ 404)
            StorageError:  file could not be removed (→ 500); the row is kept
        """
        document = await self.db.get(PackagingDocument, document_id)
        if document is None:
            raise NotFoundError(resource="document", resource_id=str(document_id))

        await self.file_store.delete(document.file_path)

        await self.db.delete(document)
        await self._flush("delete_document")
        logger.info("Document deleted: %s (%s)", document_id, document.file_path)
