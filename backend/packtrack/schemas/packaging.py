"""
PackTrack Backend — Packaging Schemas
======================================

What:  Request and response contracts for packaging items, components and
       compliance documents.

Field constraints (request side):
    PackagingItem       name, internalCode, weight, ppwrLevel: non-empty strings
                        materials: list of non-empty strings
                        status: DRAFT | ACTIVE | INACTIVE | DEACTIVATED (default DRAFT)
                        components: optional list, replaces the whole set on update
    PackagingComponent  name, format, weight, volume, ppwrCategory, ppwrLevel,
                        supplier, manufacturingProcess, color: non-empty strings
                        quantity: strict positive integer
"""

import uuid
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import Field

from packtrack.models.packaging import DocumentType, PackagingStatus
from packtrack.schemas.common import CamelModel

NonEmptyStr = Annotated[str, Field(min_length=1)]
PositiveStrictInt = Annotated[int, Field(gt=0, strict=True)]


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PackagingComponentCreate(CamelModel):
    name: NonEmptyStr
    format: NonEmptyStr
    weight: NonEmptyStr
    volume: NonEmptyStr
    ppwr_category: NonEmptyStr
    ppwr_level: NonEmptyStr
    quantity: PositiveStrictInt
    supplier: NonEmptyStr
    manufacturing_process: NonEmptyStr
    color: NonEmptyStr


class PackagingItemCreate(CamelModel):
    """
    Body of POST /packaging and PUT /packaging/{id}.

    PUT is a full replacement: every scalar field is required again and the
    submitted component list (or its absence) becomes the item's complete
    component set.
    """

    name: NonEmptyStr
    internal_code: NonEmptyStr
    materials: List[NonEmptyStr]
    status: PackagingStatus = PackagingStatus.DRAFT
    weight: NonEmptyStr
    ppwr_level: NonEmptyStr
    components: Optional[List[PackagingComponentCreate]] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PackagingComponentResponse(CamelModel):
    id: uuid.UUID
    packaging_item_id: uuid.UUID
    name: str
    format: str
    weight: str
    volume: str
    ppwr_category: str
    ppwr_level: str
    quantity: int
    supplier: str
    manufacturing_process: str
    color: str
    created_at: datetime
    updated_at: datetime


class PackagingDocumentResponse(CamelModel):
    """Document metadata; `fileUrl` is the public URL, never the disk path."""

    id: uuid.UUID
    packaging_item_id: uuid.UUID
    type: DocumentType
    name: str
    file_url: str
    file_size: int
    created_at: datetime
    updated_at: datetime


class PackagingItemResponse(CamelModel):
    id: uuid.UUID
    name: str
    internal_code: str
    materials: List[str]
    status: PackagingStatus
    weight: str
    ppwr_level: str
    created_at: datetime
    updated_at: datetime
    components: List[PackagingComponentResponse] = Field(default_factory=list)
    documents: List[PackagingDocumentResponse] = Field(default_factory=list)
