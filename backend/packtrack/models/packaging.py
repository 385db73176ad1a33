"""
PackTrack Backend — Packaging Aggregate Models
===============================================

What:  ORM models for the packaging aggregate: PackagingItem (root),
       PackagingComponent and PackagingDocument (owned children).
How:   SQLAlchemy 2.0 typed mappings on the shared DeclarativeBase.
Who:   PackagingService for CRUD; Alembic for schema management.

Ownership:
    PackagingItem 1 ── * PackagingComponent   (replaced wholesale on update)
    PackagingItem 1 ── * PackagingDocument    (file on disk + metadata row)

    Both child tables reference the item with ON DELETE CASCADE, and the ORM
    relationships use "all, delete-orphan", so a child can never outlive its
    item. The service still deletes children explicitly (documents first,
    since their files must be cleaned up before the rows go away).

Portability:
    Generic Uuid/DateTime types are used so the same models run on
    PostgreSQL (production) and SQLite (tests). `materials` is a native
    ARRAY on PostgreSQL and JSON elsewhere.
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import (
    ARRAY,
    CheckConstraint,
    JSON,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from packtrack.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PackagingStatus(str, enum.Enum):
    """Lifecycle status of a packaging item."""

    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    DEACTIVATED = "DEACTIVATED"


class DocumentType(str, enum.Enum):
    """Kinds of compliance documents attached to an item."""

    CONFORMITY_DECLARATION = "CONFORMITY_DECLARATION"
    TECHNICAL_DOCUMENTATION = "TECHNICAL_DOCUMENTATION"


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )


class PackagingItem(TimestampMixin, Base):
    """
    A packaging item tracked for PPWR compliance.

    Query Patterns:
        - List items: ORDER BY created_at DESC (idx_packaging_items_created_at)
        - Get item:   primary key lookup, children loaded with selectin
    """

    __tablename__ = "packaging_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Business identifier (e.g. "FL0001"); indexed for lookups, not unique
    internal_code: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    materials: Mapped[List[str]] = mapped_column(
        ARRAY(String).with_variant(JSON(), "sqlite"),
        nullable=False,
        default=list,
    )
    status: Mapped[PackagingStatus] = mapped_column(
        Enum(PackagingStatus, name="packaging_status"),
        nullable=False,
        default=PackagingStatus.DRAFT,
    )
    weight: Mapped[str] = mapped_column(String(50), nullable=False)
    ppwr_level: Mapped[str] = mapped_column(String(100), nullable=False)

    # lazy="selectin": children are fetched together with the item, so no
    # implicit IO happens when serializing outside an awaited query.
    components: Mapped[List["PackagingComponent"]] = relationship(
        back_populates="packaging_item",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PackagingComponent.created_at",
    )
    documents: Mapped[List["PackagingDocument"]] = relationship(
        back_populates="packaging_item",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PackagingDocument.created_at",
    )

    __table_args__ = (
        Index("idx_packaging_items_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<PackagingItem(id={self.id}, internal_code='{self.internal_code}', "
            f"status='{self.status}')>"
        )


class PackagingComponent(TimestampMixin, Base):
    """One part of a packaging item (lid, label, tray, ...)."""

    __tablename__ = "packaging_components"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    packaging_item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("packaging_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    format: Mapped[str] = mapped_column(String(100), nullable=False)
    weight: Mapped[str] = mapped_column(String(50), nullable=False)
    volume: Mapped[str] = mapped_column(String(50), nullable=False)
    ppwr_category: Mapped[str] = mapped_column(String(100), nullable=False)
    ppwr_level: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    supplier: Mapped[str] = mapped_column(String(255), nullable=False)
    manufacturing_process: Mapped[str] = mapped_column(String(255), nullable=False)
    color: Mapped[str] = mapped_column(String(100), nullable=False)

    packaging_item: Mapped["PackagingItem"] = relationship(back_populates="components")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="quantity_positive"),
    )

    def __repr__(self) -> str:
        return f"<PackagingComponent(id={self.id}, name='{self.name}', qty={self.quantity})>"


class PackagingDocument(TimestampMixin, Base):
    """
    Metadata for an uploaded compliance document.

    `file_path` is the storage path inside the upload root
    (e.g. "packaging/<uuid>.pdf"); the public URL is derived from it when
    serializing, never stored.
    """

    __tablename__ = "packaging_documents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    packaging_item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("packaging_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[DocumentType] = mapped_column(
        Enum(DocumentType, name="document_type"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(512), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)

    packaging_item: Mapped["PackagingItem"] = relationship(back_populates="documents")

    def __repr__(self) -> str:
        return f"<PackagingDocument(id={self.id}, type='{self.type}', name='{self.name}')>"
