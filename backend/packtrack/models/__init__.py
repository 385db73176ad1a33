from packtrack.models.packaging import (
    DocumentType,
    PackagingComponent,
    PackagingDocument,
    PackagingItem,
    PackagingStatus,
)
from packtrack.models.user import User, UserRole

__all__ = [
    "DocumentType",
    "PackagingComponent",
    "PackagingDocument",
    "PackagingItem",
    "PackagingStatus",
    "User",
    "UserRole",
]
